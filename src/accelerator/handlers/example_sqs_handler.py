"""
Example SQS Handler - Lambda function consuming example messages from SQS.

Every message in the batch is parsed and processed. Errors are not caught:
if one message fails the whole batch is returned to the queue and retried
under the queue's redrive policy, so use a batch size of 1 when a batch must
not be repeated.
"""

from typing import Any, Dict, List

from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.data_classes import SQSEvent, event_source
from aws_lambda_powertools.utilities.typing import LambdaContext

from accelerator.container import get_example_data_service
from accelerator.handlers.utils.observability import logger, metrics, tracer
from accelerator.models.example_sqs_message import ExampleSqsMessage

# Resolved once per container
example_data_service = get_example_data_service()


@logger.inject_lambda_context
@metrics.log_metrics(capture_cold_start_metric=True)
@tracer.capture_lambda_handler
@event_source(data_class=SQSEvent)
def lambda_handler(event: SQSEvent, context: LambdaContext) -> Dict[str, List[Any]]:
    records = list(event.records)
    logger.info(f'Received SQS Message. Input Records: {len(records)}')

    messages = []
    for record in records:
        logger.info('Message Metadata', extra={
            'message_id': record.message_id,
            'approximate_receive_count': record.attributes.approximate_receive_count,
        })
        messages.append(ExampleSqsMessage.model_validate_json(record.body))

    results = [example_data_service.process_sqs_message(message) for message in messages]
    metrics.add_metric(name='SqsMessagesProcessed', unit=MetricUnit.Count, value=len(results))
    logger.info('SQSEvent has been processed.', extra={'results': results})
    return {'results': results}

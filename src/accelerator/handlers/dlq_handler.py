"""
DLQ Handler - Lambda function draining the dead letter queue.

Every message that reaches the dead letter queue needs investigation, so each
one is logged in full at error level. Beware of sensitive data in message
bodies ending up in the logs.
"""

from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.data_classes import SQSEvent, event_source
from aws_lambda_powertools.utilities.typing import LambdaContext

from accelerator.handlers.utils.observability import logger, metrics, tracer


@logger.inject_lambda_context
@metrics.log_metrics(capture_cold_start_metric=True)
@tracer.capture_lambda_handler
@event_source(data_class=SQSEvent)
def lambda_handler(event: SQSEvent, context: LambdaContext) -> None:
    records = list(event.records)
    logger.info(f'Received SQS Message. Input Records: {len(records)}')

    for record in records:
        logger.error('ERROR: Message unable to be processed!', extra={'record': record.raw_event})
        metrics.add_metric(name='DeadLetterMessage', unit=MetricUnit.Count, value=1)

"""
Business logic for example data items.

The service maps API contracts to DynamoDB records and back, and announces
newly created items on SNS.
"""

import json
from typing import Any, Dict, List, Optional

from aws_lambda_powertools.metrics import MetricUnit

from accelerator.dal import ExampleDalHandler
from accelerator.handlers.utils.errors import NotFoundError
from accelerator.handlers.utils.observability import logger, metrics, tracer
from accelerator.models.example_data_item import (
    CreateExampleDataItemRequest,
    ExampleDataItemResponse,
    UpdateExampleDataItemRequest,
)
from accelerator.models.example_data_item_mapper import (
    convert_to_example_data_item_response,
    convert_to_partial_dynamo_record,
    create_new_dynamo_record,
    tenant_partition_key,
)
from accelerator.models.example_sqs_message import NEW_DATA_ITEM_CREATED, ExampleSqsMessage


class ExampleDataService:
    """Business logic service for example data items."""

    def __init__(
        self,
        repository: ExampleDalHandler,
        sns_client: Any = None,
        topic_arn: Optional[str] = None,
    ):
        """
        Initialize the service.

        Args:
            repository: Example data item repository
            sns_client: SNS client used to announce new items
            topic_arn: Topic new items are announced on; nothing is published when unset
        """
        self.repository = repository
        self.sns_client = sns_client
        self.topic_arn = topic_arn

    @tracer.capture_method
    def get_all_items(self) -> List[ExampleDataItemResponse]:
        # In a multi-tenant system never let a caller scan records of every tenant
        records = self.repository.get_all_records()
        return [convert_to_example_data_item_response(record) for record in records]

    @tracer.capture_method
    def get_data_item(self, tenant_id: str, item_id: str) -> ExampleDataItemResponse:
        """Get one item of a tenant. Raises NotFoundError when it does not exist."""
        logger.debug('get_data_item called', extra={'tenant_id': tenant_id, 'item_id': item_id})
        record = self.repository.get_record(tenant_partition_key(tenant_id), item_id)
        return convert_to_example_data_item_response(record)

    @tracer.capture_method
    def delete_data_item(self, tenant_id: str, item_id: str) -> ExampleDataItemResponse:
        """Delete one item of a tenant and return it as it was."""
        logger.debug('delete_data_item called', extra={'tenant_id': tenant_id, 'item_id': item_id})
        record = self.repository.delete_record(tenant_partition_key(tenant_id), item_id)
        if record is None:
            raise NotFoundError(f'No item found with ID {item_id}')
        return convert_to_example_data_item_response(record)

    @tracer.capture_method
    def create_data_item(self, request: CreateExampleDataItemRequest, tenant_id: str, user_id: str) -> ExampleDataItemResponse:
        """Store a new item and announce it on the SNS topic."""
        record = create_new_dynamo_record(request, tenant_id, user_id)
        self.repository.put_record(record)

        metrics.add_metric(name='DataItemCreated', unit=MetricUnit.Count, value=1)
        logger.info('Data item created', extra={'tenant_id': tenant_id, 'item_id': record['itemId']})

        self._publish_new_item(tenant_id, record['itemId'])
        return convert_to_example_data_item_response(record)

    @tracer.capture_method
    def update_data_item(self, request: UpdateExampleDataItemRequest, tenant_id: str, user_id: str) -> ExampleDataItemResponse:
        """
        Overwrite only the attributes given in the request.

        Attributes the request leaves out keep their stored value. Returns the
        item as stored after the update.
        """
        record = convert_to_partial_dynamo_record(request, tenant_id, user_id)
        updated_record = self.repository.update_partial_record(record)
        return convert_to_example_data_item_response(updated_record)

    @tracer.capture_method
    def process_sqs_message(self, message: ExampleSqsMessage) -> Dict[str, str]:
        logger.debug('Processing message', extra={'sqs_message': message.model_dump(by_alias=True)})
        return {'message': 'Example SQS Message has been processed.'}

    def _publish_new_item(self, tenant_id: str, item_id: str) -> None:
        message = ExampleSqsMessage(type=NEW_DATA_ITEM_CREATED, tenant_id=tenant_id, item_id=item_id)
        if not self.topic_arn or self.sns_client is None:
            logger.debug('No SNS topic configured, skipping notification', extra={'item_id': item_id})
            return

        logger.info('Notifying SNS topic', extra={'topic_arn': self.topic_arn, 'item_id': item_id})
        self.sns_client.publish(TopicArn=self.topic_arn, Message=json.dumps(message.model_dump(by_alias=True)))

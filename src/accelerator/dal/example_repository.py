"""
DynamoDB repository for example data items.

The table is keyed by 'pk' (TENANT#<tenant id>) and 'sk' (item id).
"""

from typing import Any, List, Optional, cast

from accelerator.dal.dynamodb_handler import DynamoDBHandler
from accelerator.dal.expressions import FilterInputParams, QueryInputParams, TransactionWriteItem
from accelerator.handlers.utils.errors import NotFoundError
from accelerator.handlers.utils.observability import logger, tracer
from accelerator.models.example_data_item_record import ExampleDataItemRecord

PARTITION_KEY_NAME = 'pk'
SORT_KEY_NAME = 'sk'


class ExampleRepository(DynamoDBHandler):
    """Example data item table bound to pk/sk."""

    def __init__(self, table_name: str, dynamodb_resource: Any = None, endpoint_url: Optional[str] = None) -> None:
        super().__init__(
            table_name=table_name,
            partition_key_name=PARTITION_KEY_NAME,
            sort_key_name=SORT_KEY_NAME,
            dynamodb_resource=dynamodb_resource,
            endpoint_url=endpoint_url,
        )

    def ping_table(self) -> str:
        """Describe the table to verify connectivity and configuration. Returns the table status."""
        logger.debug('ping_table called', extra={'table_name': self.schema.table_name})
        return self.describe_table()

    def get_all_records(self) -> List[ExampleDataItemRecord]:
        """
        Return every record in the table.

        Scans the whole table: do not use on a large table, and never expose
        it to a tenant in a multi-tenant system.
        """
        logger.debug('get_all_records called')
        return cast(List[ExampleDataItemRecord], self.scan_with_filters(FilterInputParams()))

    @tracer.capture_method
    def get_record(self, partition_key_value: str, sort_key_value: str) -> ExampleDataItemRecord:
        """
        Return the record with this primary key.

        Raises:
            NotFoundError: If no record has this key
        """
        logger.debug('get_record called', extra={'partition_key_value': partition_key_value, 'sort_key_value': sort_key_value})
        record = self.get(partition_key_value, sort_key_value)
        if not record:
            raise NotFoundError(f'No item found with ID {partition_key_value}')
        return cast(ExampleDataItemRecord, record)

    def delete_record(self, partition_key_value: str, sort_key_value: str) -> Optional[ExampleDataItemRecord]:
        """Delete the record with this primary key and return it, or None if it did not exist."""
        logger.debug('delete_record called', extra={'partition_key_value': partition_key_value, 'sort_key_value': sort_key_value})
        return cast(Optional[ExampleDataItemRecord], self.delete(partition_key_value, sort_key_value))

    def put_record(self, record: ExampleDataItemRecord) -> ExampleDataItemRecord:
        """
        Create or completely overwrite a record.

        Use update_partial_record to change only some attributes.
        """
        logger.debug('put_record called', extra={'item_id': record.get('itemId')})
        return cast(ExampleDataItemRecord, self.put(dict(record)))

    def update_partial_record(self, record: ExampleDataItemRecord) -> ExampleDataItemRecord:
        """
        Overwrite only the attributes present in the record and return the updated record.

        The record must carry pk and sk. Attributes that are missing or None
        are left unchanged in the table.
        """
        logger.debug('update_partial_record called', extra={'item_id': record.get('itemId')})
        return cast(ExampleDataItemRecord, self.update(dict(record)))

    def query_records(
        self,
        partition_key_value: str,
        filter_params: Optional[FilterInputParams] = None,
    ) -> List[ExampleDataItemRecord]:
        """Return every record of one partition that matches the filters."""
        logger.debug('query_records called', extra={'partition_key_value': partition_key_value})
        records = self.query_with_filters(QueryInputParams(partition_key_value=partition_key_value), filter_params)
        return cast(List[ExampleDataItemRecord], records)

    def write_records_transactionally(self, items: List[TransactionWriteItem]) -> List[TransactionWriteItem]:
        """Put, update and delete records in one all-or-nothing transaction."""
        logger.debug('write_records_transactionally called', extra={'item_count': len(items)})
        return self.transactional_write(items)

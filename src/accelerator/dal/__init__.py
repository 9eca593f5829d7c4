"""
Data Access Layer (DAL) for the Lambda service accelerator.

This module provides the repository interface the services depend on and the
factory that builds the DynamoDB implementation.
"""

from typing import Any, List, Optional, Protocol, runtime_checkable

from accelerator.dal.expressions import FilterInputParams, TransactionWriteItem
from accelerator.models.example_data_item_record import ExampleDataItemRecord


@runtime_checkable
class ExampleDalHandler(Protocol):
    """Protocol defining the example data repository interface."""

    def ping_table(self) -> str:
        """Return the table status; fails unless the table is active."""
        ...

    def get_all_records(self) -> List[ExampleDataItemRecord]:
        ...

    def get_record(self, partition_key_value: str, sort_key_value: str) -> ExampleDataItemRecord:
        """Return a record by primary key; raises NotFoundError when missing."""
        ...

    def delete_record(self, partition_key_value: str, sort_key_value: str) -> Optional[ExampleDataItemRecord]:
        ...

    def put_record(self, record: ExampleDataItemRecord) -> ExampleDataItemRecord:
        ...

    def update_partial_record(self, record: ExampleDataItemRecord) -> ExampleDataItemRecord:
        ...

    def query_records(
        self,
        partition_key_value: str,
        filter_params: Optional[FilterInputParams] = None,
    ) -> List[ExampleDataItemRecord]:
        ...

    def write_records_transactionally(self, items: List[TransactionWriteItem]) -> List[TransactionWriteItem]:
        ...


def get_dal_handler(table_name: str, dynamodb_resource: Any = None, endpoint_url: Optional[str] = None) -> ExampleDalHandler:
    """
    Factory function to get the example data repository.

    Args:
        table_name: Name of the DynamoDB table
        dynamodb_resource: boto3 DynamoDB resource to reuse
        endpoint_url: DynamoDB endpoint URL (for dynamodb-local)

    Returns:
        Repository instance
    """
    # Import here to avoid circular imports
    from accelerator.dal.example_repository import ExampleRepository

    return ExampleRepository(table_name, dynamodb_resource=dynamodb_resource, endpoint_url=endpoint_url)


__all__ = [
    'ExampleDalHandler',
    'get_dal_handler',
]

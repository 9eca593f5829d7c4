"""
Generic DynamoDB repository.

DynamoDBHandler is bound to one table's key layout and turns plain Python
parameters into ready-to-send DynamoDB requests: key conditions, equality
filters, projections and SET updates, with every attribute name and value
aliased. It drives query and scan pagination to completion and composes
transactional writes. Concrete repositories subclass it and bind a table.
"""

import functools
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

import boto3
from aws_lambda_powertools.metrics import MetricUnit
from botocore.exceptions import ClientError

from accelerator.dal.expressions import (
    NEGATION_VALUE_PREFIX,
    AttributeMap,
    AttributeValue,
    ExpressionBuilder,
    FilterInputParams,
    FilterParams,
    ProjectionParams,
    QueryInputParams,
    TableSchema,
    TransactDelete,
    TransactionWriteItem,
    TransactPut,
    TransactUpdate,
    build_filter_expression,
    build_projection_expression,
)
from accelerator.handlers.utils.errors import BaseServiceError, ConfigurationError, ErrorCategory, ErrorSeverity
from accelerator.handlers.utils.observability import logger, metrics, tracer

TABLE_STATUS_ACTIVE = 'ACTIVE'


class DALError(BaseServiceError):
    """Base exception for Data Access Layer errors."""

    def __init__(self, message: str, operation: str, table_name: str, error_code: str = 'DAL_ERROR'):
        super().__init__(
            message=message,
            error_code=error_code,
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.INFRASTRUCTURE,
        )
        self.operation = operation
        self.table_name = table_name


class TableNotActiveError(DALError):
    """Raised when describe_table reports any status other than ACTIVE."""

    def __init__(self, table_name: str, table_status: Optional[str]):
        super().__init__(
            message=f'Table {table_name} is not active, status: {table_status}',
            operation='DescribeTable',
            table_name=table_name,
            error_code='TABLE_NOT_ACTIVE',
        )
        self.table_status = table_status


def _handle_dynamodb_errors(operation: str) -> Callable:
    """Emit per-operation metrics and log store rejections before re-raising them untouched."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(self: 'DynamoDBHandler', *args, **kwargs):
            operation_start = time.time()
            metrics.add_metric(name=f'DynamoDB{operation}Count', unit=MetricUnit.Count, value=1)
            try:
                result = func(self, *args, **kwargs)
            except ClientError as exc:
                error = exc.response.get('Error', {})
                metrics.add_metric(name=f'DynamoDB{operation}Error', unit=MetricUnit.Count, value=1)
                logger.error(
                    f'DynamoDB {operation} error',
                    extra={
                        'error_code': error.get('Code'),
                        'error_message': error.get('Message'),
                        'table_name': self.schema.table_name,
                        'operation': operation,
                    },
                )
                raise

            operation_duration = (time.time() - operation_start) * 1000
            metrics.add_metric(name=f'DynamoDB{operation}Duration', unit=MetricUnit.Milliseconds, value=operation_duration)
            tracer.put_annotation('dynamodb_operation', operation)
            return result

        return wrapper

    return decorator


class DynamoDBHandler:
    """Base repository bound to one table's partition and sort key names."""

    def __init__(
        self,
        table_name: str,
        partition_key_name: str,
        sort_key_name: Optional[str] = None,
        dynamodb_resource: Any = None,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
    ):
        """
        Initialize the repository.

        Args:
            table_name: Name of the DynamoDB table
            partition_key_name: Partition key attribute of the table
            sort_key_name: Sort key attribute, if the table has one
            dynamodb_resource: boto3 DynamoDB resource to reuse across invocations
            region_name: AWS region name, used only when no resource is given
            endpoint_url: DynamoDB endpoint URL (for local testing), used only when no resource is given
        """
        self.schema = TableSchema(
            table_name=table_name,
            partition_key_name=partition_key_name,
            sort_key_name=sort_key_name,
        )

        if dynamodb_resource is None:
            session_config: Dict[str, Any] = {}
            if region_name:
                session_config['region_name'] = region_name
            if endpoint_url:
                session_config['endpoint_url'] = endpoint_url
            dynamodb_resource = boto3.resource('dynamodb', **session_config)

        self.dynamodb = dynamodb_resource
        self.table = self.dynamodb.Table(table_name)
        # transact_write_items and describe_table are client-only operations
        self.client = self.dynamodb.meta.client

        logger.debug('DynamoDB repository initialized', extra={
            'table_name': table_name,
            'partition_key_name': partition_key_name,
            'sort_key_name': sort_key_name,
        })

    def _key_names(self) -> List[str]:
        return [name for name in (self.schema.partition_key_name, self.schema.sort_key_name) if name]

    def generate_primary_key(self, partition_key_value: AttributeValue, sort_key_value: AttributeValue = None) -> AttributeMap:
        """
        Build the key of a single record.

        Raises:
            ConfigurationError: If the table has a sort key and no sort key value is given
        """
        key: AttributeMap = {self.schema.partition_key_name: partition_key_value}
        if self.schema.sort_key_name:
            if sort_key_value is None:
                raise ConfigurationError(
                    f'Sort key "{self.schema.sort_key_name}" is required for table {self.schema.table_name}.'
                )
            key[self.schema.sort_key_name] = sort_key_value
        return key

    def _add_key_condition(self, builder: ExpressionBuilder, query_params: QueryInputParams) -> None:
        partition_key_name = query_params.partition_key_name or self.schema.partition_key_name
        builder.key_condition_expression = '#pkName = :pkValue'
        builder.add_names({'#pkName': partition_key_name})
        builder.add_values({':pkValue': query_params.partition_key_value})

        sort_key_name = query_params.sort_key_name or self.schema.sort_key_name
        if sort_key_name and query_params.sort_key_value is not None:
            builder.key_condition_expression += ' AND #skName = :skValue'
            builder.add_names({'#skName': sort_key_name})
            builder.add_values({':skValue': query_params.sort_key_value})

    def generate_query_input(self, query_params: QueryInputParams) -> Dict[str, Any]:
        """Build a query request whose key condition matches the given partition (and sort) key."""
        builder = ExpressionBuilder()
        self._add_key_condition(builder, query_params)

        request: Dict[str, Any] = {'TableName': self.schema.table_name}
        if query_params.index_name:
            request['IndexName'] = query_params.index_name
        request.update(builder.finalize())
        return request

    def generate_filter_expression(self, filters: Dict[str, Any]) -> FilterParams:
        """OR the values of one attribute and AND the attributes together."""
        return build_filter_expression(filters)

    def generate_projection_expression(self, fields: Sequence[str]) -> ProjectionParams:
        """Project the given fields; the table key is always projected as well."""
        return build_projection_expression(fields, self._key_names())

    def generate_filter_input(
        self,
        filter_params: Optional[FilterInputParams] = None,
        query_params: Optional[QueryInputParams] = None,
    ) -> Dict[str, Any]:
        """
        Build a scan request, or a query request when query_params is given, carrying the filters.

        Negated filters are combined with the positive ones as
        '<positive> AND (NOT <negated>)', or 'NOT <negated>' when alone.
        """
        filter_params = filter_params or FilterInputParams()
        builder = ExpressionBuilder()
        request: Dict[str, Any] = {'TableName': self.schema.table_name}

        if query_params is not None:
            self._add_key_condition(builder, query_params)
            if query_params.index_name:
                request['IndexName'] = query_params.index_name

        if filter_params.filters:
            builder.add_filter(self.generate_filter_expression(filter_params.filters))
        if filter_params.negation_filters:
            builder.add_negation_filter(build_filter_expression(filter_params.negation_filters, NEGATION_VALUE_PREFIX))
        if filter_params.fields:
            builder.add_projection(self.generate_projection_expression(filter_params.fields))

        request.update(builder.finalize())
        return request

    def generate_update_params(self, record: AttributeMap) -> Dict[str, Any]:
        """
        Build an update request that SETs every present, non-key attribute of the record.

        Attributes whose value is None are left untouched.

        Raises:
            ConfigurationError: If a key attribute is missing or nothing is left to update
        """
        partition_key_value = record.get(self.schema.partition_key_name)
        if partition_key_value is None:
            raise ConfigurationError(
                f'Partition key "{self.schema.partition_key_name}" is required to update a record.'
            )
        key = self.generate_primary_key(partition_key_value, record.get(self.schema.sort_key_name) if self.schema.sort_key_name else None)

        builder = ExpressionBuilder()
        assignments = []
        for attribute, value in record.items():
            if attribute in key or value is None:
                continue
            assignments.append(f'#{attribute} = :{attribute}')
            builder.add_names({f'#{attribute}': attribute})
            builder.add_values({f':{attribute}': value})

        if not assignments:
            raise ConfigurationError('There are no attributes to update.')

        builder.update_expression = 'SET ' + ', '.join(assignments)
        params: Dict[str, Any] = {
            'TableName': self.schema.table_name,
            'Key': key,
            'ReturnValues': 'ALL_NEW',
        }
        params.update(builder.finalize())
        return params

    def _query_all_pages(self, request: Dict[str, Any]) -> List[AttributeMap]:
        return self._all_pages(self.table.query, request)

    def _scan_all_pages(self, request: Dict[str, Any]) -> List[AttributeMap]:
        return self._all_pages(self.table.scan, request)

    def _all_pages(self, operation: Callable[..., Dict[str, Any]], request: Dict[str, Any]) -> List[AttributeMap]:
        """Follow LastEvaluatedKey until the store reports no more pages."""
        request = dict(request)
        items: List[AttributeMap] = []
        page = 0
        while True:
            response = operation(**request)
            page += 1
            page_items = response.get('Items', [])
            items.extend(page_items)

            last_evaluated_key = response.get('LastEvaluatedKey')
            logger.debug('Results returned', extra={
                'table_name': self.schema.table_name,
                'page': page,
                'count': response.get('Count', len(page_items)),
                'last_evaluated_key': last_evaluated_key,
            })
            if not last_evaluated_key:
                return items
            request['ExclusiveStartKey'] = last_evaluated_key

    @tracer.capture_method
    @_handle_dynamodb_errors('Query')
    def query_with_filters(
        self,
        query_params: QueryInputParams,
        filter_params: Optional[FilterInputParams] = None,
    ) -> List[AttributeMap]:
        """Query every page matching the key condition and filters."""
        request = self.generate_filter_input(filter_params, query_params)
        logger.debug('Querying table', extra={'request': request})
        return self._query_all_pages(request)

    @tracer.capture_method
    @_handle_dynamodb_errors('Scan')
    def scan_with_filters(self, filter_params: Optional[FilterInputParams] = None) -> List[AttributeMap]:
        """Scan the whole table, keeping records that match the filters."""
        request = self.generate_filter_input(filter_params)
        logger.debug('Scanning table', extra={'request': request})
        return self._scan_all_pages(request)

    @tracer.capture_method
    @_handle_dynamodb_errors('Query')
    def query_local_secondary_index(
        self,
        index_name: str,
        partition_key_value: AttributeValue,
        sort_key_name: str,
        sort_key_value: AttributeValue,
    ) -> Dict[str, Any]:
        """Query one page of a local secondary index and return the raw response."""
        request = self.generate_query_input(QueryInputParams(
            index_name=index_name,
            partition_key_value=partition_key_value,
            sort_key_name=sort_key_name,
            sort_key_value=sort_key_value,
        ))
        return self.table.query(**request)

    @tracer.capture_method
    @_handle_dynamodb_errors('Query')
    def query_global_secondary_index(
        self,
        index_name: str,
        partition_key_name: str,
        partition_key_value: AttributeValue,
        sort_key_name: Optional[str] = None,
        sort_key_value: AttributeValue = None,
    ) -> Dict[str, Any]:
        """Query one page of a global secondary index and return the raw response."""
        request = self.generate_query_input(QueryInputParams(
            index_name=index_name,
            partition_key_name=partition_key_name,
            partition_key_value=partition_key_value,
            sort_key_name=sort_key_name,
            sort_key_value=sort_key_value,
        ))
        return self.table.query(**request)

    @tracer.capture_method
    @_handle_dynamodb_errors('GetItem')
    def get(self, partition_key_value: AttributeValue, sort_key_value: AttributeValue = None) -> Optional[AttributeMap]:
        """Return the record with this key, or None."""
        key = self.generate_primary_key(partition_key_value, sort_key_value)
        response = self.table.get_item(Key=key)
        return response.get('Item')

    @tracer.capture_method
    @_handle_dynamodb_errors('PutItem')
    def put(self, record: AttributeMap) -> AttributeMap:
        """Write the whole record, replacing any record with the same key."""
        self.table.put_item(Item=record)
        logger.debug('Item stored', extra={'table_name': self.schema.table_name})
        return record

    @tracer.capture_method
    @_handle_dynamodb_errors('UpdateItem')
    def update(self, record: AttributeMap) -> AttributeMap:
        """Update the record's present attributes and return all attributes after the update."""
        params = self.generate_update_params(record)
        response = self.table.update_item(**params)
        return response.get('Attributes', {})

    @tracer.capture_method
    @_handle_dynamodb_errors('DeleteItem')
    def delete(self, partition_key_value: AttributeValue, sort_key_value: AttributeValue = None) -> Optional[AttributeMap]:
        """Delete the record with this key and return it as it was, or None when there was nothing to delete."""
        key = self.generate_primary_key(partition_key_value, sort_key_value)
        response = self.table.delete_item(Key=key, ReturnValues='ALL_OLD')
        return response.get('Attributes')

    @tracer.capture_method
    @_handle_dynamodb_errors('DescribeTable')
    def describe_table(self) -> str:
        """
        Return the table status.

        Raises:
            TableNotActiveError: If the table is in any status other than ACTIVE
        """
        response = self.client.describe_table(TableName=self.schema.table_name)
        table_status = response.get('Table', {}).get('TableStatus')
        if table_status != TABLE_STATUS_ACTIVE:
            raise TableNotActiveError(self.schema.table_name, table_status)
        return table_status

    def _transact_item(self, item: TransactionWriteItem) -> Dict[str, Any]:
        if isinstance(item, TransactPut):
            return {'Put': {'TableName': self.schema.table_name, 'Item': item.record}}
        if isinstance(item, TransactUpdate):
            update = self.generate_update_params(item.record)
            # ReturnValues is not accepted inside a transaction
            update.pop('ReturnValues', None)
            return {'Update': update}
        if isinstance(item, TransactDelete):
            return {'Delete': {
                'TableName': self.schema.table_name,
                'Key': self.generate_primary_key(item.partition_key_value, item.sort_key_value),
            }}
        raise TypeError(f'Unsupported transaction item: {type(item).__name__}')

    @tracer.capture_method
    @_handle_dynamodb_errors('TransactWriteItems')
    def transactional_write(self, items: List[TransactionWriteItem]) -> List[TransactionWriteItem]:
        """Apply every item in one all-or-nothing transaction, in the given order."""
        transact_items = [self._transact_item(item) for item in items]
        logger.debug('Writing transaction', extra={'table_name': self.schema.table_name, 'item_count': len(transact_items)})
        self.client.transact_write_items(TransactItems=transact_items)
        return items

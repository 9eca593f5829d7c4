"""
Conversions between the API contracts and the DynamoDB record of a data item.

Normally the tenant and user ids come from the caller's identity; the REST
handlers pass fixed ids until authentication is wired in.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional, Union
from uuid import uuid4

from accelerator.models.example_data_item import (
    CreateExampleDataItemRequest,
    ExampleDataItemAddress,
    ExampleDataItemResponse,
    UpdateExampleDataItemRequest,
)
from accelerator.models.example_data_item_record import ExampleDataItemRecord


def tenant_partition_key(tenant_id: str) -> str:
    return f'TENANT#{tenant_id}'


def _to_decimal(value: Optional[Union[int, float]]) -> Optional[Decimal]:
    # boto3 refuses float, numbers are stored as Decimal
    if value is None:
        return None
    return Decimal(str(value))


def _from_decimal(value: Any) -> Optional[Union[int, float]]:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def _address_to_record(address: Optional[ExampleDataItemAddress]) -> Optional[Dict[str, Any]]:
    if address is None:
        return None
    return address.model_dump(by_alias=True, exclude_none=True)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_new_dynamo_record(request: CreateExampleDataItemRequest, tenant_id: str, user_id: str) -> ExampleDataItemRecord:
    """Convert a create request into a new record with a freshly generated item id."""
    item_id = str(uuid4())
    now = _now()
    record: ExampleDataItemRecord = {
        'pk': tenant_partition_key(tenant_id),
        'sk': item_id,
        'itemId': item_id,
        'name': request.name,
        'createdTimestamp': now,
        'updatedTimestamp': now,
        'createdBy': user_id,
        'updatedBy': user_id,
    }
    if request.email is not None:
        record['email'] = request.email
    if request.example_number is not None:
        record['exampleNumber'] = _to_decimal(request.example_number)
    if request.address is not None:
        record['address'] = _address_to_record(request.address)
    return record


def convert_to_partial_dynamo_record(request: UpdateExampleDataItemRequest, tenant_id: str, user_id: str) -> ExampleDataItemRecord:
    """
    Convert an update request into a partial record.

    Attributes the caller left out are None and therefore not written, so
    they keep their stored value.
    """
    return {
        'pk': tenant_partition_key(tenant_id),
        'sk': request.id,
        'itemId': request.id,
        'name': request.name,
        'email': request.email,
        'exampleNumber': _to_decimal(request.example_number),
        'address': _address_to_record(request.address),
        'updatedTimestamp': _now(),
        'updatedBy': user_id,
    }


def convert_to_example_data_item_response(record: ExampleDataItemRecord) -> ExampleDataItemResponse:
    address = record.get('address')
    return ExampleDataItemResponse(
        id=record.get('itemId'),
        name=record.get('name'),
        email=record.get('email'),
        example_number=_from_decimal(record.get('exampleNumber')),
        address=ExampleDataItemAddress.model_validate(address) if address else None,
        created_timestamp=record.get('createdTimestamp'),
        updated_timestamp=record.get('updatedTimestamp'),
        created_by=record.get('createdBy'),
        updated_by=record.get('updatedBy'),
    )

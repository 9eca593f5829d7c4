"""
API contracts for example data items.

The request and response models are kept apart from the DynamoDB record so
the table layout never leaks into the API. Field names are snake_case in
Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Annotated, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ExampleDataItemAddress(BaseModel):
    model_config = ConfigDict(strict=True, alias_generator=to_camel, populate_by_name=True)

    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    state_or_province: Optional[str] = None
    zip_or_postal_code: Optional[str] = None
    country: Optional[str] = None


class CreateExampleDataItemRequest(BaseModel):
    """Request model for creating a new data item. Unknown fields are dropped, values are never coerced."""

    model_config = ConfigDict(strict=True, alias_generator=to_camel, populate_by_name=True, extra='ignore')

    name: Annotated[str, Field(
        min_length=1,
        max_length=256,
        description='Display name of the item',
        examples=['Example item']
    )]

    email: Annotated[Optional[str], Field(
        default=None,
        min_length=4,
        max_length=254,
        description='Contact email address',
        examples=['jane.doe@example.com']
    )] = None

    example_number: Annotated[Optional[float], Field(
        default=None,
        description='Any number',
        examples=[42]
    )] = None

    address: Optional[ExampleDataItemAddress] = None


class UpdateExampleDataItemRequest(CreateExampleDataItemRequest):
    """Request model for a partial update. Attributes left out keep their stored value."""

    id: Annotated[Optional[str], Field(
        default=None,
        description='Identifier of the item to update'
    )] = None

    updated_timestamp: Annotated[Optional[datetime], Field(
        default=None,
        description='Last update time known to the caller'
    )] = None


class ExampleDataItemResponse(BaseModel):
    """Response model for a data item."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    example_number: Optional[Union[int, float]] = None
    address: Optional[ExampleDataItemAddress] = None
    created_timestamp: Optional[str] = None
    updated_timestamp: Optional[str] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

"""Message published when an example data item is created and consumed from SQS."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

NEW_DATA_ITEM_CREATED = 'NewDataItemCreated'


class ExampleSqsMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Annotated[str, Field(
        description='Message type',
        examples=[NEW_DATA_ITEM_CREATED]
    )]

    tenant_id: Annotated[str, Field(
        alias='tenantId',
        description='Tenant the item belongs to',
        examples=['abcdef']
    )]

    item_id: Annotated[str, Field(
        alias='itemId',
        description='Identifier of the created item'
    )]

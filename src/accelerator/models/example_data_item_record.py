"""DynamoDB record of an example data item."""

from decimal import Decimal
from typing import Any, Dict, Optional, TypedDict


class ExampleDataItemRecord(TypedDict, total=False):
    """Stored shape of an example data item, keyed by pk (TENANT#<tenant id>) and sk (item id)."""

    pk: str
    sk: str
    itemId: str
    name: str
    email: Optional[str]
    exampleNumber: Optional[Decimal]
    address: Optional[Dict[str, Any]]
    createdTimestamp: str
    updatedTimestamp: str
    createdBy: str
    updatedBy: str

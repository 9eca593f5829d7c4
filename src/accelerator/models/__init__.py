"""
Service Models Package

This package contains the Pydantic models of the API contracts, the DynamoDB
record of an example data item and the SQS message model.
"""

from .example_data_item import (
    CreateExampleDataItemRequest,
    ExampleDataItemAddress,
    ExampleDataItemResponse,
    UpdateExampleDataItemRequest,
)
from .example_data_item_record import ExampleDataItemRecord
from .example_sqs_message import ExampleSqsMessage
from .health import HealthReport

__all__ = [
    # Input models
    "CreateExampleDataItemRequest",
    "UpdateExampleDataItemRequest",
    "ExampleSqsMessage",

    # Output models
    "ExampleDataItemAddress",
    "ExampleDataItemResponse",
    "HealthReport",

    # Records
    "ExampleDataItemRecord",
]

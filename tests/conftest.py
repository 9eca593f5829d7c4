"""
Pytest configuration and shared fixtures for the Lambda service accelerator.

This module provides common test fixtures and configuration used across
unit and integration tests.
"""

import json
import os
from typing import Any, Dict, Optional
from unittest.mock import Mock

import boto3
import pytest
from moto import mock_aws

TABLE_NAME = "test-example-table"
SECRET_NAME = "test-example-secret"
EXTERNAL_DOMAIN = "https://external.example.com/ping"
REGION = "us-east-1"

# Handler modules resolve their services at import, so the environment must be
# in place before any test module is collected
os.environ.update({
    "AWS_DEFAULT_REGION": REGION,
    "AWS_REGION": REGION,
    "AWS_ACCESS_KEY_ID": "test",
    "AWS_SECRET_ACCESS_KEY": "test",
    "AWS_SECURITY_TOKEN": "test",
    "AWS_SESSION_TOKEN": "test",
    "DB_TABLE_NAME": TABLE_NAME,
    "SECRET_NAME": SECRET_NAME,
    "EXAMPLE_EXTERNAL_DOMAIN": EXTERNAL_DOMAIN,
    "ENVIRONMENT_NAME": "test",
    "RELEASE_VERSION": "test-1.0.0",
    "POWERTOOLS_SERVICE_NAME": "test-lambda-service-accelerator",
    "POWERTOOLS_METRICS_NAMESPACE": "TestLambdaServiceAccelerator",
    "LOG_LEVEL": "DEBUG",
    "POWERTOOLS_TRACE_DISABLED": "true",  # Disable X-Ray in tests
    "LAMBDA_ENV_MODELER_DISABLE_CACHE": "true",
})


# DynamoDB fixtures
@pytest.fixture
def dynamodb_table():
    """Create a mock DynamoDB table for testing."""
    with mock_aws():
        dynamodb = boto3.resource("dynamodb", region_name=REGION)

        # Same key layout as the deployed table, plus a GSI for index queries
        table = dynamodb.create_table(
            TableName=TABLE_NAME,
            KeySchema=[
                {"AttributeName": "pk", "KeyType": "HASH"},
                {"AttributeName": "sk", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "pk", "AttributeType": "S"},
                {"AttributeName": "sk", "AttributeType": "S"},
                {"AttributeName": "gsi1pk", "AttributeType": "S"},
                {"AttributeName": "gsi1sk", "AttributeType": "S"},
            ],
            GlobalSecondaryIndexes=[
                {
                    "IndexName": "GSI1",
                    "KeySchema": [
                        {"AttributeName": "gsi1pk", "KeyType": "HASH"},
                        {"AttributeName": "gsi1sk", "KeyType": "RANGE"},
                    ],
                    "Projection": {"ProjectionType": "ALL"},
                }
            ],
            BillingMode="PAY_PER_REQUEST",
        )

        # Wait for table to be created
        table.wait_until_exists()
        yield table


@pytest.fixture
def secret():
    """Create a mock Secrets Manager secret holding the external API key."""
    with mock_aws():
        client = boto3.client("secretsmanager", region_name=REGION)
        client.create_secret(
            Name=SECRET_NAME,
            SecretString=json.dumps({"exampleExternalApiKey": "super-secret-api-key"}),
        )
        yield client


# Sample data fixtures
@pytest.fixture
def sample_record() -> Dict[str, Any]:
    """A stored example data item."""
    return {
        "pk": "TENANT#abcdef",
        "sk": "item-1",
        "itemId": "item-1",
        "name": "Example item",
        "email": "jane.doe@example.com",
        "createdTimestamp": "2024-01-01T12:00:00+00:00",
        "updatedTimestamp": "2024-01-01T12:00:00+00:00",
        "createdBy": "90210",
        "updatedBy": "90210",
    }


def make_api_gateway_event(
    method: str,
    path: str,
    body: Optional[Any] = None,
    correlation_id: Optional[str] = "test-correlation-id",
    query_string_parameters: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Build an API Gateway REST event, with a Correlation-Object header unless correlation_id is None."""
    headers = {
        "Content-Type": "application/json",
        "User-Agent": "test-agent/1.0",
    }
    if correlation_id is not None:
        headers["Correlation-Object"] = json.dumps({"correlationId": correlation_id})

    if body is not None and not isinstance(body, str):
        body = json.dumps(body)

    return {
        "httpMethod": method,
        "path": path,
        "resource": path,
        "headers": headers,
        "multiValueHeaders": {},
        "body": body,
        "requestContext": {
            "requestId": "test-request-id-123",
            "accountId": "123456789012",
            "stage": "test",
            "httpMethod": method,
            "path": path,
            "protocol": "HTTP/1.1",
            "requestTime": "2024-01-01T12:00:00.000Z",
            "requestTimeEpoch": 1704110400000,
            "identity": {
                "sourceIp": "127.0.0.1",
                "userAgent": "test-agent/1.0",
            },
        },
        "pathParameters": None,
        "queryStringParameters": query_string_parameters,
        "multiValueQueryStringParameters": None,
        "stageVariables": None,
        "isBase64Encoded": False,
    }


def make_sqs_event(*bodies: str) -> Dict[str, Any]:
    """Build an SQS event with one record per body."""
    return {
        "Records": [
            {
                "messageId": f"message-{index}",
                "receiptHandle": f"receipt-{index}",
                "body": body,
                "attributes": {
                    "ApproximateReceiveCount": "1",
                    "SentTimestamp": "1704110400000",
                    "SenderId": "123456789012",
                    "ApproximateFirstReceiveTimestamp": "1704110400001",
                },
                "messageAttributes": {},
                "md5OfBody": "",
                "eventSource": "aws:sqs",
                "eventSourceARN": f"arn:aws:sqs:{REGION}:123456789012:example-queue",
                "awsRegion": REGION,
            }
            for index, body in enumerate(bodies)
        ]
    }


@pytest.fixture
def lambda_context():
    """Create a mock Lambda context for testing."""
    context = Mock()
    context.function_name = "test-lambda-function"
    context.function_version = "1"
    context.invoked_function_arn = "arn:aws:lambda:us-east-1:123456789012:function:test-lambda-function"
    context.memory_limit_in_mb = "512"
    context.remaining_time_in_millis = lambda: 30000
    context.aws_request_id = "test-request-id-123"
    context.log_group_name = "/aws/lambda/test-lambda-function"
    context.log_stream_name = "2024/01/01/[$LATEST]test123"
    return context


# Error simulation fixtures
@pytest.fixture
def client_error():
    """Build botocore ClientErrors for testing error handling."""
    from botocore.exceptions import ClientError

    def create_error(error_code: str, message: str = "Test error", operation_name: str = "TestOperation"):
        return ClientError(
            error_response={
                "Error": {
                    "Code": error_code,
                    "Message": message,
                }
            },
            operation_name=operation_name,
        )

    return create_error


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture(autouse=True)
def reset_container():
    """Forget cached clients and services between tests."""
    from accelerator import container

    container.reset()
    yield
    container.reset()


@pytest.fixture
def api_gateway_event():
    """Factory for API Gateway REST events."""
    return make_api_gateway_event


@pytest.fixture
def sqs_event():
    """Factory for SQS events."""
    return make_sqs_event

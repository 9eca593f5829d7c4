"""
AWS Lambda Handlers Module.

This module contains the Lambda function handlers that serve as entry points
for the service. Each handler module exposes a `lambda_handler`:

- health_handler: GET /health
- example_data_handler: CRUD on /items
- example_external_handler: GET /ping
- example_sqs_handler: example messages from SQS
- dlq_handler: messages dead-lettered by the SQS handler

Handlers resolve their services from accelerator.container once per
container and only translate between Lambda events and service calls.
"""

from accelerator.handlers.utils.observability import logger, metrics, tracer

__all__ = [
    'logger',
    'tracer',
    'metrics',
]

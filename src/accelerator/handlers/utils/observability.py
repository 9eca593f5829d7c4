"""
Centralized observability utilities for AWS Lambda handlers.

This module provides configured instances of AWS Lambda Powertools for logging,
tracing, and metrics collection shared by every handler, service and repository.
"""

from typing import List

from aws_lambda_powertools.logging import Logger
from aws_lambda_powertools.logging.formatter import LambdaPowertoolsFormatter
from aws_lambda_powertools.metrics import Metrics
from aws_lambda_powertools.tracing import Tracer

# Metrics namespace for business KPIs
METRICS_NAMESPACE = 'LambdaServiceAccelerator'

SECRET_MASK = '*****'


class SecretMaskingFormatter(LambdaPowertoolsFormatter):
    """JSON formatter that replaces registered secret values before a log line is written."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._secrets: List[str] = []

    def mask_secret(self, secret: str) -> None:
        if secret and secret not in self._secrets:
            self._secrets.append(secret)

    def serialize(self, log) -> str:
        output = super().serialize(log)
        for secret in self._secrets:
            output = output.replace(secret, SECRET_MASK)
        return output


formatter = SecretMaskingFormatter()

# JSON output format, service name can be set by environment variable "POWERTOOLS_SERVICE_NAME"
logger: Logger = Logger(logger_formatter=formatter)

# Disabled by setting POWERTOOLS_TRACE_DISABLED to "true"
tracer: Tracer = Tracer()

# Namespace and service name can be set by environment variables:
# - POWERTOOLS_METRICS_NAMESPACE
# - POWERTOOLS_SERVICE_NAME
metrics = Metrics(namespace=METRICS_NAMESPACE)


def mask_secret(secret: str) -> None:
    """Register a secret value so it is written to the logs as '*****'."""
    formatter.mask_secret(str(secret))

"""
Error taxonomy and error-to-response helpers for AWS Lambda handlers.

Every error raised on purpose by the service derives from BaseServiceError and
carries the HTTP status code the REST handlers answer with. Anything else that
reaches a handler is reported as an unexpected error.
"""

import uuid
from enum import Enum
from typing import Any, Dict, List, Optional

from accelerator.handlers.utils.observability import logger, metrics, tracer


class ErrorSeverity(str, Enum):
    """Error severity levels for classification."""
    LOW = 'LOW'
    MEDIUM = 'MEDIUM'
    HIGH = 'HIGH'
    CRITICAL = 'CRITICAL'


class ErrorCategory(str, Enum):
    """Error categories for classification."""
    VALIDATION = 'VALIDATION'
    BUSINESS_LOGIC = 'BUSINESS_LOGIC'
    EXTERNAL_SERVICE = 'EXTERNAL_SERVICE'
    INFRASTRUCTURE = 'INFRASTRUCTURE'
    SECURITY = 'SECURITY'


class BaseServiceError(Exception):
    """Base exception class for service errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        error_code: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.BUSINESS_LOGIC,
        data: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.severity = severity
        self.category = category
        self.data = data
        self.error_id = str(uuid.uuid4())

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            'error_id': self.error_id,
            'error_code': self.error_code,
            'error_message': self.message,
            'severity': self.severity.value,
            'category': self.category.value,
            'data': self.data,
        }


class BadRequestError(BaseServiceError):
    """Raised when the request is malformed."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code='BAD_REQUEST',
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.VALIDATION,
        )


class UnauthorizedError(BaseServiceError):
    """Raised when the caller is not allowed to perform the request."""

    status_code = 401

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code='UNAUTHORIZED',
            severity=ErrorSeverity.MEDIUM,
            category=ErrorCategory.SECURITY,
        )


class NotFoundError(BaseServiceError):
    """Raised when a requested resource is not found."""

    status_code = 404

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code='RESOURCE_NOT_FOUND',
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.BUSINESS_LOGIC,
        )


class ValidationError(BaseServiceError):
    """Raised when a request body fails schema validation."""

    status_code = 400

    def __init__(self, message: str, data: Optional[List[Dict[str, str]]] = None):
        super().__init__(
            message=message,
            error_code='VALIDATION_ERROR',
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.VALIDATION,
            data=data or [],
        )


class ProxyError(BaseServiceError):
    """Raised when an external dependency cannot be reached."""

    status_code = 504

    def __init__(self, message: str, service_name: str = 'external'):
        super().__init__(
            message=message,
            error_code='PROXY_ERROR',
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.EXTERNAL_SERVICE,
        )
        self.service_name = service_name


class ConfigurationError(BaseServiceError):
    """Raised when a call cannot be built from the given configuration or input. Never retried."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code='CONFIGURATION_ERROR',
            severity=ErrorSeverity.CRITICAL,
            category=ErrorCategory.INFRASTRUCTURE,
        )


def get_http_status_code(error: Exception) -> int:
    """Get appropriate HTTP status code for error."""
    if isinstance(error, BaseServiceError):
        return error.status_code
    return 500


@tracer.capture_method
def log_error_metrics(error: BaseServiceError) -> None:
    """Log error metrics for monitoring and alerting."""
    metrics.add_metric(name='ErrorCount', unit='Count', value=1)
    metrics.add_metric(name=f'Error{error.category.value}Count', unit='Count', value=1)

    tracer.put_annotation('error_code', error.error_code)
    tracer.put_metadata('error_details', error.to_dict())

    logger.error('Service error occurred', extra=error.to_dict())


def format_error_response(status_code: int, message: str, data: Any = None) -> Dict[str, Any]:
    """Format an error body as {errorCode, message, data}."""
    if isinstance(data, Exception):
        data = str(data)
    return {
        'errorCode': status_code,
        'message': message,
        'data': data,
    }

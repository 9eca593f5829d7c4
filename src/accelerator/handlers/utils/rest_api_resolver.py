"""
REST API resolver utility for AWS Lambda handlers.

Every REST handler builds its resolver here so they share the same contract:

- a 'Correlation-Object' JSON header carrying a 'correlationId' is required
  on every request and the id is attached to every log line;
- success bodies are {"result": ...};
- error bodies are {"errorCode": <status>, "message": ..., "data": ...};
- every response allows any origin.
"""

import json
from typing import Any, Dict, List, Mapping, Optional

from aws_lambda_powertools.event_handler import APIGatewayRestResolver, Response, content_types
from aws_lambda_powertools.event_handler.middlewares import NextMiddleware
from aws_lambda_powertools.utilities.data_classes import APIGatewayProxyEvent
from pydantic import BaseModel

from accelerator.handlers.utils.errors import (
    BadRequestError,
    BaseServiceError,
    ValidationError,
    format_error_response,
    get_http_status_code,
    log_error_metrics,
)
from accelerator.handlers.utils.observability import logger, metrics

# API path constants
HEALTH_PATH = '/health'
ITEMS_PATH = '/items'
PING_PATH = '/ping'

HTTP_CODE_OK = 200
HTTP_CODE_CREATED = 201
HTTP_CODE_INTERNAL_SERVER_ERROR = 500
HTTP_CODE_GATEWAY_TIMEOUT = 504

CORRELATION_OBJECT_HEADER = 'Correlation-Object'
UNEXPECTED_ERROR_MESSAGE = 'An unexpected error occurred!'
RESPONSE_HEADERS = {'Access-Control-Allow-Origin': '*'}


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode='json', by_alias=True)
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(item) for item in value]
    return value


def create_response(status_code: int, body: Dict[str, Any]) -> Response:
    logger.debug('Creating response', extra={'status_code': status_code})
    return Response(
        status_code=status_code,
        content_type=content_types.APPLICATION_JSON,
        body=json.dumps(body, default=str),
        headers=dict(RESPONSE_HEADERS),
    )


def create_success_response(result: Any, status_code: int = HTTP_CODE_OK) -> Response:
    return create_response(status_code, {'result': _to_jsonable(result)})


def create_error_response(status_code: int, message: str, data: Any = None) -> Response:
    return create_response(status_code, format_error_response(status_code, message, data))


def extract_correlation_object(headers: Optional[Mapping[str, str]]) -> Dict[str, Any]:
    """
    Parse the Correlation-Object header, whatever the capitalization of its name.

    Raises:
        BadRequestError: If the header is missing, is not JSON or has no correlationId
    """
    if headers is None:
        raise BadRequestError('Event headers are missing or malformed.')

    header_value = None
    for name, value in headers.items():
        if name.lower() == CORRELATION_OBJECT_HEADER.lower():
            header_value = value
            break

    try:
        correlation_object = json.loads(header_value)
    except (TypeError, ValueError) as exc:
        raise BadRequestError(f'A {CORRELATION_OBJECT_HEADER} header is required in the request.') from exc

    if not isinstance(correlation_object, dict) or not correlation_object.get('correlationId'):
        raise BadRequestError(f'The field "correlationId" is missing in the request\'s {CORRELATION_OBJECT_HEADER}.')
    return correlation_object


def verify_required_query_string_params(event: APIGatewayProxyEvent, required_params: List[str]) -> None:
    """
    Raises:
        BadRequestError: Listing every required query string parameter that is missing or blank
    """
    if not required_params:
        return

    query_string_parameters = event.get('queryStringParameters')
    if query_string_parameters is None:
        raise BadRequestError('Request event is malformed. The "queryStringParameters" object is missing.')

    errors = [
        f'The parameter "{name}" is required in the request\'s queryStringParameters.'
        for name in required_params
        if query_string_parameters.get(name) in (None, '')
    ]
    if errors:
        raise BadRequestError(' '.join(errors))


def correlation_middleware(app: APIGatewayRestResolver, next_middleware: NextMiddleware) -> Response:
    correlation_object = extract_correlation_object(app.current_event.headers)
    logger.set_correlation_id(correlation_object['correlationId'])
    app.append_context(correlation_object=correlation_object)
    return next_middleware(app)


def create_rest_api_resolver() -> APIGatewayRestResolver:
    """Build a resolver that enforces the correlation header and maps errors to responses."""
    app = APIGatewayRestResolver()
    app.use(middlewares=[correlation_middleware])

    @app.exception_handler(BaseServiceError)
    def handle_service_error(error: BaseServiceError) -> Response:
        log_error_metrics(error)
        data = error.data if isinstance(error, ValidationError) else {}
        return create_error_response(get_http_status_code(error), error.message, data)

    @app.exception_handler(Exception)
    def handle_unexpected_error(error: Exception) -> Response:
        logger.exception('Unexpected error in handler', extra={'error': str(error)})
        metrics.add_metric(name='UnexpectedError', unit='Count', value=1)
        return create_error_response(HTTP_CODE_INTERNAL_SERVER_ERROR, UNEXPECTED_ERROR_MESSAGE, str(error))

    return app

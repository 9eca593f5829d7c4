"""
Health Handler - Lambda function behind GET /health.

Answers 200 with the health report when every dependency is healthy and 504
with the same report otherwise. The forceExampleExternalFailure query string
parameter breaks the external call on purpose, for API tests.
"""

from typing import Any, Dict

from aws_lambda_powertools.event_handler import Response
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext

from accelerator.container import get_health_service
from accelerator.handlers.utils.observability import logger, metrics, tracer
from accelerator.handlers.utils.rest_api_resolver import (
    HEALTH_PATH,
    HTTP_CODE_GATEWAY_TIMEOUT,
    HTTP_CODE_OK,
    create_rest_api_resolver,
    create_success_response,
)

FORCE_EXAMPLE_EXTERNAL_FAILURE_PARAM = 'forceExampleExternalFailure'

app = create_rest_api_resolver()

# Resolved once per container
health_service = get_health_service()


@app.get(HEALTH_PATH)
@tracer.capture_method
def get_health() -> Response:
    query_string_parameters = app.current_event.query_string_parameters or {}
    force_failure = FORCE_EXAMPLE_EXTERNAL_FAILURE_PARAM in query_string_parameters

    report = health_service.get_health(force_example_external_failure=force_failure)
    status_code = HTTP_CODE_OK if report.is_healthy else HTTP_CODE_GATEWAY_TIMEOUT
    return create_success_response(report, status_code)


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@metrics.log_metrics(capture_cold_start_metric=True)
@tracer.capture_lambda_handler
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return app.resolve(event, context)

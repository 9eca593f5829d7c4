"""
Example External Handler - Lambda function behind GET /ping.

Calls the example external service with the API key kept in Secrets Manager.
"""

from typing import Any, Dict

from aws_lambda_powertools.event_handler import Response
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext

from accelerator.container import get_example_external_service
from accelerator.handlers.utils.observability import logger, metrics, tracer
from accelerator.handlers.utils.rest_api_resolver import PING_PATH, create_rest_api_resolver, create_success_response

app = create_rest_api_resolver()

# Resolved once per container
example_external_service = get_example_external_service()


@app.get(PING_PATH)
@tracer.capture_method
def get_ping() -> Response:
    return create_success_response(example_external_service.ping_with_secret())


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@metrics.log_metrics(capture_cold_start_metric=True)
@tracer.capture_lambda_handler
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return app.resolve(event, context)

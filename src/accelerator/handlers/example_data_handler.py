"""
Example Data Handler - Lambda function for the example data item API.

Routes:
    GET    /items             every item (scans the table)
    GET    /items/<item_id>   one item, 404 when missing
    POST   /items             create an item, 201
    PATCH  /items/<item_id>   overwrite the attributes given in the body
    DELETE /items/<item_id>   delete an item, 404 when missing
"""

from typing import Any, Dict

from aws_lambda_powertools.event_handler import Response
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext

from accelerator.container import get_example_data_service, get_schema_validator
from accelerator.handlers.utils.observability import logger, metrics, tracer
from accelerator.handlers.utils.rest_api_resolver import (
    HTTP_CODE_CREATED,
    ITEMS_PATH,
    create_rest_api_resolver,
    create_success_response,
)
from accelerator.models.example_data_item import CreateExampleDataItemRequest, UpdateExampleDataItemRequest

# TODO: take tenant and user ids from the authorizer context once authentication is configured
TENANT_ID = 'abcdef'
USER_ID = '90210'

app = create_rest_api_resolver()

# Resolved once per container
example_data_service = get_example_data_service()
schema_validator = get_schema_validator()


@app.get(ITEMS_PATH)
@tracer.capture_method
def get_all_items() -> Response:
    # In a multi-tenant system never return the records of every tenant
    return create_success_response(example_data_service.get_all_items())


@app.get(f'{ITEMS_PATH}/<item_id>')
@tracer.capture_method
def get_item(item_id: str) -> Response:
    return create_success_response(example_data_service.get_data_item(TENANT_ID, item_id))


@app.post(ITEMS_PATH)
@tracer.capture_method
def create_item() -> Response:
    request = schema_validator.validate_model(app.current_event.body, CreateExampleDataItemRequest)
    result = example_data_service.create_data_item(request, TENANT_ID, USER_ID)
    return create_success_response(result, HTTP_CODE_CREATED)


@app.patch(f'{ITEMS_PATH}/<item_id>')
@tracer.capture_method
def update_item(item_id: str) -> Response:
    request = schema_validator.validate_model(app.current_event.body, UpdateExampleDataItemRequest)
    # The path decides which item is updated
    request = request.model_copy(update={'id': item_id})
    return create_success_response(example_data_service.update_data_item(request, TENANT_ID, USER_ID))


@app.delete(f'{ITEMS_PATH}/<item_id>')
@tracer.capture_method
def delete_item(item_id: str) -> Response:
    return create_success_response(example_data_service.delete_data_item(TENANT_ID, item_id))


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@metrics.log_metrics(capture_cold_start_metric=True)
@tracer.capture_lambda_handler
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return app.resolve(event, context)

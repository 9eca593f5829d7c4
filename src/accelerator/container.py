"""
Process-wide clients and services.

Every factory is cached, so handlers resolve their dependencies once at cold
start and reuse them for every invocation of the container.
"""

from functools import lru_cache

import boto3
import httpx

from accelerator.dal import ExampleDalHandler, get_dal_handler
from accelerator.handlers.models.env_vars import EnvironmentConfig, get_handler_env_vars
from accelerator.logic.common.api_request_service import ApiRequestService
from accelerator.logic.common.schema_validator import SchemaValidator
from accelerator.logic.common.secret_service import SecretService
from accelerator.logic.example_data_service import ExampleDataService
from accelerator.logic.example_external_service import ExampleExternalService
from accelerator.logic.health_service import HealthService


@lru_cache(maxsize=1)
def get_env_config() -> EnvironmentConfig:
    return get_handler_env_vars()


@lru_cache(maxsize=1)
def dynamodb_resource():
    env_config = get_env_config()
    return boto3.resource('dynamodb', region_name=env_config.AWS_REGION, endpoint_url=env_config.dynamodb_endpoint)


@lru_cache(maxsize=1)
def sns_client():
    return boto3.client('sns', region_name=get_env_config().AWS_REGION)


@lru_cache(maxsize=1)
def secretsmanager_client():
    return boto3.client('secretsmanager', region_name=get_env_config().AWS_REGION)


@lru_cache(maxsize=1)
def http_client() -> httpx.Client:
    return httpx.Client()


@lru_cache(maxsize=1)
def get_secret_service() -> SecretService:
    return SecretService(secretsmanager_client())


@lru_cache(maxsize=1)
def get_schema_validator() -> SchemaValidator:
    return SchemaValidator()


@lru_cache(maxsize=1)
def get_example_repository() -> ExampleDalHandler:
    return get_dal_handler(get_env_config().DB_TABLE_NAME, dynamodb_resource=dynamodb_resource())


@lru_cache(maxsize=1)
def get_example_data_service() -> ExampleDataService:
    return ExampleDataService(
        repository=get_example_repository(),
        sns_client=sns_client(),
        topic_arn=get_env_config().SNS_TOPIC_EXAMPLE_PUBLISH_TOPIC_ARN,
    )


@lru_cache(maxsize=1)
def get_example_external_service() -> ExampleExternalService:
    return ExampleExternalService(get_env_config(), get_secret_service(), http_client())


@lru_cache(maxsize=1)
def get_health_service() -> HealthService:
    return HealthService(get_env_config(), get_example_external_service(), get_example_repository())


@lru_cache(maxsize=None)
def get_api_request_service(api_base_url: str, account_num: str = '', role_name: str = '') -> ApiRequestService:
    """Signed client for another service's API, one per base URL and role."""
    return ApiRequestService(
        api_base_url,
        region_name=get_env_config().AWS_REGION,
        account_num=account_num or None,
        role_name=role_name or None,
        http_client=http_client(),
    )


def reset() -> None:
    """Forget every cached client and service."""
    for factory in (
        get_env_config,
        dynamodb_resource,
        sns_client,
        secretsmanager_client,
        http_client,
        get_secret_service,
        get_schema_validator,
        get_example_repository,
        get_example_data_service,
        get_example_external_service,
        get_health_service,
        get_api_request_service,
    ):
        factory.cache_clear()

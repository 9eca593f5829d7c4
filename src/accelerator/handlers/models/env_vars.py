"""
Environment variable models for type-safe configuration.

This module defines the Pydantic model for the environment variables shared by
every Lambda handler of the service.
"""

from typing import Annotated, Optional

from aws_lambda_env_modeler import BaseModel, get_environment_variables
from pydantic import Field

SAM_LOCAL_DYNAMODB_ENDPOINT = 'http://dynamodb:8000'


class EnvironmentConfig(BaseModel):
    """Environment variables for Lambda handlers."""

    AWS_REGION: Annotated[str, Field(
        default='us-east-1',
        description='AWS region for service deployment'
    )] = 'us-east-1'

    # Service name for observability
    POWERTOOLS_SERVICE_NAME: Annotated[str, Field(
        default='lambda-service-accelerator',
        description='Service name for AWS Powertools'
    )] = 'lambda-service-accelerator'

    ENVIRONMENT_NAME: Annotated[str, Field(
        default='dev',
        description='Deployment environment name',
        pattern=r'^(local|dev|test|staging|prod)$'
    )] = 'dev'

    RELEASE_VERSION: Annotated[str, Field(
        default='0.0.0',
        description='Release version reported by the health check and the User-Agent header'
    )] = '0.0.0'

    LOG_LEVEL: Annotated[str, Field(
        default='INFO',
        description='Log level for application logging',
        pattern=r'^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$'
    )] = 'INFO'

    DOMAIN: Annotated[str, Field(
        default='',
        description='Public domain of the service'
    )] = ''

    LOCAL_DOMAIN: Annotated[str, Field(
        default='',
        description='Domain used when running under sam local'
    )] = ''

    EXAMPLE_EXTERNAL_DOMAIN: Annotated[str, Field(
        description='URL of the external service pinged by the health check',
        min_length=1
    )]

    SECRET_NAME: Annotated[str, Field(
        description='Secrets Manager secret holding the external API key',
        min_length=1
    )]

    DB_TABLE_NAME: Annotated[str, Field(
        description='DynamoDB table name for example data items',
        min_length=1
    )]

    SNS_TOPIC_EXAMPLE_PUBLISH_TOPIC_ARN: Annotated[Optional[str], Field(
        default=None,
        description='SNS topic notified when a data item is created'
    )] = None

    # Set to "true" by sam local
    AWS_SAM_LOCAL: Annotated[str, Field(
        default='false',
        description='Running under sam local (true/false)'
    )] = 'false'

    DYNAMODB_ENDPOINT: Annotated[Optional[str], Field(
        default=None,
        description='DynamoDB endpoint override, e.g. dynamodb-local'
    )] = None

    @property
    def is_sam_local(self) -> bool:
        """Check if running under sam local."""
        return self.AWS_SAM_LOCAL.lower() == 'true'

    @property
    def dynamodb_endpoint(self) -> Optional[str]:
        """DynamoDB endpoint to use, None for the regional default."""
        if self.DYNAMODB_ENDPOINT:
            return self.DYNAMODB_ENDPOINT
        if self.is_sam_local:
            return SAM_LOCAL_DYNAMODB_ENDPOINT
        return None

    @property
    def effective_domain(self) -> str:
        """Domain the service is reachable on."""
        return self.LOCAL_DOMAIN if self.is_sam_local else self.DOMAIN


def get_handler_env_vars() -> EnvironmentConfig:
    """
    Get typed environment variables for Lambda handlers.

    Returns:
        Validated environment variables model instance
    """
    return get_environment_variables(model=EnvironmentConfig)

"""
Client of the example external service.

ping() only proves connectivity and is used by the health check;
ping_with_secret() shows how a secret API key is fetched and sent along.
"""

from typing import Any, Dict

import httpx

from accelerator.handlers.models.env_vars import EnvironmentConfig
from accelerator.handlers.utils.errors import ProxyError
from accelerator.handlers.utils.observability import logger, tracer
from accelerator.logic.common.secret_service import SecretService

SERVICE_NAME = 'ExampleExternal'
API_KEY_PROPERTY_NAME = 'exampleExternalApiKey'
API_KEY_HEADER = 'X-Api-Key'


class ExampleExternalService:
    """Business logic service for the example external dependency."""

    def __init__(self, env_config: EnvironmentConfig, secret_service: SecretService, http_client: httpx.Client):
        self.env_config = env_config
        self.secret_service = secret_service
        self.http_client = http_client

    def create_headers(self) -> Dict[str, str]:
        """Headers sent with every request to the external service."""
        return {
            'Accept-Language': 'en-US',
            'Accept': 'application/json',
            'Content-Type': 'application/json',
            'User-Agent': f'SamServiceAccelerator/{self.env_config.RELEASE_VERSION}',
        }

    @tracer.capture_method
    def ping(self, force_failure: bool = False) -> Dict[str, Any]:
        """
        Make a simple request to the external service.

        Args:
            force_failure: Break the URL on purpose, for API tests

        Returns:
            {'statusCode': ..., 'body': ...} of the external response

        Raises:
            ProxyError: If the external service cannot be reached or answers with an error
        """
        return self._get(self.create_headers(), force_failure)

    @tracer.capture_method
    def ping_with_secret(self, force_failure: bool = False) -> Dict[str, Any]:
        """Like ping(), with the API key from Secrets Manager in the X-Api-Key header."""
        headers = self.create_headers()
        headers[API_KEY_HEADER] = self.secret_service.get_secret_value(self.env_config.SECRET_NAME, API_KEY_PROPERTY_NAME)
        return self._get(headers, force_failure)

    def _get(self, headers: Dict[str, str], force_failure: bool) -> Dict[str, Any]:
        url = self.env_config.EXAMPLE_EXTERNAL_DOMAIN
        if force_failure:
            url = f'broken{url}'

        try:
            response = self.http_client.get(url, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning(f'{SERVICE_NAME} request failed', extra={'error': str(exc)})
            raise ProxyError(f'{SERVICE_NAME} request failed: {exc}', service_name=SERVICE_NAME) from exc

        return {'statusCode': response.status_code, 'body': _decode_body(response)}


def _decode_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text

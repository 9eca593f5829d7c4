"""
AWS Secrets Manager access for Lambda handlers.

Secrets are JSON documents. Each secret is fetched once per Lambda container
and kept in memory until the container is recycled; every value it holds is
masked in the logs from then on.
"""

import json
from typing import Any, Dict, Optional

from accelerator.handlers.utils.observability import logger, mask_secret, tracer


class SecretService:
    """Reads properties of JSON secrets stored in AWS Secrets Manager."""

    def __init__(self, secretsmanager_client: Any) -> None:
        self.client = secretsmanager_client
        self._retrieved_secrets: Dict[str, Dict[str, Any]] = {}

    @tracer.capture_method
    def get_secret_value(self, secret_name: str, property_name: str) -> Optional[Any]:
        """
        Get one property of a JSON secret.

        Args:
            secret_name: Name or ARN of the secret
            property_name: Key inside the secret's JSON document

        Returns:
            The property value, or None if the secret has no such property

        Raises:
            ClientError: If Secrets Manager rejects the request
        """
        logger.debug('get_secret_value called', extra={'secret_name': secret_name, 'property_name': property_name})

        if secret_name in self._retrieved_secrets:
            logger.debug('Secret retrieved from cache', extra={'secret_name': secret_name})
            return self._retrieved_secrets[secret_name].get(property_name)

        logger.debug('Calling Secrets Manager to retrieve secret', extra={'secret_name': secret_name})
        response = self.client.get_secret_value(SecretId=secret_name)
        parsed_secret = json.loads(response['SecretString'])

        self._retrieved_secrets[secret_name] = parsed_secret
        for value in parsed_secret.values():
            if isinstance(value, str):
                mask_secret(value)

        return parsed_secret.get(property_name)

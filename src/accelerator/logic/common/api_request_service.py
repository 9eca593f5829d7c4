"""
Client for other services' API Gateway endpoints protected by IAM auth.

Requests are signed with SigV4 using the Lambda's own credentials, or with
temporary credentials for a role in another AWS account when an account
number and role name are given. The caller's correlation object is forwarded
so logs can be joined across services.
"""

import json
from typing import Any, Dict, Optional
from urllib.parse import quote

import boto3
import httpx
from botocore.auth import SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials

from accelerator.handlers.utils.observability import logger, tracer

EXECUTE_API_SERVICE = 'execute-api'
CORRELATION_OBJECT_HEADER = 'correlation-object'
ROLE_SESSION_NAME_MAX_LENGTH = 64
ASSUME_ROLE_DURATION_SECONDS = 3600
ASSUME_ROLE_EXTERNAL_ID = 'ManagementConsole'


class ApiRequestService:
    """SigV4-signed HTTP calls to an API Gateway endpoint."""

    def __init__(
        self,
        api_base_url: str,
        region_name: str,
        account_num: Optional[str] = None,
        role_name: Optional[str] = None,
        session: Optional[boto3.session.Session] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.api_base_url = api_base_url.rstrip('/')
        self.region_name = region_name
        self.account_num = account_num
        self.role_name = role_name
        self.session = session or boto3.session.Session()
        self.http_client = http_client or httpx.Client()
        self._credentials: Optional[Credentials] = None

    def get(self, path_template: str, template_params: Optional[Dict[str, str]] = None, query_params: Optional[Dict[str, Any]] = None) -> Any:
        return self.invoke_api('GET', path_template, template_params, query_params)

    def post(self, path_template: str, template_params: Optional[Dict[str, str]] = None, body: Any = None) -> Any:
        return self.invoke_api('POST', path_template, template_params, body=body)

    def put(
        self,
        path_template: str,
        template_params: Optional[Dict[str, str]] = None,
        query_params: Optional[Dict[str, Any]] = None,
        body: Any = None,
    ) -> Any:
        return self.invoke_api('PUT', path_template, template_params, query_params, body)

    def delete(
        self,
        path_template: str,
        template_params: Optional[Dict[str, str]] = None,
        query_params: Optional[Dict[str, Any]] = None,
        body: Any = None,
    ) -> Any:
        return self.invoke_api('DELETE', path_template, template_params, query_params, body)

    @tracer.capture_method
    def invoke_api(
        self,
        method: str,
        path_template: str,
        template_params: Optional[Dict[str, str]] = None,
        query_params: Optional[Dict[str, Any]] = None,
        body: Any = None,
    ) -> Any:
        """
        Send a signed request and return the decoded JSON response body.

        Args:
            method: HTTP method
            path_template: Path with placeholders, e.g. '/users/{userId}/profile'
            template_params: Placeholder values, e.g. {'userId': '1234'}
            query_params: Query string parameters
            body: JSON-serializable request body

        Raises:
            httpx.HTTPStatusError: If the endpoint answers with an error status
            httpx.HTTPError: If the endpoint cannot be reached
        """
        path = path_template.format(**{name: quote(str(value), safe='') for name, value in (template_params or {}).items()})
        url = httpx.URL(f'{self.api_base_url}{path}', params=query_params or {})
        content = json.dumps(body) if body is not None else None

        headers = self.get_headers()
        if content is not None:
            headers['Content-Type'] = 'application/json'

        signed_request = AWSRequest(method=method, url=str(url), data=content, headers=headers)
        SigV4Auth(self._get_credentials(), EXECUTE_API_SERVICE, self.region_name).add_auth(signed_request)

        response = self.http_client.request(method, url, content=content, headers=dict(signed_request.headers.items()))
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError:
            logger.error('Error response received', extra={'status_code': response.status_code, 'response_body': response.text})
            raise
        return response.json() if response.content else None

    def get_headers(self) -> Dict[str, str]:
        return {CORRELATION_OBJECT_HEADER: json.dumps({'correlationId': logger.get_correlation_id()})}

    def _get_credentials(self) -> Credentials:
        if self._credentials is None:
            if self.account_num and self.role_name:
                # The endpoint lives in another AWS account
                self._credentials = self.assume_role(self.account_num, self.role_name, logger.get_correlation_id() or '')
            else:
                self._credentials = self.session.get_credentials().get_frozen_credentials()
        return self._credentials

    @tracer.capture_method
    def assume_role(self, account_id: str, role_name: str, correlation_id: str) -> Credentials:
        """
        Get temporary credentials for a role in another AWS account.

        Raises:
            ClientError: If STS refuses to assume the role
        """
        # AWS limits the session name to 64 characters
        session_name = f'correlation-{correlation_id}'[:ROLE_SESSION_NAME_MAX_LENGTH]
        role_arn = f'arn:aws:iam::{account_id}:role/{role_name}'
        logger.info('assume_role called', extra={'role_arn': role_arn, 'session_name': session_name})

        response = self.session.client('sts', region_name=self.region_name).assume_role(
            RoleArn=role_arn,
            RoleSessionName=session_name,
            DurationSeconds=ASSUME_ROLE_DURATION_SECONDS,
            ExternalId=ASSUME_ROLE_EXTERNAL_ID,
        )
        credentials = response['Credentials']
        logger.info('Assumed STS role', extra={'session_name': session_name})
        return Credentials(
            access_key=credentials['AccessKeyId'],
            secret_key=credentials['SecretAccessKey'],
            token=credentials['SessionToken'],
        )

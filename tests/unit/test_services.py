"""
Unit tests for the business services and the common services.

Repositories and AWS clients are replaced with mocks; the external HTTP
dependency is served by httpx.MockTransport.
"""

import json
from decimal import Decimal
from unittest.mock import Mock

import httpx
import pytest
from botocore.credentials import Credentials
from botocore.exceptions import EndpointConnectionError

from accelerator.dal.dynamodb_handler import TableNotActiveError
from accelerator.handlers.models.env_vars import get_handler_env_vars
from accelerator.handlers.utils.errors import NotFoundError, ProxyError
from accelerator.handlers.utils.observability import SECRET_MASK, SecretMaskingFormatter
from accelerator.logic.common.api_request_service import ApiRequestService
from accelerator.logic.common.secret_service import SecretService
from accelerator.logic.example_data_service import ExampleDataService
from accelerator.logic.example_external_service import ExampleExternalService
from accelerator.logic.health_service import HealthService
from accelerator.models.example_data_item import CreateExampleDataItemRequest, UpdateExampleDataItemRequest
from accelerator.models.example_sqs_message import ExampleSqsMessage

SECRET_NAME = "test-example-secret"
EXTERNAL_DOMAIN = "https://external.example.com/ping"


@pytest.fixture
def repository():
    return Mock()


@pytest.fixture
def sns_client():
    return Mock()


@pytest.fixture
def env_config():
    return get_handler_env_vars()


def external_transport(requests_seen, status_code=200):
    """Serve the external ping; broken URLs fail to connect."""

    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        if request.url.scheme != "https":
            raise httpx.ConnectError("unsupported scheme", request=request)
        return httpx.Response(status_code, json={"pong": True})

    return httpx.MockTransport(handler)


class TestExampleDataService:
    """Test cases for ExampleDataService."""

    def test_get_data_item_maps_the_record(self, repository, sample_record):
        repository.get_record.return_value = dict(sample_record, exampleNumber=Decimal("42"))
        service = ExampleDataService(repository)

        item = service.get_data_item("abcdef", "item-1")

        repository.get_record.assert_called_once_with("TENANT#abcdef", "item-1")
        assert item.id == "item-1"
        assert item.example_number == 42
        assert isinstance(item.example_number, int)

    def test_get_all_items(self, repository, sample_record):
        repository.get_all_records.return_value = [sample_record]

        items = ExampleDataService(repository).get_all_items()

        assert [item.id for item in items] == ["item-1"]

    def test_create_data_item_publishes_to_sns(self, repository, sns_client):
        service = ExampleDataService(repository, sns_client, "arn:aws:sns:us-east-1:123456789012:example-topic")
        request = CreateExampleDataItemRequest(name="Example", example_number=1.5)

        item = service.create_data_item(request, "abcdef", "90210")

        record = repository.put_record.call_args.args[0]
        assert record["pk"] == "TENANT#abcdef"
        assert record["sk"] == record["itemId"] == item.id
        assert record["exampleNumber"] == Decimal("1.5")
        assert record["createdBy"] == record["updatedBy"] == "90210"

        sns_client.publish.assert_called_once()
        message = json.loads(sns_client.publish.call_args.kwargs["Message"])
        assert message == {"type": "NewDataItemCreated", "tenantId": "abcdef", "itemId": item.id}

    def test_create_data_item_without_topic_does_not_publish(self, repository, sns_client):
        service = ExampleDataService(repository, sns_client, None)

        service.create_data_item(CreateExampleDataItemRequest(name="Example"), "abcdef", "90210")

        sns_client.publish.assert_not_called()

    def test_update_data_item_sends_a_partial_record(self, repository, sample_record):
        repository.update_partial_record.return_value = dict(sample_record, name="New")
        service = ExampleDataService(repository)

        item = service.update_data_item(UpdateExampleDataItemRequest(id="item-1", name="New"), "abcdef", "90210")

        record = repository.update_partial_record.call_args.args[0]
        assert record["pk"] == "TENANT#abcdef"
        assert record["sk"] == "item-1"
        assert record["email"] is None
        assert item.name == "New"

    def test_delete_missing_item_is_not_found(self, repository):
        repository.delete_record.return_value = None

        with pytest.raises(NotFoundError):
            ExampleDataService(repository).delete_data_item("abcdef", "missing")

    def test_process_sqs_message(self, repository):
        message = ExampleSqsMessage(type="NewDataItemCreated", tenant_id="abcdef", item_id="item-1")

        result = ExampleDataService(repository).process_sqs_message(message)

        assert result == {"message": "Example SQS Message has been processed."}


class TestExampleExternalService:
    """Test cases for ExampleExternalService."""

    def test_ping(self, env_config):
        requests_seen = []
        service = ExampleExternalService(env_config, Mock(), httpx.Client(transport=external_transport(requests_seen)))

        response = service.ping()

        assert response == {"statusCode": 200, "body": {"pong": True}}
        assert str(requests_seen[0].url) == EXTERNAL_DOMAIN
        assert requests_seen[0].headers["User-Agent"] == "SamServiceAccelerator/test-1.0.0"
        assert requests_seen[0].headers["Accept-Language"] == "en-US"

    def test_forced_failure_is_a_proxy_error(self, env_config):
        requests_seen = []
        service = ExampleExternalService(env_config, Mock(), httpx.Client(transport=external_transport(requests_seen)))

        with pytest.raises(ProxyError) as exc_info:
            service.ping(force_failure=True)

        assert exc_info.value.status_code == 504

    def test_error_status_is_a_proxy_error(self, env_config):
        service = ExampleExternalService(env_config, Mock(), httpx.Client(transport=external_transport([], status_code=503)))

        with pytest.raises(ProxyError):
            service.ping()

    def test_ping_with_secret_sends_api_key(self, env_config):
        requests_seen = []
        secret_service = Mock()
        secret_service.get_secret_value.return_value = "api-key"
        service = ExampleExternalService(env_config, secret_service, httpx.Client(transport=external_transport(requests_seen)))

        service.ping_with_secret()

        secret_service.get_secret_value.assert_called_once_with(SECRET_NAME, "exampleExternalApiKey")
        assert requests_seen[0].headers["X-Api-Key"] == "api-key"


class TestHealthService:
    """Test cases for HealthService."""

    def test_healthy(self, env_config, repository):
        external_service = Mock()
        external_service.ping.return_value = {"statusCode": 200, "body": {}}
        repository.ping_table.return_value = "ACTIVE"

        report = HealthService(env_config, external_service, repository).get_health()

        assert report.is_healthy
        assert report.example_external_status == "healthy"
        assert report.db_status == "healthy"
        assert report.version == "test-1.0.0"
        assert report.errors == []
        assert report.execution_time is not None

    def test_external_failure_is_reported(self, env_config, repository):
        external_service = Mock()
        external_service.ping.side_effect = ProxyError("ExampleExternal request failed: boom")

        report = HealthService(env_config, external_service, repository).get_health(force_example_external_failure=True)

        external_service.ping.assert_called_once_with(force_failure=True)
        assert report.status == "error"
        assert report.example_external_status == "error"
        assert report.errors == ["ExampleExternal Status: ExampleExternal request failed: boom"]

    def test_database_failure_is_reported(self, env_config, repository):
        external_service = Mock()
        external_service.ping.return_value = {"statusCode": 200, "body": {}}
        repository.ping_table.side_effect = TableNotActiveError("test-example-table", "CREATING")

        report = HealthService(env_config, external_service, repository).get_health()

        assert report.status == "error"
        assert report.db_status == "error"
        assert len(report.errors) == 1

    def test_unreachable_database_is_reported(self, env_config, repository):
        external_service = Mock()
        external_service.ping.return_value = {"statusCode": 200, "body": {}}
        repository.ping_table.side_effect = EndpointConnectionError(endpoint_url="http://dynamodb:8000")

        report = HealthService(env_config, external_service, repository).get_health()

        assert not report.is_healthy
        assert report.db_status == "error"
        assert report.example_external_status == "healthy"
        assert report.errors[0].startswith("DB Status: ")


class TestSecretService:
    """Test cases for SecretService."""

    def test_secret_is_fetched_once(self, secret):
        client = Mock(wraps=secret)
        service = SecretService(client)

        assert service.get_secret_value(SECRET_NAME, "exampleExternalApiKey") == "super-secret-api-key"
        assert service.get_secret_value(SECRET_NAME, "exampleExternalApiKey") == "super-secret-api-key"
        assert service.get_secret_value(SECRET_NAME, "missing") is None

        client.get_secret_value.assert_called_once_with(SecretId=SECRET_NAME)


class TestSecretMaskingFormatter:
    """Test cases for log masking."""

    def test_registered_secret_is_masked(self):
        formatter = SecretMaskingFormatter()
        formatter.mask_secret("hunter2")

        output = formatter.serialize({"message": "password is hunter2"})

        assert "hunter2" not in output
        assert SECRET_MASK in output


class TestApiRequestService:
    """Test cases for ApiRequestService."""

    def _service(self, requests_seen, **kwargs):
        def handler(request: httpx.Request) -> httpx.Response:
            requests_seen.append(request)
            return httpx.Response(200, json={"ok": True})

        session = Mock()
        session.get_credentials.return_value.get_frozen_credentials.return_value = Credentials("AKID", "SECRET", "TOKEN")
        return ApiRequestService(
            "https://api.example.com/prod/",
            region_name="us-east-1",
            session=session,
            http_client=httpx.Client(transport=httpx.MockTransport(handler)),
            **kwargs,
        ), session

    def test_signed_get(self):
        requests_seen = []
        service, _ = self._service(requests_seen)

        result = service.get("/users/{userId}/profile", {"userId": "12 34"}, {"verbose": "true"})

        assert result == {"ok": True}
        request = requests_seen[0]
        assert request.method == "GET"
        assert "/prod/users/12%2034/profile" in str(request.url)
        assert request.url.params["verbose"] == "true"
        assert request.headers["Authorization"].startswith("AWS4-HMAC-SHA256 Credential=AKID/")
        assert "execute-api" in request.headers["Authorization"]
        assert "correlationId" in json.loads(request.headers["correlation-object"])

    def test_post_sends_json(self):
        requests_seen = []
        service, _ = self._service(requests_seen)

        service.post("/users", body={"name": "x"})

        assert json.loads(requests_seen[0].content) == {"name": "x"}
        assert requests_seen[0].headers["Content-Type"] == "application/json"

    def test_error_status_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"message": "boom"})

        session = Mock()
        session.get_credentials.return_value.get_frozen_credentials.return_value = Credentials("AKID", "SECRET")
        service = ApiRequestService(
            "https://api.example.com",
            region_name="us-east-1",
            session=session,
            http_client=httpx.Client(transport=httpx.MockTransport(handler)),
        )

        with pytest.raises(httpx.HTTPStatusError):
            service.delete("/users/1")

    def test_cross_account_role_is_assumed_once(self):
        requests_seen = []
        service, session = self._service(requests_seen, account_num="210987654321", role_name="ApiCaller")
        sts = session.client.return_value
        sts.assume_role.return_value = {
            "Credentials": {"AccessKeyId": "ASSUMED", "SecretAccessKey": "SECRET", "SessionToken": "TOKEN"}
        }

        service.get("/a")
        service.get("/b")

        sts.assume_role.assert_called_once()
        kwargs = sts.assume_role.call_args.kwargs
        assert kwargs["RoleArn"] == "arn:aws:iam::210987654321:role/ApiCaller"
        assert kwargs["RoleSessionName"].startswith("correlation-")
        assert len(kwargs["RoleSessionName"]) <= 64
        assert requests_seen[1].headers["Authorization"].startswith("AWS4-HMAC-SHA256 Credential=ASSUMED/")

"""
Health check of the service and its dependencies.

Each dependency is checked in turn; a failing dependency is reported in the
result instead of failing the check.
"""

import time

from aws_lambda_powertools.metrics import MetricUnit
from botocore.exceptions import BotoCoreError, ClientError

from accelerator.dal import ExampleDalHandler
from accelerator.handlers.models.env_vars import EnvironmentConfig
from accelerator.handlers.utils.errors import BaseServiceError
from accelerator.handlers.utils.observability import logger, metrics, tracer
from accelerator.logic.example_external_service import ExampleExternalService
from accelerator.models.health import ERROR, HEALTHY, HealthReport


def _elapsed_ms(start: float) -> int:
    return int((time.time() - start) * 1000)


class HealthService:
    def __init__(self, env_config: EnvironmentConfig, example_external_service: ExampleExternalService, repository: ExampleDalHandler):
        self.env_config = env_config
        self.example_external_service = example_external_service
        self.repository = repository

    @tracer.capture_method
    def get_health(self, force_example_external_failure: bool = False) -> HealthReport:
        """
        Check every dependency and echo the running configuration.

        The overall status is healthy only when every dependency is healthy.
        """
        start_time = time.time()
        report = HealthReport(
            version=self.env_config.RELEASE_VERSION,
            region=self.env_config.AWS_REGION,
            service_name=self.env_config.POWERTOOLS_SERVICE_NAME,
            environment_name=self.env_config.ENVIRONMENT_NAME,
            log_level=self.env_config.LOG_LEVEL,
            domain=self.env_config.effective_domain,
        )

        external_start_time = time.time()
        try:
            response = self.example_external_service.ping(force_failure=force_example_external_failure)
            report.example_external_status = HEALTHY
            logger.debug('ExampleExternal connection succeeded', extra={'status_code': response['statusCode']})
        except BaseServiceError as exc:
            report.example_external_status = ERROR
            report.errors.append(f'ExampleExternal Status: {exc.message}')
            logger.error('ExampleExternal connection failed in healthcheck', extra={'error': exc.message})
        report.example_external_response_time = _elapsed_ms(external_start_time)

        db_start_time = time.time()
        try:
            self.repository.ping_table()
            report.db_status = HEALTHY
        except (BaseServiceError, BotoCoreError, ClientError) as exc:
            report.db_status = ERROR
            report.errors.append(f'DB Status: {exc}')
            logger.error('Database connection failed in healthcheck', extra={'error': str(exc)})
        report.db_response_time = _elapsed_ms(db_start_time)

        report.status = HEALTHY if report.example_external_status == HEALTHY and report.db_status == HEALTHY else ERROR
        report.execution_time = _elapsed_ms(start_time)

        metrics.add_metric(name='HealthCheckHealthy' if report.is_healthy else 'HealthCheckUnhealthy', unit=MetricUnit.Count, value=1)
        return report

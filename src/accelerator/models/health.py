"""Output model of the health check."""

from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

HEALTHY = 'healthy'
ERROR = 'error'


class HealthReport(BaseModel):
    """Status of every dependency plus the configuration the service runs with."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: Annotated[str, Field(
        default='',
        description='healthy when every dependency is healthy, otherwise error',
        examples=[HEALTHY, ERROR]
    )] = ''

    example_external_status: str = ''
    db_status: str = ''
    version: str = ''
    region: str = ''
    service_name: str = ''
    environment_name: str = ''
    log_level: str = ''
    domain: str = ''

    execution_time: Annotated[Optional[int], Field(
        default=None,
        description='Total time of the health check in milliseconds'
    )] = None

    example_external_response_time: int = 0
    db_response_time: Optional[int] = None
    errors: List[str] = Field(default_factory=list)

    @property
    def is_healthy(self) -> bool:
        return self.status == HEALTHY

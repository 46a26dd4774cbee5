from functools import lru_cache
from typing import Annotated

from fastapi.params import Depends

from ics.healthcheck.service import HealthCheckService


@lru_cache
def get_health_check_service() -> HealthCheckService:
    return HealthCheckService()


HealthCheckServiceDep = Annotated[HealthCheckService, Depends(get_health_check_service)]

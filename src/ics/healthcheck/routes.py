from dataclasses import asdict

from fastapi import APIRouter
from starlette import status
from starlette.responses import Response

from ics import __version__
from ics.healthcheck.dependencies import HealthCheckServiceDep

hc_route = APIRouter()


@hc_route.get("/hc")
@hc_route.get("/health")
def get_health_check(response: Response, hc_service: HealthCheckServiceDep) -> dict:
    result = hc_service.formats_info
    if result.error:
        response.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    return {'status': asdict(result), 'version': __version__}

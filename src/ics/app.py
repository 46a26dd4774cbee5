from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from ics.healthcheck.dependencies import get_health_check_service
from ics.healthcheck.routes import hc_route
from ics.host import set_fault_hook
from ics.images.dependencies import get_codec
from ics.images.formats_service import FormatsService
from ics.images.routes import images_router


def _startup() -> None:
    set_fault_hook()

    formats_service = FormatsService(get_codec(), logger.bind(source="core"))  # type: ignore
    formats_info = formats_service.probe_formats()
    get_health_check_service().set_formats_info(formats_info)


@asynccontextmanager
async def _lifespan(_: FastAPI):
    _startup()
    yield


def create_web_app() -> FastAPI:
    result = FastAPI(lifespan=_lifespan)
    result.include_router(images_router)
    result.include_router(hc_route)
    return result

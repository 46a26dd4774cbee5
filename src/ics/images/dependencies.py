from functools import lru_cache
from typing import Annotated

from logging import Logger
from fastapi.params import Depends
from loguru import logger

from ics.config import get_app_settings
from ics.images.codec import ImageCodec, PillowCodec
from ics.images.conversion_service import ConversionService


@lru_cache
def get_codec() -> ImageCodec:
    return PillowCodec(get_app_settings().encoder_params)


CodecDep = Annotated[ImageCodec, Depends(get_codec)]


def _get_request_logger(output_format: str) -> Logger:
    return logger.bind(output_format=output_format)  # type: ignore


RequestLoggerDep = Annotated[Logger, Depends(_get_request_logger)]


def _get_conversion_service(codec: CodecDep, request_logger: RequestLoggerDep) -> ConversionService:
    return ConversionService(codec, get_app_settings().max_input_bytes, request_logger)


ConversionServiceDep = Annotated[ConversionService, Depends(_get_conversion_service)]

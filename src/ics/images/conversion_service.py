from logging import Logger

from starlette import status
from starlette.requests import Request
from starlette.responses import Response, PlainTextResponse

from ics.images.codec import ImageCodec
from ics.images.errors import ConversionError, CodecFailure, UnsupportedOutputFormat, UnknownMediaTypeForFormat
from ics.images.image_processor import convert_async

HEADER_LEN = "Content-Length"

_error_statuses: dict[type[ConversionError], int] = {
    UnsupportedOutputFormat: status.HTTP_400_BAD_REQUEST,
    CodecFailure: status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    UnknownMediaTypeForFormat: status.HTTP_501_NOT_IMPLEMENTED,
}


class ConversionService:
    _codec: ImageCodec
    _max_input_bytes: int
    _logger: Logger

    def __init__(self, codec: ImageCodec, max_input_bytes: int, logger: Logger):
        assert codec is not None, "codec is required"
        assert max_input_bytes > 0, "max_input_bytes must be greater than 0"
        assert logger is not None, "logger is required"

        self._codec = codec
        self._max_input_bytes = max_input_bytes
        self._logger = logger

    def _too_large_response(self, size: int) -> Response:
        self._logger.debug(f"Image of {size} bytes exceeds the limit")
        return PlainTextResponse(f"Image size exceeds {self._max_input_bytes} bytes",
                                 status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE)

    async def convert_request(self, request: Request, output_format: str) -> Response:
        """ Reads the image from the request body, stops reading as soon as the size limit is exceeded """
        content_length = request.headers.get(HEADER_LEN, None)
        if content_length and content_length.isdigit() and int(content_length) > self._max_input_bytes:
            return self._too_large_response(int(content_length))

        data = bytearray()
        async for chunk in request.stream():
            data.extend(chunk)
            if len(data) > self._max_input_bytes:
                return self._too_large_response(len(data))

        return await self.convert(bytes(data), output_format)

    async def convert(self, data: bytes, output_format: str) -> Response:
        if len(data) > self._max_input_bytes:
            return self._too_large_response(len(data))

        try:
            data_uri = await convert_async(data, output_format, self._codec)
        except ConversionError as e:
            self._logger.warning(f"Failed to convert image: {e.render()}")
            return PlainTextResponse(e.render(),
                                     status_code=_error_statuses.get(type(e), status.HTTP_500_INTERNAL_SERVER_ERROR))
        except Exception as e:
            self._logger.exception("Unexpected fault while converting image")
            return PlainTextResponse(f"InternalFault: {e}", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

        self._logger.debug(f"Image of {len(data)} bytes was converted")
        return PlainTextResponse(data_uri)

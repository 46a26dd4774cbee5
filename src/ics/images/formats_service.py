from logging import Logger

from ics.images.codec import ImageCodec
from ics.images.errors import UnknownMediaTypeForFormat
from ics.images.format_resolver import media_type
from ics.models import FormatsInfo, FormatStatus, ImageFormat


class FormatsService:
    _codec: ImageCodec
    _logger: Logger

    def __init__(self, codec: ImageCodec, l: Logger):
        self._codec = codec
        self._logger = l

    def _probe_format(self, image_format: ImageFormat) -> FormatStatus:
        try:
            media_type(image_format)
        except UnknownMediaTypeForFormat:
            return FormatStatus.no_media_type

        if not self._codec.can_encode(image_format):
            return FormatStatus.no_encoder

        return FormatStatus.available

    def probe_formats(self) -> FormatsInfo:
        self._logger.debug(f"Probing {len(ImageFormat)} output formats")
        result = FormatsInfo(output_formats=dict(), error=True)

        for image_format in ImageFormat:
            status = self._probe_format(image_format)
            result.output_formats[image_format.value] = status
            if status == FormatStatus.available:
                self._logger.info(f"Output format {image_format} is available as {', '.join(image_format.extensions)}")
            else:
                self._logger.info(f"Output format {image_format} is not available: {status.value}")

        result.error = not any(t == FormatStatus.available for t in result.output_formats.values())
        if result.error:
            self._logger.warning("No output format is available, check Pillow installation")
        return result

from ics.models import ImageFormat


class ConversionError(Exception):
    """ Base class of all errors raised by the conversion pipeline """

    @property
    def kind(self) -> str:
        return type(self).__name__

    def render(self) -> str:
        """ Renders error as a plain diagnostic string, e.g. ``UnsupportedOutputFormat: ...`` """
        return f"{self.kind}: {self}"


class CodecFailure(ConversionError):
    """ Input bytes could not be sniffed or decoded, or the image could not be encoded """
    cause: Exception | None

    def __init__(self, detail: str, cause: Exception | None = None):
        super().__init__(detail)
        self.cause = cause


class UnsupportedOutputFormat(ConversionError):
    """ Requested output format token doesn't match any known format """
    token: str

    def __init__(self, token: str):
        super().__init__(f"Output format '{token}' is not supported")
        self.token = token


class UnknownMediaTypeForFormat(ConversionError):
    """ Resolved output format has no registered media type """
    image_format: ImageFormat

    def __init__(self, image_format: ImageFormat):
        super().__init__(f"Format '{image_format}' has no registered media type")
        self.image_format = image_format

import enum
from dataclasses import dataclass


class ImageFormat(enum.StrEnum):
    PNG = enum.auto()
    JPEG = enum.auto()
    GIF = enum.auto()
    WEBP = enum.auto()
    PNM = enum.auto()
    TIFF = enum.auto()
    TGA = enum.auto()
    DDS = enum.auto()
    BMP = enum.auto()
    ICO = enum.auto()
    HDR = enum.auto()
    OPENEXR = enum.auto()
    FARBFELD = enum.auto()
    AVIF = enum.auto()
    QOI = enum.auto()

    @classmethod
    def from_extension(cls, extension: str) -> "ImageFormat | None":
        """ Returns format by its file extension (case-sensitive, without dot) or `None` if it is not known """
        return _extensions.get(extension, None)

    @property
    def extensions(self) -> tuple[str, ...]:
        return tuple(ext for ext, image_format in _extensions.items() if image_format == self)


_extensions: dict[str, ImageFormat] = {
    'png': ImageFormat.PNG,
    'jpg': ImageFormat.JPEG,
    'jpeg': ImageFormat.JPEG,
    'gif': ImageFormat.GIF,
    'webp': ImageFormat.WEBP,
    'pnm': ImageFormat.PNM,
    'pbm': ImageFormat.PNM,
    'pgm': ImageFormat.PNM,
    'ppm': ImageFormat.PNM,
    'pam': ImageFormat.PNM,
    'tif': ImageFormat.TIFF,
    'tiff': ImageFormat.TIFF,
    'tga': ImageFormat.TGA,
    'dds': ImageFormat.DDS,
    'bmp': ImageFormat.BMP,
    'ico': ImageFormat.ICO,
    'hdr': ImageFormat.HDR,
    'exr': ImageFormat.OPENEXR,
    'ff': ImageFormat.FARBFELD,
    'farbfeld': ImageFormat.FARBFELD,
    'avif': ImageFormat.AVIF,
    'qoi': ImageFormat.QOI,
}


class FormatStatus(str, enum.Enum):
    available = "available"
    no_encoder = "no_encoder"
    no_media_type = "no_media_type"


@dataclass(slots=True)
class FormatsInfo:
    output_formats: dict[str, FormatStatus]
    error: bool

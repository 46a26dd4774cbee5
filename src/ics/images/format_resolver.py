from collections.abc import Mapping
from types import MappingProxyType

from ics.images.errors import UnsupportedOutputFormat, UnknownMediaTypeForFormat
from ics.models import ImageFormat

MEDIA_TYPES: Mapping[ImageFormat, str] = MappingProxyType({
    ImageFormat.PNG: 'image/png',
    ImageFormat.JPEG: 'image/jpeg',
    ImageFormat.GIF: 'image/gif',
    ImageFormat.WEBP: 'image/webp',
    ImageFormat.PNM: 'image/pbm',
    ImageFormat.TIFF: 'image/tiff',
    ImageFormat.TGA: 'image/tga',
    ImageFormat.DDS: 'image/vnd-ms.dds',
    ImageFormat.BMP: 'image/bmp',
    ImageFormat.ICO: 'image/vnd.microsoft.icon',
    ImageFormat.HDR: 'image/vnd.radiance',
    ImageFormat.OPENEXR: 'image/x-exr',
    ImageFormat.AVIF: 'image/avif',
})
""" Canonical media types of output formats, formats missing here can't be used in a data URI """


def resolve_output_format(token: str) -> ImageFormat:
    """
    Resolves output format by a file extension like token, e.g. "png" or "jpg"
    :param token: Case-sensitive extension without leading dot
    :return: :class:`ImageFormat`
    :raises UnsupportedOutputFormat: if no format recognizes the token
    """
    image_format = ImageFormat.from_extension(token)
    if image_format is None:
        raise UnsupportedOutputFormat(token)

    return image_format


def media_type(image_format: ImageFormat) -> str:
    """
    Returns canonical media type of the format
    :raises UnknownMediaTypeForFormat: if the format has no registered media type
    """
    result = MEDIA_TYPES.get(image_format, None)
    if result is None:
        raise UnknownMediaTypeForFormat(image_format)

    return result

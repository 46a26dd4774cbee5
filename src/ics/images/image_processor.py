import base64
import functools

import anyio.to_thread
import numpy as np
from PIL import Image
from loguru import logger

from ics.host import set_fault_hook
from ics.images.codec import ImageCodec, PillowCodec
from ics.images.errors import CodecFailure, ConversionError
from ics.images.format_resolver import media_type, resolve_output_format
from ics.images.models import ConversionResult
from ics.models import ImageFormat

# the space after the comma is kept, consumers already parse this exact form
_DATA_URI_TEMPLATE = "data:{media_type};base64, {payload}"

_default_codec = PillowCodec()

_alpha_modes = frozenset({'LA', 'RGBA'})
_rgb_modes = frozenset({'CMYK', 'YCbCr', 'LAB', 'HSV', 'RGBX'})
_premultiplied_modes: dict[str, str] = {'RGBa': 'RGBA', 'La': 'LA'}
_transparency_modes: dict[str, str] = {'L': 'LA', 'RGB': 'RGBA'}

# "I" images hold 16-bit samples decoded from PNG/PNM/TIFF
_int_mode_max = 65535


def _normalize_mode(image: Image.Image) -> Image.Image:
    mode = image.mode
    has_transparency = image.info.get('transparency', None) is not None

    if mode in ('P', 'PA'):
        return image.convert('RGBA' if mode == 'PA' or has_transparency else 'RGB')
    if mode in _rgb_modes:
        return image.convert('RGB')
    if mode in _premultiplied_modes:
        return image.convert(_premultiplied_modes[mode])
    if has_transparency and mode in _transparency_modes:
        return image.convert(_transparency_modes[mode])

    return image


def _channel_max(pixels: np.ndarray) -> int | float:
    if np.issubdtype(pixels.dtype, np.floating):
        return 1.0
    if pixels.dtype == np.int32:
        return _int_mode_max
    return int(np.iinfo(pixels.dtype).max)


def invert_image(image: Image.Image) -> Image.Image:
    """
    Replaces every color channel value by its maximum-minus-value, alpha channel stays untouched
    :param image: Source image, it is not modified
    :return: New inverted image
    """
    normalized = _normalize_mode(image)
    pixels = np.array(normalized)

    if pixels.dtype == np.bool_:
        np.logical_not(pixels, out=pixels)
    else:
        max_value = _channel_max(pixels)
        color = pixels[..., :-1] if normalized.mode in _alpha_modes else pixels
        if normalized.mode == 'I':
            np.clip(color, 0, max_value, out=color)
        np.subtract(max_value, color, out=color)

    if normalized is not image:
        normalized.close()

    return Image.fromarray(pixels)


def compose_data_uri(data: bytes, image_format: ImageFormat) -> str:
    payload = base64.b64encode(data).decode('ascii')
    return _DATA_URI_TEMPLATE.format(media_type=media_type(image_format), payload=payload)


def convert(data: bytes, output_format: str, codec: ImageCodec | None = None) -> str:
    """
    Decodes the image, inverts its colors and encodes it into the requested format
    :param data: Encoded image, the format is detected by the content
    :param output_format: Extension like token of the output format, e.g. "png"
    :param codec: Codec to use, Pillow based codec by default
    :return: Base64 data URI with the converted image
    :raises ConversionError: on the first failed step
    """
    image_codec = codec or _default_codec

    image_format = resolve_output_format(output_format)
    source_format = image_codec.guess_format(data)

    with image_codec.decode(data, source_format) as image:
        try:
            inverted = invert_image(image)
        except (ValueError, TypeError) as e:
            raise CodecFailure(f"Failed to invert {image.mode} image: {e}", e) from e

    with inverted:
        encoded = image_codec.encode(inverted, image_format)

    return compose_data_uri(encoded, image_format)


async def convert_async(data: bytes, output_format: str, codec: ImageCodec | None = None) -> str:
    func = functools.partial(convert, data=data, output_format=output_format, codec=codec)
    return await anyio.to_thread.run_sync(func)


def call(data: bytes, output_format: str, codec: ImageCodec | None = None) -> ConversionResult:
    """
    Host boundary of :func:`convert`, never raises and reports errors as plain strings
    """
    set_fault_hook()

    try:
        return ConversionResult(data_uri=convert(data, output_format, codec))
    except ConversionError as e:
        logger.warning(f"Conversion to '{output_format}' failed: {e.render()}")
        return ConversionResult(error=e.render())
    except Exception as e:
        logger.opt(exception=e).error(f"Unexpected fault on conversion to '{output_format}'")
        return ConversionResult(error=f"InternalFault: {e}")

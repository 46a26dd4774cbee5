from abc import ABC, abstractmethod
from collections.abc import Mapping
from io import BytesIO
from typing import Any

import PIL
import numpy as np
from PIL import Image

from ics.images.errors import CodecFailure
from ics.models import ImageFormat

_default_params: dict[ImageFormat, dict[str, Any]] = {
    ImageFormat.PNG: {'optimize': True},
    ImageFormat.JPEG: {'optimize': True},
}

# Pillow's format identifiers, formats without a Pillow plugin are absent
_pillow_formats: dict[ImageFormat, str] = {
    ImageFormat.PNG: 'PNG',
    ImageFormat.JPEG: 'JPEG',
    ImageFormat.GIF: 'GIF',
    ImageFormat.WEBP: 'WEBP',
    ImageFormat.PNM: 'PPM',
    ImageFormat.TIFF: 'TIFF',
    ImageFormat.TGA: 'TGA',
    ImageFormat.DDS: 'DDS',
    ImageFormat.BMP: 'BMP',
    ImageFormat.ICO: 'ICO',
    ImageFormat.AVIF: 'AVIF',
    ImageFormat.QOI: 'QOI',
}

# Modes accepted by encoders and the mode to convert into otherwise
_format_modes: dict[ImageFormat, tuple[frozenset[str], str]] = {
    ImageFormat.PNG: (frozenset({'1', 'L', 'LA', 'I', 'I;16', 'I;16B', 'RGB', 'RGBA', 'P'}), 'RGBA'),
    ImageFormat.JPEG: (frozenset({'1', 'L', 'RGB', 'CMYK'}), 'RGB'),
    ImageFormat.GIF: (frozenset({'1', 'L', 'P', 'RGB', 'RGBA'}), 'RGBA'),
    ImageFormat.WEBP: (frozenset({'RGB', 'RGBA'}), 'RGBA'),
    ImageFormat.PNM: (frozenset({'1', 'L', 'I', 'I;16', 'I;16B', 'RGB'}), 'RGB'),
    ImageFormat.TGA: (frozenset({'1', 'L', 'LA', 'P', 'RGB', 'RGBA'}), 'RGBA'),
    ImageFormat.DDS: (frozenset({'L', 'LA', 'RGB', 'RGBA'}), 'RGBA'),
    ImageFormat.BMP: (frozenset({'1', 'L', 'P', 'RGB', 'RGBA'}), 'RGBA'),
    ImageFormat.ICO: (frozenset({'1', 'L', 'LA', 'P', 'RGB', 'RGBA'}), 'RGBA'),
    ImageFormat.AVIF: (frozenset({'RGB', 'RGBA'}), 'RGBA'),
    ImageFormat.QOI: (frozenset({'RGB', 'RGBA'}), 'RGBA'),
}

# 16-bit samples, "I" holds them widened to 32 bits
_wide_modes = frozenset({'I', 'I;16', 'I;16B', 'I;16L', 'I;16N'})

# ICO directory stores sides up to 256px
_ico_max_size = 256


def _to_8_bit(source_image: Image.Image) -> Image.Image:
    """ Scales 16-bit grayscale samples down to 8-bit "L" image, keeping the high byte """
    pixels = np.array(source_image)
    if pixels.dtype == np.int32:
        np.clip(pixels, 0, 65535, out=pixels)
    return Image.fromarray((pixels >> 8).astype(np.uint8))


def _try_convert_image(source_image: Image.Image, image_format: ImageFormat) -> Image.Image:
    if image_format not in _format_modes:
        return source_image

    accepted_modes, new_mode = _format_modes[image_format]
    if source_image.mode in accepted_modes:
        return source_image

    if source_image.mode in _wide_modes:
        with _to_8_bit(source_image) as eight_bit_image:
            if eight_bit_image.mode in accepted_modes:
                return eight_bit_image.copy()
            return eight_bit_image.convert(new_mode)

    try:
        return source_image.convert(new_mode)
    except ValueError:
        # let the encoder report the unsupported mode
        return source_image


class ImageCodec(ABC):
    """
    An abstract interface to image codec
    """

    @abstractmethod
    def guess_format(self, data: bytes) -> str:
        """
        Detects the container format by the content
        :param data: Encoded image
        :return: Codec specific format name
        :raises CodecFailure: if format was not recognized
        """
        pass

    @abstractmethod
    def decode(self, data: bytes, source_format: str) -> Image.Image:
        """
        Decodes the first frame of the image
        :param data: Encoded image
        :param source_format: Format returned by :meth:`guess_format`
        :return: Decoded image, owned by the caller
        :raises CodecFailure: if image can't be decoded
        """
        pass

    @abstractmethod
    def encode(self, image: Image.Image, image_format: ImageFormat) -> bytes:
        """
        Encodes the image into the given format
        :raises CodecFailure: if image can't be encoded
        """
        pass

    @abstractmethod
    def can_encode(self, image_format: ImageFormat) -> bool:
        pass


class PillowCodec(ImageCodec):
    _save_params: Mapping[ImageFormat, dict[str, Any]]

    def __init__(self, save_params: Mapping[ImageFormat, dict[str, Any]] | None = None):
        """
        :param save_params: Pillow save arguments per format, merged over the defaults
        """
        configured_params = save_params or {}
        self._save_params = {f: {**_default_params.get(f, {}), **configured_params.get(f, {})}
                             for f in {*_default_params, *configured_params}}

    def guess_format(self, data: bytes) -> str:
        if not data:
            raise CodecFailure("Image format can't be guessed from empty data")

        try:
            with Image.open(BytesIO(data)) as im:
                return str(im.format)
        except (PIL.UnidentifiedImageError, OSError, ValueError, Exception) as e:
            raise CodecFailure(f"Image format was not recognized: {e}", e) from e

    def decode(self, data: bytes, source_format: str) -> Image.Image:
        try:
            with Image.open(BytesIO(data), formats=[source_format]) as im:
                im.load()
                return im.copy()
        except (PIL.UnidentifiedImageError, OSError, ValueError, Exception) as e:
            raise CodecFailure(f"Failed to decode {source_format} image: {e}", e) from e

    def encode(self, image: Image.Image, image_format: ImageFormat) -> bytes:
        pillow_format = _pillow_formats.get(image_format, None)
        if not self.can_encode(image_format):
            raise CodecFailure(f"No encoder available for '{image_format}'")

        params = dict(self._save_params.get(image_format, {}))
        if image_format == ImageFormat.ICO:
            if max(image.size) > _ico_max_size:
                raise CodecFailure(f"ICO image can't be larger than {_ico_max_size}px, got {image.size}")
            # Pillow's default sizes drop images smaller than 16px and rescale the rest
            params.setdefault('sizes', [image.size])

        im = _try_convert_image(image, image_format)
        result = BytesIO()
        try:
            im.save(result, pillow_format, **params)
            return result.getvalue()
        except (PIL.UnidentifiedImageError, OSError, ValueError, Exception) as e:
            raise CodecFailure(f"Failed to encode image as {pillow_format}: {e}", e) from e
        finally:
            if im is not image:
                im.close()

    def can_encode(self, image_format: ImageFormat) -> bool:
        pillow_format = _pillow_formats.get(image_format, None)
        if not pillow_format:
            return False

        Image.init()
        return pillow_format in Image.SAVE

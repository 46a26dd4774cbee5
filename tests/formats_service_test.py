from unittest.mock import create_autospec, Mock

from ics.images.codec import ImageCodec
from ics.images.formats_service import FormatsService
from ics.models import FormatStatus, ImageFormat


def test_probe_formats():
    # arrange
    codec_mock = create_autospec(ImageCodec)
    codec_mock.can_encode.side_effect = lambda f: f in (ImageFormat.PNG, ImageFormat.QOI)
    formats_service = FormatsService(codec_mock, Mock())

    # act
    result = formats_service.probe_formats()

    # assert
    assert not result.error
    assert len(result.output_formats) == len(ImageFormat)
    assert result.output_formats['png'] == FormatStatus.available
    assert result.output_formats['hdr'] == FormatStatus.no_encoder
    assert result.output_formats['qoi'] == FormatStatus.no_media_type
    assert result.output_formats['farbfeld'] == FormatStatus.no_media_type


def test_probe_formats_error_when_nothing_available():
    # arrange
    codec_mock = create_autospec(ImageCodec)
    codec_mock.can_encode.return_value = False
    logger_mock = Mock()
    formats_service = FormatsService(codec_mock, logger_mock)

    # act
    result = formats_service.probe_formats()

    # assert
    assert result.error
    assert all(t != FormatStatus.available for t in result.output_formats.values())
    logger_mock.warning.assert_called_once()

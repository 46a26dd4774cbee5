from io import BytesIO
from unittest.mock import create_autospec, Mock

import pytest
from PIL import Image
from fastapi.testclient import TestClient
from starlette.requests import Request

from ics import __version__
from ics.app import create_web_app
from ics.config import get_app_settings
from ics.images.codec import ImageCodec
from ics.images.conversion_service import ConversionService
from ics.images.errors import UnknownMediaTypeForFormat
from ics.models import ImageFormat


def __encode(image: Image.Image) -> bytes:
    result = BytesIO()
    image.save(result, 'PNG')
    return result.getvalue()


def __make_request(chunks: list[bytes],
                   headers: list[tuple[bytes, bytes]] | None = None) -> tuple[Request, list[bytes]]:
    """ Builds a request streaming the body by chunks, returns it with the list of chunks actually received """
    messages = [{'type': 'http.request', 'body': chunk, 'more_body': i < len(chunks) - 1}
                for i, chunk in enumerate(chunks)]
    received = list[bytes]()

    async def receive():
        message = messages.pop(0)
        received.append(message['body'])
        return message

    scope = {'type': 'http', 'method': 'POST', 'path': '/convert/png', 'headers': headers or []}
    return Request(scope, receive), received


@pytest.fixture
def client():
    with TestClient(create_web_app()) as test_client:
        yield test_client


def test_convert_successful(client: TestClient):
    # arrange
    data = __encode(Image.new('RGBA', (2, 2), (255, 0, 0, 255)))

    # act
    response = client.post('/convert/png', content=data)

    # assert
    assert response.status_code == 200
    assert response.headers['content-type'].startswith('text/plain')
    assert response.text.startswith('data:image/png;base64, ')


@pytest.mark.parametrize('output_format, data, expected_status, expected_error', [
    ('zzz', b'\x89PNG', 400, 'UnsupportedOutputFormat: '),
    ('png', b'', 415, 'CodecFailure: '),
    ('png', b'not an image', 415, 'CodecFailure: '),
    ('hdr', None, 415, 'CodecFailure: '),
])
def test_convert_fails(client: TestClient, output_format: str, data: bytes | None, expected_status: int,
                       expected_error: str):
    if data is None:
        data = __encode(Image.new('RGB', (1, 1)))

    response = client.post(f'/convert/{output_format}', content=data)

    assert response.status_code == expected_status
    assert response.text.startswith(expected_error)


def test_health_check(client: TestClient):
    # act
    response = client.get('/health')

    # assert
    assert response.status_code == 200
    body = response.json()
    assert body['version'] == __version__
    assert body['status']['error'] == False
    assert body['status']['output_formats']['png'] == 'available'
    assert body['status']['output_formats']['qoi'] == 'no_media_type'
    assert client.get('/hc').status_code == 200


@pytest.mark.anyio
async def test_conversion_service_rejects_large_input():
    # arrange
    codec_mock = create_autospec(ImageCodec)
    conversion_service = ConversionService(codec_mock, 8, Mock())

    # act
    response = await conversion_service.convert(b'0123456789', 'png')

    # assert
    assert response.status_code == 413
    codec_mock.guess_format.assert_not_called()


@pytest.mark.anyio
async def test_conversion_service_unknown_media_type():
    # arrange
    codec_mock = create_autospec(ImageCodec)
    codec_mock.guess_format.return_value = 'PNG'
    codec_mock.decode.return_value = Image.new('RGB', (1, 1))
    codec_mock.encode.return_value = b'qoif'
    conversion_service = ConversionService(codec_mock, 1024, Mock())

    # act
    response = await conversion_service.convert(b'0123456789', 'qoi')

    # assert
    assert response.status_code == 501
    assert response.body.decode() == UnknownMediaTypeForFormat(ImageFormat.QOI).render()


@pytest.mark.anyio
async def test_conversion_service_unexpected_error():
    # arrange
    codec_mock = create_autospec(ImageCodec)
    codec_mock.guess_format.side_effect = RuntimeError('unit test error')
    logger_mock = Mock()
    conversion_service = ConversionService(codec_mock, 1024, logger_mock)

    # act
    response = await conversion_service.convert(b'0123456789', 'png')

    # assert
    assert response.status_code == 500
    assert response.body.decode() == 'InternalFault: unit test error'
    logger_mock.exception.assert_called_once()


@pytest.mark.anyio
async def test_conversion_service_rejects_large_content_length_without_reading():
    # arrange
    codec_mock = create_autospec(ImageCodec)
    conversion_service = ConversionService(codec_mock, 8, Mock())
    request, received = __make_request([b'0123456789'], [(b'content-length', b'10')])

    # act
    response = await conversion_service.convert_request(request, 'png')

    # assert
    assert response.status_code == 413
    assert received == []
    codec_mock.guess_format.assert_not_called()


@pytest.mark.anyio
async def test_conversion_service_stops_reading_large_stream():
    # arrange
    codec_mock = create_autospec(ImageCodec)
    conversion_service = ConversionService(codec_mock, 8, Mock())
    request, received = __make_request([b'01234', b'56789', b'abcde', b''])

    # act
    response = await conversion_service.convert_request(request, 'png')

    # assert
    assert response.status_code == 413
    assert received == [b'01234', b'56789']
    codec_mock.guess_format.assert_not_called()


@pytest.mark.anyio
async def test_conversion_service_reads_chunked_body():
    # arrange
    codec_mock = create_autospec(ImageCodec)
    codec_mock.guess_format.side_effect = RuntimeError('unit test error')
    conversion_service = ConversionService(codec_mock, 1024, Mock())
    request, _ = __make_request([b'01234', b'56789', b''])

    # act
    response = await conversion_service.convert_request(request, 'png')

    # assert
    assert response.status_code == 500
    codec_mock.guess_format.assert_called_once_with(b'0123456789')


def test_convert_rejects_large_body(client: TestClient, monkeypatch: pytest.MonkeyPatch):
    # arrange
    monkeypatch.setattr(get_app_settings(), 'max_input_bytes', 16)

    # act
    response = client.post('/convert/png', content=b'0' * 32)

    # assert
    assert response.status_code == 413

from fastapi import APIRouter, Request
from starlette.responses import Response, PlainTextResponse

from ics.images.dependencies import ConversionServiceDep

images_router = APIRouter()


@images_router.post("/convert/{output_format}", response_class=PlainTextResponse)
async def convert_image(output_format: str, request: Request,
                        conversion_service: ConversionServiceDep) -> Response:
    return await conversion_service.convert_request(request, output_format)

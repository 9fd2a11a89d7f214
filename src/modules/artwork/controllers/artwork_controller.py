import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.concurrency import run_in_threadpool

from modules.artwork.backends.headless import HeadlessRenderer
from modules.artwork.backends.native import NativeRenderer
from modules.artwork.dependencies import get_headless_renderer, get_native_renderer
from modules.artwork.errors import (
    ArtworkError, AssetLoadError, InvalidRenderRequest, RendererUnavailableError, RenderTimeoutError
)
from modules.artwork.models.render_request import RenderRequest
from modules.artwork.schemas.artwork_schemas import GenerateArtworkRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/artwork", tags=["artwork"])


def raise_http_error(error: ArtworkError):
    """Traduce errores de renderizado a respuestas HTTP"""
    if isinstance(error, InvalidRenderRequest):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, RenderTimeoutError):
        raise HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=str(error))
    if isinstance(error, RendererUnavailableError):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(error))
    if isinstance(error, AssetLoadError):
        logger.error("Asset load failed: %s", error)
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to generate artwork: {error}",
    )


def png_response(png: bytes) -> Response:
    return Response(content=png, media_type="image/png", headers={"Content-Length": str(len(png))})


def render_native(renderer: NativeRenderer, request: RenderRequest) -> bytes:
    try:
        return renderer.render(request)
    except ArtworkError as e:
        raise_http_error(e)


@router.post("/generate")
async def generate_artwork(body: GenerateArtworkRequest, renderer: NativeRenderer = Depends(get_native_renderer)):
    """Genera la obra en el servidor y devuelve un PNG"""
    try:
        request = body.to_render_request()
    except InvalidRenderRequest as e:
        raise_http_error(e)
    png = await run_in_threadpool(render_native, renderer, request)
    return png_response(png)


@router.get("/generate")
async def generate_artwork_from_query(
    name: Optional[str] = None,
    date: Optional[str] = None,
    signature: Optional[str] = None,
    signer_number: Optional[int] = Query(default=None, alias="signerNumber"),
    is_mobile: bool = Query(default=False, alias="isMobile"),
    white_background: bool = Query(default=False, alias="whiteBackground"),
    renderer: NativeRenderer = Depends(get_native_renderer),
):
    body = GenerateArtworkRequest(
        name=name,
        date=date,
        signature=signature,
        signer_number=signer_number,
        is_mobile=is_mobile,
        white_background=white_background,
    )
    return await generate_artwork(body, renderer)


@router.post("/generate-headless")
async def generate_artwork_headless(
    body: GenerateArtworkRequest,
    renderer: HeadlessRenderer = Depends(get_headless_renderer),
):
    """Genera la obra en un navegador headless y devuelve la captura"""
    try:
        png = await renderer.render(body.to_render_request())
    except ArtworkError as e:
        raise_http_error(e)
    return png_response(png)

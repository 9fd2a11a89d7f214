import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

import config
from database import get_db
from modules.artwork.backends.interactive import InteractiveSession
from modules.artwork.backends.native import NativeRenderer
from modules.artwork.controllers.artwork_controller import png_response, raise_http_error
from modules.artwork.dependencies import get_native_renderer
from modules.artwork.errors import ArtworkError
from modules.artwork.models.render_request import Background, RenderRequest, Viewport
from modules.reveal.errors import TokenNotMintedError
from modules.reveal.repositories.publication_repository import PublicationRepository
from modules.reveal.schemas.reveal_schemas import PublicationResponse
from modules.reveal.services.publication_service import publish_in_background
from modules.reveal.services.reveal_service import RevealService
from modules.tokens.controllers.token_controller import contract_http_error
from modules.tokens.dependencies import get_contract_gateway
from modules.tokens.errors import ContractError
from modules.tokens.services.contract_gateway import ContractGateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reveal", tags=["reveal"])

FRAME_BOUNDARY = "frame"


async def resolve(
    gateway: ContractGateway,
    token_id: int,
    name: Optional[str],
    tx: Optional[str],
    wallet: Optional[str],
    background: Background = Background.PAPER,
    viewport: Viewport = Viewport.DESKTOP,
) -> RenderRequest:
    try:
        return await run_in_threadpool(
            RevealService.resolve_request, gateway, token_id, name, tx, wallet, background, viewport
        )
    except TokenNotMintedError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ContractError as e:
        raise contract_http_error(e, "fetch token metadata")
    except ArtworkError as e:
        raise_http_error(e)


async def render(renderer: NativeRenderer, request: RenderRequest) -> bytes:
    try:
        return await run_in_threadpool(renderer.render, request)
    except ArtworkError as e:
        raise_http_error(e)


def multipart_frame(png: bytes) -> bytes:
    return (
        f"--{FRAME_BOUNDARY}\r\nContent-Type: image/png\r\n"
        f"Content-Length: {len(png)}\r\n\r\n"
    ).encode("ascii") + png + b"\r\n"


async def close_session(session: InteractiveSession, task: asyncio.Task):
    await session.stop()
    if not task.done():
        task.cancel()
    # Si hubo un error, ya llegó al llamador a través de session.frames().
    await asyncio.gather(task, return_exceptions=True)


@router.get("/{token_id}")
async def reveal_artwork(
    token_id: int,
    background_tasks: BackgroundTasks,
    name: Optional[str] = None,
    tx: Optional[str] = None,
    wallet: Optional[str] = None,
    background: Background = Background.PAPER,
    is_mobile: bool = Query(default=False, alias="isMobile"),
    gateway: ContractGateway = Depends(get_contract_gateway),
    renderer: NativeRenderer = Depends(get_native_renderer),
):
    """Renderiza la obra del token y programa su publicación en IPFS"""
    viewport = Viewport.MOBILE if is_mobile else Viewport.DESKTOP
    request = await resolve(gateway, token_id, name, tx, wallet, background, viewport)
    png = await render(renderer, request)
    background_tasks.add_task(publish_in_background, token_id, request, renderer, png)
    return png_response(png)


@router.get("/{token_id}/live")
async def reveal_live(
    token_id: int,
    name: Optional[str] = None,
    tx: Optional[str] = None,
    wallet: Optional[str] = None,
    background: Background = Background.PAPER,
    frames: Optional[int] = Query(default=None, ge=1),
    gateway: ContractGateway = Depends(get_contract_gateway),
    renderer: NativeRenderer = Depends(get_native_renderer),
):
    """Stream multipart de frames; la publicación arranca con el primer frame"""
    request = await resolve(gateway, token_id, name, tx, wallet, background)
    loop = asyncio.get_running_loop()

    def on_ready(png: bytes):
        loop.run_in_executor(None, publish_in_background, token_id, request, renderer, png)

    session = InteractiveSession(renderer, request, fps=config.INTERACTIVE_FPS, on_ready=on_ready)
    task = asyncio.create_task(session.run(max_frames=frames))
    updates = session.frames()

    # El primer frame se dibuja antes de responder, así un render fallido sigue siendo un error HTTP.
    try:
        first = await updates.__anext__()
    except StopAsyncIteration:
        first = None
    except ArtworkError as e:
        await close_session(session, task)
        raise_http_error(e)

    async def stream():
        try:
            if first is not None:
                yield multipart_frame(first)
                async for frame in updates:
                    yield multipart_frame(frame)
            yield f"--{FRAME_BOUNDARY}--\r\n".encode("ascii")
        finally:
            await close_session(session, task)

    return StreamingResponse(stream(), media_type=f"multipart/x-mixed-replace; boundary={FRAME_BOUNDARY}")


@router.get("/{token_id}/print")
async def reveal_for_print(
    token_id: int,
    name: Optional[str] = None,
    tx: Optional[str] = None,
    wallet: Optional[str] = None,
    gateway: ContractGateway = Depends(get_contract_gateway),
    renderer: NativeRenderer = Depends(get_native_renderer),
):
    """Versión con fondo blanco para imprimir"""
    request = await resolve(gateway, token_id, name, tx, wallet, Background.WHITE)
    png = await render(renderer, request)
    response = png_response(png)
    response.headers["Content-Disposition"] = 'attachment; filename="manifesto-artwork.png"'
    return response


@router.get("/{token_id}/publication", response_model=PublicationResponse)
def get_publication(token_id: int, db: Session = Depends(get_db)):
    publication = PublicationRepository(db).get(token_id)
    if not publication:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Publication not found")
    return publication

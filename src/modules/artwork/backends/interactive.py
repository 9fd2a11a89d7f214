import asyncio
import logging
from typing import AsyncIterator, Callable, Optional

from modules.artwork.backends.native import NativeRenderer
from modules.artwork.models.render_request import Background, RenderRequest
from modules.artwork.services.composition import ReadySignal

logger = logging.getLogger(__name__)


class InteractiveSession:
    """Redibuja una obra en forma continua y publica cada frame como PNG.

    Cada frame repite la composición completa sobre una superficie nueva. El
    layout se calcula una sola vez, así cambiar el fondo no mueve los íconos.
    ``on_ready`` recibe el PNG del primer frame completo, una sola vez. Un
    frame fallido termina la sesión y el error llega a cada suscriptor.
    """

    def __init__(
        self,
        renderer: NativeRenderer,
        request: RenderRequest,
        fps: float = 1.0,
        on_ready: Optional[Callable[[bytes], None]] = None,
    ):
        self.renderer = renderer
        self.fps = fps
        self._request = request
        self._context = None
        self._ready = ReadySignal(on_ready)
        self._frame: Optional[bytes] = None
        self._frame_count = 0
        self._stopped = False
        self._error: Optional[Exception] = None
        self._changed = asyncio.Condition()

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def ready(self) -> bool:
        return self._ready.fired

    @property
    def latest_frame(self) -> Optional[bytes]:
        return self._frame

    @property
    def context(self):
        return self._context

    def set_background(self, background: Background) -> None:
        if self._context is not None:
            self._context = self._context.with_background(Background(background))
        self._request = self._request.with_background(Background(background))

    async def _draw_frame(self) -> bytes:
        if self._context is None:
            self._context = await asyncio.to_thread(self.renderer.render_context, self._request)
        context = self._context
        surface, _ = await asyncio.to_thread(self.renderer.draw, context)
        return await asyncio.to_thread(surface.to_png)

    async def run(self, max_frames: Optional[int] = None) -> None:
        interval = 1 / self.fps if self.fps > 0 else 0
        try:
            while not self._stopped and (max_frames is None or self._frame_count < max_frames):
                png = await self._draw_frame()
                async with self._changed:
                    self._frame = png
                    self._frame_count += 1
                    self._changed.notify_all()
                self._ready.fire(png)
                if interval:
                    await asyncio.sleep(interval)
        except Exception as e:
            self._error = e
            raise
        finally:
            await self.stop()
            logger.debug("Interactive session ended after %d frames", self._frame_count)

    async def stop(self) -> None:
        async with self._changed:
            self._stopped = True
            self._changed.notify_all()

    async def frames(self) -> AsyncIterator[bytes]:
        """Entrega cada frame nuevo hasta que la sesión se detiene.

        Si la sesión terminó por un error, lo relanza.
        """
        seen = 0
        while True:
            async with self._changed:
                await self._changed.wait_for(lambda: self._stopped or self._frame_count > seen)
                if self._frame_count == seen:
                    if self._error is not None:
                        raise self._error
                    return
                seen = self._frame_count
                frame = self._frame
            yield frame

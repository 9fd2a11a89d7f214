import io
import logging
import math
from typing import Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw

from modules.artwork.backends.blending import BLEND_FUNCS, alpha_composite_with_blend
from modules.artwork.models.context import RenderContext
from modules.artwork.models.layers import RGBA, BlendMode
from modules.artwork.models.render_request import RenderRequest
from modules.artwork.services.assets import AssetBundle, AssetRegistry
from modules.artwork.services.composition import CompositionReport, ReadySignal, build_render_context, compose_artwork
from modules.artwork.services.surface import TextAlign, TextStyle

logger = logging.getLogger(__name__)

Box = Tuple[int, int, int, int]

TEXT_ANCHORS = {
    TextAlign.LEFT: "ls",
    TextAlign.CENTER: "ms",
    TextAlign.RIGHT: "rs",
}


class NativeSurface:
    """Superficie raster sobre Pillow.

    Cada operación se dibuja en una capa transparente del tamaño del recorte
    actual y luego se compone sobre el canvas con el modo de mezcla activo.
    Los círculos consecutivos de un mismo color comparten capa, así los puntos
    de un campo no se acumulan donde se superponen.
    """

    def __init__(self, width: int, height: int, assets: AssetBundle):
        self.width = width
        self.height = height
        self.assets = assets
        self.canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        self._clip: Optional[Box] = None
        self._blend = BlendMode.NORMAL
        self._pending = None

    # -- dibujo ---------------------------------------------------------

    def fill_rect(self, x, y, w, h, color: RGBA) -> None:
        box, layer = self._new_layer()
        ImageDraw.Draw(layer).rectangle(
            [x - box[0], y - box[1], x + w - box[0] - 1, y + h - box[1] - 1], fill=tuple(color)
        )
        self._composite(layer, box)

    def draw_image(self, key: str, x, y, w, h, alpha: float = 1.0, rotation: float = 0.0) -> None:
        source = self.assets.image(key)
        image = source.resize((max(1, round(w)), max(1, round(h))), Image.Resampling.BILINEAR)
        if alpha < 1.0:
            channel = np.asarray(image.getchannel("A"), dtype=np.float32) * alpha
            image.putalpha(Image.fromarray(np.rint(channel).astype(np.uint8), "L"))
        if rotation:
            cx, cy = x + w / 2, y + h / 2
            # En canvas el ángulo gira en sentido horario (y hacia abajo); en Pillow, antihorario.
            image = image.rotate(-math.degrees(rotation), resample=Image.Resampling.BICUBIC, expand=True)
            x, y = cx - image.width / 2, cy - image.height / 2

        box, layer = self._new_layer()
        layer.paste(image, (round(x) - box[0], round(y) - box[1]))
        self._composite(layer, box)

    def draw_circle(self, cx, cy, diameter, color: RGBA) -> None:
        color = tuple(color)
        if self._pending is None or self._pending[2] != color:
            self._flush()
            box, layer = self._new_layer(flush=False)
            self._pending = (box, layer, color, ImageDraw.Draw(layer))
        box, _, _, draw = self._pending
        radius = diameter / 2
        draw.ellipse(
            [cx - radius - box[0], cy - radius - box[1], cx + radius - box[0], cy + radius - box[1]],
            fill=color,
        )

    def draw_text(self, text: str, x, y, style: TextStyle) -> None:
        font = self.assets.font(style.font, style.size)
        box, layer = self._new_layer()
        ImageDraw.Draw(layer).text(
            (x - box[0], y - box[1]), text, font=font, fill=tuple(style.color), anchor=TEXT_ANCHORS[style.align]
        )
        self._composite(layer, box)

    # -- estado ---------------------------------------------------------

    def clip_rect(self, x, y, w, h) -> None:
        self._flush()
        self._clip = (
            max(0, math.floor(x)),
            max(0, math.floor(y)),
            min(self.width, math.ceil(x + w)),
            min(self.height, math.ceil(y + h)),
        )

    def reset_clip(self) -> None:
        self._flush()
        self._clip = None

    def set_blend_mode(self, mode: BlendMode) -> None:
        mode = BlendMode(mode)
        if mode != self._blend:
            self._flush()
            self._blend = mode

    # -- salida ---------------------------------------------------------

    def to_image(self) -> Image.Image:
        self._flush()
        return self.canvas.convert("RGB")

    def to_png(self) -> bytes:
        buffer = io.BytesIO()
        self.to_image().save(buffer, format="PNG")
        return buffer.getvalue()

    # -- internos -------------------------------------------------------

    def _target_box(self) -> Box:
        return self._clip or (0, 0, self.width, self.height)

    def _new_layer(self, flush: bool = True):
        if flush:
            self._flush()
        box = self._target_box()
        return box, Image.new("RGBA", (box[2] - box[0], box[3] - box[1]), (0, 0, 0, 0))

    def _flush(self) -> None:
        if self._pending is None:
            return
        box, layer, _, _ = self._pending
        self._pending = None
        self._composite(layer, box)

    def _composite(self, layer: Image.Image, box: Box) -> None:
        if box[2] <= box[0] or box[3] <= box[1]:
            return
        region = self.canvas.crop(box)
        if self._blend == BlendMode.NORMAL:
            merged = Image.alpha_composite(region, layer)
        else:
            merged = Image.fromarray(
                alpha_composite_with_blend(np.asarray(region), np.asarray(layer), BLEND_FUNCS[self._blend]),
                "RGBA",
            )
        self.canvas.paste(merged, box[:2])


class NativeRenderer:
    """Renderiza la obra en el proceso y retorna los bytes del PNG"""

    def __init__(self, assets: AssetRegistry, noise_mode: str = "perlin"):
        self.assets = assets
        self.noise_mode = noise_mode

    def render_context(self, request: RenderRequest) -> RenderContext:
        bundle = self.assets.get()
        return build_render_context(request, bundle.icon_count, self.noise_mode)

    def draw(self, context: RenderContext, ready: Optional[ReadySignal] = None) -> Tuple[NativeSurface, CompositionReport]:
        bundle = self.assets.get()
        surface = NativeSurface(context.geometry.width, context.geometry.height, bundle)
        report = compose_artwork(surface, context, ready)
        return surface, report

    def render_with_report(self, request: RenderRequest) -> Tuple[bytes, CompositionReport]:
        context = self.render_context(request)
        surface, report = self.draw(context)
        png = surface.to_png()
        logger.info(
            "Rendered artwork #%d (%s, %s): %d layers, %d icons, %d dots, %d bytes",
            request.signer_ordinal, request.viewport.value, request.background.value,
            len(report.layers), report.icon_count, report.dot_count, len(png),
        )
        return png, report

    def render(self, request: RenderRequest) -> bytes:
        png, _ = self.render_with_report(request)
        return png

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from modules.artwork.models.context import RenderContext
from modules.artwork.models.geometry import geometry_for
from modules.artwork.models.layers import BlendMode
from modules.artwork.models.render_request import Background, RenderRequest
from modules.artwork.services.assets import MANIFESTO_TEXT, PAPER_BACKGROUND, icon_key
from modules.artwork.services.density_field import base_density, render_layer, select_layers
from modules.artwork.services.icon_layout import layout_icons
from modules.artwork.services.noise import make_noise
from modules.artwork.services.seed import derive_seed
from modules.artwork.services.surface import FontRole, TextAlign, TextStyle

logger = logging.getLogger(__name__)

TITLE = "THE DIGITAL MAVERICK MANIFESTO"
WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)
SIGNATURE_GREY = (180, 180, 180, 255)
ICON_ALPHA = 70 / 255
MANIFESTO_ALPHA = 140 / 255


@dataclass(frozen=True)
class CompositionReport:
    layers: Tuple[str, ...]
    icon_count: int
    dot_count: int


class ReadySignal:
    """Llama a su callback tras la primera pasada completa, y nunca más"""

    def __init__(self, callback: Optional[Callable] = None):
        self._callback = callback
        self._fired = False
        self._lock = threading.Lock()

    @property
    def fired(self) -> bool:
        return self._fired

    def fire(self, *args) -> bool:
        with self._lock:
            if self._fired:
                return False
            self._fired = True
        if self._callback is not None:
            self._callback(*args)
        return True


def build_render_context(request: RenderRequest, available_icons: int, noise_mode: str = "perlin") -> RenderContext:
    geometry = geometry_for(request.viewport)
    seed = derive_seed(request.signature_text)
    density = base_density(request.signer_ordinal)
    icons = layout_icons(seed, geometry.art_width, geometry.art_height, available_icons)
    context = RenderContext(
        request=request,
        geometry=geometry,
        seed=seed,
        icons=icons,
        layers=select_layers(request.signer_ordinal, density),
        base_density=density,
        noise=make_noise(noise_mode, seed),
    )
    logger.debug(
        "Render context: seed=%d ordinal=%d icons=%d layers=%s",
        seed, request.signer_ordinal, len(icons), [layer.name for layer in context.layers],
    )
    return context


def draw_background(surface, context: RenderContext) -> None:
    geometry = context.geometry
    if context.request.background == Background.WHITE:
        surface.fill_rect(0, 0, geometry.width, geometry.height, WHITE)
    else:
        surface.draw_image(PAPER_BACKGROUND, 0, 0, geometry.width, geometry.height)


def draw_icons(surface, context: RenderContext) -> int:
    left, top = context.geometry.margin_left, context.geometry.margin_top
    for icon in context.icons:
        surface.draw_image(
            icon_key(icon.icon_index),
            left + icon.x - icon.size / 2,
            top + icon.y - icon.size / 2,
            icon.size,
            icon.size,
            alpha=ICON_ALPHA,
            rotation=icon.rotation,
        )
    return len(context.icons)


def draw_captions(surface, context: RenderContext) -> None:
    geometry = context.geometry
    captions = geometry.captions
    request = context.request
    center = geometry.width / 2

    surface.draw_text(
        TITLE, center, geometry.height - captions.title_offset,
        TextStyle(FontRole.TITLE, captions.title_size, BLACK),
    )
    surface.draw_text(
        f"Signed by {request.display_name} on {request.date_label}",
        center, geometry.height - captions.signed_by_offset,
        TextStyle(FontRole.SIGNED_BY, captions.signed_by_size, BLACK),
    )
    surface.draw_text(
        request.signature_text, center, geometry.height - captions.signature_offset,
        TextStyle(FontRole.SIGNATURE, captions.signature_size, SIGNATURE_GREY),
    )
    surface.draw_text(
        f"#{request.signer_ordinal}",
        geometry.margin_left + geometry.art_width - captions.ordinal_inset,
        geometry.margin_top + geometry.art_height + captions.ordinal_offset,
        TextStyle(FontRole.ORDINAL, captions.ordinal_size, BLACK, TextAlign.RIGHT),
    )


def compose_artwork(surface, context: RenderContext, ready: Optional[ReadySignal] = None) -> CompositionReport:
    """Dibuja una pasada completa de la obra sobre ``surface``.

    El orden de las etapas es fijo. Lo que se dibuja en la zona de arte queda
    recortado a ella; el bloque de textos queda fuera del recorte.
    """
    geometry = context.geometry
    left, top = geometry.margin_left, geometry.margin_top

    draw_background(surface, context)
    surface.clip_rect(left, top, geometry.art_width, geometry.art_height)

    dot_count = 0
    for layer in context.layers:
        dot_count += render_layer(surface, layer, context)

    icon_count = draw_icons(surface, context)
    surface.draw_image(MANIFESTO_TEXT, left, top, geometry.art_width, geometry.art_height, alpha=MANIFESTO_ALPHA)
    surface.set_blend_mode(BlendMode.NORMAL)
    surface.reset_clip()

    draw_captions(surface, context)

    report = CompositionReport(
        layers=tuple(layer.name for layer in context.layers),
        icon_count=icon_count,
        dot_count=dot_count,
    )
    if ready is not None:
        ready.fire(report)
    return report

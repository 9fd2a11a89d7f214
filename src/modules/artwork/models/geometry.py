from dataclasses import dataclass

from modules.artwork.models.render_request import Viewport


@dataclass(frozen=True)
class CaptionMetrics:
    """Tamaños de fuente y desplazamientos de línea base del bloque de textos.

    Los desplazamientos de las líneas centradas se miden hacia arriba desde el
    borde inferior del canvas; el del ordinal se mide hacia abajo desde el
    borde inferior de la zona de arte.
    """

    title_size: int
    title_offset: int
    signed_by_size: int
    signed_by_offset: int
    signature_size: int
    signature_offset: int
    ordinal_size: int
    ordinal_offset: int
    ordinal_inset: int = 10


@dataclass(frozen=True)
class CanvasGeometry:
    width: int
    height: int
    art_width: int
    art_height: int
    margin_bottom: int
    captions: CaptionMetrics

    @property
    def margin_top(self) -> int:
        return self.height - self.art_height - self.margin_bottom

    @property
    def margin_left(self) -> float:
        return (self.width - self.art_width) / 2


DESKTOP_GEOMETRY = CanvasGeometry(
    width=1700,
    height=2200,
    art_width=1428,
    art_height=1785,
    margin_bottom=279,
    captions=CaptionMetrics(
        title_size=48, title_offset=200,
        signed_by_size=32, signed_by_offset=150,
        signature_size=28, signature_offset=100,
        ordinal_size=40, ordinal_offset=40,
    ),
)

MOBILE_GEOMETRY = CanvasGeometry(
    width=850,
    height=1100,
    art_width=714,
    art_height=892,
    margin_bottom=139,
    captions=CaptionMetrics(
        title_size=24, title_offset=100,
        signed_by_size=16, signed_by_offset=75,
        signature_size=14, signature_offset=50,
        ordinal_size=20, ordinal_offset=20,
    ),
)

GEOMETRIES = {
    Viewport.DESKTOP: DESKTOP_GEOMETRY,
    Viewport.MOBILE: MOBILE_GEOMETRY,
}


def geometry_for(viewport: Viewport) -> CanvasGeometry:
    return GEOMETRIES[Viewport(viewport)]

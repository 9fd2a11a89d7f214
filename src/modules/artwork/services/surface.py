from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from modules.artwork.models.layers import RGBA, BlendMode


class FontRole(str, Enum):
    TITLE = "title"
    SIGNED_BY = "signed_by"
    SIGNATURE = "signature"
    ORDINAL = "ordinal"


class TextAlign(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass(frozen=True)
class TextStyle:
    font: FontRole
    size: int
    color: RGBA
    align: TextAlign = TextAlign.CENTER


class DrawingSurface(Protocol):
    """Operaciones que la composición necesita de un backend.

    Las coordenadas son píxeles absolutos del canvas. El texto se dibuja
    sobre la línea base alfabética en ``(x, y)``.
    """

    width: int
    height: int

    def fill_rect(self, x: float, y: float, w: float, h: float, color: RGBA) -> None: ...

    def draw_image(self, key: str, x: float, y: float, w: float, h: float,
                   alpha: float = 1.0, rotation: float = 0.0) -> None: ...

    def draw_circle(self, cx: float, cy: float, diameter: float, color: RGBA) -> None: ...

    def draw_text(self, text: str, x: float, y: float, style: TextStyle) -> None: ...

    def clip_rect(self, x: float, y: float, w: float, h: float) -> None: ...

    def reset_clip(self) -> None: ...

    def set_blend_mode(self, mode: BlendMode) -> None: ...

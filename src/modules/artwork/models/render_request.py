from dataclasses import dataclass, replace
from enum import Enum

from modules.artwork.errors import InvalidRenderRequest


class Background(str, Enum):
    PAPER = "paper"
    WHITE = "white"


class Viewport(str, Enum):
    DESKTOP = "desktop"
    MOBILE = "mobile"


@dataclass(frozen=True)
class RenderRequest:
    """Entrada inmutable de un render"""

    display_name: str
    date_label: str
    signature_text: str
    signer_ordinal: int
    background: Background = Background.PAPER
    viewport: Viewport = Viewport.DESKTOP

    def __post_init__(self):
        missing = [
            field
            for field, value in (
                ("display_name", self.display_name),
                ("date_label", self.date_label),
                ("signature_text", self.signature_text),
            )
            if not isinstance(value, str) or not value.strip()
        ]
        if missing:
            raise InvalidRenderRequest(f"Missing required parameters: {', '.join(missing)}")

        ordinal = self.signer_ordinal
        if isinstance(ordinal, bool) or not isinstance(ordinal, int) or ordinal < 1:
            raise InvalidRenderRequest("signer_ordinal must be a positive integer")

        try:
            object.__setattr__(self, "background", Background(self.background))
            object.__setattr__(self, "viewport", Viewport(self.viewport))
        except ValueError as e:
            raise InvalidRenderRequest(str(e)) from e

    def with_background(self, background: Background) -> "RenderRequest":
        return replace(self, background=background)

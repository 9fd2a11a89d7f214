from typing import Optional

from pydantic import BaseModel, Field

from modules.artwork.models.render_request import Background, RenderRequest, Viewport


class GenerateArtworkRequest(BaseModel):
    """Cuerpo de los endpoints de render.

    Acepta los flags booleanos heredados (``isMobile``, ``whiteBackground``) y
    también valores explícitos de ``background``/``viewport``, que tienen
    prioridad.
    """

    model_config = {"populate_by_name": True}

    name: Optional[str] = None
    date: Optional[str] = None
    signature: Optional[str] = None
    signer_number: Optional[int] = Field(default=None, alias="signerNumber")
    is_mobile: bool = Field(default=False, alias="isMobile")
    white_background: bool = Field(default=False, alias="whiteBackground")
    background: Optional[Background] = None
    viewport: Optional[Viewport] = None

    def to_render_request(self) -> RenderRequest:
        background = self.background or (Background.WHITE if self.white_background else Background.PAPER)
        viewport = self.viewport or (Viewport.MOBILE if self.is_mobile else Viewport.DESKTOP)
        return RenderRequest(
            display_name=self.name,
            date_label=self.date,
            signature_text=self.signature,
            signer_ordinal=self.signer_number,
            background=background,
            viewport=viewport,
        )

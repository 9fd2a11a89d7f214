from dataclasses import dataclass, replace
from typing import Tuple

from modules.artwork.models.geometry import CanvasGeometry
from modules.artwork.models.layers import DensityFieldLayer
from modules.artwork.models.placement import IconPlacement
from modules.artwork.models.render_request import Background, RenderRequest
from modules.artwork.services.noise import NoiseSource


@dataclass(frozen=True)
class RenderContext:
    """Todo lo que necesita un render; se construye una vez por solicitud y no se modifica"""

    request: RenderRequest
    geometry: CanvasGeometry
    seed: int
    icons: Tuple[IconPlacement, ...]
    layers: Tuple[DensityFieldLayer, ...]
    base_density: float
    noise: NoiseSource

    def with_background(self, background: Background) -> "RenderContext":
        # Layout y ruido dependen solo de la semilla, se conservan.
        return replace(self, request=self.request.with_background(background))

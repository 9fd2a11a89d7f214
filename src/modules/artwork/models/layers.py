from dataclasses import dataclass, replace
from enum import Enum
from typing import Tuple


class BlendMode(str, Enum):
    NORMAL = "normal"
    MULTIPLY = "multiply"
    DARKEN = "darken"


RGBA = Tuple[int, int, int, int]


@dataclass(frozen=True)
class DensityFieldLayer:
    name: str
    base_color: RGBA
    noise_offset: float
    min_dot_size: float
    max_dot_size: float
    contrast: float
    blend_mode: BlendMode
    density: float = 0.0

    def with_density(self, density: float) -> "DensityFieldLayer":
        return replace(self, density=density)

from dataclasses import dataclass


@dataclass(frozen=True)
class IconPlacement:
    # centro del ícono, relativo a la zona de arte
    x: float
    y: float
    size: float
    rotation: float
    icon_index: int

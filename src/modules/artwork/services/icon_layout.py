import math
from typing import Optional, Sequence, Tuple

from modules.artwork.models.placement import IconPlacement
from modules.artwork.services.noise import RandomSource

MIN_ICONS = 7
ICON_COUNT_SPREAD = 5
MAX_TRIES = 400
ICON_BUFFER = 10
MIN_ICON_SIZE = 600
MAX_ICON_SIZE = 900
CAPTION_CLEARANCE = 80
MAX_ROTATION = math.pi / 16


def is_visible(x: float, y: float, size: float, art_width: float, art_height: float) -> bool:
    """True si al menos parte del ícono cae dentro de la zona de arte"""
    half = size / 2
    return (
        x + half > 0 and x - half < art_width and
        y + half > 0 and y - half < art_height
    )


def keeps_spacing(x: float, y: float, size: float, placed: Sequence[IconPlacement]) -> bool:
    for other in placed:
        if math.dist((x, y), (other.x, other.y)) < (size + other.size) / 2 + ICON_BUFFER:
            return False
    return True


def layout_icons(
    seed: int,
    art_width: float,
    art_height: float,
    available_icons: int,
    random_source: Optional[RandomSource] = None,
) -> Tuple[IconPlacement, ...]:
    """Ubica los íconos por muestreo con rechazo.

    El orden de los sorteos es parte del contrato: cantidad de íconos, luego
    la permutación de índices, luego (tamaño, x, y, rotación) por intento.
    Cambiar ese orden cambia todas las composiciones.
    """
    if available_icons < 0:
        raise ValueError("available_icons must be non-negative")

    rng = random_source if random_source is not None else RandomSource(seed)
    num_icons = min(int(rng.random() * ICON_COUNT_SPREAD) + MIN_ICONS, available_icons)
    icon_indices = rng.shuffle(range(available_icons))[:num_icons]

    placed = []
    tries = 0
    while len(placed) < num_icons and tries < MAX_TRIES:
        size = rng.uniform(MIN_ICON_SIZE, MAX_ICON_SIZE)
        x = rng.uniform(-size / 3, art_width + size / 3)
        y = rng.uniform(-size / 3, art_height - CAPTION_CLEARANCE + size / 3)
        rotation = rng.uniform(-MAX_ROTATION, MAX_ROTATION)

        if keeps_spacing(x, y, size, placed) and is_visible(x, y, size, art_width, art_height):
            placed.append(IconPlacement(
                x=x,
                y=y,
                size=size,
                rotation=rotation,
                icon_index=icon_indices[len(placed)],
            ))
        tries += 1

    return tuple(placed)

import math
from typing import Optional, Tuple

import numpy as np

from modules.artwork.models.layers import BlendMode, DensityFieldLayer

MIN_DENSITY = 80
MAX_DENSITY = 120
DENSITY_ORDINAL_LOW = 1
DENSITY_ORDINAL_HIGH = 1000
NOISE_STEP = 0.09
SEED_NOISE_SCALE = 0.01

BASE_LAYER = DensityFieldLayer(
    name="base",
    base_color=(255, 232, 0, 255),
    noise_offset=0,
    min_dot_size=2,
    max_dot_size=24,
    contrast=2.2,
    blend_mode=BlendMode.NORMAL,
)

# (umbral, capa): la capa se dibuja cuando signer_ordinal > umbral
TIER_LAYERS: Tuple[Tuple[int, DensityFieldLayer], ...] = (
    (25, DensityFieldLayer("tier1", (136, 137, 138, 120), 1000, 0, 18, 2.0, BlendMode.MULTIPLY)),
    (50, DensityFieldLayer("tier2", (94, 200, 229, 180), 2000, 1, 16, 2.0, BlendMode.MULTIPLY)),
    (100, DensityFieldLayer("tier3", (255, 75, 128, 180), 3000, 1, 16, 2.0, BlendMode.MULTIPLY)),
    (250, DensityFieldLayer("tier4", (68, 214, 44, 180), 4000, 1, 16, 2.0, BlendMode.MULTIPLY)),
    (500, DensityFieldLayer("tier5", (255, 116, 119, 180), 5000, 1, 16, 2.0, BlendMode.MULTIPLY)),
    (1000, DensityFieldLayer("tier6", (130, 216, 213, 180), 6000, 1, 16, 2.0, BlendMode.MULTIPLY)),
)

OVERLAY_LAYER = DensityFieldLayer(
    name="overlay",
    base_color=(0, 0, 0, 40),
    noise_offset=3000,
    min_dot_size=0,
    max_dot_size=10,
    contrast=3.0,
    blend_mode=BlendMode.DARKEN,
)


def base_density(signer_ordinal: int) -> float:
    """Columnas de la grilla comunes a todas las capas; firmantes posteriores tienen campos más finos."""
    clamped = min(max(signer_ordinal, DENSITY_ORDINAL_LOW), DENSITY_ORDINAL_HIGH)
    span = (clamped - DENSITY_ORDINAL_LOW) / (DENSITY_ORDINAL_HIGH - DENSITY_ORDINAL_LOW)
    return span * (MAX_DENSITY - MIN_DENSITY) + MIN_DENSITY


def select_layers(signer_ordinal: int, density: Optional[float] = None) -> Tuple[DensityFieldLayer, ...]:
    if density is None:
        density = base_density(signer_ordinal)
    layers = [BASE_LAYER]
    layers.extend(layer for threshold, layer in TIER_LAYERS if signer_ordinal > threshold)
    layers.append(OVERLAY_LAYER)
    return tuple(layer.with_density(density) for layer in layers)


def dot_field(layer: DensityFieldLayer, art_width: float, art_height: float, seed: int, noise):
    """Centros de celda y diámetros de los puntos de una capa, por columnas.

    Retorna ``(xs, ys, diameters)``, donde ``diameters[i, j]`` corresponde a
    la celda ``(xs[i], ys[j])`` en coordenadas de la zona de arte.
    """
    density = layer.density
    columns = math.ceil(density)
    rows = int(density * art_height / art_width)
    if columns <= 0 or rows <= 0:
        empty = np.zeros(0)
        return empty, empty, np.zeros((0, 0))

    cell_w = art_width / density
    cell_h = art_height / rows
    cols_idx = np.arange(columns, dtype=np.float64)
    rows_idx = np.arange(rows, dtype=np.float64)

    offset = layer.noise_offset
    n = noise.grid(
        cols_idx * NOISE_STEP + offset,
        rows_idx * NOISE_STEP + offset,
        seed * SEED_NOISE_SCALE + offset,
    )
    n = np.power(n, layer.contrast)
    diameters = layer.min_dot_size + n * (layer.max_dot_size - layer.min_dot_size)

    xs = cols_idx * cell_w + cell_w / 2
    ys = rows_idx * cell_h + cell_h / 2
    return xs, ys, diameters


def render_layer(surface, layer: DensityFieldLayer, context) -> int:
    """Dibuja un campo de puntos dentro de la zona de arte y retorna cuántos dibujó"""
    geometry = context.geometry
    xs, ys, diameters = dot_field(layer, geometry.art_width, geometry.art_height, context.seed, context.noise)
    left, top = geometry.margin_left, geometry.margin_top

    surface.set_blend_mode(layer.blend_mode)
    drawn = 0
    for i, x in enumerate(xs):
        for j, y in enumerate(ys):
            diameter = float(diameters[i, j])
            if diameter <= 0:
                continue
            surface.draw_circle(left + float(x), top + float(y), diameter, layer.base_color)
            drawn += 1
    surface.set_blend_mode(BlendMode.NORMAL)
    return drawn

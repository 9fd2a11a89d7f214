import numpy as np

from modules.artwork.models.layers import BlendMode


def blend_normal(base, layer): return layer
def blend_multiply(base, layer): return base * layer
def blend_darken(base, layer): return np.minimum(base, layer)


BLEND_FUNCS = {
    BlendMode.NORMAL: blend_normal,
    BlendMode.MULTIPLY: blend_multiply,
    BlendMode.DARKEN: blend_darken,
}


def alpha_composite_with_blend(base_rgba: np.ndarray, layer_rgba: np.ndarray, blend_func=blend_normal) -> np.ndarray:
    """Composición source-over con una mezcla separable aplicada al RGB.

    Ambos arreglos son RGBA ``uint8`` de la misma forma.
    """
    if base_rgba.shape != layer_rgba.shape:
        raise ValueError(f"Base shape {base_rgba.shape} != layer shape {layer_rgba.shape}")

    base_rgb = base_rgba[..., :3].astype(np.float32) / 255.0
    base_a = base_rgba[..., 3:].astype(np.float32) / 255.0
    layer_rgb = layer_rgba[..., :3].astype(np.float32) / 255.0
    layer_a = layer_rgba[..., 3:].astype(np.float32) / 255.0

    # Donde el fondo es transparente la mezcla se reduce al color de origen.
    blended_rgb = base_a * blend_func(base_rgb, layer_rgb) + (1.0 - base_a) * layer_rgb

    out_a = layer_a + base_a * (1.0 - layer_a)
    out_rgb = np.zeros_like(base_rgb)
    mask = out_a[..., 0] > 1e-6

    numerator = blended_rgb * layer_a + base_rgb * base_a * (1.0 - layer_a)
    out_rgb[mask] = numerator[mask] / out_a[mask]

    rgba = np.dstack((np.clip(out_rgb, 0, 1) * 255, np.clip(out_a, 0, 1) * 255))
    return np.rint(rgba).astype(np.uint8)

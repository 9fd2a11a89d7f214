import math

import pytest

from modules.artwork.backends.recording import RecordingSurface
from modules.artwork.services.composition import build_render_context
from modules.artwork.services.density_field import (
    BASE_LAYER, OVERLAY_LAYER, base_density, dot_field, render_layer, select_layers
)
from modules.artwork.services.noise import PerlinNoise
from conftest import make_request


def test_base_density_endpoints_and_clamp():
    assert base_density(1) == 80
    assert base_density(1000) == 120
    assert base_density(0) == 80
    assert base_density(5000) == base_density(1000)


def test_base_density_is_monotonic():
    values = [base_density(n) for n in range(1, 1001)]
    assert values == sorted(values)


def names(ordinal):
    return [layer.name for layer in select_layers(ordinal)]


def test_gating_is_a_strict_step():
    assert names(1) == ["base", "overlay"]
    assert names(25) == ["base", "overlay"]
    assert names(26) == ["base", "tier1", "overlay"]
    assert names(51) == ["base", "tier1", "tier2", "overlay"]
    assert names(1000) == ["base", "tier1", "tier2", "tier3", "tier4", "tier5", "overlay"]
    assert names(1001) == ["base", "tier1", "tier2", "tier3", "tier4", "tier5", "tier6", "overlay"]


def test_layers_share_density():
    layers = select_layers(300)
    assert {layer.density for layer in layers} == {base_density(300)}


def test_dot_field_grid_and_sizes():
    layer = BASE_LAYER.with_density(80)
    xs, ys, diameters = dot_field(layer, 1428, 1785, 42, PerlinNoise(42))
    assert len(xs) == 80
    assert len(ys) == 100
    assert diameters.shape == (80, 100)
    assert diameters.min() >= layer.min_dot_size
    assert diameters.max() <= layer.max_dot_size
    assert xs[0] == pytest.approx(1428 / 80 / 2)


def test_fractional_density_adds_partial_column():
    layer = OVERLAY_LAYER.with_density(base_density(500))
    xs, ys, _ = dot_field(layer, 1428, 1785, 1, PerlinNoise(1))
    assert len(xs) == math.ceil(layer.density)
    assert len(ys) == int(layer.density * 1785 / 1428)


def test_render_layer_draws_inside_art_region():
    context = build_render_context(make_request(), available_icons=10)
    surface = RecordingSurface(context.geometry.width, context.geometry.height)
    drawn = render_layer(surface, context.layers[0], context)

    assert drawn == surface.dot_count()
    assert surface.ops[0] == {"op": "blend", "mode": "normal"}
    dots = surface.ops[1]["dots"]
    left, top = context.geometry.margin_left, context.geometry.margin_top
    assert all(left <= x <= left + 1428 for x in dots[0::3])
    assert all(top <= y <= top + 1785 for y in dots[1::3])

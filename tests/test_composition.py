import pytest

from modules.artwork.backends.recording import RecordingSurface
from modules.artwork.errors import InvalidRenderRequest
from modules.artwork.models.render_request import Background, RenderRequest, Viewport
from modules.artwork.services.composition import (
    ICON_ALPHA, MANIFESTO_ALPHA, ReadySignal, build_render_context, compose_artwork
)
from conftest import make_request


def record(request, available_icons=14, ready=None):
    context = build_render_context(request, available_icons)
    surface = RecordingSurface(context.geometry.width, context.geometry.height)
    report = compose_artwork(surface, context, ready)
    return context, surface, report


def ops_of(surface, kind):
    return [op for op in surface.ops if op["op"] == kind]


def test_scenario_ordinal_42_has_base_tier1_overlay():
    context, surface, report = record(make_request(signer_ordinal=42))
    assert (surface.width, surface.height) == (1700, 2200)
    assert report.layers == ("base", "tier1", "overlay")
    assert report.icon_count == len(context.icons)
    assert report.dot_count == surface.dot_count()
    assert [op["color"] for op in ops_of(surface, "circles")] == [
        [255, 232, 0, 255], [136, 137, 138, 120], [0, 0, 0, 40]
    ]


def test_scenario_ordinal_1500_has_all_layers():
    _, _, report = record(make_request(signer_ordinal=1500))
    assert report.layers == ("base", "tier1", "tier2", "tier3", "tier4", "tier5", "tier6", "overlay")


def test_pipeline_order():
    _, surface, _ = record(make_request())
    kinds = [op["op"] for op in surface.ops]

    assert surface.ops[0]["op"] == "image" and surface.ops[0]["key"] == "paper-background"
    assert surface.ops[1] == {"op": "clip", "x": 136.0, "y": 136.0, "w": 1428.0, "h": 1785.0}
    reset = kinds.index("reset_clip")
    assert kinds.index("circles") < reset
    assert all(kind == "text" for kind in kinds[reset + 1:])

    images = [op for op in surface.ops[2:reset] if op["op"] == "image"]
    assert images[-1]["key"] == "manifesto-text"
    assert images[-1]["alpha"] == round(MANIFESTO_ALPHA, 3)
    assert all(op["key"].startswith("icon-") for op in images[:-1])
    assert all(op["alpha"] == round(ICON_ALPHA, 3) for op in images[:-1])


def test_icons_are_drawn_in_art_coordinates():
    context, surface, _ = record(make_request())
    icons = [op for op in ops_of(surface, "image") if op["key"].startswith("icon-")]
    assert len(icons) == len(context.icons)
    for op, icon in zip(icons, context.icons):
        assert op["key"] == f"icon-{icon.icon_index}"
        assert op["x"] == pytest.approx(136 + icon.x - icon.size / 2, abs=1e-3)
        assert op["y"] == pytest.approx(136 + icon.y - icon.size / 2, abs=1e-3)
        assert op["rotation"] == pytest.approx(icon.rotation, abs=1e-6)


def test_caption_block_desktop():
    _, surface, _ = record(make_request(signer_ordinal=7))
    title, signed_by, signature, ordinal = ops_of(surface, "text")

    assert title["text"] == "THE DIGITAL MAVERICK MANIFESTO"
    assert (title["x"], title["y"], title["size"]) == (850.0, 2000.0, 48)
    assert signed_by["text"] == "Signed by Test User on January 1, 2025"
    assert (signed_by["y"], signed_by["size"]) == (2050.0, 32)
    assert signature["text"] == "0xabc123"
    assert signature["color"] == [180, 180, 180, 255]
    assert (signature["y"], signature["size"]) == (2100.0, 28)
    assert ordinal["text"] == "#7"
    assert ordinal["align"] == "right"
    assert (ordinal["x"], ordinal["y"], ordinal["size"]) == (1554.0, 1961.0, 40)


def test_caption_block_mobile():
    _, surface, _ = record(make_request(viewport=Viewport.MOBILE))
    title, _, _, ordinal = ops_of(surface, "text")
    assert (surface.width, surface.height) == (850, 1100)
    assert (title["y"], title["size"]) == (1000.0, 24)
    assert (ordinal["x"], ordinal["y"]) == (68 + 714 - 10, 69 + 892 + 20)


def test_white_and_paper_differ_only_in_base_fill():
    _, paper, _ = record(make_request(background=Background.PAPER))
    _, white, _ = record(make_request(background=Background.WHITE))

    assert paper.ops[0]["op"] == "image"
    assert white.ops[0] == {"op": "fill_rect", "x": 0.0, "y": 0.0, "w": 1700.0, "h": 2200.0, "color": [255, 255, 255, 255]}
    assert paper.ops[1:] == white.ops[1:]


def test_context_with_background_keeps_layout():
    context = build_render_context(make_request(), 14)
    white = context.with_background(Background.WHITE)
    assert white.icons == context.icons
    assert white.request.background == Background.WHITE


def test_idempotent_display_list():
    _, first, first_report = record(make_request())
    _, second, second_report = record(make_request())
    assert first.ops == second.ops
    assert first_report == second_report


def test_ready_signal_fires_once():
    calls = []
    ready = ReadySignal(calls.append)
    context = build_render_context(make_request(), 14)
    for _ in range(5):
        compose_artwork(RecordingSurface(1700, 2200), context, ready)
    assert len(calls) == 1
    assert ready.fired


@pytest.mark.parametrize("missing", ["display_name", "date_label", "signature_text"])
def test_missing_field_fails_before_drawing(missing):
    fields = dict(display_name="Test User", date_label="January 1, 2025", signature_text="0xabc123", signer_ordinal=1)
    fields[missing] = ""
    with pytest.raises(InvalidRenderRequest, match="Missing required parameters"):
        RenderRequest(**fields)


@pytest.mark.parametrize("ordinal", [0, -3, True, "12", None])
def test_invalid_ordinal(ordinal):
    with pytest.raises(InvalidRenderRequest):
        make_request(signer_ordinal=ordinal)


def test_invalid_background():
    with pytest.raises(InvalidRenderRequest):
        make_request(background="glitter")

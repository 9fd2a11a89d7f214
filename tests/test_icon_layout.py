import math

import pytest

from modules.artwork.services.icon_layout import (
    MAX_ICON_SIZE, MAX_ROTATION, MIN_ICON_SIZE, ICON_BUFFER, layout_icons
)
from modules.artwork.services.noise import RandomSource

ART_W, ART_H = 1428, 1785


@pytest.mark.parametrize("seed", [0, 1, 42, 3105, 1772899, 2 ** 31 - 1])
def test_layout_invariants(seed):
    placements = layout_icons(seed, ART_W, ART_H, 71)
    assert 0 <= len(placements) <= 11

    for p in placements:
        assert MIN_ICON_SIZE <= p.size <= MAX_ICON_SIZE
        assert -MAX_ROTATION <= p.rotation <= MAX_ROTATION
        half = p.size / 2
        assert p.x + half > 0 and p.x - half < ART_W
        assert p.y + half > 0 and p.y - half < ART_H

    for i, a in enumerate(placements):
        for b in placements[i + 1:]:
            assert math.dist((a.x, a.y), (b.x, b.y)) >= (a.size + b.size) / 2 + ICON_BUFFER

    indices = [p.icon_index for p in placements]
    assert len(set(indices)) == len(indices)
    assert all(0 <= i < 71 for i in indices)


def test_layout_is_deterministic():
    assert layout_icons(12345, ART_W, ART_H, 71) == layout_icons(12345, ART_W, ART_H, 71)


def test_count_and_permutation_are_drawn_first():
    seed = 777
    rng = RandomSource(seed)
    requested = min(int(rng.random() * 5) + 7, 71)
    order = rng.shuffle(range(71))

    placements = layout_icons(seed, ART_W, ART_H, 71)
    assert len(placements) <= requested
    assert [p.icon_index for p in placements] == order[:len(placements)]


def test_capped_by_available_icons():
    assert len(layout_icons(5, ART_W, ART_H, 3)) <= 3
    assert layout_icons(5, ART_W, ART_H, 0) == ()


def test_mobile_art_region():
    placements = layout_icons(99, 714, 892, 71)
    for p in placements:
        assert p.x + p.size / 2 > 0 and p.x - p.size / 2 < 714

import numpy as np
import pytest

from modules.artwork.services.noise import HashNoise, PerlinNoise, RandomSource, make_noise


def test_first_value_of_seed_zero():
    assert RandomSource(0).random() == 1013904223 / 2 ** 32


def test_same_seed_same_stream():
    a, b = RandomSource(1234), RandomSource(1234)
    assert [a.random() for _ in range(50)] == [b.random() for _ in range(50)]


def test_values_in_unit_interval():
    rng = RandomSource(987654321)
    values = [rng.random() for _ in range(1000)]
    assert all(0 <= v < 1 for v in values)


def test_uniform_respects_bounds():
    rng = RandomSource(7)
    for _ in range(200):
        assert -3.0 <= rng.uniform(-3.0, 5.0) < 5.0


def test_shuffle_is_deterministic_permutation():
    first = RandomSource(99).shuffle(range(30))
    second = RandomSource(99).shuffle(range(30))
    assert first == second
    assert sorted(first) == list(range(30))
    assert first != list(range(30))


def test_perlin_is_deterministic_and_bounded():
    a, b = PerlinNoise(42), PerlinNoise(42)
    for x, y, z in [(0.0, 0.0, 0.0), (1.5, 2.25, 0.42), (1000.09, 1000.18, 1000.3)]:
        assert a.noise(x, y, z) == b.noise(x, y, z)
        assert 0.0 <= a.noise(x, y, z) <= 1.0


def test_perlin_depends_on_seed():
    assert PerlinNoise(1).noise(0.3, 0.7, 0.1) != PerlinNoise(2).noise(0.3, 0.7, 0.1)


def test_perlin_grid_matches_pointwise_samples():
    noise = PerlinNoise(5)
    xs = np.arange(6) * 0.09 + 1000
    ys = np.arange(4) * 0.09 + 1000
    grid = noise.grid(xs, ys, 1000.5)
    assert grid.shape == (6, 4)
    for i, x in enumerate(xs):
        for j, y in enumerate(ys):
            assert grid[i, j] == pytest.approx(noise.noise(x, y, 1000.5))


def test_perlin_is_coherent():
    noise = PerlinNoise(3)
    assert abs(noise.noise(2.0, 3.0, 0.5) - noise.noise(2.001, 3.0, 0.5)) < 0.01


def test_hash_noise():
    noise = HashNoise()
    assert noise.noise(0, 0, 0) == pytest.approx(0.5)
    grid = noise.grid(np.arange(10) * 0.09, np.arange(10) * 0.09, 0.3)
    assert grid.min() >= 0.0
    assert grid.max() <= 1.0


def test_make_noise():
    assert isinstance(make_noise("perlin", 1), PerlinNoise)
    assert isinstance(make_noise("hash", 1), HashNoise)
    with pytest.raises(ValueError):
        make_noise("simplex", 1)

import math
from typing import Iterable, List, Protocol

import numpy as np

LCG_MODULUS = 4294967296
LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223

PERLIN_YWRAPB = 4
PERLIN_YWRAP = 1 << PERLIN_YWRAPB
PERLIN_ZWRAPB = 8
PERLIN_ZWRAP = 1 << PERLIN_ZWRAPB
PERLIN_SIZE = 4095
PERLIN_OCTAVES = 4
PERLIN_AMP_FALLOFF = 0.5


class RandomSource:
    """Generador uniforme con semilla (LCG de 32 bits), el mismo del sketch del navegador"""

    def __init__(self, seed: int):
        self._state = int(seed) & 0xFFFFFFFF

    def random(self) -> float:
        self._state = (LCG_MULTIPLIER * self._state + LCG_INCREMENT) % LCG_MODULUS
        return self._state / LCG_MODULUS

    def uniform(self, low: float, high: float) -> float:
        if low > high:
            low, high = high, low
        return self.random() * (high - low) + low

    def shuffle(self, items: Iterable) -> List:
        result = list(items)
        idx = len(result)
        while idx > 1:
            rnd = int(self.random() * idx)
            idx -= 1
            result[idx], result[rnd] = result[rnd], result[idx]
        return result


class NoiseSource(Protocol):
    def noise(self, x: float, y: float = 0.0, z: float = 0.0) -> float: ...

    def grid(self, xs, ys, z: float) -> np.ndarray: ...


def _scaled_cosine(values):
    return 0.5 * (1.0 - np.cos(values * math.pi))


class PerlinNoise:
    """Ruido de valor coherente, cuatro octavas, interpolación coseno.

    La tabla se llena con el mismo LCG de :class:`RandomSource`, con su propia
    semilla, así el ruido nunca consume la secuencia del layout.
    """

    def __init__(self, seed: int):
        lcg = RandomSource(seed)
        self._table = np.array([lcg.random() for _ in range(PERLIN_SIZE + 1)], dtype=np.float64)

    def noise(self, x: float, y: float = 0.0, z: float = 0.0) -> float:
        return float(self._sample(x, y, z))

    def grid(self, xs, ys, z: float) -> np.ndarray:
        """Evalúa cada par (x, y); el resultado se indexa ``[len(xs), len(ys)]``"""
        gx, gy = np.meshgrid(np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64), indexing="ij")
        return self._sample(gx, gy, np.full_like(gx, z))

    def _sample(self, x, y, z):
        x, y, z = (np.abs(np.asarray(v, dtype=np.float64)) for v in np.broadcast_arrays(x, y, z))
        xi = np.floor(x).astype(np.int64)
        yi = np.floor(y).astype(np.int64)
        zi = np.floor(z).astype(np.int64)
        xf = x - xi
        yf = y - yi
        zf = z - zi

        table = self._table
        result = np.zeros_like(x)
        amplitude = 0.5

        for _ in range(PERLIN_OCTAVES):
            offset = xi + (yi << PERLIN_YWRAPB) + (zi << PERLIN_ZWRAPB)
            rxf = _scaled_cosine(xf)
            ryf = _scaled_cosine(yf)

            n1 = table[offset & PERLIN_SIZE]
            n1 = n1 + rxf * (table[(offset + 1) & PERLIN_SIZE] - n1)
            n2 = table[(offset + PERLIN_YWRAP) & PERLIN_SIZE]
            n2 = n2 + rxf * (table[(offset + PERLIN_YWRAP + 1) & PERLIN_SIZE] - n2)
            n1 = n1 + ryf * (n2 - n1)

            offset = offset + PERLIN_ZWRAP
            n2 = table[offset & PERLIN_SIZE]
            n2 = n2 + rxf * (table[(offset + 1) & PERLIN_SIZE] - n2)
            n3 = table[(offset + PERLIN_YWRAP) & PERLIN_SIZE]
            n3 = n3 + rxf * (table[(offset + PERLIN_YWRAP + 1) & PERLIN_SIZE] - n3)
            n2 = n2 + ryf * (n3 - n2)

            n1 = n1 + _scaled_cosine(zf) * (n2 - n1)
            result = result + n1 * amplitude
            amplitude *= PERLIN_AMP_FALLOFF

            xi, yi, zi = xi << 1, yi << 1, zi << 1
            xf, yf, zf = xf * 2, yf * 2, zf * 2
            xi, xf = np.where(xf >= 1.0, xi + 1, xi), np.where(xf >= 1.0, xf - 1.0, xf)
            yi, yf = np.where(yf >= 1.0, yi + 1, yi), np.where(yf >= 1.0, yf - 1.0, yf)
            zi, zf = np.where(zf >= 1.0, zi + 1, zi), np.where(zf >= 1.0, zf - 1.0, zf)

        return result


class HashNoise:
    """Aproximación barata por hash de seno; determinista pero no coherente"""

    def __init__(self, seed: int = 0):
        self.seed = seed

    def noise(self, x: float, y: float = 0.0, z: float = 0.0) -> float:
        return float(self._sample(x, y, z))

    def grid(self, xs, ys, z: float) -> np.ndarray:
        gx, gy = np.meshgrid(np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64), indexing="ij")
        return self._sample(gx, gy, np.full_like(gx, z))

    @staticmethod
    def _sample(x, y, z):
        hashed = np.fmod(np.asarray(x) * 12.9898 + np.asarray(y) * 78.233 + np.asarray(z) * 37.719, 1.0)
        return np.sin(hashed * math.pi) * 0.5 + 0.5


NOISE_SOURCES = {
    "perlin": PerlinNoise,
    "hash": HashNoise,
}


def make_noise(mode: str, seed: int) -> NoiseSource:
    try:
        factory = NOISE_SOURCES[mode]
    except KeyError:
        raise ValueError(f"Unknown noise mode '{mode}', expected one of {sorted(NOISE_SOURCES)}")
    return factory(seed)

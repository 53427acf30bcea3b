import math

import numpy as np
import pytest

from terrain.config import TerrainConfig


class SineNoise:
    """Ruido determinista y barato para pruebas, siempre en [-1, 1]."""

    def __init__(self, frequency: float = 0.05) -> None:
        self.frequency = frequency
        self.calls = 0

    def sample(self, position):
        self.calls += 1
        x, y, z = position
        f = self.frequency
        return math.sin(x * f) * math.cos(y * f * 1.3) * math.sin(z * f * 0.7 + 0.4)


class ConstantNoise:
    def __init__(self, value: float) -> None:
        self.value = value

    def sample(self, position):
        return self.value


def triangle_set(triangles: np.ndarray):
    """Multiconjunto ordenado de triángulos (posiciones redondeadas)."""
    rounded = np.round(np.asarray(triangles, dtype=np.float64).reshape(-1, 3, 3), 4)
    return sorted(tuple(map(tuple, tri)) for tri in rounded.tolist())


@pytest.fixture
def sine_noise():
    return SineNoise()


@pytest.fixture
def small_config():
    return TerrainConfig(grid_size=8, workers=2, result_timeout=30.0)

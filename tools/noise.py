"""
Fuente de ruido para sembrar el campo de densidad.

``OpenSimplexNoise`` reproduce el ruido fractal por defecto de los motores de
juego (periodo 64, 3 octavas, persistencia 0.5, lacunaridad 2.0) sobre la
librería ``opensimplex``. El resultado siempre queda en ``[-1, 1]``.
"""

from __future__ import annotations

from typing import Protocol, Sequence

import numpy as np
from opensimplex import OpenSimplex


class NoiseSource(Protocol):
    def sample(self, position: Sequence[float]) -> float:
        ...


class OpenSimplexNoise:
    """Ruido OpenSimplex fractal (suma de octavas normalizada)."""

    def __init__(
        self,
        seed: int = 0,
        period: float = 64.0,
        octaves: int = 3,
        persistence: float = 0.5,
        lacunarity: float = 2.0,
    ) -> None:
        if period <= 0:
            raise ValueError("El periodo del ruido debe ser > 0.")
        if octaves < 1:
            raise ValueError("Se necesita al menos una octava de ruido.")
        self.seed = seed
        self.period = period
        self.octaves = octaves
        self.persistence = persistence
        self.lacunarity = lacunarity
        self._simplex = OpenSimplex(seed=seed)
        # Suma de amplitudes para normalizar la salida a [-1, 1].
        self._amplitude_sum = float(sum(persistence**k for k in range(octaves)))

    def sample(self, position: Sequence[float]) -> float:
        x, y, z = (float(p) / self.period for p in position)
        total = 0.0
        amplitude = 1.0
        frequency = 1.0
        for _ in range(self.octaves):
            total += amplitude * self._simplex.noise3(x * frequency, y * frequency, z * frequency)
            amplitude *= self.persistence
            frequency *= self.lacunarity
        return float(np.clip(total / self._amplitude_sum, -1.0, 1.0))

    def sample_grid(self, xs: np.ndarray, ys: np.ndarray, zs: np.ndarray) -> np.ndarray:
        """
        Evalúa el producto cartesiano de los tres ejes de una vez.

        Devuelve un array ``(len(xs), len(ys), len(zs))`` indexado ``[x, y, z]``
        con los mismos valores que ``sample`` punto a punto.
        """
        xs, ys, zs = (np.asarray(axis, dtype=np.float64) / self.period for axis in (xs, ys, zs))
        total = np.zeros((len(zs), len(ys), len(xs)), dtype=np.float64)
        amplitude = 1.0
        frequency = 1.0
        for _ in range(self.octaves):
            # noise3array devuelve el grid indexado como [z, y, x].
            total += amplitude * self._simplex.noise3array(xs * frequency, ys * frequency, zs * frequency)
            amplitude *= self.persistence
            frequency *= self.lacunarity
        return np.clip(total / self._amplitude_sum, -1.0, 1.0).transpose(2, 1, 0)

"""
Muestreo del campo de densidad.

El campo se llena una sola vez, en un único hilo, y se congela antes de
entregarlo a los trabajadores: a partir de ese momento nadie escribe en él y se
puede leer desde cualquier hilo sin bloqueos.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from terrain.indexing import CoordinateIndexer, GridCoordinate
from tools.noise import NoiseSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DensityField:
    """Instantánea inmutable de N³ densidades en ``[0, 1]``."""

    size: int
    values: np.ndarray

    def __post_init__(self) -> None:
        if self.values.shape != (self.size**3,):
            raise ValueError(
                f"Se esperaban {self.size ** 3} densidades, se recibió un array de forma {self.values.shape}."
            )
        self.values.setflags(write=False)
        # Se fija antes de publicar el campo: los trabajadores sólo lo leen.
        object.__setattr__(self, "indexer", CoordinateIndexer(self.size))

    def value_at(self, coord: GridCoordinate) -> float:
        return float(self.values[self.indexer.index(coord)])

    def corner_values(self, offset: GridCoordinate, corners: Sequence[Sequence[int]]) -> list:
        """Densidades de ``offset + c`` para cada esquina ``c``, en el orden recibido."""
        ox, oy, oz = offset
        indexer = self.indexer
        return [float(self.values[indexer.index((ox + cx, oy + cy, oz + cz))]) for cx, cy, cz in corners]

    def as_grid(self) -> np.ndarray:
        """Vista ``(N, N, N)`` de sólo lectura indexada como ``[x, y, z]``."""
        return self.values.reshape(self.size, self.size, self.size)


def sample_density_field(noise: NoiseSource, size: int, scale: float = 4.0) -> DensityField:
    """
    Llena el grid completo con ``(noise(c * scale) + 1) / 2``.

    Evalúa el ruido N³ veces; el campo sólo se publica cuando está completo.
    Si la fuente ofrece ``sample_grid`` se evalúa el grid entero de una vez.
    """
    indexer = CoordinateIndexer(size)
    sample_grid = getattr(noise, "sample_grid", None)
    if sample_grid is not None:
        axis = np.arange(size, dtype=np.float64) * scale
        # El orden C de un grid [x, y, z] coincide con el índice lineal.
        values = ((np.asarray(sample_grid(axis, axis, axis)) + 1.0) / 2.0).astype(np.float32).ravel()
    else:
        values = np.empty(indexer.volume, dtype=np.float32)
        for i in range(indexer.volume):
            x, y, z = indexer.coord(i)
            sample = noise.sample((x * scale, y * scale, z * scale))
            values[i] = (sample + 1.0) / 2.0
    np.clip(values, 0.0, 1.0, out=values)
    logger.debug("Campo de densidad %d³ muestreado (min=%.3f, max=%.3f)", size, values.min(), values.max())
    return DensityField(size=size, values=values)

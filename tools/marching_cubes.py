"""
Triangulación de una celda unidad con Marching Cubes.

Recibe los 8 valores de las esquinas en el orden canónico de ``CORNER_OFFSETS``
y devuelve entre 0 y 5 triángulos en el marco local del cubo unidad. La
búsqueda en la tabla de casos la hace ``skimage.measure.marching_cubes`` con la
tabla clásica de Lorensen (interpolación lineal sobre las aristas).
"""

from __future__ import annotations

from typing import Protocol, Sequence

import numpy as np
from skimage import measure

# Coordenadas relativas de los 8 vértices de un cubo unidad.
CORNER_OFFSETS = np.array(
    [
        [0, 0, 0],
        [1, 0, 0],
        [1, 1, 0],
        [0, 1, 0],
        [0, 0, 1],
        [1, 0, 1],
        [1, 1, 1],
        [0, 1, 1],
    ],
    dtype=np.int64,
)

MAX_TRIANGLES_PER_CELL = 5

_EMPTY = np.empty((0, 3, 3), dtype=np.float32)
_EMPTY.setflags(write=False)


class Triangulator(Protocol):
    def __call__(self, corners: Sequence[float], iso_level: float) -> np.ndarray:
        ...


def _compute_cube_index(values: Sequence[float], iso_level: float) -> int:
    """Calcula el índice de caso en base a los 8 valores del cubo."""
    cube_index = 0
    for i, v in enumerate(values):
        if v < iso_level:
            cube_index |= 1 << i
    return cube_index


def triangulate(corners: Sequence[float], iso_level: float = 0.5) -> np.ndarray:
    """
    Triangula una celda.

    Args:
        corners: 8 densidades en el orden de ``CORNER_OFFSETS``.
        iso_level: Umbral entre esquinas "sólidas" y "vacías".

    Returns:
        Array ``(T, 3, 3)`` float32 con ``0 <= T <= 5``.
    """
    if len(corners) != len(CORNER_OFFSETS):
        raise ValueError(f"Se esperaban 8 valores de esquina, se recibieron {len(corners)}.")

    cube_index = _compute_cube_index(corners, iso_level)
    if cube_index in (0, 0xFF):
        # Celda completamente dentro o fuera: no cruza la superficie.
        return _EMPTY

    volume = np.empty((2, 2, 2), dtype=np.float32)
    for (dx, dy, dz), value in zip(CORNER_OFFSETS, corners):
        volume[dx, dy, dz] = value

    try:
        verts, faces, _, _ = measure.marching_cubes(
            volume, level=iso_level, method="lorensen", allow_degenerate=False
        )
    except RuntimeError as exc:
        # skimage lo señala así cuando sólo quedan triángulos degenerados.
        if "No surface found" in str(exc):
            return _EMPTY
        raise

    if len(faces) == 0:
        return _EMPTY
    return np.asarray(verts, dtype=np.float32)[np.asarray(faces)]

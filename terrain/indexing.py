"""Conversión entre coordenadas de grid 3D e índices lineales."""

from __future__ import annotations

from typing import Tuple

GridCoordinate = Tuple[int, int, int]


class CoordinateIndexer:
    """
    Biyección entre ``[0, N)³`` y ``[0, N³)``: ``index = z + N * (y + N * x)``.

    No valida rangos; quien llama debe pasar valores dentro del grid.
    """

    def __init__(self, size: int) -> None:
        self.size = size
        self.volume = size * size * size

    def index(self, coord: GridCoordinate) -> int:
        x, y, z = coord
        return z + self.size * (y + self.size * x)

    def coord(self, index: int) -> GridCoordinate:
        n = self.size
        return index // (n * n), (index // n) % n, index % n

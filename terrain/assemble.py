"""
Ensamblado de la malla final a partir del flujo de vértices.

Cada terna consecutiva del flujo es un triángulo. Los vértices con la misma
posición se sueldan en un único índice y las normales se suavizan sumando las
normales de cara de todos los triángulos que tocan cada vértice soldado.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np
import trimesh

from terrain.errors import MeshAssemblyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TerrainMesh:
    """Malla indexada e inmutable (lista de triángulos)."""

    vertices: np.ndarray
    indices: np.ndarray
    normals: np.ndarray
    primitive: str = "triangles"

    def __post_init__(self) -> None:
        for array in (self.vertices, self.indices, self.normals):
            array.setflags(write=False)

    @classmethod
    def empty(cls) -> "TerrainMesh":
        return cls(
            vertices=np.empty((0, 3), dtype=np.float32),
            indices=np.empty((0,), dtype=np.int64),
            normals=np.empty((0, 3), dtype=np.float32),
        )

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    @property
    def faces(self) -> np.ndarray:
        return self.indices.reshape(-1, 3)

    def bounds(self) -> Tuple[Tuple[float, float, float], Tuple[float, float, float]]:
        if not self.vertex_count:
            return (0.0, 0.0, 0.0), (0.0, 0.0, 0.0)
        lo = self.vertices.min(axis=0)
        hi = self.vertices.max(axis=0)
        return tuple(float(v) for v in lo), tuple(float(v) for v in hi)  # type: ignore[return-value]

    def to_trimesh(self) -> trimesh.Trimesh:
        if not self.vertex_count:
            # trimesh no acepta normales de vértice vacías.
            return trimesh.Trimesh(vertices=self.vertices, faces=self.faces, process=False)
        return trimesh.Trimesh(
            vertices=self.vertices, faces=self.faces, vertex_normals=self.normals, process=False
        )


def smooth_vertex_normals(vertices: np.ndarray, faces: np.ndarray) -> np.ndarray:
    """Suma normalizada de las normales unitarias de cara incidentes en cada vértice."""
    triangles = vertices[faces]
    face_normals = trimesh.util.unitize(
        np.cross(triangles[:, 1] - triangles[:, 0], triangles[:, 2] - triangles[:, 0])
    )
    summed = np.zeros_like(vertices, dtype=np.float64)
    np.add.at(summed, faces.ravel(), np.repeat(face_normals, 3, axis=0))
    return trimesh.util.unitize(summed)


def assemble_mesh(stream: np.ndarray) -> TerrainMesh:
    """
    Construye la ``TerrainMesh`` a partir del flujo de vértices en espacio de grid.

    Conserva el orden de los triángulos tal como llegan.
    """
    stream = np.asarray(stream, dtype=np.float64).reshape(-1, 3)
    if len(stream) % 3:
        raise MeshAssemblyError(f"El flujo de vértices tiene {len(stream)} vértices, no es múltiplo de 3.")
    if not len(stream):
        logger.info("Flujo de vértices vacío: la malla no tiene triángulos")
        return TerrainMesh.empty()

    soup = trimesh.Trimesh(vertices=stream, faces=np.arange(len(stream)).reshape(-1, 3), process=False)
    soup.merge_vertices()

    vertices = np.asarray(soup.vertices)
    faces = np.asarray(soup.faces, dtype=np.int64)
    normals = smooth_vertex_normals(vertices, faces)
    logger.debug("Soldados %d vértices en %d (%d triángulos)", len(stream), len(vertices), len(faces))

    return TerrainMesh(
        vertices=vertices.astype(np.float32),
        indices=faces.ravel().copy(),
        normals=normals.astype(np.float32),
    )

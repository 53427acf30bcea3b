"""
Punto de entrada de la tubería de generación.

``TerrainGenerator.generate`` encadena las fases:
1. Muestreo del campo de densidad (un hilo).
2. Reparto de una celda por trabajo en el pool.
3. Agregación de exactamente (N-1)³ resultados.
4. Ensamblado de la malla indexada.

Sólo puede haber una generación en curso por generador; una segunda petición
mientras la primera corre se rechaza con ``GenerationInProgress``.
"""

from __future__ import annotations

import enum
import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from terrain.aggregate import collect_results
from terrain.assemble import TerrainMesh, assemble_mesh
from terrain.cells import CellJobScheduler, expected_job_count
from terrain.config import TerrainConfig
from terrain.density import sample_density_field
from terrain.errors import GenerationError, GenerationInProgress
from tools.marching_cubes import Triangulator, triangulate
from tools.noise import NoiseSource, OpenSimplexNoise

logger = logging.getLogger(__name__)


class GenerationState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class GenerationResult:
    mesh: TerrainMesh
    jobs_dispatched: int
    results_collected: int
    timings: Dict[str, float] = field(default_factory=dict)

    @property
    def triangle_count(self) -> int:
        return self.mesh.triangle_count


def build_noise(config: TerrainConfig) -> OpenSimplexNoise:
    return OpenSimplexNoise(
        seed=config.noise_seed,
        period=config.noise_period,
        octaves=config.noise_octaves,
        persistence=config.noise_persistence,
        lacunarity=config.noise_lacunarity,
    )


class TerrainGenerator:
    def __init__(
        self,
        config: Optional[TerrainConfig] = None,
        noise: Optional[NoiseSource] = None,
        triangulator: Optional[Triangulator] = None,
    ) -> None:
        self.config = (config or TerrainConfig()).validate()
        self.noise = noise if noise is not None else build_noise(self.config)
        self.triangulator = triangulator or triangulate
        self._guard = threading.Lock()
        self._state = GenerationState.IDLE

    @property
    def state(self) -> GenerationState:
        return self._state

    def generate(self) -> GenerationResult:
        if not self._guard.acquire(blocking=False):
            raise GenerationInProgress("Ya hay una generación de terreno en curso.")
        self._state = GenerationState.RUNNING
        try:
            return self._run()
        except GenerationError as exc:
            logger.error("Generación abortada: %s", exc)
            raise
        finally:
            self._state = GenerationState.IDLE
            self._guard.release()

    def _run(self) -> GenerationResult:
        config = self.config
        timings: Dict[str, float] = {}

        start = time.perf_counter()
        density = sample_density_field(self.noise, config.grid_size, config.noise_scale)
        timings["sampling"] = time.perf_counter() - start

        start = time.perf_counter()
        expected = expected_job_count(config.grid_size)
        channel: queue.Queue = queue.Queue(maxsize=config.channel_capacity)
        scheduler = CellJobScheduler(config.workers)
        dispatch = scheduler.dispatch(density, channel, self.triangulator, config.iso_level)
        try:
            stream, received = collect_results(channel, expected, dispatch, config.result_timeout)
        except BaseException:
            dispatch.abort()
            raise
        dispatch.join()
        timings["triangulation"] = time.perf_counter() - start

        start = time.perf_counter()
        mesh = assemble_mesh(stream)
        timings["assembly"] = time.perf_counter() - start

        logger.info(
            "Terreno %d³ generado: %d trabajos, %d triángulos, %d vértices (%d trabajadores, %.2fs)",
            config.grid_size,
            dispatch.dispatched,
            mesh.triangle_count,
            mesh.vertex_count,
            scheduler.workers,
            sum(timings.values()),
        )
        return GenerationResult(
            mesh=mesh,
            jobs_dispatched=dispatch.dispatched,
            results_collected=received,
            timings=timings,
        )


class TerrainNode:
    """
    Ranura de malla del nodo anfitrión.

    ``ready`` genera al montar la escena y ``trigger`` regenera ante un evento
    explícito. Si la generación falla, la malla anterior se mantiene.
    """

    def __init__(self, generator: TerrainGenerator) -> None:
        self.generator = generator
        self.mesh: Optional[TerrainMesh] = None
        self.last_result: Optional[GenerationResult] = None

    def ready(self) -> TerrainMesh:
        return self._regenerate()

    def trigger(self) -> TerrainMesh:
        return self._regenerate()

    def _regenerate(self) -> TerrainMesh:
        result = self.generator.generate()
        self.mesh = result.mesh
        self.last_result = result
        return result.mesh

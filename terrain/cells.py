"""
Reparto de celdas unidad entre un pool de trabajadores.

Cada celda del interior del grid es un trabajo independiente: lee las 8
densidades de sus esquinas del campo compartido (inmutable), llama al
triangulador y deja el resultado en un canal acotado. El canal nunca descarta
resultados; si está lleno, el productor espera.
"""

from __future__ import annotations

import itertools
import logging
import os
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterator, Optional

import numpy as np

from terrain.density import DensityField
from terrain.indexing import GridCoordinate
from tools.marching_cubes import CORNER_OFFSETS, MAX_TRIANGLES_PER_CELL, Triangulator, triangulate

logger = logging.getLogger(__name__)

_PUT_POLL_SECONDS = 0.1
_CORNERS = tuple(tuple(c) for c in CORNER_OFFSETS.tolist())


@dataclass(frozen=True)
class JobResult:
    triangles: np.ndarray
    offset: GridCoordinate


@dataclass(frozen=True)
class JobFailure:
    offset: GridCoordinate
    error: BaseException


def expected_job_count(size: int) -> int:
    return (size - 1) ** 3


def iter_cell_offsets(size: int) -> Iterator[GridCoordinate]:
    """Recorre ``[0, N-1)³`` en orden x, y, z."""
    return itertools.product(range(size - 1), repeat=3)


def triangulate_cell(
    field: DensityField,
    offset: GridCoordinate,
    triangulator: Triangulator = triangulate,
    iso_level: float = 0.5,
) -> JobResult:
    corners = field.corner_values(offset, _CORNERS)
    triangles = np.asarray(triangulator(corners, iso_level), dtype=np.float32).reshape(-1, 3, 3)
    if len(triangles) > MAX_TRIANGLES_PER_CELL:
        raise ValueError(
            f"El triangulador devolvió {len(triangles)} triángulos (máximo {MAX_TRIANGLES_PER_CELL})."
        )
    return JobResult(triangles=triangles, offset=offset)


class CellDispatch:
    """
    Estado de un reparto en curso.

    ``finished`` actúa de latch: se activa cuando todos los trabajos enviados
    han dejado su resultado (o su fallo) en el canal.
    """

    def __init__(self, executor: ThreadPoolExecutor, channel: queue.Queue) -> None:
        self.dispatched = 0
        self.finished = threading.Event()
        self._executor = executor
        self._channel = channel
        self._completed = 0
        self._sealed = False
        self._lock = threading.Lock()
        self._aborted = threading.Event()

    @property
    def completed(self) -> int:
        with self._lock:
            return self._completed

    def put(self, outcome) -> None:
        # Bloquea mientras el canal está lleno; sólo se rinde si el reparto se abortó.
        while True:
            try:
                self._channel.put(outcome, timeout=_PUT_POLL_SECONDS)
                return
            except queue.Full:
                if self._aborted.is_set():
                    return

    def job_done(self) -> None:
        with self._lock:
            self._completed += 1
            if self._sealed and self._completed == self.dispatched:
                self.finished.set()

    def seal(self) -> None:
        with self._lock:
            self._sealed = True
            if self._completed == self.dispatched:
                self.finished.set()

    @property
    def aborted(self) -> bool:
        return self._aborted.is_set()

    def join(self) -> None:
        self._executor.shutdown(wait=True)

    def abort(self) -> None:
        """Cancela los trabajos pendientes sin esperar a los que ya corren."""
        self._aborted.set()
        self._executor.shutdown(wait=False, cancel_futures=True)


class CellJobScheduler:
    """Envía un trabajo de triangulación por celda a un pool de tamaño fijo."""

    def __init__(self, workers: Optional[int] = None) -> None:
        self.workers = workers or os.cpu_count() or 1

    def dispatch(
        self,
        field: DensityField,
        channel: queue.Queue,
        triangulator: Triangulator = triangulate,
        iso_level: float = 0.5,
    ) -> CellDispatch:
        executor = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="cell-worker")
        dispatch = CellDispatch(executor, channel)

        def run(offset: GridCoordinate) -> None:
            try:
                if dispatch.aborted:
                    return
                try:
                    outcome = triangulate_cell(field, offset, triangulator, iso_level)
                except Exception as exc:  # noqa: BLE001 - se reenvía al agregador
                    outcome = JobFailure(offset=offset, error=exc)
                dispatch.put(outcome)
            finally:
                dispatch.job_done()

        for offset in iter_cell_offsets(field.size):
            executor.submit(run, offset)
            dispatch.dispatched += 1
        dispatch.seal()

        logger.debug("%d trabajos de celda enviados a %d trabajadores", dispatch.dispatched, self.workers)
        return dispatch

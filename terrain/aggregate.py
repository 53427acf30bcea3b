"""
Agregación de resultados de celda.

Vacía el canal hasta recibir exactamente el número de resultados esperado y
traslada cada triángulo al espacio del grid. Es la barrera que separa la fase
paralela del ensamblado: si falta algún resultado falla con un error explícito
en lugar de quedarse esperando para siempre.
"""

from __future__ import annotations

import logging
import queue
import time
from typing import List, Optional, Tuple

import numpy as np

from terrain.cells import CellDispatch, JobFailure
from terrain.errors import GenerationTimeout, JobFailedError, ResultCountMismatch

logger = logging.getLogger(__name__)

POLL_SECONDS = 0.05


def collect_results(
    channel: queue.Queue,
    expected: int,
    dispatch: Optional[CellDispatch] = None,
    timeout: Optional[float] = None,
) -> Tuple[np.ndarray, int]:
    """
    Devuelve el flujo de vértices ``(3 * triángulos, 3)`` en orden de llegada
    junto con el número de resultados recibidos.

    Args:
        channel: Cola de ``JobResult`` / ``JobFailure``.
        expected: Número exacto de resultados a recibir.
        dispatch: Reparto que alimenta el canal; permite detectar resultados
            perdidos en cuanto todos los trabajos han terminado.
        timeout: Segundos máximos sin recibir nada. ``None`` espera mientras
            queden trabajos en marcha.
    """
    if dispatch is not None and dispatch.dispatched != expected:
        raise ResultCountMismatch(dispatch.dispatched, expected)

    chunks: List[np.ndarray] = []
    received = 0
    last_arrival = time.monotonic()
    while received < expected:
        try:
            outcome = channel.get(timeout=POLL_SECONDS)
        except queue.Empty:
            if dispatch is not None and dispatch.finished.is_set() and channel.empty():
                raise ResultCountMismatch(received, expected) from None
            if timeout is not None and time.monotonic() - last_arrival > timeout:
                raise GenerationTimeout(
                    f"Sin resultados durante {timeout:.1f}s ({received}/{expected} recibidos)."
                ) from None
            continue

        last_arrival = time.monotonic()
        received += 1
        if isinstance(outcome, JobFailure):
            raise JobFailedError(outcome.offset, outcome.error) from outcome.error
        if len(outcome.triangles):
            chunks.append(outcome.triangles + np.asarray(outcome.offset, dtype=np.float32))

    logger.debug("%d resultados agregados, %d celdas con superficie", received, len(chunks))
    if not chunks:
        return np.empty((0, 3), dtype=np.float32), received
    return np.concatenate(chunks).reshape(-1, 3), received

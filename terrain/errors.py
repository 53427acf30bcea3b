"""Errores que abortan una generación de terreno en curso."""

from __future__ import annotations


class GenerationError(RuntimeError):
    """Fallo no recuperable de la generación; la malla anterior se conserva."""


class GenerationInProgress(GenerationError):
    """Se pidió una generación mientras otra seguía en curso."""


class JobFailedError(GenerationError):
    def __init__(self, offset, cause: BaseException) -> None:
        super().__init__(f"La triangulación de la celda {tuple(offset)} falló: {cause}")
        self.offset = offset


class ResultCountMismatch(GenerationError):
    def __init__(self, received: int, expected: int) -> None:
        super().__init__(f"Se recibieron {received} resultados de celda, se esperaban {expected}.")
        self.received = received
        self.expected = expected


class GenerationTimeout(GenerationError):
    pass


class MeshAssemblyError(GenerationError):
    pass

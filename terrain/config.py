"""Configuración de la generación de terreno (JSON reproducible)."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

SUPPORTED_EXPORT_FORMATS = {"obj", "ply", "glb", "gltf", "stl"}


@dataclass
class TerrainConfig:
    """Parámetros de la tubería: grid, isosuperficie, ruido y paralelismo."""

    grid_size: int = 64
    iso_level: float = 0.5
    noise_scale: float = 4.0
    noise_seed: int = 0
    noise_period: float = 64.0
    noise_octaves: int = 3
    noise_persistence: float = 0.5
    noise_lacunarity: float = 2.0
    workers: Optional[int] = None
    channel_capacity: int = 4096
    result_timeout: Optional[float] = None
    export_format: str = "obj"

    @classmethod
    def from_mapping(cls, payload: dict) -> "TerrainConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(payload) - known
        if unknown:
            raise ValueError(f"Claves de configuración desconocidas: {', '.join(sorted(unknown))}")
        defaults = cls()
        workers = payload.get("workers", defaults.workers)
        timeout = payload.get("result_timeout", defaults.result_timeout)
        return cls(
            grid_size=int(payload.get("grid_size", defaults.grid_size)),
            iso_level=float(payload.get("iso_level", defaults.iso_level)),
            noise_scale=float(payload.get("noise_scale", defaults.noise_scale)),
            noise_seed=int(payload.get("noise_seed", defaults.noise_seed)),
            noise_period=float(payload.get("noise_period", defaults.noise_period)),
            noise_octaves=int(payload.get("noise_octaves", defaults.noise_octaves)),
            noise_persistence=float(payload.get("noise_persistence", defaults.noise_persistence)),
            noise_lacunarity=float(payload.get("noise_lacunarity", defaults.noise_lacunarity)),
            workers=None if workers is None else int(workers),
            channel_capacity=int(payload.get("channel_capacity", defaults.channel_capacity)),
            result_timeout=None if timeout is None else float(timeout),
            export_format=str(payload.get("export_format", defaults.export_format)).lower(),
        )

    def validate(self) -> "TerrainConfig":
        if self.grid_size < 2:
            raise ValueError("grid_size debe ser >= 2 (al menos una celda).")
        if not 0.0 <= self.iso_level <= 1.0:
            raise ValueError("iso_level debe estar en [0, 1].")
        if self.noise_scale <= 0 or self.noise_period <= 0:
            raise ValueError("noise_scale y noise_period deben ser > 0.")
        if self.noise_octaves < 1:
            raise ValueError("noise_octaves debe ser >= 1.")
        if self.workers is not None and self.workers < 1:
            raise ValueError("workers debe ser >= 1.")
        if self.channel_capacity < 1:
            raise ValueError("channel_capacity debe ser >= 1.")
        if self.result_timeout is not None and self.result_timeout <= 0:
            raise ValueError("result_timeout debe ser > 0.")
        if self.export_format not in SUPPORTED_EXPORT_FORMATS:
            raise ValueError(
                f"Formato '{self.export_format}' no soportado. Usa uno de: {', '.join(sorted(SUPPORTED_EXPORT_FORMATS))}"
            )
        return self


def save_config(config: TerrainConfig, path: Path) -> None:
    """Guarda la configuración en JSON para reproducir parámetros."""
    path.write_text(json.dumps(asdict(config), indent=2))


def load_config(path: Path) -> TerrainConfig:
    """Lee un JSON de configuración y devuelve ``TerrainConfig`` validada."""
    payload = json.loads(path.read_text())
    return TerrainConfig.from_mapping(payload).validate()

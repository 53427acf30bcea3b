"""Exportación de mallas de terreno y de sus metadatos JSON.

Flujo:
1. Convierte la ``TerrainMesh`` a ``trimesh.Trimesh`` (con sus normales suaves).
2. Exporta al formato pedido por extensión o ``--format``.
3. Guarda ``{name}.json`` junto a la malla con conteos, límites y parámetros.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from terrain.assemble import TerrainMesh
from terrain.config import SUPPORTED_EXPORT_FORMATS, TerrainConfig
from terrain.generator import GenerationResult


@dataclass
class ExportMetadata:
    name: str
    format: str
    vertices: int
    faces: int
    bounds_min: Tuple[float, float, float]
    bounds_max: Tuple[float, float, float]
    jobs_dispatched: int
    results_collected: int
    timings: Dict[str, float]
    params: Dict[str, Any]


def _ensure_supported_format(path: Path, export_format: Optional[str]) -> str:
    fmt = (export_format or path.suffix.replace(".", "")).lower()
    if fmt not in SUPPORTED_EXPORT_FORMATS:
        raise ValueError(
            f"Formato '{fmt}' no soportado. Usa uno de: {', '.join(sorted(SUPPORTED_EXPORT_FORMATS))}"
        )
    return fmt


def export_mesh(mesh: TerrainMesh, output_path: Path, export_format: Optional[str] = None) -> Path:
    """
    Exporta la malla al formato indicado usando la extensión del archivo o ``export_format``.
    """
    fmt = _ensure_supported_format(output_path, export_format)
    output_path = output_path.with_suffix(f".{fmt}")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    mesh.to_trimesh().export(str(output_path), file_type=fmt)
    return output_path


def build_metadata(result: GenerationResult, config: TerrainConfig, output_path: Path) -> ExportMetadata:
    bounds_min, bounds_max = result.mesh.bounds()
    params = asdict(config)
    params.pop("export_format")
    return ExportMetadata(
        name=output_path.stem,
        format=output_path.suffix.replace(".", ""),
        vertices=result.mesh.vertex_count,
        faces=result.mesh.triangle_count,
        bounds_min=bounds_min,
        bounds_max=bounds_max,
        jobs_dispatched=result.jobs_dispatched,
        results_collected=result.results_collected,
        timings=dict(result.timings),
        params=params,
    )


def write_metadata(metadata: ExportMetadata, output_path: Path) -> Path:
    metadata_path = output_path.with_suffix(".json")
    metadata_path.write_text(json.dumps(asdict(metadata), indent=2), encoding="utf-8")
    return metadata_path

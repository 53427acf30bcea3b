"""
CLI para generar terreno volumétrico (ruido → Marching Cubes en paralelo → malla).

Ejemplos:
  python -m terrain.cli generate --output terrain.obj
  python -m terrain.cli generate --output terrain.glb --grid-size 32 --seed 7 --workers 4
  python -m terrain.cli generate --output terrain.ply --config-in terrain.json --config-out used.json
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable

from terrain.config import TerrainConfig, load_config, save_config
from terrain.errors import GenerationError
from terrain.generator import TerrainGenerator, TerrainNode
from tools.mesh_exporter import build_metadata, export_mesh, write_metadata

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _parse_positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("El valor debe ser >= 1.")
    return number


def _parse_positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError("El valor debe ser > 0.")
    return number


def add_generate_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--output", required=True, type=Path, help="Malla de salida (usa extensión o --format).")
    parser.add_argument("--grid-size", default=None, type=_parse_positive_int, help="Lado N del grid de densidad.")
    parser.add_argument("--iso-level", default=None, type=float, help="Iso-superficie para Marching Cubes.")
    parser.add_argument("--noise-scale", default=None, type=_parse_positive_float, help="Escala espacial del ruido.")
    parser.add_argument("--seed", default=None, type=int, help="Semilla del ruido OpenSimplex.")
    parser.add_argument("--workers", default=None, type=_parse_positive_int, help="Hilos del pool (por defecto, CPUs).")
    parser.add_argument(
        "--timeout", default=None, type=_parse_positive_float, help="Segundos máximos sin recibir resultados."
    )
    parser.add_argument("--format", default=None, help="Formato de exportación: obj, ply, glb, gltf, stl.")
    parser.add_argument("--config-in", type=Path, help="Carga un JSON con configuración.")
    parser.add_argument("--config-out", type=Path, help="Guarda un JSON con la configuración usada.")
    parser.add_argument("--no-metadata", action="store_true", help="No escribe el JSON de metadatos.")


def _build_config(args: argparse.Namespace) -> TerrainConfig:
    config = load_config(args.config_in) if args.config_in else TerrainConfig()
    overrides = {
        "grid_size": args.grid_size,
        "iso_level": args.iso_level,
        "noise_scale": args.noise_scale,
        "noise_seed": args.seed,
        "workers": args.workers,
        "result_timeout": args.timeout,
    }
    for key, value in overrides.items():
        if value is not None:
            setattr(config, key, value)
    config.export_format = (args.format or args.output.suffix.replace(".", "") or config.export_format).lower()
    config.validate()
    if args.config_out:
        save_config(config, args.config_out)
    return config


def handle_generate(args: argparse.Namespace) -> Path:
    config = _build_config(args)
    node = TerrainNode(TerrainGenerator(config))
    print(f"[cli] Generando terreno {config.grid_size}³ (iso={config.iso_level}, semilla={config.noise_seed})")
    node.ready()
    result = node.last_result
    output = export_mesh(result.mesh, args.output, config.export_format)
    print(f"[cli] Malla generada con Marching Cubes: {output} ({result.triangle_count} triángulos)")
    if not args.no_metadata:
        metadata_path = write_metadata(build_metadata(result, config, output), output)
        print(f"[cli] Metadatos: {metadata_path}")
    return output


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generación de terreno con Marching Cubes en paralelo.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log en nivel DEBUG.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser("generate", help="Genera una malla de terreno y la exporta.")
    add_generate_arguments(generate_parser)
    generate_parser.set_defaults(func=handle_generate)

    return parser


def main(argv: Iterable[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format=LOG_FORMAT)

    try:
        result = args.func(args)
    except (GenerationError, ValueError, OSError) as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1

    if result:
        print(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())

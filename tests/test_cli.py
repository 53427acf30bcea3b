import json

import pytest
import trimesh

from terrain.cli import build_parser, main


def test_generate_writes_mesh_and_metadata(tmp_path, capsys):
    output = tmp_path / "terrain.obj"
    code = main(
        ["generate", "--output", str(output), "--grid-size", "8", "--seed", "3", "--workers", "2", "--noise-scale", "32"]
    )

    assert code == 0
    assert output.exists()
    mesh = trimesh.load(output, force="mesh")
    metadata = json.loads((tmp_path / "terrain.json").read_text())
    assert metadata["faces"] == len(mesh.faces)
    assert metadata["jobs_dispatched"] == 343
    assert metadata["results_collected"] == 343
    assert metadata["params"]["noise_seed"] == 3
    assert "[cli] Malla generada" in capsys.readouterr().out


def test_format_flag_overrides_extension(tmp_path):
    output = tmp_path / "terrain.mesh"
    code = main(
        ["generate", "--output", str(output), "--grid-size", "6", "--noise-scale", "32", "--format", "ply", "--no-metadata"]
    )
    assert code == 0
    assert (tmp_path / "terrain.ply").exists()
    assert not (tmp_path / "terrain.json").exists()


def test_config_in_and_out(tmp_path):
    config_in = tmp_path / "in.json"
    config_in.write_text(json.dumps({"grid_size": 5, "iso_level": 0.45, "noise_scale": 32.0}))
    config_out = tmp_path / "out.json"
    code = main(
        [
            "generate",
            "--output",
            str(tmp_path / "t.stl"),
            "--config-in",
            str(config_in),
            "--config-out",
            str(config_out),
            "--workers",
            "1",
        ]
    )
    assert code == 0
    saved = json.loads(config_out.read_text())
    assert saved["grid_size"] == 5
    assert saved["iso_level"] == 0.45
    assert saved["workers"] == 1
    assert saved["export_format"] == "stl"


def test_unsupported_format_exits_with_error(tmp_path, capsys):
    code = main(["generate", "--output", str(tmp_path / "t.fbx"), "--grid-size", "4"])
    assert code == 1
    assert "[ERROR]" in capsys.readouterr().err


def test_parser_requires_output():
    parser = build_parser()
    args = parser.parse_args(["-v", "generate", "--output", "x.obj"])
    assert args.verbose
    assert args.grid_size is None


@pytest.mark.parametrize("fmt", ["obj", "stl"])
def test_empty_terrain_is_exported(tmp_path, fmt):
    # Con iso 0.0 ninguna esquina queda por debajo: no hay superficie.
    output = tmp_path / f"flat.{fmt}"
    code = main(["generate", "--output", str(output), "--grid-size", "4", "--iso-level", "0.0"])

    assert code == 0
    assert output.exists()
    metadata = json.loads((tmp_path / "flat.json").read_text())
    assert metadata["faces"] == 0
    assert metadata["vertices"] == 0
    assert metadata["results_collected"] == 27

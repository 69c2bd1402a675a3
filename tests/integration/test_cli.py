from __future__ import annotations

from pathlib import Path

import numpy as np
import yaml
from typer.testing import CliRunner

from plydecode.cli.main import app


def _write_ascii_ply(path: Path) -> None:
    vertices = [
        (0.0, 0.0, 0.0, 255, 0, 0),
        (1.0, 0.0, 0.0, 0, 255, 0),
        (0.0, 1.0, 0.0, 0, 0, 255),
    ]
    with open(path, "w", encoding="utf-8") as f:
        f.write("ply\n")
        f.write("format ascii 1.0\n")
        f.write("comment hand written\n")
        f.write(f"element vertex {len(vertices)}\n")
        f.write("property float x\nproperty float y\nproperty float z\n")
        f.write("property uchar red\nproperty uchar green\nproperty uchar blue\n")
        f.write("property char flags\n")
        f.write("element face 1\n")
        f.write("property list uchar int vertex_indices\n")
        f.write("end_header\n")
        for v in vertices:
            f.write(" ".join(str(c) for c in v) + " 1\n")
        f.write("3 0 1 2\n")


def test_cli_info_lists_storage(tmp_path: Path) -> None:
    ply = tmp_path / "tri.ply"
    _write_ascii_ply(ply)

    result = CliRunner().invoke(app, ["info", str(ply)])

    assert result.exit_code == 0, result.output
    assert "format ascii 1.0" in result.output
    assert "comment hand written" in result.output
    assert "element vertex 3" in result.output
    assert "x: float -> float32" in result.output
    assert "flags: char -> unsupported (int8)" in result.output
    assert "vertex_indices: list uchar int -> unsupported" in result.output


def test_cli_decode_to_npz(tmp_path: Path) -> None:
    ply = tmp_path / "tri.ply"
    _write_ascii_ply(ply)
    out = tmp_path / "tri.npz"

    result = CliRunner().invoke(app, ["decode", str(ply), "-o", str(out)])

    assert result.exit_code == 0, result.output
    assert "3 points: positions[float32], colors[uint8]" in result.output
    with np.load(out) as data:
        np.testing.assert_array_equal(
            data["rgb"], np.array([[255, 0, 0], [0, 255, 0], [0, 0, 255]], dtype=np.uint8)
        )
        assert "flags" not in data.files


def test_cli_decode_missing_element_fails(tmp_path: Path) -> None:
    ply = tmp_path / "tri.ply"
    _write_ascii_ply(ply)

    result = CliRunner().invoke(app, ["decode", str(ply), "--element", "edge"])

    assert result.exit_code == 1


def test_cli_decode_rejects_unknown_extension(tmp_path: Path) -> None:
    ply = tmp_path / "tri.ply"
    _write_ascii_ply(ply)

    result = CliRunner().invoke(app, ["decode", str(ply), "-o", str(tmp_path / "tri.csv")])

    assert result.exit_code == 2
    assert not (tmp_path / "tri.csv").exists()


def test_cli_run_with_config(tmp_path: Path) -> None:
    ply = tmp_path / "tri.ply"
    _write_ascii_ply(ply)
    cfg_path = tmp_path / "decode.yaml"
    with open(cfg_path, "w", encoding="utf-8") as f:
        yaml.safe_dump({"input": {"path": ply.name}, "output": {"path": "out/tri.las", "format": "las"}}, f)

    result = CliRunner().invoke(app, ["run", str(cfg_path)])

    assert result.exit_code == 0, result.output
    out_path = tmp_path / "out" / "tri.las"
    assert out_path.exists()

    import laspy

    with laspy.open(out_path) as reader:
        points = reader.read()
        assert len(points.x) == 3
        assert int(points.green[1]) == 255 * 257


def test_cli_run_with_overrides(tmp_path: Path) -> None:
    ply = tmp_path / "tri.ply"
    _write_ascii_ply(ply)
    cfg_path = tmp_path / "decode.yaml"
    with open(cfg_path, "w", encoding="utf-8") as f:
        yaml.safe_dump({"input": {"path": ply.name}}, f)

    override = tmp_path / "override.npz"
    result = CliRunner().invoke(app, ["run", str(cfg_path), "--output", str(override)])
    assert result.exit_code == 0, result.output
    assert override.exists()

    result = CliRunner().invoke(app, ["run", str(cfg_path), "--element", "edge"])
    assert result.exit_code == 1


def test_cli_generate_then_decode(tmp_path: Path) -> None:
    ply = tmp_path / "demo.ply"
    runner = CliRunner()

    result = runner.invoke(app, ["generate", str(ply), "--preset", "plane", "--size", "2"])
    assert result.exit_code == 0, result.output
    assert "Wrote 1681 points" in result.output

    result = runner.invoke(app, ["decode", str(ply)])
    assert result.exit_code == 0, result.output
    assert "1681 points: positions[float32], normals[float32], colors[uint8]" in result.output
    assert "intensity[float32]" in result.output
    assert "label[int32]" in result.output


def test_cli_decode_export_without_positions_fails(tmp_path: Path) -> None:
    ply = tmp_path / "values.ply"
    ply.write_text(
        "ply\nformat ascii 1.0\nelement point 2\nproperty double value\nend_header\n1.5\n2.5\n",
        encoding="ascii",
    )
    out = tmp_path / "values.npz"

    result = CliRunner().invoke(app, ["decode", str(ply), "-e", "point", "-o", str(out)])

    assert result.exit_code == 1
    assert not out.exists()
    assert "Traceback" not in result.output

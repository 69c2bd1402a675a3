from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from ..config import load_config
from ..core.dtypes import dtype_display_name, is_supported, native_dtype
from ..core.errors import PlyDecodeError
from ..core.pointcloud import PointCloud
from ..core.reader import load_point_cloud
from ..core.tokenizer import PlyTokenizer
from ..examples.synthetic import generate_cloud
from ..runtime.builders import OUTPUT_SUFFIXES, build_progress, build_writer, output_config_for
from ..sdk import decode_from_config

app = typer.Typer(help="PLY point-cloud decoding utilities")


def _configure_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, format="[%(levelname)s] %(message)s")
    logging.getLogger("plydecode").setLevel(numeric)


def _summary(cloud: PointCloud) -> str:
    if cloud.is_empty:
        return f"{len(cloud)} points: no attributes"
    parts = []
    for name in ("positions", "normals", "colors"):
        arr = getattr(cloud, name)
        if arr is not None:
            parts.append(f"{name}[{arr.dtype}]")
    for name, arr in cloud.attrs.items():
        parts.append(f"{name}[{arr.dtype}]")
    return f"{len(cloud)} points: " + ", ".join(parts)


@app.command("info")
def info(
    path: Path = typer.Argument(..., exists=True, readable=True, dir_okay=False, help="PLY file to inspect."),
) -> None:
    """Print the header of a PLY file and how each property would be stored."""

    with PlyTokenizer.open(path) as ply:
        if not ply.read_header():
            typer.echo(f"Unable to parse PLY header of {path}", err=True)
            raise typer.Exit(code=1)
        typer.echo(f"format {ply.format} {ply.version}")
        for comment in ply.comments:
            typer.echo(f"comment {comment}")
        for element in ply.elements:
            typer.echo(f"element {element.name} {element.count}")
            for prop in element.properties:
                if prop.is_list:
                    declared = f"list {prop.length_type} {prop.value_type}"
                    stored = "unsupported"
                else:
                    declared = prop.type
                    if is_supported(prop.type):
                        stored = native_dtype(prop.type).value
                    else:
                        stored = f"unsupported ({dtype_display_name(prop.type)})"
                typer.echo(f"  {prop.name}: {declared} -> {stored}")


@app.command("decode")
def decode(
    path: Path = typer.Argument(..., exists=True, readable=True, dir_okay=False, help="PLY file to decode."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Export path (.npz/.las/.laz)."),
    element: str = typer.Option("vertex", "--element", "-e", help="Element to decode."),
    progress: bool = typer.Option(False, "--progress/--no-progress", help="Show a progress bar."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Decode one element of a PLY file and optionally export it."""

    _configure_logging(log_level)
    out_cfg = None
    if output is not None:
        try:
            out_cfg = output_config_for(output)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--output")

    sink = build_progress("bar" if progress else "none", desc=f"Read {path.name}")
    try:
        cloud = load_point_cloud(path.resolve(), progress=sink, element=element)
    except PlyDecodeError as exc:
        typer.echo(f"Decode failed: {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(_summary(cloud))
    if out_cfg is not None:
        try:
            written = build_writer(out_cfg).write(cloud)
        except ValueError as exc:
            typer.echo(f"Export failed: {exc}", err=True)
            raise typer.Exit(code=1)
        typer.echo(f"Wrote {written}")


@app.command("run")
def run(
    config: Path = typer.Argument(..., exists=True, readable=True, help="Path to YAML configuration file."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Override output path (extension sets format)."),
    element: Optional[str] = typer.Option(None, "--element", "-e", help="Override the element to decode."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level (defaults to the config's)."),
) -> None:
    """Decode a PLY file described by a YAML config."""

    cfg = load_config(config)
    _configure_logging(log_level or cfg.log_level)
    if output is not None and output.suffix.lower() not in OUTPUT_SUFFIXES:
        raise typer.BadParameter(f"Unsupported output extension '{output.suffix}'", param_hint="--output")
    try:
        result = decode_from_config(cfg, output=output, element=element)
    except PlyDecodeError as exc:
        typer.echo(f"Decode failed: {exc}", err=True)
        raise typer.Exit(code=1)
    except ValueError as exc:
        typer.echo(f"Export failed: {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(_summary(result.pointcloud))
    if result.output_path is not None:
        typer.echo(f"Wrote {result.output_path}")


@app.command("generate")
def generate(
    output: Path = typer.Argument(..., help="Output PLY path."),
    preset: str = typer.Option("demo", "--preset", help="Synthetic cloud preset (demo, plane, sphere)."),
    size: float = typer.Option(10.0, "--size", help="Scene extent scaling factor."),
    fmt: str = typer.Option("binary_little_endian", "--format", help="ascii, binary_little_endian or binary_big_endian."),
    seed: int = typer.Option(0, "--seed", help="Random seed."),
) -> None:
    """Generate a synthetic PLY point cloud useful for decoding demos."""

    out = output.resolve()
    try:
        n = generate_cloud(preset=preset, size=size, path=out, fmt=fmt, seed=seed)
    except ValueError as exc:
        raise typer.BadParameter(str(exc))
    typer.echo(f"Wrote {n} points to {out}")


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from ..config.schema import OutputConfig
from ..core.exporter import LasWriter, NpzWriter
from ..core.progress import NullProgress, ProgressSink, TqdmProgress

OUTPUT_SUFFIXES = {".npz", ".las", ".laz"}


def build_progress(kind: str, desc: str = "Read PLY") -> ProgressSink:
    if kind == "bar":
        return TqdmProgress(desc=desc)
    if kind == "none":
        return NullProgress()
    raise ValueError(f"Unsupported progress kind: {kind}")


def output_config_for(path: Path, base: Optional[OutputConfig] = None) -> OutputConfig:
    """Derive an output config from a path whose extension selects the format."""
    out = Path(path).resolve()
    ext = out.suffix.lower()
    if ext not in OUTPUT_SUFFIXES:
        raise ValueError(f"Unsupported output extension '{ext}'")
    fmt = ext.lstrip(".")
    compress: Optional[bool] = None
    if fmt == "laz":
        compress = True
    elif fmt == "las":
        compress = False
    point_format = base.point_format if base is not None else 8
    return OutputConfig(path=out, format=fmt, compress=compress, point_format=point_format)


def build_writer(out_cfg: OutputConfig) -> Union[LasWriter, NpzWriter]:
    format_lower = out_cfg.format.lower()
    if format_lower in {"las", "laz"}:
        compress = out_cfg.compress
        if compress is None:
            compress = format_lower == "laz"
        return LasWriter(
            str(out_cfg.path),
            point_format=out_cfg.point_format,
            compress=compress,
        )
    if format_lower == "npz":
        return NpzWriter(str(out_cfg.path))
    raise ValueError(f"Unsupported output format: {out_cfg.format}")

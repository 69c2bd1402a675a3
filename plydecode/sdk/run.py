from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..config import DecodeConfig, load_config
from ..core.pointcloud import PointCloud
from ..core.reader import load_point_cloud
from ..runtime.builders import build_progress, build_writer, output_config_for


@dataclass(frozen=True)
class DecodeRunResult:
    """Summary of a decode driven by a configuration file."""

    pointcloud: PointCloud
    output_path: Optional[Path]
    config: DecodeConfig


def decode_from_config(
    config: Union[str, Path, DecodeConfig],
    *,
    output: Optional[Path] = None,
    element: Optional[str] = None,
) -> DecodeRunResult:
    """Decode a PLY file described by a configuration file or object.

    Parameters
    ----------
    config:
        Path to a YAML file or a pre-loaded :class:`~plydecode.config.schema.DecodeConfig`.
    output:
        Optional override for the exported file. The extension drives the
        format (``.npz``, ``.las`` or ``.laz``).
    element:
        Optional override for the element to decode (default ``vertex``).

    Returns
    -------
    DecodeRunResult
        The decoded point cloud, the written output path (``None`` when no
        output was requested) and the resolved configuration.

    Raises
    ------
    PlyDecodeError
        When the file cannot be decoded; nothing is written in that case.
    """

    cfg = load_config(config) if not isinstance(config, DecodeConfig) else config.model_copy(deep=True)

    if element:
        cfg.input.element = element
    if output is not None:
        cfg.output = output_config_for(output, cfg.output)

    progress = build_progress(cfg.progress, desc=f"Read {cfg.input.path.name}")
    cloud = load_point_cloud(cfg.input.path, progress=progress, element=cfg.input.element)

    output_path: Optional[Path] = None
    if cfg.output is not None:
        writer = build_writer(cfg.output)
        output_path = Path(writer.write(cloud))

    return DecodeRunResult(pointcloud=cloud, output_path=output_path, config=cfg)

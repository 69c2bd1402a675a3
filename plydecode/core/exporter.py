from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional, Tuple
import numpy as np
import pathlib

import laspy  # type: ignore
from .pointcloud import PointCloud
from .utils import get_logger

_log = get_logger()

# LAS ExtraBytes accept every native dtype the decoder produces.
_EXTRA_TYPES = {"uint8", "uint16", "int32", "float32", "float64"}


def _require_positions(cloud: PointCloud) -> np.ndarray:
    if cloud.positions is None:
        raise ValueError("Point cloud has no positions (x, y, z) to export.")
    return cloud.positions


@dataclass
class LasWriter:
    """LAS/LAZ writer using laspy (v2+).

    Colors are scaled to 16 bit, normals and unrecognized attributes go to
    ExtraBytes dimensions. Attributes that match a standard dimension of the
    point format (e.g. ``intensity``) are written into that dimension.
    """
    path: str
    point_format: int = 8
    compress: bool = False
    scale: tuple[float, float, float] = (1e-3, 1e-3, 1e-3)
    offset: Optional[tuple[float, float, float]] = None

    def write(self, cloud: PointCloud) -> pathlib.Path:
        xyz = _require_positions(cloud)
        header, targets = self._header_for(cloud, xyz)
        pts = laspy.ScaleAwarePointRecord.zeros(len(xyz), header=header)

        pts.x = xyz[:, 0].astype(np.float64)
        pts.y = xyz[:, 1].astype(np.float64)
        pts.z = xyz[:, 2].astype(np.float64)

        names = set(pts.point_format.dimension_names)
        if cloud.colors is not None and {"red", "green", "blue"} <= names:
            rgb = cloud.colors.astype(np.uint16)
            if cloud.colors.dtype == np.uint8:
                rgb = rgb * 257  # 0..255 -> 0..65535
            pts.red = rgb[:, 0]
            pts.green = rgb[:, 1]
            pts.blue = rgb[:, 2]

        if cloud.normals is not None:
            nrm = cloud.normals.astype(np.float32, copy=False)
            pts["NormalX"] = nrm[:, 0]
            pts["NormalY"] = nrm[:, 1]
            pts["NormalZ"] = nrm[:, 2]

        for name, dim in targets.items():
            pts[dim] = cloud.attrs[name]

        path = pathlib.Path(self.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with laspy.open(path, mode="w", header=header, do_compress=self.compress) as fh:
            fh.write_points(pts)
        _log.info("Wrote %s (%d points, PF=%d, compress=%s)", path.name, len(xyz), self.point_format, self.compress)
        return path

    def _header_for(self, cloud: PointCloud, xyz: np.ndarray) -> Tuple["laspy.LasHeader", Dict[str, str]]:
        """Build the header and map each exportable attribute to its LAS dimension."""
        pf = laspy.PointFormat(self.point_format)
        hdr = laspy.LasHeader(point_format=pf, version="1.4")
        hdr.scales = self.scale
        if self.offset is None:
            mn = np.min(xyz, axis=0) if len(xyz) else np.zeros(3)
            hdr.offsets = (float(mn[0]), float(mn[1]), float(mn[2]))
        else:
            hdr.offsets = self.offset

        extras: Dict[str, laspy.ExtraBytesParams] = {}
        if cloud.normals is not None:
            for axis in ("NormalX", "NormalY", "NormalZ"):
                extras[axis] = laspy.ExtraBytesParams(name=axis, type="float32")
        standard = set(pf.dimension_names)
        packed = pf.dtype().fields
        targets: Dict[str, str] = {}
        for name, values in cloud.attrs.items():
            if values.ndim != 1:
                _log.warning("Skipping multi-column attribute '%s' in LAS export.", name)
                continue
            if name in ("X", "Y", "Z"):
                continue
            dim = name
            if name in standard:
                field = packed.get(name)
                if field is not None and np.can_cast(values.dtype, field[0], "safe"):
                    targets[name] = name
                    continue
                # Values would be truncated by the standard dimension's type.
                dim = f"ply_{name}"
                _log.info("Exporting attribute '%s' (%s) as extra dimension '%s'.", name, values.dtype, dim)
            if dim in extras:
                continue
            if values.dtype.name not in _EXTRA_TYPES:
                _log.warning("Skipping attribute '%s' with dtype %s in LAS export.", name, values.dtype)
                continue
            extras[dim] = laspy.ExtraBytesParams(name=dim, type=values.dtype.name)
            targets[name] = dim
        for p in extras.values():
            hdr.add_extra_dim(p)
        return hdr, targets


class NpzWriter:
    """Compressed ``.npz`` dump: ``xyz``, ``normal``, ``rgb`` plus extra attributes."""

    RESERVED = ("xyz", "normal", "rgb")

    def __init__(self, path: str) -> None:
        self.path = path

    def write(self, cloud: PointCloud) -> pathlib.Path:
        out: Dict[str, np.ndarray] = {"xyz": _require_positions(cloud)}
        if cloud.normals is not None:
            out["normal"] = cloud.normals
        if cloud.colors is not None:
            out["rgb"] = cloud.colors
        for k, v in cloud.attrs.items():
            if k in self.RESERVED:
                _log.warning("Attribute '%s' clashes with a reserved key; skipping.", k)
                continue
            out[k] = v
        path = pathlib.Path(self.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        np.savez_compressed(path, **out)
        return path

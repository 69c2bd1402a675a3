from __future__ import annotations

from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence, Tuple

import numpy as np
from plyfile import PlyData, PlyElement

_SUPPORTED_DTYPES = ("int8", "uint8", "int16", "uint16", "int32", "uint32", "float32", "float64")


def _grid_plane(size: float, divisions: int, z: float) -> Tuple[np.ndarray, np.ndarray]:
    lin = np.linspace(-size / 2.0, size / 2.0, divisions + 1, dtype=np.float32)
    xv, yv = np.meshgrid(lin, lin, indexing="ij")
    xyz = np.column_stack([xv.ravel(), yv.ravel(), np.full_like(xv.ravel(), z)])
    normals = np.tile(np.array([[0.0, 0.0, 1.0]], dtype=np.float32), (xyz.shape[0], 1))
    return xyz.astype(np.float32), normals


def _sphere(radius: float, n: int, rng: np.random.Generator) -> Tuple[np.ndarray, np.ndarray]:
    v = rng.normal(size=(n, 3))
    v /= np.clip(np.linalg.norm(v, axis=1, keepdims=True), 1e-12, None)
    return (v * radius).astype(np.float32), v.astype(np.float32)


def _height_colors(xyz: np.ndarray) -> np.ndarray:
    z = xyz[:, 2]
    span = float(z.max() - z.min()) if len(z) else 0.0
    t = (z - z.min()) / span if span > 0 else np.zeros_like(z)
    rgb = np.column_stack([t * 255.0, 128.0 * np.ones_like(t), (1.0 - t) * 255.0])
    return np.clip(np.round(rgb), 0, 255).astype(np.uint8)


def write_ply(
    path: Path,
    columns: Mapping[str, np.ndarray],
    fmt: str = "ascii",
    faces: Optional[Sequence[Sequence[int]]] = None,
    comments: Sequence[str] = (),
) -> None:
    """Write one ``vertex`` element (and optional polygon faces) to ``path``.

    Column order is the property order in the header.
    """
    byte_orders = {"ascii": "=", "binary_little_endian": "<", "binary_big_endian": ">"}
    if fmt not in byte_orders:
        raise ValueError(f"Unknown PLY format '{fmt}'.")
    names = list(columns)
    arrays = [np.asarray(columns[k]) for k in names]
    n = len(arrays[0]) if arrays else 0
    for k, a in zip(names, arrays):
        if a.ndim != 1 or len(a) != n:
            raise ValueError(f"Column '{k}' must be 1D with {n} values.")
        if a.dtype.name not in _SUPPORTED_DTYPES:
            raise ValueError(f"Column '{k}' has unsupported dtype {a.dtype}.")

    vertex = np.empty(n, dtype=[(k, a.dtype) for k, a in zip(names, arrays)])
    for k, a in zip(names, arrays):
        vertex[k] = a
    elements = [PlyElement.describe(vertex, "vertex")]
    if faces is not None:
        face = np.empty(len(faces), dtype=[("vertex_indices", "O")])
        for i, poly in enumerate(faces):
            face["vertex_indices"][i] = np.asarray(poly, dtype=np.int32)
        elements.append(PlyElement.describe(
            face, "face", len_types={"vertex_indices": "u1"}, val_types={"vertex_indices": "i4"},
        ))

    path.parent.mkdir(parents=True, exist_ok=True)
    PlyData(
        elements, text=(fmt == "ascii"), byte_order=byte_orders[fmt], comments=list(comments),
    ).write(str(path))


def generate_cloud(preset: str, size: float, path: Path, fmt: str = "ascii", seed: int = 0) -> int:
    """Write a synthetic point cloud with normals, colors and extra attributes.

    Returns the number of points written.
    """
    rng = np.random.default_rng(seed)
    preset = preset.lower()
    if preset == "plane":
        xyz, normals = _grid_plane(size=size, divisions=40, z=0.0)
    elif preset == "sphere":
        xyz, normals = _sphere(radius=size / 2.0, n=2000, rng=rng)
    elif preset == "demo":
        plane_xyz, plane_n = _grid_plane(size=size, divisions=30, z=0.0)
        ball_xyz, ball_n = _sphere(radius=size * 0.2, n=1500, rng=rng)
        ball_xyz = ball_xyz + np.array([0.0, 0.0, size * 0.25], dtype=np.float32)
        xyz = np.vstack([plane_xyz, ball_xyz])
        normals = np.vstack([plane_n, ball_n])
    else:
        raise ValueError(f"Unknown synthetic cloud preset '{preset}'.")

    rgb = _height_colors(xyz)
    columns: Dict[str, np.ndarray] = {
        "x": xyz[:, 0], "y": xyz[:, 1], "z": xyz[:, 2],
        "nx": normals[:, 0], "ny": normals[:, 1], "nz": normals[:, 2],
        "red": rgb[:, 0], "green": rgb[:, 1], "blue": rgb[:, 2],
        "intensity": rng.random(len(xyz)).astype(np.float32),
        "label": (xyz[:, 2] > 1e-6).astype(np.int32),
    }
    write_ply(path, columns, fmt=fmt, comments=[f"synthetic {preset} cloud"])
    return len(xyz)

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple
import numpy as np

from .errors import GroupDtypeMismatchError, GroupSizeMismatchError
from .pointcloud import PointCloud
from .slot import AttributeSlot

POSITION_TRIPLET: Tuple[str, str, str] = ("x", "y", "z")
NORMAL_TRIPLET: Tuple[str, str, str] = ("nx", "ny", "nz")
COLOR_TRIPLET: Tuple[str, str, str] = ("red", "green", "blue")


@dataclass
class AssembledAttributes:
    positions: Optional[np.ndarray] = None
    normals: Optional[np.ndarray] = None
    colors: Optional[np.ndarray] = None
    attrs: Dict[str, np.ndarray] = field(default_factory=dict)

    def apply_to(self, pointcloud: PointCloud) -> None:
        pointcloud.clear()
        pointcloud.positions = self.positions
        pointcloud.normals = self.normals
        pointcloud.colors = self.colors
        pointcloud.attrs = dict(self.attrs)


def concat_columns(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> np.ndarray:
    """Stack three 1D columns into an (N, 3) array, keeping their dtype."""
    if a.ndim != 1 or b.ndim != 1 or c.ndim != 1:
        raise GroupSizeMismatchError("Read PLY failed: only 1D attrs are supported.")
    if a.shape[0] != b.shape[0] or a.shape[0] != c.shape[0]:
        raise GroupSizeMismatchError("Read PLY failed: size mismatch in base attrs.")
    if a.dtype != b.dtype or a.dtype != c.dtype:
        raise GroupDtypeMismatchError("Read PLY failed: datatype mismatch in base attrs.")
    out = np.empty((a.shape[0], 3), dtype=a.dtype)
    out[:, 0] = a
    out[:, 1] = b
    out[:, 2] = c
    return out


def _merge_triplet(slots: Dict[str, AttributeSlot], names: Tuple[str, str, str]) -> Optional[np.ndarray]:
    if not all(n in slots for n in names):
        return None
    merged = concat_columns(*(slots[n].data for n in names))
    for n in names:
        del slots[n]
    return merged


def assemble_attributes(slots: Dict[str, AttributeSlot]) -> AssembledAttributes:
    """Merge complete triplets and pass every other slot through by name.

    Consumes ``slots``: merged members are removed from the mapping. Partial
    triplets are not merged; their members stay single-column attributes.
    """
    out = AssembledAttributes()
    out.positions = _merge_triplet(slots, POSITION_TRIPLET)
    out.normals = _merge_triplet(slots, NORMAL_TRIPLET)
    out.colors = _merge_triplet(slots, COLOR_TRIPLET)
    for name, slot in slots.items():
        out.attrs[name] = slot.data
    return out

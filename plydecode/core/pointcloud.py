from __future__ import annotations
from dataclasses import dataclass, field
import numpy as np
from typing import Dict, Optional

@dataclass
class PointCloud:
    """Decoded point cloud: recognized geometry plus arbitrary named attributes."""
    positions: Optional[np.ndarray] = None   # (N, 3)
    normals: Optional[np.ndarray] = None     # (N, 3)
    colors: Optional[np.ndarray] = None      # (N, 3)
    attrs: Dict[str, np.ndarray] = field(default_factory=dict)

    def __post_init__(self) -> None:
        n = len(self)
        for k, v in (("normals", self.normals), ("colors", self.colors)):
            if v is not None and self.positions is not None and v.shape[0] != n:
                raise ValueError(f"Attribute '{k}' length {v.shape[0]} != {n}")

    def __len__(self) -> int:
        if self.positions is not None:
            return int(self.positions.shape[0])
        for v in self.attrs.values():
            return int(v.shape[0])
        return 0

    @property
    def is_empty(self) -> bool:
        return self.positions is None and self.normals is None and self.colors is None and not self.attrs

    def clear(self) -> None:
        self.positions = None
        self.normals = None
        self.colors = None
        self.attrs = {}

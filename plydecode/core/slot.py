from __future__ import annotations
from dataclasses import dataclass, field
import numpy as np

from .dtypes import NativeDtype
from .errors import CountMismatchError, StreamReadError


@dataclass
class AttributeSlot:
    """Fixed-capacity, typed column backing one PLY property during decode."""
    name: str
    dtype: NativeDtype
    capacity: int
    cursor: int = 0
    buffer: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.capacity < 0:
            raise CountMismatchError(
                f"Cannot allocate property '{self.name}' with negative size {self.capacity}"
            )
        self.buffer = np.zeros((self.capacity,), dtype=self.dtype.numpy)

    def write(self, value: float) -> int:
        """Store ``value`` at the cursor and return the advanced cursor."""
        if self.cursor >= self.capacity:
            raise CountMismatchError(
                f"Property '{self.name}' received more than {self.capacity} values"
            )
        try:
            self.buffer[self.cursor] = value
        except (ValueError, OverflowError) as exc:
            raise StreamReadError(
                f"Property '{self.name}' value {value!r} does not fit {self.dtype.value}"
            ) from exc
        self.cursor += 1
        return self.cursor

    @property
    def is_full(self) -> bool:
        return self.cursor == self.capacity

    @property
    def data(self) -> np.ndarray:
        # Only the written prefix is meaningful.
        return self.buffer[: self.cursor]

    def __len__(self) -> int:
        return self.cursor


def create_slot(name: str, dtype: NativeDtype, capacity: int) -> AttributeSlot:
    return AttributeSlot(name=name, dtype=dtype, capacity=int(capacity))

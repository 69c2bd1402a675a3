"""Mapping from PLY property type tags to the native dtypes we store.

Only five native types are supported. Tags outside that set are rejected,
never widened or coerced.
"""

from __future__ import annotations
from enum import Enum
from typing import Dict, Optional

import numpy as np

from .errors import UnsupportedTypeError


class NativeDtype(Enum):
    UINT8 = "uint8"
    UINT16 = "uint16"
    INT32 = "int32"
    FLOAT32 = "float32"
    FLOAT64 = "float64"

    @property
    def numpy(self) -> np.dtype:
        return np.dtype(self.value)


LIST_TAG = "list"

# Aliases for the same width/signedness resolve to the same native type.
_TAG_TO_NATIVE: Dict[str, NativeDtype] = {
    "uchar": NativeDtype.UINT8,
    "uint8": NativeDtype.UINT8,
    "ushort": NativeDtype.UINT16,
    "uint16": NativeDtype.UINT16,
    "int": NativeDtype.INT32,
    "int32": NativeDtype.INT32,
    "float": NativeDtype.FLOAT32,
    "float32": NativeDtype.FLOAT32,
    "double": NativeDtype.FLOAT64,
    "float64": NativeDtype.FLOAT64,
}

_DISPLAY_NAMES: Dict[str, str] = {
    "char": "int8",
    "int8": "int8",
    "uchar": "uint8",
    "uint8": "uint8",
    "short": "int16",
    "int16": "int16",
    "ushort": "uint16",
    "uint16": "uint16",
    "int": "int32",
    "int32": "int32",
    "uint": "uint32",
    "uint32": "uint32",
    "float": "float32",
    "float32": "float32",
    "double": "float64",
    "float64": "float64",
    LIST_TAG: LIST_TAG,
}


def native_dtype(type_tag: str) -> Optional[NativeDtype]:
    """Return the native dtype for ``type_tag``, or ``None`` if unsupported."""
    if type_tag == LIST_TAG:
        return None
    return _TAG_TO_NATIVE.get(type_tag)


def is_supported(type_tag: str) -> bool:
    return native_dtype(type_tag) is not None


def dtype_display_name(type_tag: str) -> str:
    return _DISPLAY_NAMES.get(type_tag, "unknown")


def require_native_dtype(name: str, type_tag: str) -> NativeDtype:
    dtype = native_dtype(type_tag)
    if dtype is None:
        raise UnsupportedTypeError(name, dtype_display_name(type_tag))
    return dtype

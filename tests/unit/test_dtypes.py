import numpy as np
import pytest

from plydecode.core.dtypes import (
    NativeDtype,
    dtype_display_name,
    is_supported,
    native_dtype,
    require_native_dtype,
)
from plydecode.core.errors import UnsupportedTypeError


@pytest.mark.parametrize(
    "tag, expected",
    [
        ("uchar", NativeDtype.UINT8),
        ("uint8", NativeDtype.UINT8),
        ("ushort", NativeDtype.UINT16),
        ("uint16", NativeDtype.UINT16),
        ("int", NativeDtype.INT32),
        ("int32", NativeDtype.INT32),
        ("float", NativeDtype.FLOAT32),
        ("float32", NativeDtype.FLOAT32),
        ("double", NativeDtype.FLOAT64),
        ("float64", NativeDtype.FLOAT64),
    ],
)
def test_supported_tags_map_to_native_types(tag: str, expected: NativeDtype) -> None:
    assert native_dtype(tag) is expected
    assert is_supported(tag)


@pytest.mark.parametrize("tag", ["char", "int8", "short", "int16", "uint", "uint32", "list", "half", ""])
def test_other_tags_are_rejected_not_widened(tag: str) -> None:
    assert native_dtype(tag) is None
    assert not is_supported(tag)


def test_native_dtype_exposes_numpy_dtype() -> None:
    assert NativeDtype.UINT8.numpy == np.dtype(np.uint8)
    assert NativeDtype.INT32.numpy == np.dtype(np.int32)
    assert NativeDtype.FLOAT64.numpy == np.dtype(np.float64)


def test_require_native_dtype_raises_with_display_name() -> None:
    with pytest.raises(UnsupportedTypeError) as info:
        require_native_dtype("vertex_indices", "list")
    assert info.value.name == "vertex_indices"
    assert info.value.type_name == "list"

    with pytest.raises(UnsupportedTypeError) as info:
        require_native_dtype("flags", "char")
    assert info.value.type_name == "int8"


def test_display_names() -> None:
    assert dtype_display_name("uchar") == "uint8"
    assert dtype_display_name("double") == "float64"
    assert dtype_display_name("no-such-type") == "unknown"

from __future__ import annotations


class PlyDecodeError(Exception):
    """Base class for all failures raised while decoding a PLY element."""


class UnsupportedTypeError(PlyDecodeError, ValueError):
    """A property's declared type is outside the supported native set.

    Never fatal during a decode: the property is skipped with a warning.
    """

    def __init__(self, name: str, type_name: str) -> None:
        super().__init__(f"property '{name}' has unsupported datatype '{type_name}'")
        self.name = name
        self.type_name = type_name


class CountMismatchError(PlyDecodeError, ValueError):
    """Promised occurrence count of a property disagrees with its element."""


class GroupInconsistencyError(PlyDecodeError, ValueError):
    """Members of a triplet (x/y/z, nx/ny/nz, red/green/blue) cannot be merged."""


class GroupSizeMismatchError(GroupInconsistencyError):
    pass


class GroupDtypeMismatchError(GroupInconsistencyError):
    pass


class StreamReadError(PlyDecodeError, RuntimeError):
    """The underlying pass over the file reported an I/O or structural error."""


class ElementNotFoundError(PlyDecodeError, LookupError):
    def __init__(self, element: str) -> None:
        super().__init__(f"element '{element}' not found")
        self.element = element

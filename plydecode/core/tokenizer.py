"""PLY tokenizer with a per-value callback interface, backed by plyfile.

``read_header`` loads the document with :func:`plyfile.PlyData.read` and
exposes its header as :class:`PlyElement`/:class:`PlyProperty` records.
Callers then register a read callback per property, and ``read`` walks every
element once, invoking each callback for every value of its property in file
order. The tokenizer knows nothing about what the values mean.

Usage:
    with PlyTokenizer.open("cloud.ply") as ply:
        if not ply.read_header():
            ...
        n = ply.set_read_cb("vertex", "x", on_value, state, 0)
        ok = ply.read()
"""

from __future__ import annotations
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, Callable, List, Optional, Tuple, Union

import numpy as np
import plyfile

from .dtypes import LIST_TAG
from .utils import get_logger

_log = get_logger()

ReadCallback = Callable[["PlyArgument"], bool]

# numpy dtype name -> PLY type tag as written in headers
_PLY_TYPE_TAGS = {
    "int8": "char",
    "uint8": "uchar",
    "int16": "short",
    "uint16": "ushort",
    "int32": "int",
    "uint32": "uint",
    "float32": "float",
    "float64": "double",
}


def _type_tag(code: str) -> str:
    name = np.dtype(code).name
    return _PLY_TYPE_TAGS.get(name, name)


@dataclass
class PlyProperty:
    name: str
    type: str                       # scalar tag, or "list"
    length_type: Optional[str] = None
    value_type: Optional[str] = None
    callback: Optional[ReadCallback] = field(default=None, repr=False)
    pdata: Any = field(default=None, repr=False)
    idata: int = 0

    @property
    def is_list(self) -> bool:
        return self.type == LIST_TAG


@dataclass
class PlyElement:
    name: str
    count: int
    properties: List[PlyProperty] = field(default_factory=list)

    def find_property(self, name: str) -> Optional[PlyProperty]:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None


def _header_element(element: "plyfile.PlyElement") -> PlyElement:
    props = []
    for prop in element.properties:
        if isinstance(prop, plyfile.PlyListProperty):
            props.append(PlyProperty(
                prop.name, LIST_TAG,
                length_type=_type_tag(prop.len_dtype),
                value_type=_type_tag(prop.val_dtype),
            ))
        else:
            props.append(PlyProperty(prop.name, _type_tag(prop.val_dtype)))
    return PlyElement(element.name, element.count, props)


class PlyArgument:
    """State handed to read callbacks; one instance is reused for a whole pass."""
    __slots__ = ("element", "property", "instance_index", "length", "value_index", "value", "_pdata", "_idata")

    def __init__(self) -> None:
        self.element: Optional[PlyElement] = None
        self.property: Optional[PlyProperty] = None
        self.instance_index = 0
        self.length = 1
        self.value_index = 0        # -1 while delivering a list length
        self.value = 0.0
        self._pdata: Any = None
        self._idata = 0

    @property
    def user_data(self) -> Tuple[Any, int]:
        return self._pdata, self._idata

    def bind(self, prop: PlyProperty) -> None:
        self.property = prop
        self._pdata = prop.pdata
        self._idata = prop.idata


class PlyTokenizer:
    def __init__(self, stream: BinaryIO, name: str = "<stream>", owns_stream: bool = False) -> None:
        self.stream = stream
        self.name = name
        self._owns_stream = owns_stream
        self.format: Optional[str] = None
        self.version: Optional[str] = None
        self.elements: List[PlyElement] = []
        self.comments: List[str] = []
        self.obj_info: List[str] = []
        self._document: Optional[plyfile.PlyData] = None

    @classmethod
    def open(cls, path: Union[str, Path]) -> "PlyTokenizer":
        path = Path(path)
        return cls(open(path, "rb"), name=str(path), owns_stream=True)

    def close(self) -> None:
        if self._owns_stream and not self.stream.closed:
            self.stream.close()

    def __enter__(self) -> "PlyTokenizer":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def read_header(self) -> bool:
        """Load the document; False if the header or the element data is malformed."""
        try:
            document = plyfile.PlyData.read(self.stream, mmap=False)
        except (plyfile.PlyParseError, OSError, UnicodeDecodeError, ValueError, OverflowError) as exc:
            _log.warning("Read PLY failed: unable to parse %s: %s", self.name, exc)
            return False
        if document.text:
            self.format = "ascii"
        else:
            order = document.byte_order
            if order == "=":
                order = "<" if sys.byteorder == "little" else ">"
            self.format = "binary_little_endian" if order == "<" else "binary_big_endian"
        self.version = "1.0"
        self.comments = [c.strip() for c in document.comments]
        self.obj_info = [c.strip() for c in document.obj_info]
        self.elements = [_header_element(el) for el in document.elements]
        self._document = document
        return True

    def find_element(self, name: str) -> Optional[PlyElement]:
        for element in self.elements:
            if element.name == name:
                return element
        return None

    def set_read_cb(
        self,
        element_name: str,
        property_name: str,
        callback: ReadCallback,
        pdata: Any = None,
        idata: int = 0,
    ) -> int:
        """Bind ``callback`` to a property; returns the number of instances, 0 if unknown."""
        element = self.find_element(element_name)
        if element is None:
            return 0
        prop = element.find_property(property_name)
        if prop is None:
            return 0
        prop.callback = callback
        prop.pdata = pdata
        prop.idata = idata
        return element.count

    def read(self) -> bool:
        if self._document is None:
            _log.warning("Read PLY failed: header of %s has not been read.", self.name)
            return False
        arg = PlyArgument()
        for element, source in zip(self.elements, self._document.elements):
            arg.element = element
            if not self._read_element(element, source, arg):
                _log.warning("Read PLY aborted by callback in element '%s'.", element.name)
                return False
        return True

    @staticmethod
    def _read_element(element: PlyElement, source: "plyfile.PlyElement", arg: PlyArgument) -> bool:
        columns = []
        for prop in element.properties:
            if prop.callback is None:
                continue
            if prop.is_list:
                columns.append((prop, source[prop.name]))
            else:
                # Values travel as doubles, one per callback.
                columns.append((prop, np.asarray(source[prop.name], dtype=np.float64).tolist()))
        if not columns:
            return True

        for i in range(element.count):
            arg.instance_index = i
            for prop, values in columns:
                arg.bind(prop)
                if not prop.is_list:
                    arg.length = 1
                    arg.value_index = 0
                    arg.value = values[i]
                    if not prop.callback(arg):
                        return False
                    continue
                items = np.asarray(values[i], dtype=np.float64).tolist()
                arg.length = len(items)
                arg.value_index = -1
                arg.value = float(len(items))
                if not prop.callback(arg):
                    return False
                for j, item in enumerate(items):
                    arg.value_index = j
                    arg.value = item
                    if not prop.callback(arg):
                        return False
        return True

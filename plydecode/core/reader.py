"""Decode a PLY element into a :class:`PointCloud`.

``read_point_cloud`` is the boolean entry point: it logs the reason for a
failure and leaves the target cloud untouched. ``load_point_cloud`` and
``decode_element`` raise :class:`PlyDecodeError` subclasses instead.
"""

from __future__ import annotations
from pathlib import Path
from typing import BinaryIO, Optional, Union

from .assembler import assemble_attributes
from .errors import ElementNotFoundError, PlyDecodeError, StreamReadError
from .pointcloud import PointCloud
from .progress import ProgressSink
from .session import DecodeSession
from .tokenizer import PlyTokenizer
from .utils import get_logger

_log = get_logger()

Source = Union[str, Path, BinaryIO]


def _open_tokenizer(source: Source) -> PlyTokenizer:
    if isinstance(source, (str, Path)):
        return PlyTokenizer.open(source)
    return PlyTokenizer(source, name=getattr(source, "name", "<stream>"))


def decode_element(
    tokenizer: PlyTokenizer,
    pointcloud: PointCloud,
    progress: Optional[ProgressSink] = None,
    element: str = "vertex",
) -> None:
    """Decode ``element`` from a tokenizer whose header has been read.

    ``pointcloud`` is replaced wholesale only after every step succeeded.
    """
    ply_element = tokenizer.find_element(element)
    if ply_element is None:
        raise ElementNotFoundError(element)

    session = DecodeSession(ply_element, progress)
    session.register_all(tokenizer)
    session.run(tokenizer)

    assembled = assemble_attributes(session.take_slots())
    assembled.apply_to(pointcloud)
    session.finish_progress()
    _log.debug(
        "Decoded %d %s records (%d attrs, skipped %s)",
        ply_element.count, element, len(assembled.attrs), session.skipped or "none",
    )


def load_point_cloud(
    source: Source,
    progress: Optional[ProgressSink] = None,
    element: str = "vertex",
) -> PointCloud:
    try:
        tokenizer = _open_tokenizer(source)
    except OSError as exc:
        raise StreamReadError(f"Read PLY failed: unable to open file: {source}.") from exc
    with tokenizer:
        if not tokenizer.read_header():
            raise StreamReadError("Read PLY failed: unable to parse header.")
        pointcloud = PointCloud()
        decode_element(tokenizer, pointcloud, progress=progress, element=element)
    return pointcloud


def read_point_cloud(
    source: Source,
    pointcloud: PointCloud,
    progress: Optional[ProgressSink] = None,
    element: str = "vertex",
) -> bool:
    """Populate ``pointcloud`` from a PLY file or binary stream; False on failure."""
    try:
        decoded = load_point_cloud(source, progress=progress, element=element)
    except PlyDecodeError as exc:
        _log.warning("%s", exc)
        return False
    pointcloud.clear()
    pointcloud.positions = decoded.positions
    pointcloud.normals = decoded.normals
    pointcloud.colors = decoded.colors
    pointcloud.attrs = decoded.attrs
    return True

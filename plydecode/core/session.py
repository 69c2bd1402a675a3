from __future__ import annotations
from typing import Dict, List, Optional, Tuple

from .callback import read_attr_callback
from .dtypes import NativeDtype, require_native_dtype
from .errors import CountMismatchError, StreamReadError, UnsupportedTypeError
from .progress import NullProgress, ProgressSink
from .slot import AttributeSlot, create_slot
from .tokenizer import PlyElement, PlyProperty, PlyTokenizer
from .utils import get_logger

_log = get_logger()


def classify_properties(element: PlyElement) -> Tuple[List[Tuple[PlyProperty, NativeDtype]], List[UnsupportedTypeError]]:
    """Split an element's properties into (supported with dtype, rejections)."""
    supported: List[Tuple[PlyProperty, NativeDtype]] = []
    rejected: List[UnsupportedTypeError] = []
    for prop in element.properties:
        try:
            supported.append((prop, require_native_dtype(prop.name, prop.type)))
        except UnsupportedTypeError as exc:
            rejected.append(exc)
    return supported, rejected


class DecodeSession:
    """Slots and dispatch tables for decoding one element.

    ``slots_by_id`` is what the value callback indexes into; ``slots_by_name``
    is only consulted when assembling attributes.
    """

    def __init__(self, element: PlyElement, progress: Optional[ProgressSink] = None) -> None:
        self.element_name = element.name
        self.total_size = element.count
        self.element = element
        self.progress: ProgressSink = progress if progress is not None else NullProgress()
        self.slots_by_name: Dict[str, AttributeSlot] = {}
        self.slots_by_id: List[AttributeSlot] = []
        self.skipped: List[str] = []
        self._progress_failed = False

    def register_all(self, tokenizer: PlyTokenizer) -> None:
        supported, rejected = classify_properties(self.element)
        for exc in rejected:
            _log.warning("Read PLY warning: %s; skipping it.", exc)
            self.skipped.append(exc.name)
        for prop, dtype in supported:
            if prop.name in self.slots_by_name:
                _log.warning("Read PLY warning: skipping duplicate property %s.", prop.name)
                self.skipped.append(prop.name)
                continue
            self.register(tokenizer, prop.name, dtype)

    def register(self, tokenizer: PlyTokenizer, name: str, dtype: NativeDtype) -> AttributeSlot:
        slot_id = len(self.slots_by_id)
        promised = tokenizer.set_read_cb(self.element_name, name, read_attr_callback, self, slot_id)
        if promised != self.total_size:
            raise CountMismatchError(
                f"Total size of property {name} ({promised}) is not equal to "
                f"size of {self.element_name} ({self.total_size})."
            )
        slot = create_slot(name, dtype, self.total_size)
        self.slots_by_name[name] = slot
        self.slots_by_id.append(slot)
        return slot

    def run(self, tokenizer: PlyTokenizer) -> None:
        self._notify("set_total", self.total_size)
        if not tokenizer.read():
            raise StreamReadError(f"Read PLY failed: unable to read file: {tokenizer.name}.")
        for slot in self.slots_by_id:
            if not slot.is_full:
                raise CountMismatchError(
                    f"Property {slot.name} received {slot.cursor} of {slot.capacity} values."
                )

    def report_progress(self, count: int) -> None:
        self._notify("update", count)

    def finish_progress(self) -> None:
        self._notify("finish")

    def _notify(self, method: str, *args: int) -> None:
        # Progress is a side channel; a failing sink never fails the decode.
        if self._progress_failed:
            return
        try:
            getattr(self.progress, method)(*args)
        except Exception as exc:
            self._progress_failed = True
            _log.warning("Progress reporting disabled after error in %s: %s", method, exc)

    def take_slots(self) -> Dict[str, AttributeSlot]:
        slots = self.slots_by_name
        self.slots_by_name = {}
        self.slots_by_id = []
        return slots

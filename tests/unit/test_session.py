import io
from types import SimpleNamespace

import numpy as np
import pytest

from plydecode.core.callback import read_attr_callback
from plydecode.core.dtypes import NativeDtype
from plydecode.core.errors import CountMismatchError, StreamReadError
from plydecode.core.session import DecodeSession, classify_properties
from plydecode.core.tokenizer import PlyElement, PlyProperty, PlyTokenizer


def ascii_tokenizer(header_props: list[str], rows: list[str]) -> PlyTokenizer:
    text = "ply\nformat ascii 1.0\n" + f"element vertex {len(rows)}\n"
    text += "".join(f"property {p}\n" for p in header_props)
    text += "end_header\n" + "".join(r + "\n" for r in rows)
    ply = PlyTokenizer(io.BytesIO(text.encode("ascii")))
    assert ply.read_header()
    return ply


class RecordingProgress:
    def __init__(self) -> None:
        self.total = None
        self.updates: list[int] = []
        self.finished = False

    def set_total(self, total: int) -> None:
        self.total = total

    def update(self, count: int) -> None:
        self.updates.append(count)

    def finish(self) -> None:
        self.finished = True


class ExplodingProgress(RecordingProgress):
    def update(self, count: int) -> None:
        raise RuntimeError("display went away")


def test_classify_separates_unsupported_properties() -> None:
    element = PlyElement(
        "vertex", 1,
        [
            PlyProperty("x", "float"),
            PlyProperty("flags", "char"),
            PlyProperty("idx", "list", "uchar", "int"),
            PlyProperty("t", "double"),
        ],
    )
    supported, rejected = classify_properties(element)
    assert [(p.name, d) for p, d in supported] == [("x", NativeDtype.FLOAT32), ("t", NativeDtype.FLOAT64)]
    assert [e.name for e in rejected] == ["flags", "idx"]


def test_registration_assigns_dense_ids_and_fills_slots() -> None:
    ply = ascii_tokenizer(
        ["float x", "char flags", "uchar red", "list uchar int idx", "int label"],
        ["0.5 1 200 2 7 8 -4", "1.5 2 100 0 12"],
    )
    session = DecodeSession(ply.find_element("vertex"))
    session.register_all(ply)

    assert [s.name for s in session.slots_by_id] == ["x", "red", "label"]
    assert set(session.slots_by_name) == {"x", "red", "label"}
    assert session.skipped == ["flags", "idx"]

    session.run(ply)
    for slot in session.slots_by_id:
        assert slot.cursor == slot.capacity == 2
    np.testing.assert_array_equal(session.slots_by_name["x"].data, np.array([0.5, 1.5], dtype=np.float32))
    np.testing.assert_array_equal(session.slots_by_name["red"].data, np.array([200, 100], dtype=np.uint8))
    np.testing.assert_array_equal(session.slots_by_name["label"].data, np.array([-4, 12], dtype=np.int32))


def test_count_mismatch_is_detected_at_registration() -> None:
    class LyingTokenizer:
        def set_read_cb(self, element, prop, callback, pdata, idata) -> int:
            return 2

    element = PlyElement("vertex", 3, [PlyProperty("x", "float")])
    session = DecodeSession(element)
    with pytest.raises(CountMismatchError):
        session.register_all(LyingTokenizer())
    assert session.slots_by_id == []


def test_duplicate_property_names_keep_the_first() -> None:
    class Registry:
        def __init__(self) -> None:
            self.bound: list[tuple[str, int]] = []

        def set_read_cb(self, element_name, prop, callback, pdata, idata) -> int:
            self.bound.append((prop, idata))
            return 1

    element = PlyElement("vertex", 1, [PlyProperty("x", "float"), PlyProperty("x", "double")])
    registry = Registry()
    session = DecodeSession(element)
    session.register_all(registry)
    assert registry.bound == [("x", 0)]
    assert len(session.slots_by_id) == 1
    assert session.slots_by_id[0].dtype is NativeDtype.FLOAT32
    assert session.skipped == ["x"]


def test_progress_is_reported_every_thousand_values() -> None:
    rows = [str(i) for i in range(2500)]
    ply = ascii_tokenizer(["int i"], rows)
    progress = RecordingProgress()
    session = DecodeSession(ply.find_element("vertex"), progress)
    session.register_all(ply)
    session.run(ply)
    assert progress.total == 2500
    assert progress.updates == [1000, 2000]
    session.finish_progress()
    assert progress.finished


def test_failing_progress_sink_does_not_fail_decode() -> None:
    rows = [str(i) for i in range(1200)]
    ply = ascii_tokenizer(["float v"], rows)
    session = DecodeSession(ply.find_element("vertex"), ExplodingProgress())
    session.register_all(ply)
    session.run(ply)
    assert session.slots_by_name["v"].is_full
    session.finish_progress()


def test_stream_failure_raises() -> None:
    class FailingTokenizer:
        name = "broken.ply"

        def set_read_cb(self, element_name, prop, callback, pdata, idata) -> int:
            return 3

        def read(self) -> bool:
            return False

    session = DecodeSession(PlyElement("vertex", 3, [PlyProperty("x", "float")]))
    session.register_all(FailingTokenizer())
    with pytest.raises(StreamReadError):
        session.run(FailingTokenizer())


def test_short_pass_leaves_slots_unfilled() -> None:
    class ShortTokenizer:
        def set_read_cb(self, element_name, prop, callback, pdata, idata) -> int:
            self.callback, self.user_data = callback, (pdata, idata)
            return 3

        def read(self) -> bool:
            return self.callback(SimpleNamespace(user_data=self.user_data, value=1.0))

    ply = ShortTokenizer()
    session = DecodeSession(PlyElement("vertex", 3, [PlyProperty("x", "float")]))
    session.register_all(ply)
    with pytest.raises(CountMismatchError):
        session.run(ply)


def test_callback_writes_into_slot_by_id() -> None:
    element = PlyElement("vertex", 2, [PlyProperty("a", "double"), PlyProperty("b", "ushort")])

    class Registry:
        def set_read_cb(self, element_name, prop, callback, pdata, idata) -> int:
            return 2

    session = DecodeSession(element)
    session.register_all(Registry())
    assert read_attr_callback(SimpleNamespace(user_data=(session, 1), value=65535.0))
    assert read_attr_callback(SimpleNamespace(user_data=(session, 0), value=0.125))
    assert session.slots_by_id[1].data.tolist() == [65535]
    assert session.slots_by_id[0].data.tolist() == [0.125]


def test_take_slots_hands_over_ownership() -> None:
    ply = ascii_tokenizer(["float x"], ["1"])
    session = DecodeSession(ply.find_element("vertex"))
    session.register_all(ply)
    session.run(ply)
    slots = session.take_slots()
    assert list(slots) == ["x"]
    assert session.slots_by_name == {} and session.slots_by_id == []

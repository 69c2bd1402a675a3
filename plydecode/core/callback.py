from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .session import DecodeSession
    from .tokenizer import PlyArgument

PROGRESS_INTERVAL = 1000


def read_attr_callback(argument: "PlyArgument") -> bool:
    """Tokenizer callback: store one scalar into the slot registered under its id."""
    session, slot_id = argument.user_data
    slot = session.slots_by_id[slot_id]
    cursor = slot.write(argument.value)
    if cursor % PROGRESS_INTERVAL == 0:
        session.report_progress(cursor)
    return True

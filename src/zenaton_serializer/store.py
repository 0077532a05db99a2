"""Reference store shared by the encoder and decoder.

The store is an append-only table addressed by dense integer slots. During
encoding it maps object identities to slots; during decoding it caches the
value materialised for each slot. A store lives for exactly one encode or
decode call and is never reused.
"""

from __future__ import annotations

import re
from typing import Any

from zenaton_serializer.errors import DanglingReferenceError

ID_PREFIX = "@zenaton#"

_REFERENCE_RE = re.compile(re.escape(ID_PREFIX) + r"([0-9]+)")


def make_reference(slot: int) -> str:
    """Return the reference token naming `slot`."""

    if slot < 0:
        raise ValueError("slot must be a non-negative integer")
    return f"{ID_PREFIX}{slot}"


def parse_reference(value: object) -> int | None:
    """Return the slot named by `value`, or None when it is not a reference token."""

    if not isinstance(value, str):
        return None
    match = _REFERENCE_RE.fullmatch(value)
    if match is None:
        return None
    return int(match.group(1))


def is_reference(value: object) -> bool:
    return parse_reference(value) is not None


class ReferenceStore:
    """Per-call bookkeeping for slot assignment and slot resolution."""

    def __init__(self, entries: dict[int, Any] | None = None) -> None:
        self._entries: dict[int, Any] = dict(entries or {})
        # Encoding: id(value) -> slot. Values are pinned in `_pinned` so that
        # their ids cannot be recycled while the call is running.
        self._slots_by_id: dict[int, int] = {}
        self._pinned: list[Any] = []
        # Decoding: slot -> materialised value.
        self._decoded: dict[int, Any] = {}

    def __len__(self) -> int:
        return len(self._entries)

    # Encoding side

    def lookup(self, value: Any) -> int | None:
        return self._slots_by_id.get(id(value))

    def reserve(self, value: Any, *, shared: bool = True) -> int:
        """Assign the next slot to `value` before its children are visited.

        With `shared=False` the slot is not recorded under the value's
        identity, so a later visit of the same object gets a slot of its own.
        """

        slot = len(self._pinned)
        if shared:
            self._slots_by_id[id(value)] = slot
        self._pinned.append(value)
        return slot

    def put(self, slot: int, entry: Any) -> None:
        self._entries[slot] = entry

    def entries(self) -> dict[int, Any]:
        """Return stored entries in ascending slot order."""

        return {slot: self._entries[slot] for slot in sorted(self._entries)}

    # Decoding side

    def entry(self, slot: int) -> Any:
        try:
            return self._entries[slot]
        except KeyError:
            raise DanglingReferenceError(slot) from None

    def has_cached(self, slot: int) -> bool:
        return slot in self._decoded

    def cached(self, slot: int) -> Any:
        return self._decoded[slot]

    def remember(self, slot: int, value: Any) -> Any:
        self._decoded[slot] = value
        return value

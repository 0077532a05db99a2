"""Encoding of value graphs into envelopes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterator

from zenaton_serializer.classifier import ValueKind, classify, is_scalar
from zenaton_serializer.closures.codec import ClosureCodec
from zenaton_serializer.errors import UnsupportedValueError
from zenaton_serializer.properties.access import PropertyAccess
from zenaton_serializer.store import ReferenceStore, is_reference, make_reference
from zenaton_serializer.wire import (
    ClosureEntry,
    Envelope,
    EnvelopeShape,
    RecordEntry,
    SequenceEntry,
    StoreEntry,
)

logger = logging.getLogger(__name__)

_RESOURCE_MESSAGE = (
    "You are trying to serialize an object containing a resource ({name}). "
    "Remove it before serialization and restore it afterwards."
)


@dataclass(slots=True)
class _PendingEntry:
    """A record or sequence whose slot is reserved but whose children are not all encoded."""

    slot: int
    children: Iterator[tuple[Any, Any]]
    items: list[Any] | dict[str, Any]
    type_name: str | None = None

    def add(self, key: Any, value: Any) -> None:
        if isinstance(self.items, list):
            self.items.append(value)
            return
        if key in self.items:
            raise UnsupportedValueError(f"Duplicate mapping key after conversion: {key!r}")
        self.items[key] = value

    def to_entry(self) -> StoreEntry:
        if self.type_name is not None:
            return RecordEntry(type_name=self.type_name, fields=self.items)
        return SequenceEntry(items=self.items)


class Encoder:
    """Walk a value depth-first and produce an :class:`Envelope`.

    Scalars nested in records and sequences are written inline. Every other
    value is written once in the store and referenced by token; a value seen
    again (same identity) reuses its slot, which also terminates cycles.

    The walk keeps its own stack of pending entries, so the depth of the graph
    is not bounded by the interpreter's recursion limit. Slots are still
    assigned in depth-first, first-visit order.
    """

    def __init__(self, properties: PropertyAccess, closures: ClosureCodec) -> None:
        self._properties = properties
        self._closures = closures

    def encode(self, root: Any) -> Envelope:
        kind = classify(root)
        if kind is ValueKind.SCALAR:
            return Envelope(shape=EnvelopeShape.INLINE, root=root)
        if kind is ValueKind.RESOURCE:
            raise UnsupportedValueError(_RESOURCE_MESSAGE.format(name=type(root).__name__))

        store = ReferenceStore()
        reference = self._encode_to_store(root, store)
        envelope = Envelope(shape=EnvelopeShape.REFERENCE, root=reference, store=store.entries())
        logger.debug("Encoded value", extra={"slots": len(envelope.store)})
        return envelope

    def _encode_to_store(self, root: Any, store: ReferenceStore) -> str:
        stack: list[_PendingEntry] = []
        reference = self._encode_value(root, store, stack)

        while stack:
            pending = stack[-1]
            child = next(pending.children, None)
            if child is None:
                stack.pop()
                store.put(pending.slot, pending.to_entry())
                continue
            key, value = child
            # May push the child's own entry on top of `pending`.
            pending.add(key, self._encode_value(value, store, stack))

        return reference

    def _encode_value(self, value: Any, store: ReferenceStore, stack: list[_PendingEntry]) -> Any:
        kind = classify(value)
        if kind is ValueKind.SCALAR:
            if is_reference(value):
                raise UnsupportedValueError(
                    f"String {value!r} is indistinguishable from a store reference"
                )
            return value
        if kind is ValueKind.RESOURCE:
            raise UnsupportedValueError(_RESOURCE_MESSAGE.format(name=type(value).__name__))

        # Tuples of scalars are shared freely by the interpreter (`()`, constants)
        # and decode as lists: each occurrence gets its own slot.
        shared = not _is_flat_tuple(value)
        if shared:
            existing = store.lookup(value)
            if existing is not None:
                return make_reference(existing)

        # Reserve before visiting children so self-references resolve to this slot.
        slot = store.reserve(value, shared=shared)

        if kind is ValueKind.RECORD:
            type_name = self._properties.type_name(value)
            fields = self._properties.list_fields(value)
            stack.append(_PendingEntry(slot, iter(fields.items()), {}, type_name))
        elif kind is ValueKind.SEQUENCE:
            if isinstance(value, dict):
                stack.append(_PendingEntry(slot, _mapping_items(value), {}))
            else:
                stack.append(_PendingEntry(slot, enumerate(value), []))
        elif kind is ValueKind.CLOSURE:
            store.put(slot, ClosureEntry(blob=self._closures.serialize(value)))
        else:
            raise UnsupportedValueError(f"Cannot encode value of kind {kind.value}")

        return make_reference(slot)


def _is_flat_tuple(value: Any) -> bool:
    return isinstance(value, tuple) and all(is_scalar(item) for item in value)


def _mapping_items(mapping: dict[Any, Any]) -> Iterator[tuple[str, Any]]:
    for key, item in mapping.items():
        yield _encode_key(key), item


def _encode_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, int) and not isinstance(key, bool):
        return str(key)
    raise UnsupportedValueError(f"Mapping keys must be str or int, got {type(key).__name__}")

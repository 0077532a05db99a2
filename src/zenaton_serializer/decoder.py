"""Decoding of envelopes back into value graphs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterator

from zenaton_serializer.classifier import is_scalar
from zenaton_serializer.closures.codec import ClosureCodec
from zenaton_serializer.errors import MalformedPayloadError, UnrecognizedEnvelopeError
from zenaton_serializer.properties.access import PropertyAccess
from zenaton_serializer.store import ReferenceStore, parse_reference
from zenaton_serializer.wire import (
    ClosureEntry,
    Envelope,
    EnvelopeShape,
    RecordEntry,
    SequenceEntry,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Deferred:
    """Placeholder for a record whose fields are not applied yet."""

    slot: int


@dataclass(slots=True)
class _PendingValue:
    """A list, dict or record field map still being filled."""

    target: list[Any] | dict[str, Any]
    children: Iterator[tuple[Any, Any]]
    slot: int | None = None
    record: Any = None

    def add(self, key: Any, value: Any) -> None:
        if isinstance(self.target, list):
            self.target.append(value)
        else:
            self.target[key] = value


class Decoder:
    """Rebuild the root value of an :class:`Envelope`.

    Store slots are materialised lazily, at most once per call. Records,
    lists and dicts are cached at their slot before their contents are
    decoded, so a slot that references itself resolves to the same instance.
    Pending containers are kept on an explicit stack rather than the call
    stack, so long chains of references decode without recursion.
    """

    def __init__(self, properties: PropertyAccess, closures: ClosureCodec) -> None:
        self._properties = properties
        self._closures = closures

    def decode(self, envelope: Envelope) -> Any:
        logger.debug(
            "Decoding envelope",
            extra={"shape": envelope.shape.value, "slots": len(envelope.store)},
        )

        if envelope.shape is EnvelopeShape.INLINE:
            return envelope.root

        legacy_array = envelope.shape is EnvelopeShape.LEGACY_ARRAY
        if not legacy_array and parse_reference(envelope.root) is None:
            raise UnrecognizedEnvelopeError(f"Root must be a reference token, got {envelope.root!r}")

        return self._decode_from_store(envelope.root, ReferenceStore(envelope.store))

    def _decode_from_store(self, root: Any, store: ReferenceStore) -> Any:
        stack: list[_PendingValue] = []
        result = self._decode_value(root, store, stack)

        while stack:
            pending = stack[-1]
            child = next(pending.children, None)
            if child is None:
                stack.pop()
                self._complete(pending, store)
                continue
            key, value = child
            # May push the child's own container on top of `pending`.
            pending.add(key, self._decode_value(value, store, stack))

        return _resolve(result, store)

    def _decode_value(self, value: Any, store: ReferenceStore, stack: list[_PendingValue]) -> Any:
        slot = parse_reference(value)
        if slot is not None:
            return self._decode_slot(slot, store, stack)
        if is_scalar(value):
            return value
        # Inline nested data only appears in legacy payloads; it has no identity.
        if isinstance(value, list):
            items: list[Any] = []
            stack.append(_PendingValue(items, enumerate(value)))
            return items
        if isinstance(value, dict):
            mapping: dict[str, Any] = {}
            stack.append(_PendingValue(mapping, iter(value.items())))
            return mapping
        raise UnrecognizedEnvelopeError(f"Cannot decode value of type {type(value).__name__}")

    def _decode_slot(self, slot: int, store: ReferenceStore, stack: list[_PendingValue]) -> Any:
        if store.has_cached(slot):
            return store.cached(slot)

        entry = store.entry(slot)
        if isinstance(entry, RecordEntry):
            return self._decode_record(slot, entry, store, stack)
        if isinstance(entry, SequenceEntry):
            if isinstance(entry.items, dict):
                mapping: dict[str, Any] = store.remember(slot, {})
                stack.append(_PendingValue(mapping, iter(entry.items.items()), slot))
                return mapping
            items: list[Any] = store.remember(slot, [])
            stack.append(_PendingValue(items, enumerate(entry.items), slot))
            return items
        if isinstance(entry, ClosureEntry):
            return store.remember(slot, self._closures.deserialize(entry.blob))
        raise UnrecognizedEnvelopeError(f"Unknown store entry at slot {slot}: {entry!r}")

    def _decode_record(
        self, slot: int, entry: RecordEntry, store: ReferenceStore, stack: list[_PendingValue]
    ) -> Any:
        if self._properties.is_calendar(entry.type_name):
            for name, value in entry.fields.items():
                if not is_scalar(value) or parse_reference(value) is not None:
                    raise MalformedPayloadError(
                        f"Calendar field {name!r} at slot {slot} must be an inline scalar"
                    )
            rebuilt = self._properties.build_calendar(entry.type_name, dict(entry.fields))
            return store.remember(slot, rebuilt)

        record = store.remember(slot, self._properties.new_blank(entry.type_name))
        stack.append(_PendingValue({}, iter(entry.fields.items()), slot, record))
        return _Deferred(slot)

    def _complete(self, pending: _PendingValue, store: ReferenceStore) -> None:
        target = pending.target
        keys = range(len(target)) if isinstance(target, list) else list(target)
        for key in keys:
            if isinstance(target[key], _Deferred):
                target[key] = store.cached(target[key].slot)

        if pending.record is None:
            return
        populated = self._properties.apply_fields(pending.record, target)
        if populated is not pending.record:
            store.remember(pending.slot, populated)


def _resolve(value: Any, store: ReferenceStore) -> Any:
    if isinstance(value, _Deferred):
        return store.cached(value.slot)
    return value

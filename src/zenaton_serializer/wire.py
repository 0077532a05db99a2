"""Wire-level model of an envelope.

Serialized payload structure::

    {"d": <scalar>}                                    inline scalar
    {"o": "@zenaton#<slot>", "s": {"<slot>": entry}}    root reference

Store entries::

    {"n": "<type name>", "p": {"<field>": value}}        record
    {"a": [value, ...]} or {"a": {"<key>": value}}       sequence
    {"c": "<opaque blob>"}                               closure

Each `value` is either an inline scalar or a reference token.

Two legacy shapes are accepted when parsing, never produced:

- a bare top-level ``{"a": ...}`` holding inline data, with no store;
- a top-level ``{"c": "@zenaton#<slot>", "s": ...}`` whose store entries may be
  bare blob strings instead of ``{"c": ...}`` records.

Stores written by older clients may also be JSON arrays instead of objects, and
empty property maps may appear as ``[]``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Union

from zenaton_serializer.errors import UnrecognizedEnvelopeError, UnsupportedValueError
from zenaton_serializer.store import parse_reference

KEY_DATA = "d"
KEY_OBJECT = "o"
KEY_STORE = "s"
KEY_OBJECT_NAME = "n"
KEY_OBJECT_PROPERTIES = "p"
KEY_ARRAY = "a"
KEY_CLOSURE = "c"


class EnvelopeShape(str, Enum):
    INLINE = "inline"
    REFERENCE = "reference"
    LEGACY_ARRAY = "legacy_array"
    LEGACY_CLOSURE = "legacy_closure"


@dataclass(frozen=True, slots=True)
class RecordEntry:
    """A composite record: type name plus encoded fields."""

    type_name: str
    fields: dict[str, Any]

    def to_wire(self) -> dict[str, Any]:
        return {KEY_OBJECT_NAME: self.type_name, KEY_OBJECT_PROPERTIES: self.fields}

    def values(self) -> Iterator[Any]:
        return iter(self.fields.values())


@dataclass(frozen=True, slots=True)
class SequenceEntry:
    """An ordered collection (JSON array) or a keyed collection (JSON object)."""

    items: list[Any] | dict[str, Any]

    def to_wire(self) -> dict[str, Any]:
        return {KEY_ARRAY: self.items}

    def values(self) -> Iterator[Any]:
        if isinstance(self.items, dict):
            return iter(self.items.values())
        return iter(self.items)


@dataclass(frozen=True, slots=True)
class ClosureEntry:
    """An opaque closure blob. `legacy` marks bare-string entries."""

    blob: str
    legacy: bool = False

    def to_wire(self) -> dict[str, Any]:
        return {KEY_CLOSURE: self.blob}

    def values(self) -> Iterator[Any]:
        return iter(())


StoreEntry = Union[RecordEntry, SequenceEntry, ClosureEntry]


@dataclass(frozen=True, slots=True)
class Envelope:
    """One self-contained serialized payload.

    `root` holds the inline scalar (INLINE), the root reference token
    (REFERENCE, LEGACY_CLOSURE) or the inline legacy data (LEGACY_ARRAY).
    """

    shape: EnvelopeShape
    root: Any
    store: dict[int, StoreEntry] = field(default_factory=dict)

    def to_wire(self) -> dict[str, Any]:
        if self.shape is EnvelopeShape.INLINE:
            return {KEY_DATA: self.root}
        if self.shape is not EnvelopeShape.REFERENCE:
            raise UnsupportedValueError(f"Legacy envelopes are never written: {self.shape.value}")
        return {
            KEY_OBJECT: self.root,
            KEY_STORE: {str(slot): self.store[slot].to_wire() for slot in sorted(self.store)},
        }

    def references(self) -> Iterator[tuple[int | None, int]]:
        """Yield (owning slot, referenced slot) pairs; the owner is None for the root."""

        if self.shape in (EnvelopeShape.REFERENCE, EnvelopeShape.LEGACY_CLOSURE):
            root_slot = parse_reference(self.root)
            if root_slot is not None:
                yield None, root_slot
        elif self.shape is EnvelopeShape.LEGACY_ARRAY:
            for target in _nested_references(self.root):
                yield None, target

        for slot in sorted(self.store):
            for value in self.store[slot].values():
                for target in _nested_references(value):
                    yield slot, target

    def dangling_references(self) -> list[int]:
        """Return the sorted, distinct slots referenced but absent from the store."""

        return sorted({target for _, target in self.references() if target not in self.store})


def _nested_references(value: Any) -> Iterator[int]:
    stack = [value]
    while stack:
        current = stack.pop()
        if isinstance(current, list):
            stack.extend(current)
        elif isinstance(current, dict):
            stack.extend(current.values())
        else:
            slot = parse_reference(current)
            if slot is not None:
                yield slot


def parse_entry(raw: Any) -> StoreEntry:
    """Turn a raw store entry into its tagged variant.

    The discriminant is read once: a bare string is a legacy closure, otherwise
    the first of ``c``, ``n``, ``a`` present decides.
    """

    if isinstance(raw, str):
        return ClosureEntry(blob=raw, legacy=True)

    if not isinstance(raw, dict):
        raise UnrecognizedEnvelopeError(f"Store entry must be an object, got {type(raw).__name__}")

    if KEY_CLOSURE in raw:
        blob = raw[KEY_CLOSURE]
        if not isinstance(blob, str):
            raise UnrecognizedEnvelopeError("Closure entry blob must be a string")
        return ClosureEntry(blob=blob)

    if KEY_OBJECT_NAME in raw:
        type_name = raw[KEY_OBJECT_NAME]
        if not isinstance(type_name, str) or not type_name:
            raise UnrecognizedEnvelopeError("Record entry type name must be a non-empty string")
        properties = raw.get(KEY_OBJECT_PROPERTIES, {})
        if properties == []:
            properties = {}
        if not isinstance(properties, dict):
            raise UnrecognizedEnvelopeError(f"Record {type_name!r} properties must be an object")
        return RecordEntry(type_name=type_name, fields=properties)

    if KEY_ARRAY in raw:
        items = raw[KEY_ARRAY]
        if not isinstance(items, (list, dict)):
            raise UnrecognizedEnvelopeError("Sequence entry items must be an array or an object")
        return SequenceEntry(items=items)

    raise UnrecognizedEnvelopeError(f"Unknown store entry keys: {sorted(raw)}")


def _parse_store(raw: Any) -> dict[int, StoreEntry]:
    if raw is None:
        return {}
    if isinstance(raw, list):
        return {slot: parse_entry(entry) for slot, entry in enumerate(raw)}
    if not isinstance(raw, dict):
        raise UnrecognizedEnvelopeError("Store must be an object keyed by slot")

    store: dict[int, StoreEntry] = {}
    for key, entry in raw.items():
        if not (key.isascii() and key.isdigit()):
            raise UnrecognizedEnvelopeError(f"Store slot must be a decimal index, got {key!r}")
        store[int(key)] = parse_entry(entry)
    return store


def parse_envelope(obj: Any) -> Envelope:
    """Build an :class:`Envelope` from decoded JSON.

    Raises:
        UnrecognizedEnvelopeError: If the top level matches no known shape.
    """

    if not isinstance(obj, dict):
        raise UnrecognizedEnvelopeError(
            f"Envelope must be a JSON object, got {type(obj).__name__}"
        )

    if KEY_DATA in obj:
        return Envelope(shape=EnvelopeShape.INLINE, root=obj[KEY_DATA])

    if KEY_OBJECT in obj:
        root = obj[KEY_OBJECT]
        if parse_reference(root) is None:
            raise UnrecognizedEnvelopeError(f"Root object must be a reference token, got {root!r}")
        return Envelope(
            shape=EnvelopeShape.REFERENCE, root=root, store=_parse_store(obj.get(KEY_STORE))
        )

    if KEY_ARRAY in obj:
        return Envelope(
            shape=EnvelopeShape.LEGACY_ARRAY,
            root=obj[KEY_ARRAY],
            store=_parse_store(obj.get(KEY_STORE)),
        )

    if KEY_CLOSURE in obj:
        root = obj[KEY_CLOSURE]
        if parse_reference(root) is None:
            raise UnrecognizedEnvelopeError(f"Root closure must be a reference token, got {root!r}")
        return Envelope(
            shape=EnvelopeShape.LEGACY_CLOSURE, root=root, store=_parse_store(obj.get(KEY_STORE))
        )

    raise UnrecognizedEnvelopeError(f"Unknown envelope keys: {sorted(obj)}")


def dumps(envelope: Envelope) -> str:
    """Render an envelope as compact, deterministic JSON text."""

    try:
        return json.dumps(envelope.to_wire(), separators=(",", ":"), allow_nan=False)
    except ValueError as exc:
        raise UnsupportedValueError(f"Value cannot be represented in JSON: {exc}") from exc

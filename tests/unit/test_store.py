"""Unit tests for the reference store and reference tokens."""

from __future__ import annotations

import pytest

from zenaton_serializer.errors import DanglingReferenceError
from zenaton_serializer.store import (
    ID_PREFIX,
    ReferenceStore,
    is_reference,
    make_reference,
    parse_reference,
)


def test_reference_tokens() -> None:
    assert ID_PREFIX == "@zenaton#"
    assert make_reference(0) == "@zenaton#0"
    assert make_reference(12) == "@zenaton#12"
    assert parse_reference("@zenaton#12") == 12

    with pytest.raises(ValueError):
        make_reference(-1)


@pytest.mark.parametrize(
    "value",
    ["@zenaton#", "@zenaton#1a", " @zenaton#1", "@zenaton#1 ", "@zenaton#-1", "zenaton#1", 1, None],
)
def test_non_references(value: object) -> None:
    assert parse_reference(value) is None
    assert not is_reference(value)


def test_reserve_tracks_identity_not_equality() -> None:
    store = ReferenceStore()
    first, second = [1], [1]

    assert store.lookup(first) is None
    assert store.reserve(first) == 0
    assert store.reserve(second) == 1
    assert store.lookup(first) == 0
    assert store.lookup(second) == 1
    assert store.lookup([1]) is None


def test_entries_are_returned_in_slot_order() -> None:
    store = ReferenceStore()
    for value in ("a", "b", "c"):
        store.reserve([value])

    store.put(2, "third")
    store.put(0, "first")
    store.put(1, "second")

    assert list(store.entries().items()) == [(0, "first"), (1, "second"), (2, "third")]
    assert len(store) == 3


def test_decode_side_cache() -> None:
    store = ReferenceStore({0: "entry"})

    assert store.entry(0) == "entry"
    assert not store.has_cached(0)
    value = object()
    assert store.remember(0, value) is value
    assert store.has_cached(0)
    assert store.cached(0) is value


def test_missing_slot_is_dangling() -> None:
    with pytest.raises(DanglingReferenceError) as excinfo:
        ReferenceStore({0: "entry"}).entry(3)

    assert excinfo.value.slot == 3


def test_unshared_reservation_is_not_found_by_identity() -> None:
    store = ReferenceStore()
    empty = ()

    assert store.reserve(empty, shared=False) == 0
    assert store.lookup(empty) is None
    assert store.reserve(empty, shared=False) == 1

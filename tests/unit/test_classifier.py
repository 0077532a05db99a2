"""Unit tests for value classification."""

from __future__ import annotations

import datetime as dt
import functools
import io
import socket
import sys
import threading
from enum import Enum, IntEnum
from pathlib import Path

import pytest
from records import Node, Point

from zenaton_serializer.classifier import ValueKind, classify, is_scalar


class Color(Enum):
    RED = "red"


class Level(IntEnum):
    LOW = 1


def _generator():
    yield 1


@pytest.mark.parametrize("value", [None, True, 0, 1.5, "", "text", Level.LOW])
def test_scalars(value: object) -> None:
    assert is_scalar(value)
    assert classify(value) is ValueKind.SCALAR


@pytest.mark.parametrize("value", [[], (1, 2), {"a": 1}])
def test_sequences(value: object) -> None:
    assert classify(value) is ValueKind.SEQUENCE


@pytest.mark.parametrize(
    "value",
    [Node("n"), Point(1, 2), dt.datetime(2024, 1, 1), dt.date(2024, 1, 1), dt.time(1, 2)],
)
def test_records(value: object) -> None:
    assert not is_scalar(value)
    assert classify(value) is ValueKind.RECORD


@pytest.mark.parametrize(
    "value",
    [lambda: None, len, "text".upper, functools.partial(int, base=2), Node, Color.RED],
)
def test_closures(value: object) -> None:
    assert classify(value) is ValueKind.CLOSURE


def test_resources(tmp_path: Path) -> None:
    lock = threading.Lock()
    with open(tmp_path / "f.bin", "wb") as handle, socket.socket() as sock:
        for value in (handle, sock, io.StringIO(), lock, _generator(), sys, sys.stdout):
            assert classify(value) is ValueKind.RESOURCE, value

    # A closed handle is still a resource.
    assert classify(handle) is ValueKind.RESOURCE

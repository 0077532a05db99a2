"""Classification of values into the kinds the serializer knows about."""

from __future__ import annotations

import functools
import io
import mmap
import select
import socket
import sqlite3
import threading
import types
from enum import Enum
from typing import Any


class ValueKind(str, Enum):
    SCALAR = "scalar"
    RECORD = "record"
    SEQUENCE = "sequence"
    CLOSURE = "closure"
    RESOURCE = "resource"


_SCALAR_TYPES: tuple[type, ...] = (bool, int, float, str)

_SEQUENCE_TYPES: tuple[type, ...] = (list, tuple, dict)

_CLOSURE_TYPES: tuple[type, ...] = (
    types.FunctionType,
    types.MethodType,
    types.BuiltinFunctionType,
    types.BuiltinMethodType,
    functools.partial,
    type,
    # Enum members are singletons; they travel as pickled references.
    Enum,
)

# io.IOBase covers closed files too: a closed handle is still a resource.
_RESOURCE_TYPES: tuple[type, ...] = tuple(
    t
    for t in (
        io.IOBase,
        socket.socket,
        mmap.mmap,
        sqlite3.Connection,
        sqlite3.Cursor,
        type(threading.Lock()),
        type(threading.RLock()),
        threading.Thread,
        types.GeneratorType,
        types.CoroutineType,
        types.AsyncGeneratorType,
        types.ModuleType,
        types.FrameType,
        types.TracebackType,
        getattr(select, "epoll", None),
        getattr(select, "kqueue", None),
        getattr(select, "devpoll", None),
    )
    if t is not None
)


def is_scalar(value: Any) -> bool:
    """Return whether `value` is written inline (null, bool, int, float, str)."""

    return value is None or isinstance(value, _SCALAR_TYPES)


def classify(value: Any) -> ValueKind:
    """Return the kind of `value`.

    Resources are checked first so that a file-like object never slips into the
    record path. Anything not matched otherwise is a record; calendar values
    (datetime, date, time) included.
    """

    if is_scalar(value):
        return ValueKind.SCALAR
    if isinstance(value, _RESOURCE_TYPES):
        return ValueKind.RESOURCE
    if isinstance(value, _SEQUENCE_TYPES):
        return ValueKind.SEQUENCE
    if isinstance(value, _CLOSURE_TYPES):
        return ValueKind.CLOSURE
    return ValueKind.RECORD

"""Mapping between record classes and the type names written on the wire."""

from __future__ import annotations

import importlib
import logging
import threading

from zenaton_serializer.errors import UnknownTypeError
from zenaton_serializer.properties.calendar import CALENDAR_TYPES

logger = logging.getLogger(__name__)


def default_type_name(cls: type) -> str:
    """Return the `module:qualname` name used for unregistered classes."""

    return f"{cls.__module__}:{cls.__qualname__}"


class TypeRegistry:
    """Explicit registry of serializable record types.

    Registered classes are written under their registered name. Unregistered
    classes are written as `module:qualname` and, when `allow_import` is set,
    resolved on decode by importing `module`.
    """

    def __init__(self, *, allow_import: bool = True) -> None:
        self.allow_import = allow_import
        self._lock = threading.Lock()
        self._by_name: dict[str, type] = {}
        self._names: dict[type, str] = {}
        for cls in CALENDAR_TYPES:
            self.register(cls)

    def register(self, cls: type, name: str | None = None) -> type:
        """Register `cls` under `name` (defaults to `module:qualname`).

        Returns `cls` so the method can be used as a class decorator.
        """

        if not isinstance(cls, type):
            raise TypeError("Only classes can be registered")
        type_name = name or default_type_name(cls)
        with self._lock:
            existing = self._by_name.get(type_name)
            if existing is not None and existing is not cls:
                raise ValueError(f"Type name {type_name!r} is already registered to {existing!r}")
            self._by_name[type_name] = cls
            self._names[cls] = type_name
        logger.debug("Registered record type", extra={"type_name": type_name})
        return cls

    def name_of(self, cls: type) -> str:
        with self._lock:
            registered = self._names.get(cls)
        return registered or default_type_name(cls)

    def resolve(self, type_name: str) -> type:
        """Return the class for `type_name`.

        Raises:
            UnknownTypeError: If the name is not registered and cannot be imported.
        """

        with self._lock:
            registered = self._by_name.get(type_name)
        if registered is not None:
            return registered

        if not self.allow_import:
            raise UnknownTypeError(type_name, "not registered")

        module_name, sep, qualname = type_name.partition(":")
        if not sep or not module_name or not qualname:
            raise UnknownTypeError(type_name, "expected 'module:qualname'")
        if "<locals>" in qualname:
            raise UnknownTypeError(type_name, "local classes must be registered explicitly")

        try:
            target: object = importlib.import_module(module_name)
        except ImportError as exc:
            raise UnknownTypeError(type_name, f"cannot import {module_name!r}") from exc

        for part in qualname.split("."):
            try:
                target = getattr(target, part)
            except AttributeError as exc:
                raise UnknownTypeError(type_name, f"no attribute {part!r}") from exc

        if not isinstance(target, type):
            raise UnknownTypeError(type_name, "not a class")
        return target

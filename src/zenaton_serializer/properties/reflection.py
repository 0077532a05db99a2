"""Property access built on Python object introspection."""

from __future__ import annotations

import logging
from typing import Any

from zenaton_serializer.errors import UnknownTypeError, UnsupportedValueError
from zenaton_serializer.properties import calendar
from zenaton_serializer.properties.access import PropertyAccess
from zenaton_serializer.properties.registry import TypeRegistry

logger = logging.getLogger(__name__)

_SLOT_EXCLUDES = frozenset({"__dict__", "__weakref__"})


def _slot_names(cls: type) -> list[str]:
    names: list[str] = []
    for klass in reversed(cls.__mro__):
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name in _SLOT_EXCLUDES or name in names:
                continue
            # Private slots are stored under their mangled name.
            if name.startswith("__") and not name.endswith("__"):
                name = f"_{klass.__name__.lstrip('_')}{name}"
            names.append(name)
    return names


class ReflectionPropertyAccess(PropertyAccess):
    """Default property access.

    Fields are read from `__slots__` then `__dict__`, private attributes
    included, so a decoded record carries exactly the state of the encoded object.
    Blank instances are created with `cls.__new__(cls)` and populated with
    `object.__setattr__`, which also works for frozen dataclasses.
    """

    def __init__(self, registry: TypeRegistry | None = None) -> None:
        self.registry = registry or TypeRegistry()

    def type_name(self, record: Any) -> str:
        return self.registry.name_of(type(record))

    def list_fields(self, record: Any) -> dict[str, Any]:
        cls = type(record)
        if calendar.calendar_base(cls) is not None:
            return calendar.calendar_fields(record)

        instance_dict = getattr(record, "__dict__", None)
        has_slots = any("__slots__" in klass.__dict__ for klass in cls.__mro__)
        if not isinstance(instance_dict, dict) and not has_slots:
            # Built-ins such as set, bytes or complex keep their state out of reach.
            raise UnsupportedValueError(
                f"Cannot serialize {cls.__qualname__}: it exposes no fields"
            )

        fields: dict[str, Any] = {}
        for name in _slot_names(cls):
            try:
                fields[name] = object.__getattribute__(record, name)
            except AttributeError:
                # Unset slot.
                continue

        if isinstance(instance_dict, dict):
            fields.update(instance_dict)
        return fields

    def new_blank(self, type_name: str) -> Any:
        cls = self.registry.resolve(type_name)
        try:
            return cls.__new__(cls)
        except TypeError as exc:
            raise UnknownTypeError(type_name, f"cannot create a blank instance: {exc}") from exc

    def apply_fields(self, record: Any, fields: dict[str, Any]) -> Any:
        for name, value in fields.items():
            object.__setattr__(record, name, value)
        return record

    def is_calendar(self, type_name: str) -> bool:
        try:
            cls = self.registry.resolve(type_name)
        except UnknownTypeError:
            return False
        return calendar.calendar_base(cls) is not None

    def build_calendar(self, type_name: str, fields: dict[str, Any]) -> Any:
        cls = self.registry.resolve(type_name)
        logger.debug("Rebuilding calendar value", extra={"type_name": type_name})
        return calendar.build_calendar(cls, fields)

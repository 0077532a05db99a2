"""Record types shared by the unit tests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class Wait:
    """A task-like record whose initializer must not run on decode."""

    def __init__(self, event: str | None = None) -> None:
        if event is not None and not event.endswith("Event"):
            raise ValueError("event must name an event class")
        self.event = event


class Node:
    def __init__(self, name: str, next: Any = None) -> None:
        self.name = name
        self.next = next


class Holder:
    def __init__(self, **fields: Any) -> None:
        self.__dict__.update(fields)


@dataclass(frozen=True, slots=True)
class Point:
    x: int
    y: int


class Slotted:
    __slots__ = ("label", "__secret", "unset")

    def __init__(self, label: str, secret: str) -> None:
        self.label = label
        self.__secret = secret

    @property
    def secret(self) -> str:
        return self.__secret


class Account:
    def __init__(self, owner: str, balance: int) -> None:
        self.owner = owner
        self._balance = balance

    @property
    def balance(self) -> int:
        return self._balance

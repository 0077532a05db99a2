#!/usr/bin/env python3
"""Programmatic round-trip example.

This demonstrates using the serializer directly:

* load settings from `.env`
* encode a small task graph with a shared reference and a cycle
* decode it back and check that identities survive

Pass `--show` to print the JSON payload.
"""

from __future__ import annotations

import argparse
from typing import Sequence

from zenaton_serializer import Serializer, SerializerSettings
from zenaton_serializer.logging import configure_logging
from zenaton_serializer.properties import ReflectionPropertyAccess, TypeRegistry


class Task:
    def __init__(self, name: str, retries: int = 0) -> None:
        self.name = name
        self.retries = retries
        self.parent: Task | None = None
        self.children: list[Task] = []

    def add(self, child: Task) -> Task:
        child.parent = self
        self.children.append(child)
        return child


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Encode and decode a task graph (example).")
    parser.add_argument("--show", action="store_true", help="Print the encoded payload")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = SerializerSettings()
    configure_logging(settings.log_level)

    registry = TypeRegistry(allow_import=settings.allow_type_import)
    registry.register(Task, "Task")
    serializer = Serializer(properties=ReflectionPropertyAccess(registry), settings=settings)

    root = Task("checkout")
    payment = root.add(Task("payment", retries=3))
    root.add(Task("shipping"))
    graph = {"root": root, "current": payment, "notify": lambda task: f"done: {task.name}"}

    payload = serializer.encode(graph)
    if args.show:
        print(payload)

    restored = serializer.decode(payload)
    current = restored["current"]
    print(f"Current task: {current.name} (retries={current.retries})")
    print(f"Shared reference kept: {current is restored['root'].children[0]}")
    print(f"Cycle kept: {current.parent is restored['root']}")
    print(restored["notify"](current))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

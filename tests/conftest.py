"""Test configuration and fixtures."""

from __future__ import annotations

import pytest
from records import Account, Holder, Node, Point, Slotted, Wait

from zenaton_serializer.config import SerializerSettings
from zenaton_serializer.properties import ReflectionPropertyAccess, TypeRegistry
from zenaton_serializer.serializer import Serializer


@pytest.fixture
def settings() -> SerializerSettings:
    """Provide settings isolated from any local `.env` file."""
    return SerializerSettings(_env_file=None, log_level="DEBUG", max_depth=512)


@pytest.fixture
def registry() -> TypeRegistry:
    """Provide a registry with the test record types registered."""
    registry = TypeRegistry(allow_import=False)
    for cls in (Wait, Node, Holder, Point, Slotted, Account):
        registry.register(cls, cls.__name__)
    return registry


@pytest.fixture
def properties(registry: TypeRegistry) -> ReflectionPropertyAccess:
    """Provide reflection-based property access bound to the test registry."""
    return ReflectionPropertyAccess(registry)


@pytest.fixture
def serializer(properties: ReflectionPropertyAccess, settings: SerializerSettings) -> Serializer:
    """Provide a serializer wired with the test registry."""
    return Serializer(properties=properties, settings=settings)

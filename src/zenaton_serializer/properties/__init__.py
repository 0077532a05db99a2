"""Property access package initialization."""

from zenaton_serializer.properties.access import PropertyAccess
from zenaton_serializer.properties.reflection import ReflectionPropertyAccess
from zenaton_serializer.properties.registry import TypeRegistry, default_type_name

__all__ = [
    "PropertyAccess",
    "ReflectionPropertyAccess",
    "TypeRegistry",
    "default_type_name",
]

"""Zenaton serializer.

Graph-preserving JSON serialization of Python values:
- shared references and cycles survive a round trip
- records are rebuilt without running their initializer
- closures travel as opaque blobs
"""

__version__ = "0.1.0"

from zenaton_serializer.config import SerializerSettings
from zenaton_serializer.errors import (
    DanglingReferenceError,
    MalformedPayloadError,
    SerializerError,
    UnknownTypeError,
    UnrecognizedEnvelopeError,
    UnsupportedValueError,
)
from zenaton_serializer.serializer import Serializer, decode, encode

__all__ = [
    "__version__",
    "DanglingReferenceError",
    "MalformedPayloadError",
    "Serializer",
    "SerializerError",
    "SerializerSettings",
    "UnknownTypeError",
    "UnrecognizedEnvelopeError",
    "UnsupportedValueError",
    "decode",
    "encode",
]

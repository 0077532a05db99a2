"""Exceptions raised by the serializer.

All errors derive from :class:`SerializerError` and are raised synchronously to
the caller. The codec never retries and never returns a partial envelope.
"""

from __future__ import annotations


class SerializerError(Exception):
    """Base class for every error raised by the serializer."""


class UnsupportedValueError(SerializerError, TypeError):
    """Raised when a value cannot be encoded (resources, field-less objects, ...)."""


class MalformedPayloadError(SerializerError, ValueError):
    """Raised when a payload is not valid wire syntax."""


class UnrecognizedEnvelopeError(SerializerError, ValueError):
    """Raised when a payload is valid JSON but matches no known envelope shape."""


class DanglingReferenceError(SerializerError, LookupError):
    """Raised when a reference names a slot missing from the store."""

    def __init__(self, slot: int) -> None:
        super().__init__(f"Reference to missing store slot: {slot}")
        self.slot = slot


class UnknownTypeError(SerializerError, LookupError):
    """Raised when a record type name cannot be resolved to a class."""

    def __init__(self, type_name: str, reason: str = "") -> None:
        message = f"Unknown record type: {type_name!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.type_name = type_name

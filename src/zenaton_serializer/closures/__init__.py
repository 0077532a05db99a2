"""Closure codec package initialization."""

from zenaton_serializer.closures.cloudpickle_codec import CloudpickleClosureCodec
from zenaton_serializer.closures.codec import ClosureCodec

__all__ = [
    "ClosureCodec",
    "CloudpickleClosureCodec",
]

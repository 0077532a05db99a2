"""Closure codec backed by cloudpickle."""

import base64
import binascii
import logging
import pickle
from typing import Any

import cloudpickle

from zenaton_serializer.closures.codec import ClosureCodec
from zenaton_serializer.errors import MalformedPayloadError, UnsupportedValueError

logger = logging.getLogger(__name__)


class CloudpickleClosureCodec(ClosureCodec):
    """Closure codec using cloudpickle.

    Lambdas and nested functions are pickled by value together with the state
    they capture; importable functions and classes are pickled by reference.
    The pickle bytes are base64-encoded so the blob is plain ASCII text.

    Blobs are pickles: only decode payloads from trusted sources.
    """

    def __init__(self, protocol: int | None = None) -> None:
        self.protocol = protocol

    def serialize(self, closure: Any) -> str:
        try:
            raw = cloudpickle.dumps(closure, protocol=self.protocol)
        except (pickle.PicklingError, TypeError, AttributeError) as e:
            raise UnsupportedValueError(f"Cannot serialize closure {closure!r}: {e}") from e

        logger.debug(f"Serialized closure into {len(raw)} bytes")
        return base64.b64encode(raw).decode("ascii")

    def deserialize(self, blob: str) -> Any:
        try:
            raw = base64.b64decode(blob.encode("ascii"), validate=True)
        except (binascii.Error, UnicodeEncodeError) as e:
            raise MalformedPayloadError(f"Closure blob is not valid base64: {e}") from e

        try:
            return cloudpickle.loads(raw)
        except (
            pickle.UnpicklingError,
            EOFError,
            AttributeError,
            ImportError,
            IndexError,
            KeyError,
            TypeError,
            ValueError,
        ) as e:
            raise MalformedPayloadError(f"Closure blob cannot be unpickled: {e}") from e

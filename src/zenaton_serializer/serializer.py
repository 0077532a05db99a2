"""Serialize and deserialize data.

This serializer correctly deals with shared references and cycles: values are
normalized into a reference store, and the resulting envelope is written as
JSON. See :mod:`zenaton_serializer.wire` for the payload layout.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from zenaton_serializer.closures.cloudpickle_codec import CloudpickleClosureCodec
from zenaton_serializer.closures.codec import ClosureCodec
from zenaton_serializer.config import SerializerSettings
from zenaton_serializer.decoder import Decoder
from zenaton_serializer.encoder import Encoder
from zenaton_serializer.errors import MalformedPayloadError
from zenaton_serializer.properties.access import PropertyAccess
from zenaton_serializer.properties.reflection import ReflectionPropertyAccess
from zenaton_serializer.properties.registry import TypeRegistry
from zenaton_serializer.wire import Envelope, dumps, parse_envelope

logger = logging.getLogger(__name__)


def _reject_constant(name: str) -> Any:
    raise MalformedPayloadError(f"Syntax error, malformed JSON: {name} is not allowed")


def _nesting_depth(obj: Any) -> int:
    depth = 0
    stack: list[tuple[Any, int]] = [(obj, 1)]
    while stack:
        current, level = stack.pop()
        if isinstance(current, dict):
            depth = max(depth, level)
            stack.extend((value, level + 1) for value in current.values())
        elif isinstance(current, list):
            depth = max(depth, level)
            stack.extend((value, level + 1) for value in current)
    return depth


class Serializer:
    """Encode values to JSON envelopes and decode them back.

    Collaborators are injected; missing ones default to reflection-based
    property access and the cloudpickle closure codec. A single instance can
    serve any number of calls, including concurrent ones: all bookkeeping is
    created per call.
    """

    def __init__(
        self,
        properties: PropertyAccess | None = None,
        closures: ClosureCodec | None = None,
        settings: SerializerSettings | None = None,
    ) -> None:
        self.settings = settings or SerializerSettings()
        self.properties = properties or ReflectionPropertyAccess(
            TypeRegistry(allow_import=self.settings.allow_type_import)
        )
        self.closures = closures or CloudpickleClosureCodec()
        self._encoder = Encoder(self.properties, self.closures)
        self._decoder = Decoder(self.properties, self.closures)

    def encode(self, data: Any) -> str:
        """Encode `data` into JSON text.

        Raises:
            UnsupportedValueError: If the graph contains a value that cannot be
                encoded. No partial payload is produced.
        """

        return dumps(self._encoder.encode(data))

    def decode(self, payload: str | bytes) -> Any:
        """Decode JSON text previously produced by :meth:`encode`.

        Raises:
            MalformedPayloadError: If the payload is not valid JSON.
            UnrecognizedEnvelopeError: If the JSON matches no envelope shape.
            DanglingReferenceError: If a reference names a missing slot.
        """

        return self._decoder.decode(self.load_envelope(payload))

    def load_envelope(self, payload: str | bytes) -> Envelope:
        """Parse JSON text into an :class:`Envelope` without materialising values."""

        return parse_envelope(self._json_decode(payload))

    def _json_decode(self, payload: str | bytes) -> Any:
        if isinstance(payload, (bytes, bytearray)):
            try:
                payload = bytes(payload).decode("utf-8")
            except UnicodeDecodeError as exc:
                raise MalformedPayloadError(
                    f"Malformed UTF-8 characters, possibly incorrectly encoded: {exc}"
                ) from exc

        try:
            result = json.loads(payload, parse_constant=_reject_constant)
        except json.JSONDecodeError as exc:
            if exc.pos >= len(exc.doc.rstrip()):
                cause = "Unexpected end of input"
            elif exc.msg.startswith("Invalid control character"):
                cause = "Unexpected control character found"
            else:
                cause = "Syntax error, malformed JSON"
            raise MalformedPayloadError(
                f"{cause}: {exc.msg} (line {exc.lineno}, column {exc.colno})"
            ) from exc
        except RecursionError as exc:
            raise MalformedPayloadError("Maximum stack depth exceeded") from exc

        depth = _nesting_depth(result)
        if depth > self.settings.max_depth:
            raise MalformedPayloadError(
                f"Maximum stack depth exceeded: {depth} > {self.settings.max_depth}"
            )
        return result


def encode(data: Any) -> str:
    """Encode `data` with a default :class:`Serializer`."""

    return Serializer().encode(data)


def decode(payload: str | bytes) -> Any:
    """Decode `payload` with a default :class:`Serializer`."""

    return Serializer().decode(payload)

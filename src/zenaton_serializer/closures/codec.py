"""Abstract base class for closure codecs."""

from abc import ABC, abstractmethod
from typing import Any


class ClosureCodec(ABC):
    """Turn executable closures into opaque text blobs and back.

    The serializer treats the blob as uninterpreted text; only the codec knows
    how captured state is represented.
    """

    @abstractmethod
    def serialize(self, closure: Any) -> str:
        """Serialize a closure.

        Args:
            closure: Function, method, partial or class.

        Returns:
            Opaque text blob.
        """
        pass

    @abstractmethod
    def deserialize(self, blob: str) -> Any:
        """Rebuild a closure from a blob produced by :meth:`serialize`.

        Args:
            blob: Opaque text blob.

        Returns:
            The reconstructed closure.

        Raises:
            MalformedPayloadError: If the blob cannot be decoded.
        """
        pass

"""Abstract base class for property access."""

from abc import ABC, abstractmethod
from typing import Any


class PropertyAccess(ABC):
    """Read and write the fields of composite records.

    The serializer never touches object internals itself: every field read,
    blank construction and field write goes through this interface, so
    embedding applications can swap in their own rules.
    """

    @abstractmethod
    def type_name(self, record: Any) -> str:
        """Return the name under which the record's type is written.

        Args:
            record: The record being encoded.

        Returns:
            A type name that :meth:`new_blank` can resolve later.
        """
        pass

    @abstractmethod
    def list_fields(self, record: Any) -> dict[str, Any]:
        """Return the record's fields, in a stable order.

        Args:
            record: The record being encoded.

        Returns:
            Mapping of field name to current value.

        Raises:
            UnsupportedValueError: If the record exposes no fields.
        """
        pass

    @abstractmethod
    def new_blank(self, type_name: str) -> Any:
        """Construct an empty instance of a type without running its initializer.

        Args:
            type_name: Name previously returned by :meth:`type_name`.

        Returns:
            A new, unpopulated instance.

        Raises:
            UnknownTypeError: If the name cannot be resolved.
        """
        pass

    @abstractmethod
    def apply_fields(self, record: Any, fields: dict[str, Any]) -> Any:
        """Populate a blank instance.

        Args:
            record: Instance returned by :meth:`new_blank`.
            fields: Decoded field values.

        Returns:
            The populated record (normally `record` itself).
        """
        pass

    @abstractmethod
    def is_calendar(self, type_name: str) -> bool:
        """Return whether `type_name` names a calendar type.

        Calendar values are immutable and cannot be populated field by field,
        so the decoder rebuilds them with :meth:`build_calendar` instead.
        """
        pass

    @abstractmethod
    def build_calendar(self, type_name: str, fields: dict[str, Any]) -> Any:
        """Rebuild a calendar value from its decoded fields."""
        pass

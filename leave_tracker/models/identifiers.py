"""Identifier value type shared by the live and the in-memory backends.

Identifiers reach the application in two shapes: strings coming from the
outside world (URLs, JSON bodies, token claims) and native values read back
from the store (``ObjectId`` on MongoDB, ``int`` in memory). ``DocumentId``
keeps the original value and converts it in one place.
"""

from dataclasses import dataclass
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId


@dataclass(frozen=True, eq=False)
class DocumentId:
    value: Any

    @classmethod
    def from_external(cls, raw: Any) -> "DocumentId":
        """Wrap an identifier received from a client."""
        if isinstance(raw, DocumentId):
            return raw
        if raw is None:
            raise ValueError("identifier must not be empty")
        return cls(str(raw).strip())

    @classmethod
    def from_native(cls, native: Any) -> "DocumentId":
        """Wrap an identifier read back from the store."""
        if isinstance(native, DocumentId):
            return native
        return cls(native)

    def for_backend(self, native: bool) -> Any:
        """Return the value to query with.

        On the live backend a valid 24-hex string becomes an ``ObjectId``;
        any other string is used verbatim. The in-memory backend keys
        everything by string.
        """
        if not native:
            return str(self)
        if isinstance(self.value, ObjectId):
            return self.value
        if isinstance(self.value, str) and ObjectId.is_valid(self.value):
            try:
                return ObjectId(self.value)
            except (InvalidId, TypeError):
                return self.value
        return self.value

    def __str__(self) -> str:
        return str(self.value)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DocumentId):
            return str(self) == str(other)
        if other is None:
            return False
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(str(self))


def normalize_id(value: Any) -> str:
    """String form of any identifier, used for every equality test."""
    if value is None:
        return ""
    return str(DocumentId.from_native(value))


def same_id(left: Any, right: Any) -> bool:
    if left is None or right is None:
        return False
    return normalize_id(left) == normalize_id(right)

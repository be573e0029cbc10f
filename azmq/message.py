"""Message parts, their flags, byte blobs and per-message metadata."""

from __future__ import annotations

import enum
import threading
from dataclasses import dataclass, field
from typing import Any, TypeVar

T = TypeVar("T")


class Blob(bytes):
    """An immutable byte sequence used for identities and subscriptions."""

    __slots__ = ()

    def size(self) -> int:
        """Return the number of bytes."""
        return len(self)

    def is_empty(self) -> bool:
        """Return True if the blob holds no bytes."""
        return len(self) == 0

    def __repr__(self) -> str:
        return f"Blob(len={len(self)})"


class MsgFlags(enum.IntFlag):
    """Flags describing a message part."""

    MORE = 0b01
    COMMAND = 0b10


class Metadata:
    """A map from a value's type to that value.

    Copies share the same underlying map.
    """

    def __init__(self) -> None:
        self._entries: dict[type, Any] = {}
        self._lock = threading.Lock()

    def insert_typed(self, value: Any) -> Any | None:
        """Store ``value`` under its type and return the value it replaced."""
        with self._lock:
            previous = self._entries.get(type(value))
            self._entries[type(value)] = value
            return previous

    def get(self, kind: type[T]) -> T | None:
        """Return the value stored for ``kind``, if any."""
        with self._lock:
            return self._entries.get(kind)

    def contains(self, kind: type) -> bool:
        """Return True if a value of ``kind`` is stored."""
        with self._lock:
            return kind in self._entries

    def remove(self, kind: type[T]) -> T | None:
        """Remove and return the value stored for ``kind``."""
        with self._lock:
            return self._entries.pop(kind, None)

    def is_empty(self) -> bool:
        """Return True if nothing is stored."""
        with self._lock:
            return not self._entries

    def len(self) -> int:
        """Return the number of stored values."""
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.len()

    def __contains__(self, kind: object) -> bool:
        return isinstance(kind, type) and self.contains(kind)

    def __repr__(self) -> str:
        return "Metadata(...)"


@dataclass(frozen=True)
class PeerAddress:
    """Metadata entry holding the network address of the peer."""

    address: tuple[str, int]


@dataclass(frozen=True)
class ZapUserId:
    """Metadata entry holding the authenticated user id."""

    user_id: str


@dataclass(eq=False)
class Msg:
    """A single message part (frame)."""

    data: bytes | None = None
    flags: MsgFlags = MsgFlags(0)
    metadata: Metadata = field(default_factory=Metadata)

    def __post_init__(self) -> None:
        if self.data is not None and type(self.data) is not bytes:
            self.data = bytes(self.data)
        self.flags = MsgFlags(self.flags)

    def size(self) -> int:
        """Return the payload size in bytes."""
        return 0 if self.data is None else len(self.data)

    def is_more(self) -> bool:
        """Return True if more parts follow this one."""
        return MsgFlags.MORE in self.flags

    def is_command(self) -> bool:
        """Return True if this part is a protocol command frame."""
        return MsgFlags.COMMAND in self.flags

    def __repr__(self) -> str:
        data = None if self.data is None else f"{len(self.data)} bytes"
        return f"Msg(size={self.size()}, flags={self.flags!r}, data={data!r})"
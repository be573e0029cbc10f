"""The 64-byte ZMTP greeting exchanged at the start of a connection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from azmq.errors import ProtocolViolation

log = logging.getLogger(__name__)

GREETING_PREFIX = bytes([0xFF, 0, 0, 0, 0, 0, 0, 0, 0, 0x7F])
GREETING_SUFFIX = bytes([0x7F])
GREETING_VERSION_MAJOR = 3
GREETING_VERSION_MINOR = 0
GREETING_LENGTH = 64
MECHANISM_OFFSET = 11
MECHANISM_LENGTH = 20
AS_SERVER_OFFSET = 31

_PADDING_LENGTH = GREETING_LENGTH - AS_SERVER_OFFSET - 1 - len(GREETING_SUFFIX)


@dataclass(frozen=True)
class ZmtpGreeting:
    """A parsed greeting: version, null-padded mechanism name and role."""

    version: tuple[int, int]
    mechanism: bytes
    as_server: bool

    @staticmethod
    def encode(mechanism: Union[bytes, str], as_server: bool) -> bytes:
        """Build the greeting to send; ``mechanism`` is padded with nulls."""
        if isinstance(mechanism, str):
            mechanism = mechanism.encode("ascii")
        if len(mechanism) > MECHANISM_LENGTH:
            raise ValueError(
                f"mechanism name longer than {MECHANISM_LENGTH} bytes: {mechanism!r}"
            )
        greeting = b"".join(
            (
                GREETING_PREFIX,
                bytes([GREETING_VERSION_MAJOR << 4 | GREETING_VERSION_MINOR]),
                bytes(mechanism).ljust(MECHANISM_LENGTH, b"\x00"),
                bytes([1 if as_server else 0]),
                bytes(_PADDING_LENGTH),
                GREETING_SUFFIX,
            )
        )
        assert len(greeting) == GREETING_LENGTH
        return greeting

    @classmethod
    def decode(cls, buffer: bytearray) -> Optional["ZmtpGreeting"]:
        """Take a greeting off the front of ``buffer``, or return None if incomplete."""
        if len(buffer) < GREETING_LENGTH:
            return None
        data = bytes(buffer[:GREETING_LENGTH])
        del buffer[:GREETING_LENGTH]

        if (
            data[: len(GREETING_PREFIX)] != GREETING_PREFIX
            or data[GREETING_LENGTH - len(GREETING_SUFFIX) :] != GREETING_SUFFIX
        ):
            log.error("Invalid ZMTP greeting signature received")
            raise ProtocolViolation("Invalid greeting signature")

        version_byte = data[len(GREETING_PREFIX)]
        major = version_byte >> 4
        minor = version_byte & 0x0F
        if major < 3:
            log.error("Unsupported ZMTP version received: %d.%d", major, minor)
            raise ProtocolViolation(f"Unsupported ZMTP version {major}.{minor}")

        mechanism = data[MECHANISM_OFFSET : MECHANISM_OFFSET + MECHANISM_LENGTH]

        as_server_byte = data[AS_SERVER_OFFSET]
        if as_server_byte not in (0, 1):
            log.error("Invalid as-server flag in greeting: %d", as_server_byte)
            raise ProtocolViolation("Invalid as-server flag")

        return cls((major, minor), mechanism, as_server_byte == 1)

    def mechanism_name(self) -> str:
        """Return the mechanism name up to the first null byte."""
        name = self.mechanism.split(b"\x00", 1)[0]
        try:
            return name.decode("utf-8")
        except UnicodeDecodeError:
            return "<invalid_utf8>"
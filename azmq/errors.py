"""Error types raised by the messaging library."""

from __future__ import annotations

import errno


class ZmqError(Exception):
    """Base class of every error raised by the library."""

    message = "Messaging library error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.message)


class _DetailError(ZmqError):
    """An error that carries one piece of detail, such as an endpoint."""

    template = "{}"

    def __init__(self, detail: object) -> None:
        self.detail = detail
        super().__init__(self.template.format(detail))


class IoError(ZmqError):
    """Wraps an operating-system I/O error."""

    def __init__(self, error: OSError) -> None:
        self.error = error
        super().__init__(f"I/O error: {error}")
        self.__cause__ = error


class InvalidArgument(_DetailError):
    template = "Invalid argument provided: {}"


class Timeout(ZmqError):
    message = "Operation timed out"


class AddrInUse(_DetailError):
    template = "Address already in use: {}"


class AddrNotAvailable(_DetailError):
    template = "Address not available: {}"


class ConnectionRefused(_DetailError):
    template = "Connection refused by peer: {}"


class HostUnreachable(_DetailError):
    template = "Host is unreachable: {}"


class NetworkUnreachable(_DetailError):
    template = "Network is unreachable: {}"


class ConnectionClosed(ZmqError):
    message = "Connection closed by peer or transport"


class PermissionDenied(_DetailError):
    template = "Permission denied for endpoint: {}"


class InvalidEndpoint(_DetailError):
    template = "Invalid endpoint format: {}"


class EndpointResolutionFailed(_DetailError):
    template = "Endpoint resolution failed: {}"


class InvalidOption(_DetailError):
    template = "Invalid socket option ID: {}"


class InvalidOptionValue(_DetailError):
    template = "Invalid value provided for option ID {}"


class InvalidSocketType(_DetailError):
    template = "Operation is invalid for the socket type ({})"


class InvalidState(_DetailError):
    template = "Operation is invalid for the current socket state: {}"


class ProtocolViolation(_DetailError):
    template = "ZMTP protocol violation: {}"


class InvalidMessage(_DetailError):
    template = "Invalid message format for operation: {}"


class SecurityError(_DetailError):
    template = "Security error: {}"


class AuthenticationFailure(_DetailError):
    template = "Authentication failed: {}"


class EncryptionError(_DetailError):
    template = "Encryption/Decryption error: {}"


class ResourceLimitReached(ZmqError):
    message = "Resource limit reached (e.g., HWM)"


class UnsupportedTransport(_DetailError):
    template = "Transport scheme not supported or enabled: {}"


class UnsupportedOption(_DetailError):
    template = "Socket option not supported: {}"


class UnsupportedFeature(_DetailError):
    template = "Feature not supported or enabled: {}"


class InternalError(_DetailError):
    template = "Internal library error: {}"


def from_io_endpoint(error: OSError, endpoint: str) -> ZmqError:
    """Map an OS error raised while using ``endpoint`` to a library error."""
    if error.errno == errno.EADDRINUSE:
        return AddrInUse(endpoint)
    if error.errno == errno.EADDRNOTAVAIL:
        return AddrNotAvailable(endpoint)
    if isinstance(error, ConnectionRefusedError):
        return ConnectionRefused(endpoint)
    if isinstance(error, PermissionError):
        return PermissionDenied(endpoint)
    if isinstance(error, TimeoutError):
        return Timeout()
    if isinstance(error, (ConnectionResetError, BrokenPipeError)):
        return ConnectionClosed()
    return IoError(error)
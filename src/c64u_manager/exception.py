"""Exceptions module."""

from __future__ import annotations

from typing import Iterable


class C64UError(Exception):
    """Base class for every error reported by the client."""

    def __init__(self, message: str, details: Iterable[str] | None = None):
        """Store the headline message and any detail lines."""
        super().__init__(message)
        self.message = message
        self.details: list[str] = list(details or [])


class TransportError(C64UError):
    """Raised when the device cannot be reached."""


class CommandTimeoutError(TransportError):
    """Raised when a request exceeds the transport timeout."""


class HTTPStatusError(C64UError):
    """Raised for a non-2xx status without a device supplied error list."""

    def __init__(
        self,
        message: str,
        status_code: int,
        details: Iterable[str] | None = None,
    ):
        """Keep the status code next to the message."""
        super().__init__(message, details)
        self.status_code = status_code


class DeviceReportedError(C64UError):
    """Raised when the device answers with an ``errors`` list."""


class CommandValidationError(C64UError):
    """Raised when command arguments are invalid."""


class InvalidAddress(CommandValidationError):
    """Raised when a memory address is not a 16-bit hex value."""


class InvalidHexLength(CommandValidationError):
    """Raised when a hex byte string has an odd number of digits."""


class InvalidHexDigit(CommandValidationError):
    """Raised when a hex byte string contains a non-hex character."""


class LocalFileError(C64UError):
    """Raised when a local file for upload is missing or unreadable."""


class PayloadTypeError(C64UError):
    """Raised when a response field does not hold the requested JSON type."""

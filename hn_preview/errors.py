"""Failure kinds raised by the remote fetch gateway."""

from __future__ import annotations


class FetchError(Exception):
    """A single remote fetch could not produce a usable record."""

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message)
        self.path = path


class TransportError(FetchError):
    """Connection, DNS, timeout or non-2xx HTTP failure."""


class DecodeError(FetchError):
    """Response body is not JSON or does not have the expected shape."""

"""Helpers for classifying transient failures."""

from __future__ import annotations

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError

TRANSIENT_MARKERS = ("timeout", "network", "503", "502")

_CONNECTION_ERROR_MARKERS = (
    "connection is closed",
    "underlying connection is closed",
    "server closed the connection unexpectedly",
    "connection was closed",
)


def is_transient_message(message: str) -> bool:
    """Return True when an error message names a transient upstream failure."""
    lowered = message.lower()
    return any(marker in lowered for marker in TRANSIENT_MARKERS)


def is_transient_connection_error(exc: Exception) -> bool:
    """Return True when an exception likely came from a dropped DB connection."""
    if isinstance(exc, (InterfaceError, OperationalError)):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True

    lowered = str(exc).lower()
    return any(marker in lowered for marker in _CONNECTION_ERROR_MARKERS)


def is_transient_error(exc: Exception) -> bool:
    """Return True for AI-provider or database failures worth retrying by the caller."""
    return is_transient_connection_error(exc) or is_transient_message(str(exc))

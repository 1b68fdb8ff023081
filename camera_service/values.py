"""Typed access to string values stored in Redis."""

from typing import Optional

from .errors import MalformedDataError, MissingDataError


def to_text(value) -> Optional[str]:
    """Normalize a Redis reply to str (connections may or may not decode responses)."""
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


def get_text(connection, key: str, default: Optional[str] = None) -> Optional[str]:
    try:
        value = to_text(connection.get(key))
    except UnicodeDecodeError as e:
        raise MalformedDataError(f"Key '{key}' holds a value that is not UTF-8 text", key=key) from e
    return default if value is None else value


def get_int(connection, key: str) -> int:
    """Read an integer key. Raises MissingDataError / MalformedDataError."""
    value = get_text(connection, key)
    if value is None:
        raise MissingDataError(f"Key '{key}' does not exist", key=key)
    try:
        return int(value.strip())
    except ValueError as e:
        raise MalformedDataError(f"Key '{key}' holds non-integer value {value!r}", key=key) from e


def get_members(connection, key: str) -> list[str]:
    """Snapshot of a Redis set as a sorted list."""
    return sorted(to_text(member) for member in connection.smembers(key))

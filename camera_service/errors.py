"""Errors raised by the camera service client.

Three kinds of failure reach the caller:
  - CameraConnectionError: the Redis server could not be reached
  - RemoteDataError: a key is missing or holds a value of the wrong shape
  - SharedBlockError: the shared picture block could not be used

Nothing is retried; every failure is surfaced as soon as it happens.
"""

from typing import Optional


class CameraServiceError(Exception):
    """Base class for camera service errors."""


class CameraConnectionError(CameraServiceError, ConnectionError):
    """Redis server unreachable."""


class RemoteDataError(CameraServiceError):
    """Data published by the camera server is unusable."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key

    def __str__(self) -> str:
        return self.args[0]


class MissingDataError(RemoteDataError, KeyError):
    """A required key does not exist."""


class MalformedDataError(RemoteDataError, ValueError):
    """A key exists but its value cannot be interpreted."""


class SharedBlockError(CameraServiceError, OSError):
    """Shared picture block missing, closed or too small."""


class PictureDecodeError(SharedBlockError):
    """Shared picture block does not hold a decodable image."""

"""Camera service client - camera control and picture retrieval over Redis and shared memory."""

from .client import CameraClient, connect, list_cameras
from .errors import (
    CameraConnectionError,
    CameraServiceError,
    MalformedDataError,
    MissingDataError,
    PictureDecodeError,
    RemoteDataError,
    SharedBlockError,
)
from .reader import PictureReader

__all__ = [
    "CameraClient",
    "PictureReader",
    "connect",
    "list_cameras",
    # Errors
    "CameraServiceError",
    "CameraConnectionError",
    "RemoteDataError",
    "MissingDataError",
    "MalformedDataError",
    "SharedBlockError",
    "PictureDecodeError",
]

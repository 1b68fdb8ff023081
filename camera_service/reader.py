"""
Picture reader - decodes frames published by a camera server into shared memory.

The camera server writes each encoded frame into a named shared memory block
and its capture time into Redis. A reader reads the picture information once,
attaches the block and decodes whatever it currently holds on every read().

Usage:
    with client.get_reader("main") as reader:
        frame = reader.read()
        taken_at = reader.read_timestamp()

Known limitation: there is no locking between the producer and read(). A read
issued while the server is rewriting the block may see a partially written
frame, which usually fails to decode (PictureDecodeError).
"""

import logging
import os
import sys
from datetime import datetime, timedelta, timezone
from multiprocessing import resource_tracker
from multiprocessing.shared_memory import SharedMemory
from typing import Optional

import cv2
import numpy as np

from . import keys
from .errors import MalformedDataError, PictureDecodeError, SharedBlockError
from .values import get_int, get_text

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Pixel formats published in the "format" key, mapped to element types
PIXEL_FORMATS = {
    "8U": np.uint8,
    "8S": np.int8,
    "16U": np.uint16,
    "16S": np.int16,
    "16F": np.float16,
    "32S": np.int32,
    "32F": np.float32,
    "64F": np.float64,
}


def attach_shared_block(name: str) -> SharedMemory:
    """Attach an existing shared memory block without taking ownership of it."""
    try:
        if sys.version_info >= (3, 13):
            return SharedMemory(name=name, track=False)
        block = SharedMemory(name=name)
    except FileNotFoundError as e:
        raise SharedBlockError(f"Shared picture block '{name}' does not exist") from e

    # Otherwise the resource tracker unlinks the producer's block when we exit
    if os.name == "posix":
        resource_tracker.unregister(block._name, "shared_memory")
    return block


class PictureReader:
    """Reads one picture stream of a camera."""

    def __init__(self, connection, information_prefix: str, shared_block_name: str):
        """
        Read picture information and attach the shared memory block.

        Args:
            connection: Redis connection, not owned by the reader
            information_prefix: Key prefix of the picture information items,
                e.g. "cameras/daheng.0/pictures/main/"
            shared_block_name: Name of the shared memory block, e.g. "daheng.0.main"

        Raises:
            MissingDataError: width, height or channels is missing
            MalformedDataError: width, height or channels is not an integer
            SharedBlockError: the shared memory block does not exist
        """
        self.connection = connection
        self.information_prefix = information_prefix
        self.timestamp_key = information_prefix + keys.TIMESTAMP

        # Read once; later changes on the server are not picked up
        self._width = get_int(connection, information_prefix + keys.WIDTH)
        self._height = get_int(connection, information_prefix + keys.HEIGHT)
        self._channels = get_int(connection, information_prefix + keys.CHANNELS)
        self._format = get_text(connection, information_prefix + keys.FORMAT, keys.UNKNOWN_FORMAT)

        self._shared_block_name = shared_block_name
        self._block: Optional[SharedMemory] = attach_shared_block(shared_block_name)

        logger.info(
            f"Attached picture {shared_block_name}: {self._width}x{self._height}x"
            f"{self._channels} {self._format} ({self._block.size} bytes)"
        )

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def channels(self) -> int:
        return self._channels

    @property
    def format(self) -> str:
        """Pixel format such as "8U" or "32F", "Unknown" if not published."""
        return self._format

    @property
    def shared_block_name(self) -> str:
        return self._shared_block_name

    @property
    def closed(self) -> bool:
        return self._block is None

    def _snapshot(self, size: Optional[int] = None) -> bytes:
        if self._block is None:
            raise SharedBlockError(f"Reader of '{self._shared_block_name}' is closed")
        # Copy out so no view into the block outlives this call
        if size is None:
            return bytes(self._block.buf)
        return bytes(self._block.buf[:size])

    def read(self) -> np.ndarray:
        """
        Decode the picture currently held in the shared memory block.

        Channels and depth are kept as encoded (no color conversion, alpha kept).

        Returns:
            numpy array as returned by cv2.imdecode with IMREAD_UNCHANGED
        """
        data = np.frombuffer(self._snapshot(), dtype=np.uint8)
        try:
            picture = cv2.imdecode(data, cv2.IMREAD_UNCHANGED)
        except cv2.error as e:
            raise PictureDecodeError(f"Failed to decode picture '{self._shared_block_name}': {e}") from e

        if picture is None:
            raise PictureDecodeError(f"Failed to decode picture '{self._shared_block_name}'")
        return picture

    def read_raw(self) -> np.ndarray:
        """
        Interpret the block as an undecoded height x width x channels matrix.

        The element type follows the published pixel format. Single-channel
        pictures are returned as 2D arrays.

        Returns:
            numpy array (copied out of shared memory)
        """
        dtype = PIXEL_FORMATS.get(self._format)
        if dtype is None:
            raise MalformedDataError(
                f"Picture '{self._shared_block_name}' has unsupported pixel format {self._format!r}",
                key=self.information_prefix + keys.FORMAT,
            )

        size = self._width * self._height * self._channels * np.dtype(dtype).itemsize
        if self._block is not None and self._block.size < size:
            raise SharedBlockError(
                f"Shared picture block '{self._shared_block_name}' with the size of "
                f"{self._block.size} is smaller than needed: "
                f"{self._width}*{self._height}*{self._channels}*{np.dtype(dtype).itemsize}"
            )

        data = np.frombuffer(self._snapshot(size), dtype=dtype)
        if self._channels > 1:
            return data.reshape(self._height, self._width, self._channels)
        return data.reshape(self._height, self._width)

    def read_milliseconds_timestamp(self) -> int:
        """Capture time of the current picture, in milliseconds since the epoch."""
        return get_int(self.connection, self.timestamp_key)

    def read_timestamp(self) -> datetime:
        """Capture time of the current picture as a UTC datetime."""
        milliseconds = self.read_milliseconds_timestamp()
        try:
            return EPOCH + timedelta(milliseconds=milliseconds)
        except OverflowError as e:
            raise MalformedDataError(
                f"Key '{self.timestamp_key}' holds out of range timestamp {milliseconds}",
                key=self.timestamp_key,
            ) from e

    def close(self):
        """Detach the shared memory block. The block itself is left to the producer."""
        if self._block is None:
            return
        self._block.close()
        self._block = None
        logger.info(f"Detached picture {self._shared_block_name}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

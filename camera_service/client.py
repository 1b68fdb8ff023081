"""
Camera client - controls a camera server and opens its pictures through Redis.

Every call is one synchronous Redis operation: configuration values are
written under configurations/{device}/ and the camera server is notified on
cameras/{device}/command, where it re-reads the value it was told about.

Usage:
    from camera_service import CameraClient

    # Option 1: Own connection
    with CameraClient("daheng", 0) as client:
        client.set_exposure(5000)
        with client.get_reader("main") as reader:
            frame = reader.read()

    # Option 2: Share one connection between clients
    connection = connect()
    left = CameraClient("daheng", 0, connection=connection)
    right = CameraClient("daheng", 1, connection=connection)
    ...
    connection.close()
"""

import logging
from typing import Optional

import redis

from . import keys
from .config import DEFAULT_HOST, DEFAULT_PORT
from .errors import CameraConnectionError
from .reader import PictureReader
from .values import get_int, get_members

logger = logging.getLogger(__name__)

# Commands understood by the camera server
UPDATE_EXPOSURE = "update_exposure"
UPDATE_GAIN = "update_gain"
UPDATE_WHITE_BALANCE = "update_white_balance"
AUTO_EXPOSURE = "auto_exposure"
AUTO_GAIN = "auto_gain"
AUTO_WHITE_BALANCE = "auto_white_balance"
SAVE = "save"
SHUTDOWN = "shutdown"


def connect(
    port: int = DEFAULT_PORT,
    host: str = DEFAULT_HOST,
    socket_timeout: Optional[float] = None,
) -> redis.Redis:
    """
    Open a connection to the Redis server.

    The connection is checked with a PING so an unreachable server fails here
    rather than on the first camera call.

    Raises:
        CameraConnectionError: server unreachable
    """
    connection = redis.Redis(host=host, port=port, socket_timeout=socket_timeout)
    try:
        connection.ping()
    except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
        connection.close()
        raise CameraConnectionError(f"Could not connect to Redis at {host}:{port}: {e}") from e

    logger.info(f"Connected to Redis at {host}:{port}")
    return connection


def list_cameras(connection) -> list[str]:
    """Names of the devices currently registered by camera servers."""
    return get_members(connection, keys.CAMERAS_KEY)


class CameraClient:
    """Controls one camera device and opens readers for its pictures."""

    def __init__(
        self,
        type_name: str,
        device_index: int,
        port: int = DEFAULT_PORT,
        host: str = DEFAULT_HOST,
        connection: Optional[redis.Redis] = None,
    ):
        """
        Initialize camera client.

        Args:
            type_name: Camera type, e.g. "daheng"
            device_index: Index of the device of that type
            port: Redis port, used when no connection is given
            host: Redis host, used when no connection is given
            connection: Existing Redis connection to reuse. The caller keeps
                ownership and must close it once no client or reader uses it.
        """
        self._owns_connection = connection is None
        if connection is None:
            connection = connect(port=port, host=host)
        self.connection = connection

        self._device_name = keys.device_name(type_name, device_index)
        self._configuration_prefix = keys.configuration_prefix(self._device_name)
        self._command_channel = keys.command_channel(self._device_name)

    @property
    def device_name(self) -> str:
        return self._device_name

    @property
    def configuration_prefix(self) -> str:
        return self._configuration_prefix

    @property
    def command_channel(self) -> str:
        return self._command_channel

    def _publish(self, command: str):
        self.connection.publish(self._command_channel, command)
        logger.debug(f"{self._device_name}: published {command}")

    def _set_configuration(self, field: str, value):
        # Written as given; the camera server validates ranges
        self.connection.set(self._configuration_prefix + field, value)

    def exists(self) -> bool:
        """Whether a camera server has registered this device."""
        return bool(self.connection.sismember(keys.CAMERAS_KEY, self._device_name))

    def get_reader(self, picture_name: str) -> PictureReader:
        """
        Get a reader bound to the picture with the given name.

        Raises:
            MissingDataError: the picture information is not published
            SharedBlockError: the shared memory block does not exist
        """
        return PictureReader(
            self.connection,
            keys.picture_prefix(self._device_name, picture_name),
            keys.shared_block_name(self._device_name, picture_name),
        )

    def get_picture_names(self) -> list[str]:
        """Names of the pictures this camera currently publishes."""
        return get_members(self.connection, keys.pictures_key(self._device_name))

    def get_fps(self) -> int:
        """Frames captured per second, as last reported by the camera server."""
        return get_int(self.connection, keys.fps_key(self._device_name))

    def set_exposure(self, microseconds: int):
        """Set the exposure time in microseconds."""
        self._set_configuration(keys.EXPOSURE, microseconds)
        self._publish(UPDATE_EXPOSURE)

    def set_gain(self, gain: float):
        """Set the digital gain."""
        self._set_configuration(keys.GAIN, gain)
        self._publish(UPDATE_GAIN)

    def set_white_balance(self, red_ratio: float, green_ratio: float, blue_ratio: float):
        """Set the white balance ratios of the three color channels."""
        self._set_configuration(keys.WHITE_BALANCE_RED, red_ratio)
        self._set_configuration(keys.WHITE_BALANCE_GREEN, green_ratio)
        self._set_configuration(keys.WHITE_BALANCE_BLUE, blue_ratio)
        self._publish(UPDATE_WHITE_BALANCE)

    def auto_adjust_exposure(self):
        """Ask the camera to auto adjust the exposure once."""
        self._publish(AUTO_EXPOSURE)

    def auto_adjust_gain(self):
        """Ask the camera to auto adjust the gain once."""
        self._publish(AUTO_GAIN)

    def auto_adjust_white_balance(self):
        """Ask the camera to auto adjust the white balance once."""
        self._publish(AUTO_WHITE_BALANCE)

    def save_configuration(self):
        """Ask the camera server to persist its current configuration."""
        self._publish(SAVE)

    def shutdown(self):
        """Ask the camera server to close the camera and stop."""
        self._publish(SHUTDOWN)

    def close(self):
        """Close the connection if this client opened it."""
        if self._owns_connection and self.connection is not None:
            self.connection.close()
            logger.info(f"{self._device_name}: connection closed")
        self.connection = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

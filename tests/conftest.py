"""Pytest configuration."""

import os
import sys
import uuid
from multiprocessing.shared_memory import SharedMemory
from unittest.mock import MagicMock

import cv2
import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

# Keep CLI defaults independent of the developer's environment
for name in ("CAMERA_REDIS_HOST", "CAMERA_REDIS_PORT", "CAMERA_REDIS_TIMEOUT", "CAMERA_LOG_LEVEL"):
    os.environ.pop(name, None)


def make_connection(strings=None, sets=None):
    """
    Mock Redis connection backed by plain dicts.

    Replies are bytes, as from a connection without decode_responses.
    All calls are recorded on the mock, so call order can be asserted
    through connection.mock_calls.
    """
    strings = {} if strings is None else strings
    sets = {} if sets is None else sets

    def encode(value):
        return value if isinstance(value, bytes) else str(value).encode()

    def get(key):
        return strings.get(key)

    def set_(key, value):
        strings[key] = encode(value)
        return True

    def smembers(key):
        return set(sets.get(key, set()))

    def sismember(key, member):
        return int(encode(member) in sets.get(key, set()))

    connection = MagicMock()
    connection.get.side_effect = get
    connection.set.side_effect = set_
    connection.smembers.side_effect = smembers
    connection.sismember.side_effect = sismember
    connection.publish.return_value = 1
    connection.strings = strings
    connection.sets = sets
    return connection


@pytest.fixture
def connection():
    return make_connection()


@pytest.fixture
def block_name():
    # {type_name}.{device_index}.{picture}
    return f"pytest{uuid.uuid4().hex[:8]}.0.main"


@pytest.fixture
def shared_block(block_name):
    """Factory creating shared memory blocks; unlinked after the test."""
    created = []

    def create(data: bytes, size=None):
        block = SharedMemory(name=block_name, create=True, size=size or len(data))
        block.buf[:len(data)] = data
        created.append(block)
        return block

    yield create

    for block in created:
        block.close()
        block.unlink()


def encode_png(picture: np.ndarray) -> bytes:
    ok, data = cv2.imencode(".png", picture)
    assert ok
    return data.tobytes()


@pytest.fixture
def bgra_picture():
    picture = np.zeros((24, 32, 4), dtype=np.uint8)
    picture[:, :16] = (255, 0, 0, 255)
    picture[:, 16:] = (0, 0, 255, 128)
    return picture

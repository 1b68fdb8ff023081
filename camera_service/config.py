"""
Environment-driven settings for the camera service tools.

    CAMERA_REDIS_HOST     Redis host (default: 127.0.0.1)
    CAMERA_REDIS_PORT     Redis port (default: 6379)
    CAMERA_REDIS_TIMEOUT  Socket timeout in seconds (default: none)
    CAMERA_LOG_LEVEL      Logging level for the CLIs (default: INFO)
"""

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 6379
DEFAULT_LOG_LEVEL = "INFO"

# Camera selected by the CLIs when none is given
DEFAULT_DEVICE = "daheng"
DEFAULT_INDEX = 0

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


@dataclass
class ServiceConfig:
    """Connection and logging settings."""
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    socket_timeout: Optional[float] = None  # seconds
    log_level: str = DEFAULT_LOG_LEVEL


def load_config(environ: Optional[dict] = None) -> ServiceConfig:
    """Build a ServiceConfig from environment variables."""
    env = os.environ if environ is None else environ

    timeout = env.get("CAMERA_REDIS_TIMEOUT")
    return ServiceConfig(
        host=env.get("CAMERA_REDIS_HOST", DEFAULT_HOST),
        port=int(env.get("CAMERA_REDIS_PORT", DEFAULT_PORT)),
        socket_timeout=float(timeout) if timeout else None,
        log_level=env.get("CAMERA_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
    )

"""Naming scheme binding camera devices to Redis keys, channels and shared memory blocks."""

# Set of device names registered by running camera servers
CAMERAS_KEY = "cameras"

# Configuration fields read by the camera server on update commands
EXPOSURE = "Exposure"
GAIN = "Gain"
WHITE_BALANCE_RED = "WhiteBalanceRed"
WHITE_BALANCE_GREEN = "WhiteBalanceGreen"
WHITE_BALANCE_BLUE = "WhiteBalanceBlue"

# Picture information fields
WIDTH = "width"
HEIGHT = "height"
CHANNELS = "channels"
FORMAT = "format"
TIMESTAMP = "timestamp"

UNKNOWN_FORMAT = "Unknown"


def device_name(type_name: str, device_index: int) -> str:
    return f"{type_name}.{device_index}"


def configuration_prefix(device: str) -> str:
    return f"configurations/{device}/"


def command_channel(device: str) -> str:
    return f"cameras/{device}/command"


def fps_key(device: str) -> str:
    # Singular "camera/" is the key clients have always read for fps
    return f"camera/{device}/status/fps"


def pictures_key(device: str) -> str:
    return f"cameras/{device}/pictures"


def picture_prefix(device: str, picture: str) -> str:
    return f"{pictures_key(device)}/{picture}/"


def shared_block_name(device: str, picture: str) -> str:
    return f"{device}.{picture}"

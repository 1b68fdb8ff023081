#!/usr/bin/env python3
"""
Camera viewer - shows the live picture of a camera in an OpenCV window.

Usage:
    python -m camera_service.viewer -d daheng -i 0 -p main
    python -m camera_service.viewer -d daheng -i 0 --list

Press Esc to quit.
"""

import argparse
import logging
import sys

import cv2

from .client import CameraClient, connect
from .config import DEFAULT_DEVICE, DEFAULT_INDEX, LOG_FORMAT, load_config
from .errors import PictureDecodeError

logger = logging.getLogger(__name__)

ESCAPE_KEY = 27
FRAME_WAIT_MS = 15  # ~60 fps max


def window_title(device: str, index: int, picture: str) -> str:
    return f"{device}-{index}: {picture}"


def show(reader, title: str, width: int = 0, height: int = 0):
    """Display frames until Esc is pressed."""
    while cv2.waitKey(FRAME_WAIT_MS) != ESCAPE_KEY:
        try:
            picture = reader.read()
        except PictureDecodeError as e:
            # Producer may be mid-write; try the next frame
            logger.warning(f"Skipping frame: {e}")
            continue

        if width and height:
            picture = cv2.resize(picture, (width, height))
        cv2.imshow(title, picture)

    cv2.destroyAllWindows()


def build_parser(defaults=None) -> argparse.ArgumentParser:
    config = defaults or load_config()
    parser = argparse.ArgumentParser(
        description="Camera viewer - shows pictures published by a camera server"
    )
    parser.add_argument(
        "-d", "--device",
        type=str,
        default=DEFAULT_DEVICE,
        help=f"Camera type name (default: {DEFAULT_DEVICE})"
    )
    parser.add_argument(
        "-i", "--index",
        type=int,
        default=DEFAULT_INDEX,
        help=f"Camera device index (default: {DEFAULT_INDEX})"
    )
    parser.add_argument(
        "-p", "--picture",
        type=str,
        default=None,
        help="Picture name to show (default: list pictures)"
    )
    parser.add_argument(
        "-W", "--width",
        type=int,
        default=0,
        help="Resize window to this width (needs --height)"
    )
    parser.add_argument(
        "-H", "--height",
        type=int,
        default=0,
        help="Resize window to this height (needs --width)"
    )
    parser.add_argument(
        "--host",
        type=str,
        default=config.host,
        help=f"Redis host (default: {config.host})"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=config.port,
        help=f"Redis port (default: {config.port})"
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print picture names and exit"
    )
    return parser


def main(argv=None) -> int:
    """CLI entry point."""
    config = load_config()
    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)

    args = build_parser(config).parse_args(argv)

    connection = connect(port=args.port, host=args.host, socket_timeout=config.socket_timeout)
    try:
        client = CameraClient(args.device, args.index, connection=connection)
        if not client.exists():
            logger.warning(f"Camera {client.device_name} is not registered")

        if args.list or args.picture is None:
            print(f"Pictures of {client.device_name}:")
            for name in client.get_picture_names():
                print(name)
            return 0

        with client.get_reader(args.picture) as reader:
            logger.info(
                f"Showing {args.picture}: {reader.width}x{reader.height}, "
                f"{reader.channels} channels, format {reader.format}"
            )
            show(reader, window_title(args.device, args.index, args.picture), args.width, args.height)
    finally:
        connection.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Camera calibrator - adjusts exposure, gain and white balance of a camera.

Usage:
    python -m camera_service.calibrator -d daheng -i 0 -e 8000 -g 1.5
    python -m camera_service.calibrator -d daheng -i 0 -R 1.2 -G 1.0 -B 1.4 --save
    python -m camera_service.calibrator -d daheng -i 0 -E -W
"""

import argparse
import logging
import sys

from .client import CameraClient, connect
from .config import DEFAULT_DEVICE, DEFAULT_INDEX, LOG_FORMAT, load_config

logger = logging.getLogger(__name__)


def build_parser(defaults=None) -> argparse.ArgumentParser:
    config = defaults or load_config()
    parser = argparse.ArgumentParser(
        description="Camera calibrator - adjusts camera configuration"
    )
    parser.add_argument("-d", "--device", type=str, default=DEFAULT_DEVICE,
                        help=f"Camera type name (default: {DEFAULT_DEVICE})")
    parser.add_argument("-i", "--index", type=int, default=DEFAULT_INDEX,
                        help=f"Camera device index (default: {DEFAULT_INDEX})")
    parser.add_argument("-e", "--exposure", type=int,
                        help="Exposure time in microseconds")
    parser.add_argument("-g", "--gain", type=float,
                        help="Digital gain")
    parser.add_argument("-R", "--balance-red", type=float,
                        help="White balance ratio of the red channel")
    parser.add_argument("-G", "--balance-green", type=float,
                        help="White balance ratio of the green channel")
    parser.add_argument("-B", "--balance-blue", type=float,
                        help="White balance ratio of the blue channel")
    parser.add_argument("-E", "--auto-exposure", action="store_true",
                        help="Auto adjust exposure once")
    parser.add_argument("-A", "--auto-gain", action="store_true",
                        help="Auto adjust gain once")
    parser.add_argument("-W", "--auto-white-balance", action="store_true",
                        help="Auto adjust white balance once")
    parser.add_argument("--save", action="store_true",
                        help="Ask the camera server to save its configuration")
    parser.add_argument("--host", type=str, default=config.host,
                        help=f"Redis host (default: {config.host})")
    parser.add_argument("--port", type=int, default=config.port,
                        help=f"Redis port (default: {config.port})")
    return parser


def white_balance(args: argparse.Namespace):
    """
    Requested white balance ratios, or None if not requested.

    Raises:
        ValueError: only some of the three ratios were given
    """
    balance = (args.balance_red, args.balance_green, args.balance_blue)
    if all(ratio is None for ratio in balance):
        return None
    if any(ratio is None for ratio in balance):
        raise ValueError("White balance needs --balance-red, --balance-green and --balance-blue together")
    return balance


def apply(client: CameraClient, args: argparse.Namespace) -> list[str]:
    """
    Apply the requested adjustments to the camera.

    Returns:
        Messages describing what was done, in order
    """
    balance = white_balance(args)

    done = []

    if args.exposure is not None:
        client.set_exposure(args.exposure)
        done.append("Exposure adjusted.")
    if args.gain is not None:
        client.set_gain(args.gain)
        done.append("Gain adjusted.")
    if balance is not None:
        client.set_white_balance(*balance)
        done.append("White balance adjusted.")

    if args.auto_exposure:
        client.auto_adjust_exposure()
        done.append("Exposure auto adjusting.")
    if args.auto_gain:
        client.auto_adjust_gain()
        done.append("Gain auto adjusting.")
    if args.auto_white_balance:
        client.auto_adjust_white_balance()
        done.append("White balance auto adjusting.")

    if args.save:
        client.save_configuration()
        done.append("Configuration saved.")

    return done


def main(argv=None) -> int:
    """CLI entry point."""
    config = load_config()
    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)

    parser = build_parser(config)
    args = parser.parse_args(argv)
    try:
        white_balance(args)
    except ValueError as e:
        parser.error(str(e))

    connection = connect(port=args.port, host=args.host, socket_timeout=config.socket_timeout)
    try:
        client = CameraClient(args.device, args.index, connection=connection)
        done = apply(client, args)
        if not done:
            parser.print_help()
            return 1
        for message in done:
            print(message)
    finally:
        connection.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())

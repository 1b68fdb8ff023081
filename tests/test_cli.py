"""Tests for the viewer and calibrator command line tools."""

from unittest.mock import MagicMock, call, patch

import pytest

from camera_service import calibrator, viewer
from camera_service.config import DEFAULT_DEVICE, DEFAULT_INDEX, ServiceConfig
from conftest import make_connection


def parse_calibrator(*argv):
    return calibrator.build_parser(ServiceConfig()).parse_args(list(argv))


class TestCalibrator:
    def test_apply_in_order(self):
        client = MagicMock()
        args = parse_calibrator("-e", "8000", "-g", "1.5", "-R", "1.2", "-G", "1.0", "-B", "1.4", "--save")

        done = calibrator.apply(client, args)

        assert client.mock_calls == [
            call.set_exposure(8000),
            call.set_gain(1.5),
            call.set_white_balance(1.2, 1.0, 1.4),
            call.save_configuration(),
        ]
        assert done == [
            "Exposure adjusted.",
            "Gain adjusted.",
            "White balance adjusted.",
            "Configuration saved.",
        ]

    def test_auto_adjust_flags(self):
        client = MagicMock()
        args = parse_calibrator("-E", "-A", "-W")

        calibrator.apply(client, args)

        assert client.mock_calls == [
            call.auto_adjust_exposure(),
            call.auto_adjust_gain(),
            call.auto_adjust_white_balance(),
        ]

    def test_partial_white_balance_rejected(self):
        client = MagicMock()
        args = parse_calibrator("-e", "8000", "-R", "1.2")

        with pytest.raises(ValueError):
            calibrator.apply(client, args)
        assert client.mock_calls == []

    def test_partial_white_balance_rejected_before_connecting(self, capsys):
        with patch("camera_service.calibrator.connect") as connect:
            with pytest.raises(SystemExit) as excinfo:
                calibrator.main(["-R", "1.2", "-G", "1.0"])

        assert excinfo.value.code == 2
        connect.assert_not_called()
        assert "--balance-blue" in capsys.readouterr().err

    def test_shared_device_defaults(self):
        args = parse_calibrator()
        assert (args.device, args.index) == (DEFAULT_DEVICE, DEFAULT_INDEX)
        args = viewer.build_parser(ServiceConfig()).parse_args([])
        assert (args.device, args.index) == (DEFAULT_DEVICE, DEFAULT_INDEX)

    def test_nothing_requested(self):
        assert calibrator.apply(MagicMock(), parse_calibrator()) == []

    def test_main_publishes(self, capsys):
        connection = make_connection()
        with patch("camera_service.calibrator.connect", return_value=connection) as connect:
            assert calibrator.main(["-d", "hik", "-i", "2", "-g", "2.0", "--port", "6380"]) == 0

        connect.assert_called_once_with(port=6380, host="127.0.0.1", socket_timeout=None)
        assert connection.strings["configurations/hik.2/Gain"] == b"2.0"
        connection.publish.assert_called_once_with("cameras/hik.2/command", "update_gain")
        connection.close.assert_called_once()
        assert "Gain adjusted." in capsys.readouterr().out


class TestViewer:
    def test_window_title(self):
        assert viewer.window_title("daheng", 0, "main") == "daheng-0: main"

    def test_parser_defaults(self):
        args = viewer.build_parser(ServiceConfig(host="redis.local", port=6390)).parse_args([])
        assert args.device == "daheng"
        assert args.index == 0
        assert args.picture is None
        assert (args.host, args.port) == ("redis.local", 6390)

    def test_lists_pictures_without_picture(self, capsys):
        connection = make_connection(sets={"cameras/daheng.0/pictures": {b"main", b"depth"}})
        with patch("camera_service.viewer.connect", return_value=connection):
            assert viewer.main([]) == 0

        out = capsys.readouterr().out.splitlines()
        assert out == ["Pictures of daheng.0:", "depth", "main"]
        connection.close.assert_called_once()

    def test_show_until_escape(self):
        reader = MagicMock()
        with patch("camera_service.viewer.cv2") as cv2:
            cv2.waitKey.side_effect = [0, 0, viewer.ESCAPE_KEY]
            viewer.show(reader, "daheng-0: main", 320, 240)

        assert reader.read.call_count == 2
        assert cv2.resize.call_count == 2
        cv2.resize.assert_called_with(reader.read.return_value, (320, 240))
        cv2.destroyAllWindows.assert_called_once()

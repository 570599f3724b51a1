# tests/unit/tools/test_relayctl.py
"""
Unit tests for the relayctl command-line tool.

Commands run against a controller whose SNMP adapter is mocked.
"""

import argparse
import json
from unittest.mock import AsyncMock, patch

import pytest

from daenet.errors import TransportError
from tools.relayctl import create_parser, format_state, main, parse_state, run


def parse(*argv):
    return create_parser().parse_args(["--host", "192.168.1.201", *argv])


# ================================================================
# STATE PARSING TESTS
# ================================================================
class TestParseState:
    def test_bit_string_pin_one_first(self):
        assert parse_state("10100000") == [1, 0, 1, 0, 0, 0, 0, 0]

    def test_hex_register(self):
        assert parse_state("0xAA") == [0, 1, 0, 1, 0, 1, 0, 1]

    def test_decimal_register(self):
        assert parse_state("5") == [1, 0, 1, 0, 0, 0, 0, 0]

    def test_bit_string_wins_over_decimal(self):
        assert parse_state("00000101") == [0, 0, 0, 0, 0, 1, 0, 1]

    @pytest.mark.parametrize("text", ["256", "-1", "relays", "1010", "0x1FF"])
    def test_rejected(self, text):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_state(text)


# ================================================================
# PARSER TESTS
# ================================================================
class TestParser:
    def test_get(self):
        args = parse("get")

        assert args.command == "get"
        assert args.host == "192.168.1.201"
        assert args.port == 161
        assert args.json is False

    def test_set(self):
        assert parse("set", "0xFF").state == [1] * 8

    def test_pin(self):
        args = parse("pin", "3", "1")

        assert (args.pin, args.value) == (3, 1)

    def test_device_and_host_exclusive(self):
        with pytest.raises(SystemExit) as exc_info:
            create_parser().parse_args(["--device", "a", "--host", "b", "get"])

        assert exc_info.value.code == 2

    def test_command_required(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--host", "b"])

    def test_bad_state_is_usage_error(self):
        with pytest.raises(SystemExit) as exc_info:
            parse("set", "nonsense")

        assert exc_info.value.code == 2


# ================================================================
# RUN TESTS
# ================================================================
class TestRun:
    @pytest.mark.asyncio
    async def test_get(self, controller, mock_adapter, register_response, capsys):
        mock_adapter.get.return_value = register_response(5)

        code = await run(parse("get"), controller)

        assert code == 0
        assert capsys.readouterr().out.strip() == (
            "test_board@192.168.1.201  1:1 2:0 3:1 4:0 5:0 6:0 7:0 8:0"
        )
        mock_adapter.disconnect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_set_json(self, controller, mock_adapter, capsys):
        code = await run(parse("--json", "set", "0xAA"), controller)

        assert code == 0
        mock_adapter.set.assert_awaited_once_with([("1.3.6.1.4.1.19865.1.2.2.33.0", 0xAA)])
        output = json.loads(capsys.readouterr().out)
        assert output["DAEnetIP"]["status"] == [0, 1, 0, 1, 0, 1, 0, 1]

    @pytest.mark.asyncio
    async def test_pin(self, controller, mock_adapter, capsys):
        code = await run(parse("pin", "3", "1"), controller)

        assert code == 0
        assert "3:1" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_toggle(self, controller, mock_adapter, register_response):
        mock_adapter.get.return_value = register_response(0xFF)

        assert await run(parse("toggle", "8"), controller) == 0

        mock_adapter.set.assert_awaited_once_with([("1.3.6.1.4.1.19865.1.2.2.8.0", 0)])

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "argv", [("pin", "9", "1"), ("pin", "3", "2"), ("toggle", "0")]
    )
    async def test_invalid_arguments_send_nothing(self, controller, mock_adapter, capsys, argv):
        code = await run(parse(*argv), controller)

        assert code == 1
        assert "Error:" in capsys.readouterr().err
        mock_adapter.connect.assert_not_called()
        mock_adapter.get.assert_not_called()
        mock_adapter.set.assert_not_called()

    @pytest.mark.asyncio
    async def test_transport_error_exit_code(self, controller, mock_adapter, capsys):
        mock_adapter.connect.side_effect = TransportError("no route to host")

        code = await run(parse("get"), controller)

        assert code == 1
        assert "no route to host" in capsys.readouterr().err


class TestFormatState:
    def test_unknown_state(self, controller):
        assert format_state(controller) == "DAEnetIP2@192.168.1.201(test_board) = unknown"


# ================================================================
# MAIN TESTS
# ================================================================
class TestMain:
    @pytest.mark.asyncio
    async def test_device_from_config(self, temp_config_dir, write_config_file, board_config):
        write_config_file(board_config)

        with patch("tools.relayctl.run", new=AsyncMock(return_value=0)) as mock_run:
            code = await main(["--config-dir", str(temp_config_dir), "--device", "lab_relays", "get"])

        assert code == 0
        controller = mock_run.await_args.args[1]
        assert controller.alias == "lab"
        assert controller.host == "192.168.1.201"
        assert controller.identity.port == 1161

    @pytest.mark.asyncio
    async def test_unknown_device_is_usage_error(
        self, temp_config_dir, write_config_file, board_config
    ):
        write_config_file(board_config)

        with pytest.raises(SystemExit) as exc_info:
            await main(["--config-dir", str(temp_config_dir), "--device", "nope", "get"])

        assert exc_info.value.code == 2

    @pytest.mark.asyncio
    async def test_unsupported_version_in_config(
        self, temp_config_dir, write_config_file, board_config
    ):
        board_config["devices"][0]["version"] = 3
        write_config_file(board_config)

        with pytest.raises(SystemExit) as exc_info:
            await main(["--config-dir", str(temp_config_dir), "--device", "lab_relays", "get"])

        assert exc_info.value.code == 2

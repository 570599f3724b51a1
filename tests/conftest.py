# tests/conftest.py
"""Shared pytest fixtures for relay board tests.

The SNMP adapter is the only thing mocked: the SNMPProtocol and the
RelayBankController under test are real, so every test exercises the same
response handling a board on the wire would.
"""

from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
import yaml

from daenet.devices import RelayBankController, register_oid
from daenet.protocols.snmp import SNMPProtocol

BOARD_HOST = "192.168.1.201"
BOARD_COMMUNITY = "private"


# ----------------------------------------------------------------
# SNMP response helpers
# ----------------------------------------------------------------
def _response(varbinds, error_indication=None, error_status=0, error_index=0):
    return (error_indication, error_status, error_index, list(varbinds))


@pytest.fixture
def snmp_response():
    """Factory for raw adapter responses.

    Returns:
        Function building (error_indication, error_status, error_index, var_binds)
    """

    def _build(oid: str, value, **kwargs):
        return _response([(oid, value)], **kwargs)

    return _build


@pytest.fixture
def register_response(snmp_response):
    """Factory for a GET/SET response carrying the packed P5 register."""

    def _build(value: int):
        return snmp_response(register_oid(), value)

    return _build


# ----------------------------------------------------------------
# Adapter / session / controller
# ----------------------------------------------------------------
@pytest.fixture
def mock_adapter(register_response):
    """Create a mock pysnmp adapter.

    GET returns register 0 by default; SET echoes the request back.
    """
    adapter = Mock()
    adapter.timeout = 0.5
    adapter.retries = 0
    adapter.connect = AsyncMock(return_value=True)
    adapter.disconnect = AsyncMock()
    adapter.probe = AsyncMock(return_value={"transport": "snmp-v1-udp"})
    adapter.get = AsyncMock(return_value=register_response(0))
    adapter.set = AsyncMock(side_effect=lambda varbinds: _response(varbinds))
    return adapter


@pytest.fixture
def session(mock_adapter):
    """Real SNMPProtocol on top of the mock adapter."""
    return SNMPProtocol(mock_adapter)


@pytest.fixture
def controller(session):
    """Unconnected controller for one board."""
    return RelayBankController(
        host=BOARD_HOST,
        alias="test_board",
        community=BOARD_COMMUNITY,
        session=session,
    )


@pytest.fixture
async def connected_controller(controller, mock_adapter, register_response):
    """Controller after connect(), with register 0x05 (relays 1 and 3 on)."""
    mock_adapter.get.return_value = register_response(0x05)
    await controller.connect()
    mock_adapter.get.reset_mock()
    mock_adapter.set.reset_mock()
    return controller


# ----------------------------------------------------------------
# Configuration fixtures
# ----------------------------------------------------------------
@pytest.fixture
def temp_config_dir(tmp_path) -> Path:
    """Temporary directory for configuration files."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def write_config_file(temp_config_dir):
    """Factory fixture for writing YAML configuration files.

    Returns:
        Function that writes config dict to YAML file
    """

    def _write_config(config: dict, filename: str = "devices.yml") -> Path:
        config_file = temp_config_dir / filename
        with open(config_file, "w") as f:
            yaml.dump(config, f)
        return config_file

    return _write_config


@pytest.fixture
def board_config() -> dict:
    """devices.yml content with one board."""
    return {
        "devices": [
            {
                "name": "lab_relays",
                "version": 2,
                "host": BOARD_HOST,
                "alias": "lab",
                "community": BOARD_COMMUNITY,
                "port": 1161,
                "timeout": 1.5,
                "retries": 2,
            }
        ]
    }

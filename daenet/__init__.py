"""
DAEnetIP2 relay board client.

SNMP v1 control of the P5 module (8 relays) of a DAEnetIP2 board.

Usage:
    from daenet import RelayBankController

    board = RelayBankController(host="192.168.1.201", community="private")
    board.on("pinSet", print)
    await board.connect()
    await board.toggle_relay(3)
"""

from daenet.devices import DeviceIdentity, RelayBankController
from daenet.errors import (
    DeviceProtocolError,
    InvalidArgument,
    RelayBankError,
    TransportError,
)
from daenet.events import EventBus, RelayEvent

__version__ = "0.4.0"

__all__ = [
    "DeviceIdentity",
    "DeviceProtocolError",
    "EventBus",
    "InvalidArgument",
    "RelayBankController",
    "RelayBankError",
    "RelayEvent",
    "TransportError",
]

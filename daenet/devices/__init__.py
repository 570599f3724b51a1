"""DAEnetIP board controllers."""

from daenet.devices.daenetip2 import (
    DeviceIdentity,
    RelayBankController,
    pin_oid,
    register_oid,
)
from daenet.devices.register_codec import decode, encode

__all__ = [
    "DeviceIdentity",
    "RelayBankController",
    "decode",
    "encode",
    "pin_oid",
    "register_oid",
]

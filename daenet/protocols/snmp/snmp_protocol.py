# daenet/protocols/snmp/snmp_protocol.py
"""
SNMP v1 protocol abstraction.

Turns raw adapter responses into plain (oid, value) varbinds and maps every
failure onto TransportError or DeviceProtocolError. Concrete adapters are
injected (duck-typed).
"""

import asyncio
from typing import Any

from pysnmp.proto.rfc1905 import EndOfMibView, NoSuchInstance, NoSuchObject

from daenet.errors import DeviceProtocolError, TransportError
from daenet.protocols.base_protocol import BaseProtocol

Varbind = tuple[str, Any]

# Slack on top of the adapter's own timeout * attempts
REQUEST_TIMEOUT_MARGIN = 1.0


def _pretty(value: Any) -> str:
    if hasattr(value, "prettyPrint"):
        return value.prettyPrint()
    return str(value)


def _oid_str(oid: Any) -> str:
    if hasattr(oid, "getOid"):
        return str(oid.getOid())
    return str(oid)


class SNMPProtocol(BaseProtocol):
    """
    SNMP v1 session wrapper.

    Expected adapter interface (duck-typed):
      - connect() -> bool
      - disconnect() -> None
      - probe() -> dict
      - get(oids) -> (error_indication, error_status, error_index, var_binds)
      - set(varbinds) -> (error_indication, error_status, error_index, var_binds)
      - timeout, retries attributes (seconds, count)
    """

    def __init__(self, adapter, request_timeout: float | None = None):
        super().__init__("snmp")
        self.adapter = adapter

        if request_timeout is None:
            attempts = int(adapter.retries) + 1
            request_timeout = float(adapter.timeout) * attempts + REQUEST_TIMEOUT_MARGIN
        self.request_timeout = request_timeout

    # ------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------

    async def connect(self) -> bool:
        self.connected = await self.adapter.connect()
        return self.connected

    async def disconnect(self) -> None:
        if self.connected:
            await self.adapter.disconnect()
        self.connected = False

    async def probe(self) -> dict[str, object]:
        return {
            "protocol": self.protocol_name,
            "version": "1",
            "connected": self.connected,
            "request_timeout": self.request_timeout,
            "transport": await self.adapter.probe(),
        }

    # ------------------------------------------------------------
    # varbind sentinels
    # ------------------------------------------------------------

    @staticmethod
    def is_varbind_error(varbind: Varbind) -> bool:
        """True if the varbind value is an SNMP exception value."""
        return isinstance(varbind[1], (NoSuchObject, NoSuchInstance, EndOfMibView))

    @staticmethod
    def varbind_error(varbind: Varbind) -> str:
        """Human-readable message for an exception varbind."""
        oid, value = varbind
        return f"{type(value).__name__} ({_pretty(value)}) at {oid}"

    # ------------------------------------------------------------
    # requests
    # ------------------------------------------------------------

    async def get(self, oids: list[str]) -> list[Varbind]:
        return await self._request("GET", self.adapter.get(oids))

    async def set(self, varbinds: list[Varbind]) -> list[Varbind]:
        return await self._request("SET", self.adapter.set(varbinds))

    async def _request(self, verb: str, pending) -> list[Varbind]:
        try:
            response = await asyncio.wait_for(pending, timeout=self.request_timeout)
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"SNMP {verb} timed out after {self.request_timeout:.1f}s"
            ) from e
        except OSError as e:
            raise TransportError(f"SNMP {verb} failed: {e}") from e

        try:
            error_indication, error_status, error_index, var_binds = response
        except (TypeError, ValueError) as e:
            raise TransportError(f"Malformed SNMP {verb} response: {response!r}") from e

        if error_indication:
            raise TransportError(f"SNMP {verb} failed: {_pretty(error_indication)}")

        var_binds = [(_oid_str(vb[0]), vb[1]) for vb in var_binds or []]

        if error_status and int(error_status):
            oid = None
            if error_index and 0 < int(error_index) <= len(var_binds):
                oid = var_binds[int(error_index) - 1][0]
            status = _pretty(error_status)
            raise DeviceProtocolError(
                f"SNMP {verb} rejected: {status} at {oid or '?'}",
                oid=oid,
                status=status,
            )

        return var_binds

# daenet/protocols/snmp/pysnmp_7.py
"""
SNMP v1 adapter using pysnmp 7 (asyncio hlapi)

Transport-only adapter.
No device state.
No protocol semantics.
"""

from pysnmp.error import PySnmpError
from pysnmp.hlapi.v3arch.asyncio import (
    CommunityData,
    ContextData,
    ObjectIdentity,
    ObjectType,
    SnmpEngine,
    UdpTransportTarget,
    get_cmd,
    set_cmd,
)
from pysnmp.proto.rfc1902 import Integer32

from daenet.errors import TransportError

SNMP_V1 = 0  # pysnmp mpModel for SNMPv1


class PySnmp7Adapter:
    def __init__(
        self,
        host: str,
        port: int = 161,
        community: str = "public",
        timeout: float = 2.0,
        retries: int = 1,
    ):
        self.host = host
        self.port = port
        self.community = community
        self.timeout = timeout
        self.retries = retries

        self.engine: SnmpEngine | None = None
        self.transport: UdpTransportTarget | None = None
        self.connected: bool = False

        self._auth = CommunityData(community, mpModel=SNMP_V1)
        self._context = ContextData()

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------
    async def connect(self) -> bool:
        if not self.engine:
            self.engine = SnmpEngine()

        if not self.transport:
            try:
                self.transport = await UdpTransportTarget.create(
                    (self.host, self.port),
                    timeout=self.timeout,
                    retries=self.retries,
                )
            except PySnmpError as e:
                await self.disconnect()
                raise TransportError(
                    f"Cannot open SNMP session to {self.host}:{self.port}: {e}"
                ) from e

        self.connected = True
        return self.connected

    async def disconnect(self) -> None:
        if self.engine:
            self.engine.close_dispatcher()
            self.engine = None

        self.transport = None
        self.connected = False

    # ------------------------------------------------------------------
    # SNMP primitives (no semantics)
    # ------------------------------------------------------------------
    async def get(self, oids: list[str]):
        """
        Issue one GET PDU.

        Returns the raw pysnmp tuple
        (error_indication, error_status, error_index, var_binds).
        """
        if not self.engine or not self.transport:
            raise TransportError("SNMP session not open")

        try:
            return await get_cmd(
                self.engine,
                self._auth,
                self.transport,
                self._context,
                *[ObjectType(ObjectIdentity(oid)) for oid in oids],
            )
        except PySnmpError as e:
            raise TransportError(f"SNMP GET failed: {e}") from e

    async def set(self, varbinds: list[tuple[str, int]]):
        """Issue one SET PDU with Integer32 values. Returns the raw pysnmp tuple."""
        if not self.engine or not self.transport:
            raise TransportError("SNMP session not open")

        try:
            return await set_cmd(
                self.engine,
                self._auth,
                self.transport,
                self._context,
                *[
                    ObjectType(ObjectIdentity(oid), Integer32(value))
                    for oid, value in varbinds
                ],
            )
        except PySnmpError as e:
            raise TransportError(f"SNMP SET failed: {e}") from e

    # ------------------------------------------------------------------
    # Transport-level introspection only
    # ------------------------------------------------------------------
    async def probe(self) -> dict:
        return {
            "transport": "snmp-v1-udp",
            "host": self.host,
            "port": self.port,
            "timeout": self.timeout,
            "retries": self.retries,
            "connected": self.connected,
        }

# daenet/devices/daenetip2.py
"""
DAEnetIP2 relay bank controller.

Controls the P5 module (8 relays) of a DAEnetIP2 board over SNMP v1:
- read the whole bank (one packed register)
- write the whole bank
- write a single relay
- toggle a single relay (read from the device, then write)

Results are returned to the awaiting caller and, when given, to a
callback(error, state). State changes are published on an EventBus.

OID layout (from the board MIB):
    1.3.6.1.4.1.19865 . 1.2 . <module> . <index> . 0
    module 2 is P5; index 33 is the packed register, 1..8 are single relays.
"""

import asyncio
import json
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from daenet.errors import (
    DeviceProtocolError,
    InvalidArgument,
    RelayBankError,
    TransportError,
)
from daenet.events import EventBus, RelayEvent, Subscriber
from daenet.logging_system import DeviceLogger, get_logger
from daenet.protocols.snmp import PySnmp7Adapter, SNMPProtocol

from .register_codec import (
    RelayBankState,
    decode,
    encode,
    validate_pin,
    validate_pin_value,
)

SUPPORTED_VERSION = 2

MIB_ROOT = "1.3.6.1.4.1.19865"
PRODUCT_PATH = "1.2"
P3 = "1"  # not supported
P5 = "2"  # 8x relay control
P6 = "3"  # not supported
P5_REGISTER_INDEX = 33

Callback = Callable[[Exception | None, RelayBankState | None], None]


def register_oid() -> str:
    """OID of the packed P5 register."""
    return f"{MIB_ROOT}.{PRODUCT_PATH}.{P5}.{P5_REGISTER_INDEX}.0"


def pin_oid(pin: int) -> str:
    """OID of a single P5 relay (1..8)."""
    return f"{MIB_ROOT}.{PRODUCT_PATH}.{P5}.{validate_pin(pin)}.0"


def check_version(version: Any) -> int:
    """Only DAEnetIP2 is supported, given as 2 or "2"."""
    if isinstance(version, str) and version.strip() == str(SUPPORTED_VERSION):
        return SUPPORTED_VERSION
    if type(version) is int and version == SUPPORTED_VERSION:
        return SUPPORTED_VERSION
    raise InvalidArgument(f"unsupported version: {version!r}")


@dataclass(frozen=True)
class DeviceIdentity:
    """Who the controller talks to. Fixed for the controller's lifetime."""

    version: int = SUPPORTED_VERSION
    host: str = "localhost"
    alias: str = ""
    community: str = "public"
    port: int = 161
    timeout: float = 2.0
    retries: int = 1

    def __post_init__(self):
        object.__setattr__(self, "version", check_version(self.version))
        if not self.host:
            object.__setattr__(self, "host", "localhost")
        if not self.alias:
            object.__setattr__(self, "alias", f"DAEnetIP{self.version}")
        if not self.community:
            object.__setattr__(self, "community", "public")

    @classmethod
    def from_config(cls, settings: dict[str, Any]) -> "DeviceIdentity":
        """Build from a devices.yml entry; unknown keys are ignored."""
        fields = {
            key: settings[key]
            for key in ("version", "host", "alias", "community", "port", "timeout", "retries")
            if settings.get(key) is not None
        }
        return cls(**fields)


class RelayBankController:
    """
    SNMP v1 client for the P5 relay bank of one DAEnetIP2 board.

    Construction does no network I/O; call connect() to open the session
    and read the initial state.
    """

    def __init__(
        self,
        version: int = SUPPORTED_VERSION,
        host: str | None = None,
        alias: str | None = None,
        community: str | None = None,
        *,
        port: int = 161,
        timeout: float = 2.0,
        retries: int = 1,
        identity: DeviceIdentity | None = None,
        session: SNMPProtocol | None = None,
        events: EventBus | None = None,
    ):
        """
        Initialise controller.

        Args:
            version: DAEnet board generation (only 2)
            host: Board address (default localhost)
            alias: Free-text label (default DAEnetIP2)
            community: SNMP v1 read/write community (default public)
            port: SNMP UDP port
            timeout: Per-attempt SNMP timeout in seconds
            retries: SNMP retries per request
            identity: Prebuilt identity; overrides the arguments above
            session: SNMP session provider (default: pysnmp over UDP)
            events: Event bus to publish on (default: a private one)
        """
        self.identity = identity or DeviceIdentity(
            version=version,
            host=host or "localhost",
            alias=alias or "",
            community=community or "public",
            port=port,
            timeout=timeout,
            retries=retries,
        )

        self.logger: DeviceLogger = get_logger(__name__, device=self.identity.alias)
        self.events = events or EventBus(logger=self.logger)

        self.session = session or SNMPProtocol(
            PySnmp7Adapter(
                host=self.identity.host,
                port=self.identity.port,
                community=self.identity.community,
                timeout=self.identity.timeout,
                retries=self.identity.retries,
            )
        )

        self._state: RelayBankState | None = None
        self._write_lock = asyncio.Lock()

    @classmethod
    def from_config(cls, settings: dict[str, Any], **kwargs) -> "RelayBankController":
        return cls(identity=DeviceIdentity.from_config(settings), **kwargs)

    check_version = staticmethod(check_version)

    # ------------------------------------------------------------------
    # Identity and cached state
    # ------------------------------------------------------------------

    @property
    def version(self) -> int:
        return self.identity.version

    @property
    def host(self) -> str:
        return self.identity.host

    @property
    def alias(self) -> str:
        return self.identity.alias

    @property
    def community(self) -> str:
        return self.identity.community

    @property
    def state(self) -> RelayBankState | None:
        """Last device-confirmed relay state, or None before the first read."""
        return list(self._state) if self._state is not None else None

    @property
    def status(self) -> dict[str, Any]:
        """Per-module status. Only P5 is managed."""
        return {
            "P3": "unknown",
            "P5": self.state if self._state is not None else "unknown",
            "P6": "unknown",
            "AI": "unknown",
        }

    def __str__(self) -> str:
        state = self._state if self._state is not None else "unknown"
        return f"DAEnetIP{self.version}@{self.host}({self.alias}) = {state}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "DAEnetIP": {
                "version": self.version,
                "host": self.host,
                "alias": self.alias,
                "status": self.state,
            }
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def on(self, event: RelayEvent | str, callback: Subscriber) -> Subscriber:
        return self.events.on(event, callback)

    def off(self, event: RelayEvent | str, callback: Subscriber) -> bool:
        return self.events.off(event, callback)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self, callback: Callback | None = None) -> RelayBankState | None:
        """Open the SNMP session and read the initial relay state."""
        try:
            await self.session.connect()
        except RelayBankError as e:
            self._report_error("connect", e)
            if callback is None:
                raise
            self._invoke(callback, e, None)
            return None

        self.logger.info(f"Connected to {self.host}:{self.identity.port} ({self.alias})")
        return await self.get_state(callback)

    initialize = connect

    async def disconnect(self) -> None:
        await self.session.disconnect()
        self.logger.info(f"Disconnected from {self.host} ({self.alias})")

    async def probe(self) -> dict[str, object]:
        return {
            "device": f"DAEnetIP{self.version}",
            "host": self.host,
            "alias": self.alias,
            "state": self.state,
            "session": await self.session.probe(),
        }

    # ------------------------------------------------------------------
    # Relay operations
    # ------------------------------------------------------------------

    async def get_state(self, callback: Callback | None = None) -> RelayBankState | None:
        """Read the whole bank from the device."""
        return await self._deliver(self._get_state(), callback)

    async def set_state(
        self, new_state: Sequence[int], callback: Callback | None = None
    ) -> RelayBankState | None:
        """
        Write the whole bank.

        The cache takes the value the device echoes back, which may differ
        from new_state.
        """
        register = encode(new_state)
        return await self._deliver(self._set_state(register), callback)

    async def set_pin(
        self, pin: int, value: int, callback: Callback | None = None
    ) -> RelayBankState | None:
        """Write a single relay (pin 1..8, value 0|1)."""
        validate_pin(pin)
        value = validate_pin_value(value)
        return await self._deliver(self._locked_set_pin(pin, value), callback)

    async def toggle_relay(
        self, pin: int, callback: Callback | None = None
    ) -> RelayBankState | None:
        """Flip one relay based on a fresh read from the device."""
        validate_pin(pin)
        return await self._deliver(self._toggle(pin), callback)

    # Legacy method names
    get_p5_state = get_state
    set_p5_state = set_state
    set_p5_pin_val = set_pin
    set_relay_state = set_pin

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _get_state(self) -> RelayBankState:
        oid = register_oid()
        self.logger.debug(f"[get_state] GET {oid}")

        try:
            varbinds = await self.session.get([oid])
            register = self._echoed_value(varbinds, oid)
        except RelayBankError as e:
            self._report_error("get_state", e)
            raise

        self._state = decode(register)
        self.logger.info(f"[get_state] {self}")

        self.events.emit(RelayEvent.STATE_READ, self.state)
        return self.state

    async def _set_state(self, register: int) -> RelayBankState:
        oid = register_oid()

        async with self._write_lock:
            self.logger.debug(f"[set_state] SET {oid} = 0x{register:02X}")
            try:
                varbinds = await self.session.set([(oid, register)])
                echoed = self._echoed_value(varbinds, oid)
            except RelayBankError as e:
                await self._audit("set_state", register, "FAILED", error=str(e))
                self._report_error("set_state", e)
                raise

            self._state = decode(echoed)
            await self._audit("set_state", register, "OK", echoed=echoed)

        self.logger.info(f"[set_state] {self}")
        self.events.emit(RelayEvent.STATE_SET, self.state)
        return self.state

    async def _locked_set_pin(self, pin: int, value: int) -> RelayBankState | None:
        async with self._write_lock:
            return await self._set_pin(pin, value)

    async def _set_pin(self, pin: int, value: int) -> RelayBankState | None:
        """Caller holds the write lock."""
        oid = pin_oid(pin)
        self.logger.debug(f"[set_pin] SET {oid} = {value}")

        try:
            varbinds = await self.session.set([(oid, value)])
            echoed = self._echoed_value(varbinds, oid)
            if echoed not in (0, 1):
                raise DeviceProtocolError(
                    f"Relay {pin} echoed out-of-range value {echoed}", oid=oid
                )
        except RelayBankError as e:
            await self._audit("set_pin", value, "FAILED", pin=pin, error=str(e))
            self._report_error("set_pin", e)
            raise

        # An unread bank stays unknown; one pin is not the whole state
        if self._state is not None:
            self._state[pin - 1] = echoed
        await self._audit("set_pin", value, "OK", pin=pin, echoed=echoed)

        self.logger.info(f"[set_pin] relay {pin} = {echoed}; {self}")
        self.events.emit(RelayEvent.PIN_SET, {"pin": pin, "value": echoed})
        return self.state

    async def _toggle(self, pin: int) -> RelayBankState | None:
        self.logger.debug(f"[toggle_relay] relay {pin}")
        async with self._write_lock:
            current = await self._get_state()
            return await self._set_pin(pin, 1 - current[pin - 1])

    def _echoed_value(self, varbinds: list, oid: str) -> int:
        if not varbinds:
            raise TransportError(f"Empty SNMP response for {oid}")

        varbind = varbinds[0]
        if self.session.is_varbind_error(varbind):
            message = self.session.varbind_error(varbind)
            raise DeviceProtocolError(message, oid=oid)

        try:
            return int(varbind[1])
        except (TypeError, ValueError) as e:
            raise TransportError(
                f"Malformed SNMP value for {oid}: {varbind[1]!r}"
            ) from e

    async def _deliver(self, operation, callback: Callback | None):
        try:
            state = await operation
        except (TransportError, DeviceProtocolError) as e:
            if callback is None:
                raise
            self._invoke(callback, e, None)
            return None

        if callback is not None:
            self._invoke(callback, None, state)
        return state

    def _invoke(self, callback: Callback, error, state) -> None:
        try:
            callback(error, state)
        except Exception as e:
            self.logger.error(f"Callback error: {e}")

    def _report_error(self, operation: str, error: RelayBankError) -> None:
        self.logger.error(f"[{operation}] {type(error).__name__}: {error}")
        self.events.emit(RelayEvent.ERROR, error)

    async def _audit(self, action: str, value: int, result: str, **data) -> None:
        await self.logger.log_audit(
            f"{action} {value} -> {result}",
            action=action,
            result=result,
            data={"host": self.host, "value": value, **data},
        )


# daenet/protocols/base_protocol.py
"""
Base class for protocol wrappers.

A protocol sits on top of an injected transport adapter and owns the
protocol semantics; the adapter only moves PDUs.
"""


class BaseProtocol:
    def __init__(self, protocol_name: str):
        self.protocol_name = protocol_name
        self.connected = False

    # ------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------

    async def connect(self) -> bool:
        raise NotImplementedError

    async def disconnect(self) -> None:
        raise NotImplementedError

    # ------------------------------------------------------------
    # introspection
    # ------------------------------------------------------------

    async def probe(self) -> dict[str, object]:
        """Report what is reachable over this protocol."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(protocol={self.protocol_name!r}, "
            f"connected={self.connected})"
        )

"""
Protocol wrappers.

Structure:
    daenet/protocols/
    ├── base_protocol.py     # BaseProtocol lifecycle contract
    └── snmp/
        ├── pysnmp_7.py      # PySnmp7Adapter (UDP transport, pysnmp 7)
        └── snmp_protocol.py # SNMPProtocol (v1 semantics, error mapping)

Usage:
    from daenet.protocols.snmp import PySnmp7Adapter, SNMPProtocol

    session = SNMPProtocol(PySnmp7Adapter("192.168.1.201", community="private"))
    await session.connect()
    varbinds = await session.get(["1.3.6.1.4.1.19865.1.2.2.33.0"])
"""

from daenet.protocols.base_protocol import BaseProtocol

__all__ = ["BaseProtocol"]

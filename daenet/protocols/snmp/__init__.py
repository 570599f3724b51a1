"""SNMP v1 adapter and protocol."""

from daenet.protocols.snmp.pysnmp_7 import PySnmp7Adapter
from daenet.protocols.snmp.snmp_protocol import SNMPProtocol

__all__ = [
    "PySnmp7Adapter",
    "SNMPProtocol",
]

# daenet/errors.py
"""
Errors raised by the DAEnetIP relay client.

The set is closed: callers only ever see a RelayBankError subclass.
"""


class RelayBankError(Exception):
    """Base class for relay bank errors."""


class TransportError(RelayBankError):
    """SNMP session level failure: no response, timeout or malformed response."""


class DeviceProtocolError(RelayBankError):
    """
    The device answered but flagged the request.

    Raised for a non-zero SNMP error-status or a varbind carrying an
    exception value (noSuchObject, noSuchInstance, endOfMibView).
    """

    def __init__(self, message: str, oid: str | None = None, status: str | None = None):
        super().__init__(message)
        self.oid = oid
        self.status = status


class InvalidArgument(RelayBankError, ValueError):
    """Caller contract violation, raised before any network request."""

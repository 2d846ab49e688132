"""
Error taxonomy for the ONVIF protocol core.

Three disjoint failure classes are raised to callers:

* TransportError: the request never produced a usable response (name
  resolution, connection, timeout, or an HTTP error status with no body).
* ProtocolFault: the device answered with a SOAP fault.
* DecodeError: the response was neither a fault nor something we could
  extract the expected data from.
"""

from enum import Enum
from typing import Optional


class ONVIFError(Exception):
    """
    Base class for all errors raised by onvifproto.
    """

    pass


class TransportError(ONVIFError):
    """
    The device could not be reached or returned nothing to classify.
    """

    def __init__(self, message: str, status: Optional[int] = None, body: Optional[bytes] = None):
        super().__init__(message)
        self.status = status
        self.body = body


class DiscoveryError(TransportError):
    """
    The discovery socket could not be set up or the probe could not be sent.
    """

    pass


class FaultKind(Enum):
    USERNAME_CLASH = "duplicate-username"
    USERNAME_MISSING = "username-not-found"
    TOO_MANY_USERS = "quota-exceeded"
    FIXED_USER = "protected-account"
    PASSWORD_POLICY = "weak-credential"
    NOT_AUTHORIZED = "not-authorized"
    UNCLASSIFIED = "unclassified-fault"


class ProtocolFault(ONVIFError):
    """
    A SOAP fault returned by the device. Instances are built by
    `onvifproto.faults.classify`.
    """

    def __init__(self, kind: FaultKind, message: str, code: str = "", body: Optional[bytes] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.code = code
        self.body = body

    def __repr__(self):
        return f"<ProtocolFault kind={self.kind.value} message={self.message!r}>"


class DecodeError(ONVIFError):
    """
    Got a response we couldn't find the expected data in.
    """

    def __init__(self, message: str, shape: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message)
        self.shape = shape
        self.field = field

"""
SOAP fault detection and classification.
"""

from typing import Optional, Union

from . import xmlscan
from .errors import FaultKind, ProtocolFault
from .util import _getLogger

# Checked in order against the raw body; first match wins. Several vendors only
# identify these through the ONVIF subcode, others only through NotAuthorized
# appearing somewhere in the fault detail.
FAULT_TABLE = (
    ('ter:UsernameClash', FaultKind.USERNAME_CLASH, 'username already exists'),
    ('ter:UsernameMissing', FaultKind.USERNAME_MISSING, 'username not found'),
    ('ter:TooManyUsers', FaultKind.TOO_MANY_USERS, 'maximum number of users reached'),
    ('ter:FixedUser', FaultKind.FIXED_USER, 'cannot modify or delete fixed user'),
    ('ter:Password', FaultKind.PASSWORD_POLICY, 'password does not meet requirements'),
    ('NotAuthorized', FaultKind.NOT_AUTHORIZED, 'not authorized'),
)

GENERIC_FAULT_MESSAGE = 'SOAP fault in response'

_log = _getLogger(__name__)


def _clean(value: Optional[str]) -> str:
    if value is None:
        return ''
    return xmlscan.text_content(value).strip()


def fault_code(text: str) -> str:
    """
    Most specific fault code: the Value of the innermost SOAP 1.2 Subcode,
    else the top-level Code Value, else the SOAP 1.1 faultcode.
    """
    scope = xmlscan.extract(text, 'Code')
    while scope is not None:
        subcode = xmlscan.extract(scope, 'Subcode')
        if subcode is None:
            break
        scope = subcode
    if scope is not None:
        code = _clean(xmlscan.extract(scope, 'Value'))
        if code:
            return code
    return _clean(xmlscan.extract(text, 'faultcode'))


def fault_reason(text: str) -> str:
    """Human-readable reason: SOAP 1.2 Reason/Text, else SOAP 1.1 faultstring."""
    for path in ('Reason/Text', 'faultstring'):
        reason = _clean(xmlscan.extract_path(text, path))
        if reason:
            return reason
    return ''


def is_fault(body: Union[str, bytes]) -> bool:
    return xmlscan.has_element(body, 'Fault')


def classify(body: Union[str, bytes]) -> Optional[ProtocolFault]:
    """
    Return a ProtocolFault describing `body`, or None if it isn't a fault.
    The fault is returned, not raised.
    """
    if not is_fault(body):
        return None

    raw = body if isinstance(body, bytes) else body.encode('utf-8')
    text = body if isinstance(body, str) else body.decode('utf-8', errors='replace')
    # A truncated body may still carry a Fault start tag; search it whole then.
    scope = xmlscan.extract(text, 'Fault') or text
    code = fault_code(scope)

    for needle, kind, message in FAULT_TABLE:
        if needle in text:
            _log.debug("Classified SOAP fault as %s (matched %r)", kind.value, needle)
            return ProtocolFault(kind, message, code=code, body=raw)

    reason = fault_reason(scope)
    if reason:
        return ProtocolFault(FaultKind.UNCLASSIFIED, reason, code=code, body=raw)

    return ProtocolFault(FaultKind.UNCLASSIFIED, GENERIC_FAULT_MESSAGE, code=code, body=raw)

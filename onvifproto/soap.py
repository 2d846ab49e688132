"""
SOAP envelope construction and HTTP transport for ONVIF services.
"""

from typing import Any, Optional

import requests
import urllib3

from . import parser
from .auth import generate_token
from .errors import TransportError
from .faults import classify
from .interfaces import (
    DEFAULT_HTTP_TIMEOUT, AuthCredential, ClientConfig, DigestToken, RawResponse)
from .util import _getLogger, escape_xml

WSSE_NS = "http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-wssecurity-secext-1.0.xsd"
WSU_NS = "http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-wssecurity-utility-1.0.xsd"
PASSWORD_DIGEST_TYPE = ("http://docs.oasis-open.org/wss/2004/01/"
                        "oasis-200401-wss-username-token-profile-1.0#PasswordDigest")
BASE64_ENCODING_TYPE = ("http://docs.oasis-open.org/wss/2004/01/"
                        "oasis-200401-wss-soap-message-security-1.0#Base64Binary")

# Prefixes declared here are usable by any request fragment without further
# namespace declarations: device, media, schema, imaging and media2.
SOAP_ENVELOPE = """<?xml version="1.0" encoding="UTF-8"?>
<s:Envelope xmlns:s="http://www.w3.org/2003/05/soap-envelope"
            xmlns:tds="http://www.onvif.org/ver10/device/wsdl"
            xmlns:trt="http://www.onvif.org/ver10/media/wsdl"
            xmlns:tt="http://www.onvif.org/ver10/schema"
            xmlns:timg="http://www.onvif.org/ver20/imaging/wsdl"
            xmlns:tr2="http://www.onvif.org/ver20/media/wsdl">
    <s:Header>{header}</s:Header>
    <s:Body>{body}</s:Body>
</s:Envelope>"""

SECURITY_HEADER = """
        <Security xmlns="{wsse}">
            <UsernameToken>
                <Username>{username}</Username>
                <Password Type="{password_type}">{digest}</Password>
                <Nonce EncodingType="{encoding_type}">{nonce}</Nonce>
                <Created xmlns="{wsu}">{created}</Created>
            </UsernameToken>
        </Security>"""

# Headers for SOAP requests
HEADERS = {
    "Content-Type": "application/soap+xml; charset=utf-8"
}

_log = _getLogger(__name__)


def security_header(credential: AuthCredential, token: DigestToken) -> str:
    """WS-Security UsernameToken block with a PasswordDigest."""
    return SECURITY_HEADER.format(
        wsse=WSSE_NS,
        wsu=WSU_NS,
        password_type=PASSWORD_DIGEST_TYPE,
        encoding_type=BASE64_ENCODING_TYPE,
        username=escape_xml(credential.username),
        digest=token.digest,
        nonce=token.nonce,
        created=token.created,
    )


def build_envelope(body: str, credential: Optional[AuthCredential] = None,
                   token: Optional[DigestToken] = None) -> str:
    """
    Wrap a request body fragment in a SOAP 1.2 envelope.

    The Header element is always present. It carries a security block only
    for a non-anonymous credential; a fresh token is generated unless one is
    passed in. The fragment is inserted verbatim.
    """
    header = ""
    if credential is not None and not credential.is_anonymous:
        if token is None:
            token = generate_token(credential.password)
        header = security_header(credential, token)
    return SOAP_ENVELOPE.format(header=header, body=body)


def send(endpoint: str, soap_action: str, envelope: str, timeout: Optional[float] = None,
         insecure_tls: bool = False) -> RawResponse:
    """
    POST an envelope to a service endpoint.

    Error statuses with a body are returned like any other response, since
    the body is usually a SOAP fault worth classifying. Raises TransportError
    for network failures and for error statuses with an empty body.
    """
    if not timeout:
        timeout = DEFAULT_HTTP_TIMEOUT
    headers = dict(HEADERS)
    headers["SOAPAction"] = soap_action
    data = envelope.encode("utf-8")

    _log.debug("SOAP request: action=%s, url=%s, %d bytes", soap_action, endpoint, len(data))
    try:
        response = requests.post(endpoint, headers=headers, data=data, timeout=timeout,
                                 verify=not insecure_tls)
    except requests.RequestException as exc:
        raise TransportError(f"request to {endpoint} failed: {exc}") from exc

    body = response.content or b""
    _log.debug("SOAP response: HTTP %d, %d bytes", response.status_code, len(body))

    if response.status_code >= 400 and not body.strip():
        raise TransportError(
            f"HTTP {response.status_code} with empty response", status=response.status_code)

    return RawResponse(status=response.status_code, body=body)


def disable_insecure_warnings():
    """
    Silence urllib3's InsecureRequestWarning for the whole process. `send`
    never touches warning filters itself; applications talking to devices
    with self-signed certificates call this once at startup if they want to.
    """
    urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)


class Client:
    """
    Authenticated SOAP caller. Holds the credential and transport settings;
    every call gets its own envelope and digest token.
    """

    def __init__(self, username: str = "", password: str = "",
                 timeout: float = DEFAULT_HTTP_TIMEOUT, insecure_tls: bool = False):
        self.credential = AuthCredential(username, password)
        self.timeout = timeout or DEFAULT_HTTP_TIMEOUT
        self.insecure_tls = insecure_tls

    @classmethod
    def from_config(cls, config: ClientConfig) -> "Client":
        client = cls(timeout=config.timeout, insecure_tls=config.insecure_tls)
        client.credential = config.credential
        return client

    def __repr__(self):
        return f"<Client username={self.credential.username!r} timeout={self.timeout}>"

    def call(self, endpoint: str, action: str, body: str) -> RawResponse:
        envelope = build_envelope(body, self.credential)
        return send(endpoint, action, envelope, self.timeout, self.insecure_tls)

    def request(self, endpoint: str, action: str, body: str, shape: "parser.ResponseShape") -> Any:
        """Send a request and decode the response into `shape`."""
        return parser.parse(self.call(endpoint, action, body), shape)

    def check(self, endpoint: str, action: str, body: str) -> RawResponse:
        """
        Send a request whose success response carries no data. Raises the
        classified fault, or TransportError for an error status.
        """
        response = self.call(endpoint, action, body)
        fault = classify(response.body)
        if fault is not None:
            raise fault
        if response.status >= 400:
            raise TransportError(f"HTTP {response.status}", status=response.status,
                                 body=response.body)
        return response

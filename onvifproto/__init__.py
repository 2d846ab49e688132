"""
Client-side ONVIF protocol core.

This package covers the parts every ONVIF operation has in common:

- WS-Discovery: multicast a Probe and collect the devices that answer
  (`discover`).
- SOAP transport: wrap a request body in an envelope with a WS-Security
  PasswordDigest header and POST it to a service endpoint (`Client`,
  `build_envelope`, `send`).
- Response interpretation: detect and classify SOAP faults (`classify`) and
  decode responses whose layout varies between vendors (`parse`, with the
  shapes in `onvifproto.shapes`).

Example:

------------------------------------------------------------------------------
import onvifproto
from onvifproto import shapes

for camera in onvifproto.discover():
    client = onvifproto.Client('admin', 'secret')
    info = client.request(
        camera.primary_address,
        'http://www.onvif.org/ver10/device/wsdl/GetDeviceInformation',
        '<tds:GetDeviceInformation/>',
        shapes.DEVICE_INFORMATION,
    )
    print("%s: %s %s" % (camera.primary_address, info['manufacturer'], info['model']))
------------------------------------------------------------------------------

Failures are reported as one of three exception families: TransportError (the
device couldn't be reached), ProtocolFault (the device refused), and
DecodeError (the response wasn't understood).
"""
from onvifproto import auth, errors, faults, interfaces, parser, shapes, soap, util, wsdiscovery, xmlscan  # noqa: F401
from .errors import (
    ONVIFError, TransportError, DiscoveryError, ProtocolFault, FaultKind, DecodeError)
from .interfaces import (
    AuthCredential, DigestToken, RawResponse, ProbeMatch, DiscoveryReply, Candidate,
    ClientConfig, DiscoveryOptions, ConfigBuilder)
from .faults import classify
from .parser import Field, ResponseShape, parse
from .soap import Client, build_envelope, disable_insecure_warnings, send
from .wsdiscovery import discover, deduplicate

__all__ = [
    "ONVIFError", "TransportError", "DiscoveryError", "ProtocolFault", "FaultKind", "DecodeError",
    "AuthCredential", "DigestToken", "RawResponse", "ProbeMatch", "DiscoveryReply", "Candidate",
    "ClientConfig", "DiscoveryOptions", "ConfigBuilder",
    "classify", "Field", "ResponseShape", "parse",
    "Client", "build_envelope", "send", "disable_insecure_warnings",
    "discover", "deduplicate",
]

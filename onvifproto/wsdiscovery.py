"""
WS-Discovery probing for ONVIF devices.

A single Probe for NetworkVideoTransmitter devices is multicast from an
ephemeral port, and every ProbeMatch received before the deadline is decoded
into a Candidate. Listening ends only when the deadline passes; there is no
way to know that every device has answered. Candidates are deduplicated on
the first address of their XAddrs list.
"""

import re
import socket
import time
import uuid
import xml.etree.ElementTree as ET
from typing import Dict, Iterable, Iterator, List, Optional, Tuple
from urllib.parse import unquote

from .errors import DecodeError, DiscoveryError
from .interfaces import Candidate, DiscoveryOptions, DiscoveryReply, ProbeMatch
from .util import _getLogger, first_address

WS_DISCOVERY_PORT = 3702
MAX_DATAGRAM_SIZE = 65536

PROBE_TEMPLATE = '''<?xml version="1.0" encoding="UTF-8"?>
<Envelope xmlns="http://www.w3.org/2003/05/soap-envelope"
          xmlns:a="http://schemas.xmlsoap.org/ws/2004/08/addressing"
          xmlns:d="http://schemas.xmlsoap.org/ws/2005/04/discovery"
          xmlns:dn="http://www.onvif.org/ver10/network/wsdl">
    <Header>
        <a:Action>http://schemas.xmlsoap.org/ws/2005/04/discovery/Probe</a:Action>
        <a:MessageID>{message_id}</a:MessageID>
        <a:To>urn:schemas-xmlsoap-org:ws:2005:04:discovery</a:To>
    </Header>
    <Body>
        <d:Probe>
            <d:Types>dn:NetworkVideoTransmitter</d:Types>
        </d:Probe>
    </Body>
</Envelope>'''

_SCOPE_RE = re.compile(r'^[^:/\s]+://[^/\s]+/(?P<key>name|location|hardware)/(?P<value>.+)$')

# Checked in order; a type token maps to the first tag whose marker it contains.
TYPE_TAGS = (
    ('NetworkVideoTransmitter', 'Network Video Transmitter'),
    ('Device', 'Device'),
    ('Media', 'Media'),
    ('PTZ', 'PTZ'),
    ('Analytics', 'Analytics'),
    ('Events', 'Events'),
    ('Imaging', 'Imaging'),
    ('Recording', 'Recording'),
    ('Replay', 'Replay'),
)

_log = _getLogger(__name__)


def probe_message(message_id: Optional[str] = None) -> bytes:
    """Probe envelope bytes; a fresh urn:uuid MessageID unless one is given."""
    if message_id is None:
        message_id = f"urn:uuid:{uuid.uuid4()}"
    return PROBE_TEMPLATE.format(message_id=message_id).encode('utf-8')


def resolve_target(multicast_addr: str) -> Tuple[str, int]:
    """Resolve "host:port" (port optional) to an IPv4 socket address."""
    host, sep, port = multicast_addr.rpartition(':')
    if not sep:
        host, port = multicast_addr, str(WS_DISCOVERY_PORT)
    try:
        infos = socket.getaddrinfo(host, int(port), socket.AF_INET, socket.SOCK_DGRAM)
    except (socket.gaierror, ValueError) as exc:
        raise DiscoveryError(f"failed to resolve multicast address {multicast_addr}: {exc}") from exc
    return infos[0][4][:2]


def _local(tag) -> str:
    if not isinstance(tag, str):
        return ''
    return tag.rsplit('}', 1)[-1]


def _child_text(element, name: str) -> str:
    for child in element.iter():
        if child is not element and _local(child.tag) == name:
            return (child.text or '').strip()
    return ''


def parse_probe_matches(data: bytes) -> List[ProbeMatch]:
    """
    Decode every ProbeMatch in a WS-Discovery reply, whatever prefixes the
    device uses. Raises DecodeError for a datagram that isn't XML.
    """
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise DecodeError(f"malformed discovery reply: {exc}") from exc

    matches = []
    for element in root.iter():
        if _local(element.tag) != 'ProbeMatch':
            continue
        matches.append(ProbeMatch(
            address_list=_child_text(element, 'XAddrs'),
            types_list=_child_text(element, 'Types'),
            scopes_list=_child_text(element, 'Scopes'),
            endpoint_reference=_child_text(element, 'Address'),
            metadata_version=_child_text(element, 'MetadataVersion'),
        ))
    return matches


def decode_scopes(scopes: str) -> Tuple[str, str, str]:
    """Return (name, location, hardware) from a Scopes list; unknown scopes are ignored."""
    found = {'name': '', 'location': '', 'hardware': ''}
    for scope in scopes.split():
        match = _SCOPE_RE.match(scope)
        if match is None:
            continue
        found[match.group('key')] = unquote(match.group('value')).replace('_', ' ')
    return found['name'], found['location'], found['hardware']


def decode_types(types: str) -> List[str]:
    """Map a Types list to capability tags, keeping first-seen order."""
    tags = []
    for token in types.split():
        for marker, tag in TYPE_TAGS:
            if marker in token:
                if tag not in tags:
                    tags.append(tag)
                break
    return tags


def candidate_from_match(match: ProbeMatch, source_host: str = '') -> Candidate:
    primary = first_address(match.address_list)
    if not primary:
        raise DecodeError(f"probe match from {source_host or 'unknown host'} has no XAddrs")
    name, location, hardware = decode_scopes(match.scopes_list)
    return Candidate(
        primary_address=primary,
        display_name=name,
        location=location,
        hardware_model=hardware,
        service_type_tags=decode_types(match.types_list),
        address_list=match.address_list,
        endpoint_reference=match.endpoint_reference,
        source_host=source_host,
    )


def deduplicate(candidates: Iterable[Candidate]) -> List[Candidate]:
    """Keep the first candidate seen for each primary address, in arrival order."""
    unique: Dict[str, Candidate] = {}
    for candidate in candidates:
        if candidate.primary_address not in unique:
            unique[candidate.primary_address] = candidate
    return list(unique.values())


def collect_replies(sock: socket.socket, timeout: float) -> Iterator[Tuple[bytes, Tuple[str, int]]]:
    """Yield (data, address) for every datagram received before the deadline."""
    deadline = time.monotonic() + timeout
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return
        sock.settimeout(remaining)
        try:
            data, addr = sock.recvfrom(MAX_DATAGRAM_SIZE)
        except socket.timeout:
            return
        except OSError as exc:
            _log.debug("Ignoring receive error during discovery: %s", exc)
            continue
        yield data, addr


def decode_reply(data: bytes, source: Tuple[str, int]) -> DiscoveryReply:
    return DiscoveryReply(source=source, matches=parse_probe_matches(data))


def discover(options: Optional[DiscoveryOptions] = None) -> List[Candidate]:
    """
    Probe the network and return the deduplicated list of devices that
    answered within `options.timeout` seconds. An empty list is a valid
    result. Raises DiscoveryError if the probe can't be sent at all.
    """
    if options is None:
        options = DiscoveryOptions()
    target = resolve_target(options.multicast_addr)

    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        try:
            sock.bind(('', 0))
            sock.sendto(probe_message(), target)
        except OSError as exc:
            raise DiscoveryError(f"failed to send probe to {target[0]}:{target[1]}: {exc}") from exc
        _log.debug("Sent WS-Discovery probe to %s:%d", *target)

        candidates = []
        for data, addr in collect_replies(sock, options.timeout):
            try:
                reply = decode_reply(data, addr)
            except DecodeError as exc:
                _log.debug("Skipping reply from %s: %s", addr[0], exc)
                continue
            for match in reply.matches:
                try:
                    candidates.append(candidate_from_match(match, addr[0]))
                except DecodeError as exc:
                    _log.debug("Skipping probe match: %s", exc)
    finally:
        sock.close()

    devices = deduplicate(candidates)
    _log.debug("Discovery finished: %d probe matches, %d unique devices", len(candidates), len(devices))
    return devices

"""
Common data structures and configuration for the ONVIF protocol core.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Tuple

DEFAULT_HTTP_TIMEOUT = 10.0
DEFAULT_DISCOVERY_TIMEOUT = 5.0
DEFAULT_MULTICAST_ADDR = '239.255.255.250:3702'


@dataclass(frozen=True)
class AuthCredential:
    """Username and shared secret used for WS-Security digest authentication."""
    username: str = ''
    password: str = ''

    @property
    def is_anonymous(self) -> bool:
        return not self.username


@dataclass(frozen=True)
class DigestToken:
    """One-shot WS-Security PasswordDigest values. Never reuse."""
    digest: str
    nonce: str
    created: str


@dataclass(frozen=True)
class RawResponse:
    """HTTP status and body as received from a service endpoint."""
    status: int
    body: bytes


@dataclass
class ProbeMatch:
    """A single ProbeMatch record from a WS-Discovery reply, as on the wire."""
    address_list: str = ''
    types_list: str = ''
    scopes_list: str = ''
    endpoint_reference: str = ''
    metadata_version: str = ''


@dataclass
class DiscoveryReply:
    """One received datagram and the probe matches decoded from it."""
    source: Tuple[str, int]
    matches: List[ProbeMatch] = field(default_factory=list)


@dataclass
class Candidate:
    """A device found by discovery, keyed by its primary address."""
    primary_address: str
    display_name: str = ''
    location: str = ''
    hardware_model: str = ''
    service_type_tags: List[str] = field(default_factory=list)
    address_list: str = ''
    endpoint_reference: str = ''
    source_host: str = ''


@dataclass
class ClientConfig:
    """Configuration for authenticated SOAP calls."""
    username: str = ''
    password: str = ''
    timeout: float = DEFAULT_HTTP_TIMEOUT
    insecure_tls: bool = False  # skip certificate checks for self-signed devices

    @property
    def credential(self) -> AuthCredential:
        return AuthCredential(self.username, self.password)


@dataclass
class DiscoveryOptions:
    """Configuration for a WS-Discovery session."""
    timeout: float = DEFAULT_DISCOVERY_TIMEOUT
    multicast_addr: str = DEFAULT_MULTICAST_ADDR

    def __post_init__(self):
        if not self.timeout:
            self.timeout = DEFAULT_DISCOVERY_TIMEOUT
        if not self.multicast_addr:
            self.multicast_addr = DEFAULT_MULTICAST_ADDR


class ConfigBuilder:
    """Helper class to build configuration objects from plain dictionaries."""

    @staticmethod
    def _known(target, data: Dict[str, Any]) -> Dict[str, Any]:
        names = {f.name for f in fields(target)}
        return {k: v for k, v in data.items() if k in names}

    @staticmethod
    def client_from_dict(data: Dict[str, Any]) -> ClientConfig:
        """Create ClientConfig from dictionary, ignoring unknown keys."""
        config = ClientConfig(**ConfigBuilder._known(ClientConfig, data))
        if not config.timeout:
            config.timeout = DEFAULT_HTTP_TIMEOUT
        return config

    @staticmethod
    def discovery_from_dict(data: Dict[str, Any]) -> DiscoveryOptions:
        """Create DiscoveryOptions from dictionary, ignoring unknown keys."""
        return DiscoveryOptions(**ConfigBuilder._known(DiscoveryOptions, data))

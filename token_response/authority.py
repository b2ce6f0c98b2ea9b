"""Authority descriptor and cache environment derivation"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List
from urllib.parse import urlparse


class AuthorityType(str, Enum):
    """Kind of authorization server the response came from"""
    AAD = "AAD"
    ADFS = "ADFS"
    B2C = "B2C"
    GENERIC = "Generic"


class ProtocolMode(str, Enum):
    """Protocol dialect spoken by the authority"""
    AAD = "AAD"
    OIDC = "OIDC"


@dataclass
class Authority:
    """Authority the token request was sent to

    Attributes:
        canonical_authority: Authority URL, e.g. https://login.microsoftonline.com/common/
        authority_type: Directory flavour of the authority
        protocol_mode: AAD for directory-backed protocol, OIDC for plain OpenID Connect
        environment_aliases: Known host aliases; the first one is the preferred cache environment
    """
    canonical_authority: str
    authority_type: AuthorityType = AuthorityType.AAD
    protocol_mode: ProtocolMode = ProtocolMode.AAD
    environment_aliases: List[str] = field(default_factory=list)

    @property
    def host_name_and_port(self) -> str:
        """Host (and port, if any) of the authority URL, lower-cased"""
        return urlparse(self.canonical_authority).netloc.lower()

    @property
    def tenant(self) -> str:
        """First path segment of the authority URL"""
        segments = [s for s in urlparse(self.canonical_authority).path.split("/") if s]
        return segments[0] if segments else ""


def generate_environment_from_authority(authority: Authority) -> str:
    """Resolve the cache environment for an authority

    Args:
        authority: Authority the response came from

    Returns:
        Preferred cache alias when the host is a known alias, otherwise the
        authority host. Empty if the authority URL has no host.
    """
    host = authority.host_name_and_port
    aliases = [a.lower() for a in authority.environment_aliases]
    if host and host in aliases:
        return aliases[0]
    return host

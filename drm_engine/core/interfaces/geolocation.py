"""
Contract: Geolocation Resolver

Maps a network address to country/region. The lookup is best effort:
any failure degrades to "no geolocation" and geography checks are skipped.
"""

import ipaddress
import logging
from abc import ABC, abstractmethod

from drm_engine.core.entities import Geolocation
from drm_engine.core.errors import ExternalServiceDegraded

logger = logging.getLogger(__name__)


def is_public_ip(ip: str | None) -> bool:
    """True for a parseable, globally routable address."""
    if not ip or ip == "unknown":
        return False
    try:
        addr = ipaddress.ip_address(ip)
    except ValueError:
        return False
    return not (addr.is_private or addr.is_loopback or addr.is_link_local
                or addr.is_reserved or addr.is_multicast or addr.is_unspecified)


class IGeolocationResolver(ABC):
    """
    Port: Geolocation Resolver

    Subclasses implement lookup(); callers use resolve(), which never raises.
    """

    @abstractmethod
    def lookup(self, ip: str) -> Geolocation | None:
        """
        Resolve a public address.

        Args:
            ip: Public IPv4/IPv6 address.

        Returns:
            Geolocation, or None when the provider has no answer.

        Raises:
            ExternalServiceDegraded: provider failed or timed out.
        """
        ...

    def resolve(self, ip: str | None) -> Geolocation | None:
        if not is_public_ip(ip):
            return None
        try:
            return self.lookup(ip)
        except ExternalServiceDegraded as e:
            logger.warning(f"Geolocation degraded for {ip}: {e}")
            return None

"""
Adapter: ip-api.com Geolocation Resolver

Concrete IGeolocationResolver over the ip-api.com JSON endpoint
(free tier, no key, 45 requests/minute). Every call has a bounded timeout;
failures raise ExternalServiceDegraded, which resolve() turns into
"no geolocation".
"""

import logging

import httpx

from drm_engine.core.entities import Geolocation
from drm_engine.core.errors import ExternalServiceDegraded
from drm_engine.core.interfaces.geolocation import IGeolocationResolver

logger = logging.getLogger(__name__)


class IpApiGeolocationResolver(IGeolocationResolver):

    DEFAULT_URL = "http://ip-api.com/json/{ip}"

    def __init__(
        self,
        url_template: str = DEFAULT_URL,
        timeout_seconds: float = 2.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self._url_template = url_template
        self._timeout = timeout_seconds
        self._client = httpx.Client(timeout=timeout_seconds, transport=transport)

    def lookup(self, ip: str) -> Geolocation | None:
        try:
            url = self._url_template.format(ip=ip)
        except (KeyError, IndexError, ValueError) as e:
            raise ExternalServiceDegraded(f"bad geolocation URL template: {e}") from e

        try:
            response = self._client.get(url)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise ExternalServiceDegraded(f"ip-api timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise ExternalServiceDegraded(f"ip-api request failed: {e}") from e
        except httpx.InvalidURL as e:
            raise ExternalServiceDegraded(f"invalid geolocation URL: {e}") from e
        except ValueError as e:
            raise ExternalServiceDegraded("ip-api returned invalid JSON") from e

        if not isinstance(data, dict) or data.get("status") != "success":
            message = data.get("message", "") if isinstance(data, dict) else ""
            logger.debug(f"ip-api has no location for {ip}: {message}")
            return None
        if not data.get("countryCode"):
            return None

        return Geolocation(
            country_code=data["countryCode"],
            country=data.get("country", ""),
            region=data.get("regionName", ""),
            city=data.get("city", ""),
            latitude=data.get("lat"),
            longitude=data.get("lon"),
            timezone=data.get("timezone", ""),
            isp=data.get("isp", ""),
        )

    def close(self):
        self._client.close()

"""
Adapter: Static Geolocation Resolver

Fixed ip -> country table. For offline development and demos where the
external provider must not be called.
"""

from drm_engine.core.entities import Geolocation
from drm_engine.core.interfaces.geolocation import IGeolocationResolver


class StaticGeolocationResolver(IGeolocationResolver):

    def __init__(self, countries: dict[str, str] | None = None):
        self._countries = {ip: code.upper() for ip, code in (countries or {}).items()}

    def lookup(self, ip: str) -> Geolocation | None:
        code = self._countries.get(ip)
        if not code:
            return None
        return Geolocation(country_code=code)

"""Test doubles and fixed values shared by the test modules."""

from datetime import datetime, timezone

from drm_engine.config.settings import Settings
from drm_engine.core.entities import Geolocation
from drm_engine.core.errors import ExternalServiceDegraded
from drm_engine.core.interfaces.geolocation import IGeolocationResolver

# Wednesday, 12:00 UTC
FIXED_NOW = datetime(2026, 3, 11, 12, 0, 0, tzinfo=timezone.utc)

US_IP = "8.8.8.8"
GB_IP = "81.2.69.142"
CN_IP = "36.110.0.1"


class FixedClock:
    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, **changes):
        self.now = self.now.replace(**changes)


class FakeGeolocation(IGeolocationResolver):
    """ip -> country table that counts provider calls."""

    def __init__(self, countries: dict[str, str]):
        self.countries = countries
        self.calls = 0

    def lookup(self, ip: str) -> Geolocation | None:
        self.calls += 1
        code = self.countries.get(ip)
        return Geolocation(country_code=code, country=code) if code else None


class FailingGeolocation(IGeolocationResolver):
    def lookup(self, ip: str) -> Geolocation | None:
        raise ExternalServiceDegraded("provider timed out")


def make_settings(**overrides) -> Settings:
    values = {"database_url": "sqlite://", "geo_provider": "none", "owner_api_key": "owner-secret"}
    values.update(overrides)
    return Settings(_env_file=None, **values)

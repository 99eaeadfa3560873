"""Resolve a few public IPs through the configured ip-api endpoint (real network call)."""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), ".env"))

from drm_engine.config.settings import get_settings
from drm_engine.infrastructure.geo.ip_api_resolver import IpApiGeolocationResolver

settings = get_settings()
resolver = IpApiGeolocationResolver(settings.geo_api_url, settings.geo_timeout_seconds)

ips = sys.argv[1:] or ["8.8.8.8", "81.2.69.142", "1.1.1.1", "192.168.1.10"]

print("=" * 70)
print(f"  Geolocation — {settings.geo_api_url} (timeout {settings.geo_timeout_seconds}s)")
print("=" * 70)

for ip in ips:
    geo = resolver.resolve(ip)
    if geo is None:
        print(f"  {ip:<16} -> no geolocation (private, unknown or provider degraded)")
    else:
        print(f"  {ip:<16} -> {geo.country_code} {geo.country} / {geo.region} / {geo.city}")

resolver.close()

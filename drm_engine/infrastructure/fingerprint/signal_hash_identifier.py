"""
Adapter: Signal-Hash Device Identifier

Hashes browser/environment signals into a DeviceFingerprint. Signals are
taken in a fixed order so that component-wise comparison is meaningful;
signals outside that list are appended in name order.
"""

import hashlib
from collections.abc import Mapping

from drm_engine.core.interfaces.device_identifier import DeviceFingerprint, IDeviceIdentifier

# Signal names reported by the viewer (canvas/webgl/audio arrive pre-hashed)
SIGNAL_ORDER = (
    "user_agent",
    "platform",
    "language",
    "languages",
    "screen",
    "available_screen",
    "pixel_ratio",
    "timezone",
    "timezone_offset",
    "hardware_concurrency",
    "device_memory",
    "touch",
    "canvas",
    "webgl",
    "audio",
    "fonts",
    "plugins",
)

UNAVAILABLE = "unavailable"

# Request headers usable as signals when the client sends none
HEADER_SIGNALS = {
    "user-agent": "user_agent",
    "accept-language": "languages",
    "sec-ch-ua-platform": "platform",
    "sec-ch-ua": "client_hints",
}


def _short_hash(value: str, length: int = 8) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:length]


def signals_from_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Map HTTP request headers to fingerprint signals."""
    lowered = {k.lower(): v for k, v in headers.items()}
    return {
        signal: lowered[header]
        for header, signal in HEADER_SIGNALS.items()
        if lowered.get(header)
    }


class SignalHashDeviceIdentifier(IDeviceIdentifier):

    DIGEST_LENGTH = 32

    def identify(self, signals: Mapping[str, str]) -> DeviceFingerprint:
        names = list(SIGNAL_ORDER) + sorted(k for k in signals if k not in SIGNAL_ORDER)
        components = tuple(
            _short_hash(f"{name}:{str(signals.get(name) or UNAVAILABLE).strip()}")
            for name in names
        )
        digest = hashlib.sha256("||".join(components).encode("utf-8")).hexdigest()
        return DeviceFingerprint(digest=digest[: self.DIGEST_LENGTH], components=components)

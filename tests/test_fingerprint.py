"""Device fingerprints from environment signals."""

from drm_engine.infrastructure.fingerprint.signal_hash_identifier import (
    SIGNAL_ORDER,
    SignalHashDeviceIdentifier,
    signals_from_headers,
)

SIGNALS = {
    "user_agent": "Mozilla/5.0 (X11; Linux x86_64)",
    "platform": "Linux x86_64",
    "language": "en-US",
    "screen": "1920x1080x24",
    "timezone": "Europe/Berlin",
    "hardware_concurrency": "8",
    "canvas": "a1b2c3",
    "webgl": "d4e5f6",
}


def test_same_signals_same_digest():
    identifier = SignalHashDeviceIdentifier()
    assert identifier.identify(SIGNALS) == identifier.identify(dict(SIGNALS))


def test_digest_shape():
    fingerprint = SignalHashDeviceIdentifier().identify(SIGNALS)
    assert len(fingerprint.digest) == 32
    assert str(fingerprint) == fingerprint.digest
    assert len(fingerprint.components) == len(SIGNAL_ORDER)


def test_one_changed_signal_is_still_similar():
    identifier = SignalHashDeviceIdentifier()
    original = identifier.identify(SIGNALS)
    moved = identifier.identify({**SIGNALS, "timezone": "America/New_York"})

    assert original.digest != moved.digest
    assert identifier.similarity(original, moved) == (len(SIGNAL_ORDER) - 1) / len(SIGNAL_ORDER)
    assert identifier.matches(original, moved)


def test_different_devices_do_not_match():
    identifier = SignalHashDeviceIdentifier()
    other = {
        "user_agent": "Mozilla/5.0 (iPhone)",
        "platform": "iPhone",
        "language": "fr-FR",
        "screen": "390x844x32",
        "timezone": "Europe/Paris",
        "hardware_concurrency": "6",
        "canvas": "ffff",
        "webgl": "eeee",
    }
    assert not identifier.matches(identifier.identify(SIGNALS), identifier.identify(other))


def test_extra_signals_extend_components():
    fingerprint = SignalHashDeviceIdentifier().identify({**SIGNALS, "battery": "charging"})
    assert len(fingerprint.components) == len(SIGNAL_ORDER) + 1


def test_signals_from_headers():
    headers = {"User-Agent": "curl/8.0", "Accept-Language": "de-DE", "X-Other": "1"}
    assert signals_from_headers(headers) == {"user_agent": "curl/8.0", "languages": "de-DE"}

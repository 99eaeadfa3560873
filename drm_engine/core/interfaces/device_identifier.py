"""
Contract: Device Identifier

Derives a best-effort device fingerprint from environment signals.

A fingerprint is a soft signal, not an identity:
  - false positives: identical browsers on identical hardware and locale
    produce the same digest;
  - false negatives: a browser update, a new monitor or a timezone change
    produces a different digest.
Compare with similarity()/matches() when a tolerant comparison is needed;
never use a fingerprint as a unique key or a credential.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field


@dataclass(frozen=True)
class DeviceFingerprint:
    """Digest over all signals plus one short hash per signal."""
    digest: str
    components: tuple[str, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        return self.digest


class IDeviceIdentifier(ABC):
    """Port: Device Identifier"""

    DEFAULT_TOLERANCE = 0.9

    @abstractmethod
    def identify(self, signals: Mapping[str, str]) -> DeviceFingerprint:
        """
        Build a fingerprint.

        Args:
            signals: Environment signals, e.g. {"user_agent": ..., "screen": "1920x1080x24"}.

        Returns:
            DeviceFingerprint. Missing signals hash as "unavailable".
        """
        ...

    def similarity(self, a: DeviceFingerprint, b: DeviceFingerprint) -> float:
        """Fraction of matching per-signal components (0.0 - 1.0)."""
        if a.digest == b.digest:
            return 1.0
        total = max(len(a.components), len(b.components))
        if total == 0:
            return 0.0
        matches = sum(1 for x, y in zip(a.components, b.components) if x == y)
        return matches / total

    def matches(self, a: DeviceFingerprint, b: DeviceFingerprint,
                tolerance: float = DEFAULT_TOLERANCE) -> bool:
        return self.similarity(a, b) >= tolerance

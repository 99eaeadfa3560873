"""
Entity: Document + DRM Policy

A protected document and the admission constraints attached to it.
Pure domain model, no framework or database dependency.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class WatermarkPosition(str, Enum):
    DIAGONAL = "diagonal"
    CENTER = "center"
    BOTTOM = "bottom"
    TOP = "top"


@dataclass
class Document:
    """Domain entity: Document. Owned by the uploading user."""
    id: str
    drm_enabled: bool = False
    last_access_revoked_at: datetime | None = None


@dataclass
class DRMPolicy:
    """
    Admission constraints of one protected document.

    Days of week use 0 = Sunday ... 6 = Saturday. The hour window is
    inclusive on both ends and only applies when both bounds are set.
    The prevent_* flags are viewer directives, not enforcement.
    """
    document_id: str
    max_views: int | None = None
    max_unique_devices: int | None = None

    # Advisory protection flags
    prevent_copy: bool = False
    prevent_print: bool = False
    prevent_download: bool = False
    prevent_screenshot: bool = False

    # Watermark
    require_watermark: bool = False
    watermark_text: str | None = None
    watermark_opacity: float | None = None
    watermark_position: WatermarkPosition | None = None

    # Time / geography
    access_expires_at: datetime | None = None
    allowed_countries: set[str] = field(default_factory=set)
    blocked_countries: set[str] = field(default_factory=set)
    allowed_days_of_week: set[int] = field(default_factory=set)
    allowed_hours_start: int | None = None
    allowed_hours_end: int | None = None

    @property
    def has_hour_window(self) -> bool:
        return self.allowed_hours_start is not None and self.allowed_hours_end is not None

    def validate(self) -> list[str]:
        """Return a list of problems; empty when the policy is consistent."""
        problems = []
        if self.max_views is not None and self.max_views < 0:
            problems.append("max_views must not be negative")
        if self.max_unique_devices is not None and self.max_unique_devices < 0:
            problems.append("max_unique_devices must not be negative")
        if (self.allowed_hours_start is None) != (self.allowed_hours_end is None):
            problems.append("allowed_hours_start and allowed_hours_end must be set together")
        for name in ("allowed_hours_start", "allowed_hours_end"):
            value = getattr(self, name)
            if value is not None and not 0 <= value <= 23:
                problems.append(f"{name} must be between 0 and 23")
        if self.has_hour_window and self.allowed_hours_start > self.allowed_hours_end:
            problems.append("allowed_hours_start must not be after allowed_hours_end")
        bad_days = sorted(d for d in self.allowed_days_of_week if not 0 <= d <= 6)
        if bad_days:
            problems.append(f"allowed_days_of_week contains invalid days: {bad_days}")
        if self.watermark_opacity is not None and not 0.0 <= self.watermark_opacity <= 1.0:
            problems.append("watermark_opacity must be between 0 and 1")
        return problems

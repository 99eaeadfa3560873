from .document import Document, DRMPolicy, WatermarkPosition
from .access_session import (
    AccessSession,
    Geolocation,
    ProtectionViolation,
    ViewRecord,
    ViolationType,
)
from .verdict import (
    DENIAL_MESSAGES,
    AccessVerdict,
    DenialCode,
    ProtectionDirectives,
    WatermarkDirective,
)
from .stats import AccessStats, DeviceActivity

__all__ = [
    "Document",
    "DRMPolicy",
    "WatermarkPosition",
    "AccessSession",
    "Geolocation",
    "ProtectionViolation",
    "ViewRecord",
    "ViolationType",
    "DENIAL_MESSAGES",
    "AccessVerdict",
    "DenialCode",
    "ProtectionDirectives",
    "WatermarkDirective",
    "AccessStats",
    "DeviceActivity",
]

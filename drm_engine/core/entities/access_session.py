"""
Entity: Access Session, View Record, Protection Violation

Sessions bind one client (by bearer token) to one document. They are never
deleted, only revoked. View records and violation reports are append-only.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum


@dataclass
class Geolocation:
    """Country/region resolved once from the client IP at session creation."""
    country_code: str
    country: str = ""
    region: str = ""
    city: str = ""
    latitude: float | None = None
    longitude: float | None = None
    timezone: str = ""
    isp: str = ""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict | None) -> "Geolocation | None":
        if not data or not data.get("country_code"):
            return None
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass
class AccessSession:
    """Domain entity: one client's access session for one document."""
    id: str
    token: str
    document_id: str
    ip_address: str = ""
    device_fingerprint: str = ""
    user_agent: str = ""
    geolocation: Geolocation | None = None
    access_count: int = 0
    is_revoked: bool = False
    revoked_reason: str | None = None
    revoked_at: datetime | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    last_access_at: datetime | None = None


@dataclass
class ViewRecord:
    """One granted and tracked view. The count per document is the quota counter."""
    id: str
    document_id: str
    session_id: str
    ip_address: str = ""
    page_number: int | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    # Views left on the document right after this one; not stored
    remaining_views: int | None = None


class ViolationType(str, Enum):
    COPY = "copy"
    CUT = "cut"
    KEYBOARD_COPY = "keyboard_copy"
    KEYBOARD_CUT = "keyboard_cut"
    PRINT = "print"
    SCREENSHOT = "screenshot"
    POSSIBLE_SCREENSHOT = "possible_screenshot"
    CONTEXT_MENU = "context_menu"
    DEVTOOLS_OPEN = "devtools_open"


@dataclass
class ProtectionViolation:
    """A viewer-reported attempt to bypass an advisory protection flag."""
    id: str
    document_id: str
    session_id: str
    violation_type: ViolationType
    ip_address: str = ""
    created_at: datetime = field(default_factory=datetime.utcnow)

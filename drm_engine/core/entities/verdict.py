"""
Entity: Access Verdict

Outcome of policy evaluation. A denial is a normal result, not an error:
it carries a stable reason code for machines and a plain-language reason
for the viewer.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum


class DenialCode(str, Enum):
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    SETTINGS_UNAVAILABLE = "SETTINGS_UNAVAILABLE"
    SESSION_REQUIRED = "SESSION_REQUIRED"
    INVALID_SESSION = "INVALID_SESSION"
    SESSION_REVOKED = "SESSION_REVOKED"
    ACCESS_EXPIRED = "ACCESS_EXPIRED"
    DAY_NOT_ALLOWED = "DAY_NOT_ALLOWED"
    HOUR_NOT_ALLOWED = "HOUR_NOT_ALLOWED"
    LOCATION_BLOCKED = "LOCATION_BLOCKED"
    LOCATION_NOT_ALLOWED = "LOCATION_NOT_ALLOWED"
    VIEW_LIMIT_REACHED = "VIEW_LIMIT_REACHED"


DENIAL_MESSAGES = {
    DenialCode.DOCUMENT_NOT_FOUND: "document not found",
    DenialCode.SETTINGS_UNAVAILABLE: "failed to load access settings",
    DenialCode.SESSION_REQUIRED: "session token required",
    DenialCode.INVALID_SESSION: "invalid or expired session",
    DenialCode.SESSION_REVOKED: "access has been revoked",
    DenialCode.ACCESS_EXPIRED: "access has expired",
    DenialCode.DAY_NOT_ALLOWED: "access not permitted on this day",
    DenialCode.HOUR_NOT_ALLOWED: "access only permitted between {start}:00 and {end}:00",
    DenialCode.LOCATION_BLOCKED: "access blocked from your location",
    DenialCode.LOCATION_NOT_ALLOWED: "access not permitted from your location",
    DenialCode.VIEW_LIMIT_REACHED: "maximum view limit reached",
}


@dataclass
class WatermarkDirective:
    text: str
    opacity: float
    position: str


@dataclass
class ProtectionDirectives:
    """
    Viewer hints (disable copy, print, download, screenshots).

    Advisory only: the client may ignore them and they never take part in
    the admission decision.
    """
    prevent_copy: bool = False
    prevent_print: bool = False
    prevent_download: bool = False
    prevent_screenshot: bool = False
    advisory: bool = True


@dataclass
class AccessVerdict:
    """Admit or Deny, with directives (admit) or a reason (deny)."""
    allowed: bool
    reason_code: DenialCode | None = None
    reason: str | None = None
    remaining_views: int | None = None
    watermark: WatermarkDirective | None = None
    protection: ProtectionDirectives | None = None
    session_token: str | None = None

    @classmethod
    def admit(
        cls,
        remaining_views: int | None = None,
        watermark: WatermarkDirective | None = None,
        protection: ProtectionDirectives | None = None,
        session_token: str | None = None,
    ) -> "AccessVerdict":
        return cls(
            allowed=True,
            remaining_views=remaining_views,
            watermark=watermark,
            protection=protection,
            session_token=session_token,
        )

    @classmethod
    def deny(
        cls,
        code: DenialCode,
        reason: str | None = None,
        remaining_views: int | None = None,
    ) -> "AccessVerdict":
        return cls(
            allowed=False,
            reason_code=code,
            reason=reason or DENIAL_MESSAGES[code],
            remaining_views=remaining_views,
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["reason_code"] = self.reason_code.value if self.reason_code else None
        return data

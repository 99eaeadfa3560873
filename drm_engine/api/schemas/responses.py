"""
Pydantic schemas — Response models for the API.
"""

from datetime import datetime

from pydantic import BaseModel

from drm_engine.core.entities import (
    AccessSession,
    AccessStats,
    AccessVerdict,
    Document,
    DRMPolicy,
    ProtectionViolation,
)


class DocumentResponse(BaseModel):
    id: str
    drm_enabled: bool
    last_access_revoked_at: datetime | None = None

    @classmethod
    def from_entity(cls, document: Document) -> "DocumentResponse":
        return cls(
            id=document.id,
            drm_enabled=document.drm_enabled,
            last_access_revoked_at=document.last_access_revoked_at,
        )


class DRMSettingsResponse(BaseModel):
    document_id: str
    max_views: int | None = None
    max_unique_devices: int | None = None
    prevent_copy: bool = False
    prevent_print: bool = False
    prevent_download: bool = False
    prevent_screenshot: bool = False
    require_watermark: bool = False
    watermark_text: str | None = None
    watermark_opacity: float | None = None
    watermark_position: str | None = None
    access_expires_at: datetime | None = None
    allowed_countries: list[str] = []
    blocked_countries: list[str] = []
    allowed_days_of_week: list[int] = []
    allowed_hours_start: int | None = None
    allowed_hours_end: int | None = None

    @classmethod
    def from_entity(cls, policy: DRMPolicy) -> "DRMSettingsResponse":
        return cls(
            document_id=policy.document_id,
            max_views=policy.max_views,
            max_unique_devices=policy.max_unique_devices,
            prevent_copy=policy.prevent_copy,
            prevent_print=policy.prevent_print,
            prevent_download=policy.prevent_download,
            prevent_screenshot=policy.prevent_screenshot,
            require_watermark=policy.require_watermark,
            watermark_text=policy.watermark_text,
            watermark_opacity=policy.watermark_opacity,
            watermark_position=policy.watermark_position.value if policy.watermark_position else None,
            access_expires_at=policy.access_expires_at,
            allowed_countries=sorted(policy.allowed_countries),
            blocked_countries=sorted(policy.blocked_countries),
            allowed_days_of_week=sorted(policy.allowed_days_of_week),
            allowed_hours_start=policy.allowed_hours_start,
            allowed_hours_end=policy.allowed_hours_end,
        )


class SessionResponse(BaseModel):
    session_token: str


class WatermarkResponse(BaseModel):
    text: str
    opacity: float
    position: str


class ProtectionResponse(BaseModel):
    prevent_copy: bool
    prevent_print: bool
    prevent_download: bool
    prevent_screenshot: bool
    advisory: bool = True


class VerdictResponse(BaseModel):
    allowed: bool
    reason_code: str | None = None
    reason: str | None = None
    remaining_views: int | None = None
    watermark: WatermarkResponse | None = None
    protection: ProtectionResponse | None = None
    session_token: str | None = None

    @classmethod
    def from_verdict(cls, verdict: AccessVerdict) -> "VerdictResponse":
        return cls.model_validate(verdict.to_dict())


class SuccessResponse(BaseModel):
    success: bool = True


class RevokeAllResponse(BaseModel):
    success: bool = True
    revoked_sessions: int


class SessionStateResponse(BaseModel):
    session_id: str
    document_id: str
    is_revoked: bool
    revoked_reason: str | None = None
    revoked_at: datetime | None = None
    created_at: datetime | None = None
    last_access_at: datetime | None = None

    @classmethod
    def from_entity(cls, session: AccessSession) -> "SessionStateResponse":
        return cls(
            session_id=session.id,
            document_id=session.document_id,
            is_revoked=session.is_revoked,
            revoked_reason=session.revoked_reason,
            revoked_at=session.revoked_at,
            created_at=session.created_at,
            last_access_at=session.last_access_at,
        )


class RevokeSessionResponse(BaseModel):
    success: bool = True
    session: SessionStateResponse


class DeviceActivityResponse(BaseModel):
    fingerprint: str
    access_count: int
    last_access_at: datetime | None = None


class StatsResponse(BaseModel):
    document_id: str
    total_views: int
    unique_devices: int
    active_sessions: int
    revoked_sessions: int
    per_device: list[DeviceActivityResponse]

    @classmethod
    def from_entity(cls, stats: AccessStats) -> "StatsResponse":
        return cls(
            document_id=stats.document_id,
            total_views=stats.total_views,
            unique_devices=stats.unique_devices,
            active_sessions=stats.active_sessions,
            revoked_sessions=stats.revoked_sessions,
            per_device=[
                DeviceActivityResponse(
                    fingerprint=d.fingerprint,
                    access_count=d.access_count,
                    last_access_at=d.last_access_at,
                )
                for d in stats.per_device
            ],
        )


class ViolationResponse(BaseModel):
    id: str
    document_id: str
    session_id: str
    violation_type: str
    ip_address: str = ""
    created_at: datetime | None = None

    @classmethod
    def from_entity(cls, violation: ProtectionViolation) -> "ViolationResponse":
        return cls(
            id=violation.id,
            document_id=violation.document_id,
            session_id=violation.session_id,
            violation_type=violation.violation_type.value,
            ip_address=violation.ip_address,
            created_at=violation.created_at,
        )

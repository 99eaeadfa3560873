"""
Pydantic schemas — Request models for the API.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from drm_engine.core.entities import DRMPolicy, ViolationType, WatermarkPosition


class DocumentUpdateRequest(BaseModel):
    drm_enabled: bool


class DRMSettingsRequest(BaseModel):
    max_views: int | None = Field(None, ge=0)
    max_unique_devices: int | None = Field(None, ge=0)
    prevent_copy: bool = False
    prevent_print: bool = False
    prevent_download: bool = False
    prevent_screenshot: bool = False
    require_watermark: bool = False
    watermark_text: str | None = Field(None, max_length=500)
    watermark_opacity: float | None = Field(None, ge=0.0, le=1.0)
    watermark_position: WatermarkPosition | None = None
    access_expires_at: datetime | None = None
    allowed_countries: list[str] = []
    blocked_countries: list[str] = []
    allowed_days_of_week: list[int] = []
    allowed_hours_start: int | None = Field(None, ge=0, le=23)
    allowed_hours_end: int | None = Field(None, ge=0, le=23)

    def to_policy(self, document_id: str) -> DRMPolicy:
        return DRMPolicy(
            document_id=document_id,
            max_views=self.max_views,
            max_unique_devices=self.max_unique_devices,
            prevent_copy=self.prevent_copy,
            prevent_print=self.prevent_print,
            prevent_download=self.prevent_download,
            prevent_screenshot=self.prevent_screenshot,
            require_watermark=self.require_watermark,
            watermark_text=self.watermark_text,
            watermark_opacity=self.watermark_opacity,
            watermark_position=self.watermark_position,
            access_expires_at=self.access_expires_at,
            allowed_countries=set(self.allowed_countries),
            blocked_countries=set(self.blocked_countries),
            allowed_days_of_week=set(self.allowed_days_of_week),
            allowed_hours_start=self.allowed_hours_start,
            allowed_hours_end=self.allowed_hours_end,
        )


class CreateSessionRequest(BaseModel):
    device_fingerprint: str | None = Field(None, max_length=128)
    user_agent: str | None = None
    signals: dict[str, str] = {}


class AdmitRequest(BaseModel):
    session_token: str | None = None
    page_number: int | None = Field(None, ge=1)


class TrackViewRequest(BaseModel):
    page_number: int | None = Field(None, ge=1)


class ViolationRequest(BaseModel):
    violation_type: ViolationType


class RevokeRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)

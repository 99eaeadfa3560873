"""
Database Models — SQLAlchemy.

Tables:
  - documents: protected documents and their DRM toggle
  - document_drm_settings: one policy per protected document
  - document_access_sessions: access sessions (never deleted, only revoked)
  - document_view_tracking: append-only view log, the view-quota counter
  - document_protection_violations: viewer-reported violation attempts
"""

from datetime import datetime

from sqlalchemy import (
    Column, String, Float, Integer, Boolean, DateTime, Text, JSON,
    ForeignKey, Index,
)
from sqlalchemy.orm import DeclarativeBase

from drm_engine.core.entities import (
    AccessSession,
    Document,
    DRMPolicy,
    Geolocation,
    ProtectionViolation,
    ViewRecord,
    ViolationType,
    WatermarkPosition,
)


class Base(DeclarativeBase):
    pass


class DocumentRecord(Base):
    __tablename__ = "documents"

    id = Column(String(64), primary_key=True)
    drm_enabled = Column(Boolean, default=False, nullable=False)
    last_access_revoked_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<Document {self.id} drm={self.drm_enabled}>"

    def to_entity(self) -> Document:
        return Document(
            id=self.id,
            drm_enabled=bool(self.drm_enabled),
            last_access_revoked_at=self.last_access_revoked_at,
        )


class DrmSettingsRecord(Base):
    __tablename__ = "document_drm_settings"

    document_id = Column(String(64), ForeignKey("documents.id", ondelete="CASCADE"), primary_key=True)

    # Quotas
    max_views = Column(Integer, nullable=True)
    max_unique_devices = Column(Integer, nullable=True)

    # Protection flags (advisory)
    prevent_copy = Column(Boolean, default=False)
    prevent_print = Column(Boolean, default=False)
    prevent_download = Column(Boolean, default=False)
    prevent_screenshot = Column(Boolean, default=False)

    # Watermark
    require_watermark = Column(Boolean, default=False)
    watermark_text = Column(Text, nullable=True)
    watermark_opacity = Column(Float, nullable=True)
    watermark_position = Column(String(20), nullable=True)

    # Time / geography
    access_expires_at = Column(DateTime, nullable=True)
    allowed_countries = Column(JSON, default=list)
    blocked_countries = Column(JSON, default=list)
    allowed_days_of_week = Column(JSON, default=list)
    allowed_hours_start = Column(Integer, nullable=True)
    allowed_hours_end = Column(Integer, nullable=True)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<DrmSettings {self.document_id} max_views={self.max_views}>"

    def to_entity(self) -> DRMPolicy:
        return DRMPolicy(
            document_id=self.document_id,
            max_views=self.max_views,
            max_unique_devices=self.max_unique_devices,
            prevent_copy=bool(self.prevent_copy),
            prevent_print=bool(self.prevent_print),
            prevent_download=bool(self.prevent_download),
            prevent_screenshot=bool(self.prevent_screenshot),
            require_watermark=bool(self.require_watermark),
            watermark_text=self.watermark_text,
            watermark_opacity=self.watermark_opacity,
            watermark_position=WatermarkPosition(self.watermark_position) if self.watermark_position else None,
            access_expires_at=self.access_expires_at,
            allowed_countries=set(self.allowed_countries or []),
            blocked_countries=set(self.blocked_countries or []),
            allowed_days_of_week=set(self.allowed_days_of_week or []),
            allowed_hours_start=self.allowed_hours_start,
            allowed_hours_end=self.allowed_hours_end,
        )

    def apply(self, policy: DRMPolicy) -> "DrmSettingsRecord":
        """Copy a policy's fields onto this row."""
        self.max_views = policy.max_views
        self.max_unique_devices = policy.max_unique_devices
        self.prevent_copy = policy.prevent_copy
        self.prevent_print = policy.prevent_print
        self.prevent_download = policy.prevent_download
        self.prevent_screenshot = policy.prevent_screenshot
        self.require_watermark = policy.require_watermark
        self.watermark_text = policy.watermark_text
        self.watermark_opacity = policy.watermark_opacity
        self.watermark_position = policy.watermark_position.value if policy.watermark_position else None
        self.access_expires_at = policy.access_expires_at
        self.allowed_countries = sorted(policy.allowed_countries)
        self.blocked_countries = sorted(policy.blocked_countries)
        self.allowed_days_of_week = sorted(policy.allowed_days_of_week)
        self.allowed_hours_start = policy.allowed_hours_start
        self.allowed_hours_end = policy.allowed_hours_end
        return self


class AccessSessionRecord(Base):
    __tablename__ = "document_access_sessions"

    id = Column(String(36), primary_key=True)
    document_id = Column(String(64), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True)
    session_token = Column(String(128), unique=True, nullable=False, index=True)
    ip_address = Column(String(64), default="")
    device_fingerprint = Column(String(128), default="", index=True)
    user_agent = Column(Text, default="")
    geolocation = Column(JSON, nullable=True)
    access_count = Column(Integer, default=0, nullable=False)

    is_revoked = Column(Boolean, default=False, nullable=False)
    revoked_at = Column(DateTime, nullable=True)
    revoked_reason = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    last_access_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("ix_sessions_document_revoked", "document_id", "is_revoked"),
    )

    def __repr__(self):
        return f"<AccessSession {self.id} doc={self.document_id} revoked={self.is_revoked}>"

    @classmethod
    def from_entity(cls, session: AccessSession) -> "AccessSessionRecord":
        return cls(
            id=session.id,
            document_id=session.document_id,
            session_token=session.token,
            ip_address=session.ip_address,
            device_fingerprint=session.device_fingerprint,
            user_agent=session.user_agent,
            geolocation=session.geolocation.to_dict() if session.geolocation else None,
            access_count=session.access_count,
            is_revoked=session.is_revoked,
            revoked_at=session.revoked_at,
            revoked_reason=session.revoked_reason,
            created_at=session.created_at,
            last_access_at=session.last_access_at,
        )

    def to_entity(self) -> AccessSession:
        return AccessSession(
            id=self.id,
            token=self.session_token,
            document_id=self.document_id,
            ip_address=self.ip_address or "",
            device_fingerprint=self.device_fingerprint or "",
            user_agent=self.user_agent or "",
            geolocation=Geolocation.from_dict(self.geolocation),
            access_count=self.access_count or 0,
            is_revoked=bool(self.is_revoked),
            revoked_reason=self.revoked_reason,
            revoked_at=self.revoked_at,
            created_at=self.created_at,
            last_access_at=self.last_access_at,
        )


class ViewTrackingRecord(Base):
    __tablename__ = "document_view_tracking"

    id = Column(String(36), primary_key=True)
    document_id = Column(String(64), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True)
    session_id = Column(String(36), ForeignKey("document_access_sessions.id", ondelete="CASCADE"), nullable=False)
    page_number = Column(Integer, nullable=True)
    ip_address = Column(String(64), default="")
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<View doc={self.document_id} session={self.session_id} page={self.page_number}>"

    def to_entity(self) -> ViewRecord:
        return ViewRecord(
            id=self.id,
            document_id=self.document_id,
            session_id=self.session_id,
            ip_address=self.ip_address or "",
            page_number=self.page_number,
            created_at=self.created_at,
        )


class ProtectionViolationRecord(Base):
    __tablename__ = "document_protection_violations"

    id = Column(String(36), primary_key=True)
    document_id = Column(String(64), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True)
    session_id = Column(String(36), ForeignKey("document_access_sessions.id", ondelete="CASCADE"), nullable=False)
    violation_type = Column(String(30), nullable=False)
    ip_address = Column(String(64), default="")
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    @classmethod
    def from_entity(cls, violation: ProtectionViolation) -> "ProtectionViolationRecord":
        return cls(
            id=violation.id,
            document_id=violation.document_id,
            session_id=violation.session_id,
            violation_type=violation.violation_type.value,
            ip_address=violation.ip_address,
            created_at=violation.created_at,
        )

    def to_entity(self) -> ProtectionViolation:
        return ProtectionViolation(
            id=self.id,
            document_id=self.document_id,
            session_id=self.session_id,
            violation_type=ViolationType(self.violation_type),
            ip_address=self.ip_address or "",
            created_at=self.created_at,
        )

"""
Access Repository — SQLAlchemy implementation.

Handles:
  - Documents and DRM policies
  - Access sessions (create, lookup, revoke, touch)
  - View records, including the quota-guarded conditional append
  - Protection-violation reports
"""

import logging
from datetime import datetime

from sqlalchemy import (
    Boolean, DateTime, Integer, String, Text,
    desc, distinct, exists, func, insert, literal, or_, select, update,
)

from drm_engine.core.entities import (
    AccessSession,
    Document,
    DRMPolicy,
    ProtectionViolation,
    ViewRecord,
)
from drm_engine.core.interfaces.access_repository import IAccessRepository
from drm_engine.infrastructure.db.database import Database, get_database
from drm_engine.infrastructure.db.models import (
    AccessSessionRecord,
    DocumentRecord,
    DrmSettingsRecord,
    ProtectionViolationRecord,
    ViewTrackingRecord,
)

logger = logging.getLogger(__name__)


class SqlAlchemyAccessRepository(IAccessRepository):
    """Repository for documents, policies, sessions and views."""

    def __init__(self, database: Database | None = None):
        self._db = database or get_database()

    # ── Documents & policies ──

    def get_document(self, document_id: str) -> Document | None:
        with self._db.session() as db:
            record = db.get(DocumentRecord, document_id)
            return record.to_entity() if record else None

    def save_document(self, document: Document) -> Document:
        with self._db.session() as db:
            record = db.get(DocumentRecord, document.id)
            if record is None:
                record = DocumentRecord(id=document.id)
                db.add(record)
            record.drm_enabled = document.drm_enabled
            record.last_access_revoked_at = document.last_access_revoked_at
            db.flush()
            return record.to_entity()

    def get_policy(self, document_id: str) -> DRMPolicy | None:
        with self._db.session() as db:
            record = db.get(DrmSettingsRecord, document_id)
            return record.to_entity() if record else None

    def save_policy(self, policy: DRMPolicy) -> DRMPolicy:
        with self._db.session() as db:
            record = db.get(DrmSettingsRecord, policy.document_id)
            if record is None:
                record = DrmSettingsRecord(document_id=policy.document_id)
                db.add(record)
            record.apply(policy)
            db.flush()
            return record.to_entity()

    def mark_document_revoked(self, document_id: str, at: datetime) -> None:
        with self._db.session() as db:
            db.execute(
                update(DocumentRecord)
                .where(DocumentRecord.id == document_id)
                .values(last_access_revoked_at=at)
            )

    # ── Sessions ──

    def create_session(self, session: AccessSession, max_devices: int | None = None) -> bool:
        with self._db.session() as db:
            if max_devices is None or not session.device_fingerprint:
                db.add(AccessSessionRecord.from_entity(session))
                return True

            self._lock_policy_row(db, session.document_id)

            active = (
                AccessSessionRecord.document_id == session.document_id,
                AccessSessionRecord.is_revoked.is_(False),
            )
            known_devices = (
                select(func.count(distinct(AccessSessionRecord.device_fingerprint)))
                .where(*active, AccessSessionRecord.device_fingerprint != "")
                .scalar_subquery()
            )
            same_device = exists().where(
                *active, AccessSessionRecord.device_fingerprint == session.device_fingerprint
            )
            guarded_row = select(
                literal(session.id, String),
                literal(session.document_id, String),
                literal(session.token, String),
                literal(session.ip_address, String),
                literal(session.device_fingerprint, String),
                literal(session.user_agent, Text),
                literal(session.access_count, Integer),
                literal(False, Boolean),
                literal(session.created_at, DateTime),
                literal(session.last_access_at, DateTime),
            ).where(or_(same_device, known_devices < max_devices))

            result = db.execute(
                insert(AccessSessionRecord).from_select(
                    ["id", "document_id", "session_token", "ip_address", "device_fingerprint",
                     "user_agent", "access_count", "is_revoked", "created_at", "last_access_at"],
                    guarded_row,
                )
            )
            if (result.rowcount or 0) != 1:
                return False

            # Geolocation (JSON) is written once the guarded insert succeeded
            if session.geolocation is not None:
                db.execute(
                    update(AccessSessionRecord)
                    .where(AccessSessionRecord.id == session.id)
                    .values(geolocation=session.geolocation.to_dict())
                )
            return True

    def find_session(self, token: str, document_id: str | None = None) -> AccessSession | None:
        with self._db.session() as db:
            query = select(AccessSessionRecord).where(AccessSessionRecord.session_token == token)
            if document_id is not None:
                query = query.where(AccessSessionRecord.document_id == document_id)
            record = db.execute(query).scalar_one_or_none()
            return record.to_entity() if record else None

    def list_sessions(self, document_id: str) -> list[AccessSession]:
        with self._db.session() as db:
            records = db.execute(
                select(AccessSessionRecord)
                .where(AccessSessionRecord.document_id == document_id)
                .order_by(AccessSessionRecord.created_at)
            ).scalars().all()
            return [r.to_entity() for r in records]

    def touch_session(self, session_id: str, at: datetime) -> None:
        with self._db.session() as db:
            db.execute(
                update(AccessSessionRecord)
                .where(AccessSessionRecord.id == session_id)
                .values(
                    last_access_at=at,
                    access_count=AccessSessionRecord.access_count + 1,
                )
            )

    def revoke_sessions(self, document_id: str, reason: str, at: datetime) -> int:
        with self._db.session() as db:
            result = db.execute(
                update(AccessSessionRecord)
                .where(
                    AccessSessionRecord.document_id == document_id,
                    AccessSessionRecord.is_revoked.is_(False),
                )
                .values(is_revoked=True, revoked_at=at, revoked_reason=reason)
            )
            return result.rowcount or 0

    def revoke_session(self, token: str, reason: str, at: datetime) -> bool:
        with self._db.session() as db:
            result = db.execute(
                update(AccessSessionRecord)
                .where(
                    AccessSessionRecord.session_token == token,
                    AccessSessionRecord.is_revoked.is_(False),
                )
                .values(is_revoked=True, revoked_at=at, revoked_reason=reason)
            )
            return (result.rowcount or 0) > 0

    # ── Views ──

    def count_views(self, document_id: str) -> int:
        with self._db.session() as db:
            return db.execute(
                select(func.count(ViewTrackingRecord.id))
                .where(ViewTrackingRecord.document_id == document_id)
            ).scalar_one()

    def append_view(self, view: ViewRecord, max_views: int | None = None) -> int | None:
        with self._db.session() as db:
            count_query = (
                select(func.count(ViewTrackingRecord.id))
                .where(ViewTrackingRecord.document_id == view.document_id)
            )

            if max_views is None:
                db.add(ViewTrackingRecord(
                    id=view.id,
                    document_id=view.document_id,
                    session_id=view.session_id,
                    page_number=view.page_number,
                    ip_address=view.ip_address,
                    created_at=view.created_at,
                ))
                db.flush()
                return db.execute(count_query).scalar_one()

            self._lock_policy_row(db, view.document_id)

            # Count and insert in one statement. On SQLite the statement takes
            # the write lock before it reads the count.
            guarded_row = select(
                literal(view.id, String),
                literal(view.document_id, String),
                literal(view.session_id, String),
                literal(view.page_number, Integer),
                literal(view.ip_address, String),
                literal(view.created_at, DateTime),
            ).where(count_query.scalar_subquery() < max_views)

            result = db.execute(
                insert(ViewTrackingRecord).from_select(
                    ["id", "document_id", "session_id", "page_number", "ip_address", "created_at"],
                    guarded_row,
                )
            )
            if (result.rowcount or 0) != 1:
                return None

            # Still inside the locked transaction: no other append can land in between
            view_count = db.execute(count_query).scalar_one()
            logger.debug(f"Appended view {view.id} to document {view.document_id} ({view_count}/{max_views})")
            return view_count

    @staticmethod
    def _lock_policy_row(db, document_id: str) -> None:
        """
        Serialize guarded writes per document on servers with row locks:
        concurrent callers wait on the policy row until this transaction
        commits. SQLite needs no lock; its guarded INSERT holds the write lock.
        """
        if db.get_bind().dialect.name == "sqlite":
            return
        db.execute(
            select(DrmSettingsRecord.document_id)
            .where(DrmSettingsRecord.document_id == document_id)
            .with_for_update()
        )

    # ── Protection violations ──

    def add_violation(self, violation: ProtectionViolation) -> ProtectionViolation:
        with self._db.session() as db:
            db.add(ProtectionViolationRecord.from_entity(violation))
        return violation

    def list_violations(self, document_id: str, limit: int = 100) -> list[ProtectionViolation]:
        with self._db.session() as db:
            records = db.execute(
                select(ProtectionViolationRecord)
                .where(ProtectionViolationRecord.document_id == document_id)
                .order_by(desc(ProtectionViolationRecord.created_at))
                .limit(limit)
            ).scalars().all()
            return [r.to_entity() for r in records]

"""
Contract: Access Repository

Storage boundary of the engine: documents, DRM policies, access sessions,
view records and protection-violation reports.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from drm_engine.core.entities import (
    AccessSession,
    Document,
    DRMPolicy,
    ProtectionViolation,
    ViewRecord,
)


class IAccessRepository(ABC):
    """
    Port: Access Repository

    Implementations raise PersistenceError when the store is unreachable.
    Lookups return None for missing rows; they never raise NotFound.
    """

    # ── Documents & policies ──

    @abstractmethod
    def get_document(self, document_id: str) -> Document | None:
        ...

    @abstractmethod
    def save_document(self, document: Document) -> Document:
        """Insert or update a document row."""
        ...

    @abstractmethod
    def get_policy(self, document_id: str) -> DRMPolicy | None:
        ...

    @abstractmethod
    def save_policy(self, policy: DRMPolicy) -> DRMPolicy:
        """Insert or replace the policy of a document."""
        ...

    @abstractmethod
    def mark_document_revoked(self, document_id: str, at: datetime) -> None:
        """Stamp the document's last-revoked marker."""
        ...

    # ── Sessions ──

    @abstractmethod
    def create_session(self, session: AccessSession, max_devices: int | None = None) -> bool:
        """
        Persist a new session, optionally guarded by a device ceiling.

        With max_devices set and a non-empty fingerprint, the session is
        inserted only if its fingerprint already belongs to an active session
        of the document or the document has fewer than max_devices distinct
        active fingerprints. The count and the insert form one atomic step.

        Returns:
            True if the session was stored, False if the ceiling rejected it.
        """
        ...

    @abstractmethod
    def find_session(self, token: str, document_id: str | None = None) -> AccessSession | None:
        """
        Find a session by token.

        Args:
            token: Session token.
            document_id: When given, the session must belong to this document.
        """
        ...

    @abstractmethod
    def list_sessions(self, document_id: str) -> list[AccessSession]:
        ...

    @abstractmethod
    def touch_session(self, session_id: str, at: datetime) -> None:
        """Bump last_access_at and the session's tracked access count."""
        ...

    @abstractmethod
    def revoke_sessions(self, document_id: str, reason: str, at: datetime) -> int:
        """
        Revoke every non-revoked session of a document.

        Returns:
            Number of sessions that changed state.
        """
        ...

    @abstractmethod
    def revoke_session(self, token: str, reason: str, at: datetime) -> bool:
        """
        Revoke one session if it is not revoked yet.

        Returns:
            True if the session changed state.
        """
        ...

    # ── Views ──

    @abstractmethod
    def count_views(self, document_id: str) -> int:
        ...

    @abstractmethod
    def append_view(self, view: ViewRecord, max_views: int | None = None) -> int | None:
        """
        Append a view record, optionally guarded by a quota.

        With max_views set, the record is inserted only if the document has
        fewer than max_views records, and the count and the insert form one
        atomic step: concurrent callers can never push the count past the
        limit.

        Returns:
            The document's view count including this record, read in the
            same transaction as the insert. None if the quota rejected it.
        """
        ...

    # ── Protection violations ──

    @abstractmethod
    def add_violation(self, violation: ProtectionViolation) -> ProtectionViolation:
        ...

    @abstractmethod
    def list_violations(self, document_id: str, limit: int = 100) -> list[ProtectionViolation]:
        ...

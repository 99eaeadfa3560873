"""
Use Case: Revocation Service

Marks sessions permanently invalid. Sessions are never deleted, so the
audit history survives revocation. Both operations are idempotent.
"""

import logging
from collections.abc import Callable

from drm_engine.core.clock import Clock, local_clock, to_utc_naive
from drm_engine.core.entities import AccessSession
from drm_engine.core.errors import SessionNotFoundError
from drm_engine.core.interfaces.access_repository import IAccessRepository
from drm_engine.core.use_cases.manage_sessions import short_token

logger = logging.getLogger(__name__)

RevocationHook = Callable[[str, int], None]


class RevocationService:
    """
    Use Case: revoke one session or every session of a document.

    When at least one session changes state, the document's
    last_access_revoked_at marker is stamped and on_revoked(document_id,
    revoked_count) is called.
    """

    DEFAULT_DOCUMENT_REASON = "Access revoked by document owner"
    DEFAULT_SESSION_REASON = "Session revoked"

    def __init__(
        self,
        repository: IAccessRepository,
        clock: Clock | None = None,
        on_revoked: RevocationHook | None = None,
    ):
        self._repo = repository
        self._clock = clock or local_clock()
        self._on_revoked = on_revoked

    def revoke_all(self, document_id: str, reason: str | None = None) -> int:
        """Revoke every active session of a document. Returns how many changed."""
        now = to_utc_naive(self._clock())
        count = self._repo.revoke_sessions(document_id, reason or self.DEFAULT_DOCUMENT_REASON, now)
        if count:
            self._after_revocation(document_id, count, now)
        logger.info(f"Revoked {count} session(s) for document {document_id}")
        return count

    def revoke_one(self, session_token: str, reason: str | None = None) -> AccessSession:
        """
        Revoke one session. Revoking an already revoked session is a no-op.

        Raises:
            SessionNotFoundError: unknown token.
        """
        session = self._repo.find_session(session_token)
        if session is None:
            raise SessionNotFoundError()

        now = to_utc_naive(self._clock())
        if self._repo.revoke_session(session_token, reason or self.DEFAULT_SESSION_REASON, now):
            self._after_revocation(session.document_id, 1, now)
            logger.info(f"Revoked session {short_token(session_token)} on document {session.document_id}")
            session = self._repo.find_session(session_token)
        return session

    def _after_revocation(self, document_id: str, count: int, at) -> None:
        self._repo.mark_document_revoked(document_id, at)
        if self._on_revoked is not None:
            self._on_revoked(document_id, count)

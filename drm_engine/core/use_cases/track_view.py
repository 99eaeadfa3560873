"""
Use Case: View Tracker

Records one granted view. The record is appended through the repository's
conditional append, so the quota check and the insert happen as one
atomic step at the storage boundary.

Duplicate calls (e.g. client retries) are recorded as separate views;
deduplication is the caller's concern.
"""

import logging
import uuid

from drm_engine.core.clock import Clock, local_clock, to_utc_naive
from drm_engine.core.entities import ViewRecord
from drm_engine.core.errors import SessionNotFoundError, ViewQuotaExceeded
from drm_engine.core.interfaces.access_repository import IAccessRepository
from drm_engine.core.use_cases.manage_sessions import short_token

logger = logging.getLogger(__name__)


class ViewTracker:
    """Use Case: append a view record and bump the session's last access."""

    def __init__(self, repository: IAccessRepository, clock: Clock | None = None):
        self._repo = repository
        self._clock = clock or local_clock()

    def track_view(
        self,
        session_token: str,
        page_number: int | None = None,
        document_id: str | None = None,
    ) -> ViewRecord:
        """
        Args:
            session_token: Token of the viewing session.
            page_number: Page shown, if known.
            document_id: When given, the session must belong to this document.

        Raises:
            SessionNotFoundError: unknown token, or a token of another document.
            ViewQuotaExceeded: the document's max_views was already reached.
            PersistenceError: store unreachable.
        """
        session = self._repo.find_session(session_token, document_id=document_id)
        if session is None:
            raise SessionNotFoundError()

        max_views = self._quota_for(session.document_id)
        now = to_utc_naive(self._clock())

        view = ViewRecord(
            id=str(uuid.uuid4()),
            document_id=session.document_id,
            session_id=session.id,
            ip_address=session.ip_address,
            page_number=page_number,
            created_at=now,
        )
        view_count = self._repo.append_view(view, max_views=max_views)
        if view_count is None:
            logger.warning(
                f"View rejected for session {short_token(session_token)}: "
                f"limit {max_views} reached on document {session.document_id}"
            )
            raise ViewQuotaExceeded(session.document_id, max_views)
        if max_views is not None:
            view.remaining_views = max(max_views - view_count, 0)

        self._repo.touch_session(session.id, now)
        logger.info(
            f"Tracked view on document {session.document_id} "
            f"(session {short_token(session_token)}, page={page_number})"
        )
        return view

    def _quota_for(self, document_id: str) -> int | None:
        document = self._repo.get_document(document_id)
        if document is None or not document.drm_enabled:
            return None
        policy = self._repo.get_policy(document_id)
        return policy.max_views if policy else None

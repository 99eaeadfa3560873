"""
Use Case: Report Protection Violation

The viewer reports attempts to copy, print or screenshot protected content.
Reports are audit data only and never affect admission.
"""

import logging
import uuid

from drm_engine.core.clock import Clock, local_clock, to_utc_naive
from drm_engine.core.entities import ProtectionViolation, ViolationType
from drm_engine.core.errors import SessionNotFoundError
from drm_engine.core.interfaces.access_repository import IAccessRepository
from drm_engine.core.use_cases.manage_sessions import short_token

logger = logging.getLogger(__name__)


class ReportViolationUseCase:

    def __init__(self, repository: IAccessRepository, clock: Clock | None = None):
        self._repo = repository
        self._clock = clock or local_clock()

    def execute(self, session_token: str, violation_type: ViolationType) -> ProtectionViolation:
        session = self._repo.find_session(session_token)
        if session is None:
            raise SessionNotFoundError()

        violation = ProtectionViolation(
            id=str(uuid.uuid4()),
            document_id=session.document_id,
            session_id=session.id,
            violation_type=ViolationType(violation_type),
            ip_address=session.ip_address,
            created_at=to_utc_naive(self._clock()),
        )
        self._repo.add_violation(violation)
        logger.warning(
            f"Protection violation '{violation.violation_type.value}' on document "
            f"{session.document_id} (session {short_token(session_token)})"
        )
        return violation

    def list_for_document(self, document_id: str, limit: int = 100) -> list[ProtectionViolation]:
        return self._repo.list_violations(document_id, limit=limit)

"""
Use Case: Admit View

Validate and record in one call. The quota is re-checked atomically when
the view is recorded, so concurrent admissions can never exceed max_views:
a request that passed validation but lost the race is denied.
"""

from drm_engine.core.entities import AccessVerdict, DenialCode
from drm_engine.core.errors import SessionNotFoundError, ViewQuotaExceeded
from drm_engine.core.use_cases.evaluate_policy import PolicyEvaluator
from drm_engine.core.use_cases.track_view import ViewTracker


class AdmitViewUseCase:

    def __init__(self, evaluator: PolicyEvaluator, tracker: ViewTracker):
        self._evaluator = evaluator
        self._tracker = tracker

    def execute(self, document_id: str, session_token: str | None,
                page_number: int | None = None) -> AccessVerdict:
        verdict = self._evaluator.validate_access(document_id, session_token)
        if not verdict.allowed or not session_token:
            return verdict

        try:
            view = self._tracker.track_view(session_token, page_number, document_id=document_id)
        except SessionNotFoundError:
            # DRM disabled: the token was never checked and is not a session
            # of this document, nothing to record
            return verdict
        except ViewQuotaExceeded:
            return AccessVerdict.deny(DenialCode.VIEW_LIMIT_REACHED, remaining_views=0)

        if verdict.remaining_views is not None and view.remaining_views is not None:
            verdict.remaining_views = view.remaining_views
        return verdict

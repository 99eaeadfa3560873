"""
Use Case: Policy Evaluator — validate access to a protected document.

Checks run in a fixed order and stop at the first failure:
document → DRM toggle → policy → session → revocation → expiry
→ day → hour → geography → view quota → directives.
Deny-reason precedence is user-visible, so the order must not change.
"""

import logging

from drm_engine.core.clock import Clock, js_weekday, local_clock, to_utc_naive
from drm_engine.core.entities import (
    DENIAL_MESSAGES,
    AccessSession,
    AccessVerdict,
    DenialCode,
    DRMPolicy,
    ProtectionDirectives,
    WatermarkDirective,
)
from drm_engine.core.errors import SessionNotFoundError
from drm_engine.core.interfaces.access_repository import IAccessRepository
from drm_engine.core.use_cases.manage_sessions import SessionManager, short_token

logger = logging.getLogger(__name__)

DEFAULT_WATERMARK_TEMPLATE = "{ip} - {timestamp}"


class _KeepMissing(dict):
    """format_map() mapping that leaves unknown placeholders untouched."""

    def __missing__(self, key):
        return "{" + key + "}"


def render_watermark(template: str, values: dict) -> str:
    try:
        return template.format_map(_KeepMissing(values))
    except (ValueError, IndexError, AttributeError):
        # Stray braces: use the text as written
        return template


class PolicyEvaluator:
    """
    Use Case: produce an admit/deny verdict for one access attempt.

    Read-only: the evaluator never records views. Recording is done by
    ViewTracker, whose conditional append enforces max_views atomically.
    """

    def __init__(
        self,
        repository: IAccessRepository,
        session_manager: SessionManager,
        clock: Clock | None = None,
        default_watermark_opacity: float = 0.3,
        default_watermark_position: str = "diagonal",
    ):
        self._repo = repository
        self._sessions = session_manager
        self._clock = clock or local_clock()
        self._default_opacity = default_watermark_opacity
        self._default_position = default_watermark_position

    def validate_access(self, document_id: str, session_token: str | None = None) -> AccessVerdict:
        verdict = self._evaluate(document_id, session_token)
        if not verdict.allowed:
            logger.debug(
                f"Denied document {document_id} session {short_token(session_token)}: "
                f"{verdict.reason_code.value}"
            )
        return verdict

    def _evaluate(self, document_id: str, session_token: str | None) -> AccessVerdict:
        # ── 1. Document ────────────────────────────────────
        document = self._repo.get_document(document_id)
        if document is None:
            return AccessVerdict.deny(DenialCode.DOCUMENT_NOT_FOUND)

        # ── 2. DRM toggle ──────────────────────────────────
        if not document.drm_enabled:
            return AccessVerdict.admit(session_token=session_token)

        # ── 3. Policy ──────────────────────────────────────
        policy = self._repo.get_policy(document_id)
        if policy is None:
            return AccessVerdict.deny(DenialCode.SETTINGS_UNAVAILABLE)

        # ── 4-6. Session ───────────────────────────────────
        if not session_token:
            return AccessVerdict.deny(DenialCode.SESSION_REQUIRED)

        try:
            session = self._sessions.lookup_session(session_token, document_id)
        except SessionNotFoundError:
            return AccessVerdict.deny(DenialCode.INVALID_SESSION)

        if session.is_revoked:
            return AccessVerdict.deny(DenialCode.SESSION_REVOKED, reason=session.revoked_reason)

        now = self._clock()

        # ── 7. Expiry ──────────────────────────────────────
        if policy.access_expires_at is not None:
            if to_utc_naive(policy.access_expires_at) < to_utc_naive(now):
                return AccessVerdict.deny(DenialCode.ACCESS_EXPIRED)

        # ── 8. Day of week ─────────────────────────────────
        if policy.allowed_days_of_week and js_weekday(now) not in policy.allowed_days_of_week:
            return AccessVerdict.deny(DenialCode.DAY_NOT_ALLOWED)

        # ── 9. Hour window ─────────────────────────────────
        if policy.has_hour_window:
            start, end = policy.allowed_hours_start, policy.allowed_hours_end
            if now.hour < start or now.hour > end:
                reason = DENIAL_MESSAGES[DenialCode.HOUR_NOT_ALLOWED].format(start=start, end=end)
                return AccessVerdict.deny(DenialCode.HOUR_NOT_ALLOWED, reason=reason)

        # ── 10. Geography ──────────────────────────────────
        # No geolocation (lookup failed or private IP): checks are skipped
        if session.geolocation is not None:
            country = session.geolocation.country_code.upper()
            if country in {c.upper() for c in policy.blocked_countries}:
                return AccessVerdict.deny(DenialCode.LOCATION_BLOCKED)
            allowed = {c.upper() for c in policy.allowed_countries}
            if allowed and country not in allowed:
                return AccessVerdict.deny(DenialCode.LOCATION_NOT_ALLOWED)

        # ── 11-12. View quota ──────────────────────────────
        remaining_views = None
        if policy.max_views is not None:
            view_count = self._repo.count_views(document_id)
            if view_count >= policy.max_views:
                return AccessVerdict.deny(DenialCode.VIEW_LIMIT_REACHED, remaining_views=0)
            remaining_views = policy.max_views - view_count

        # ── 13-14. Directives ──────────────────────────────
        return AccessVerdict.admit(
            remaining_views=remaining_views,
            watermark=self._build_watermark(policy, session, now),
            protection=ProtectionDirectives(
                prevent_copy=policy.prevent_copy,
                prevent_print=policy.prevent_print,
                prevent_download=policy.prevent_download,
                prevent_screenshot=policy.prevent_screenshot,
            ),
            session_token=session_token,
        )

    def _build_watermark(self, policy: DRMPolicy, session: AccessSession, now) -> WatermarkDirective | None:
        if not policy.require_watermark:
            return None

        values = {
            "ip": session.ip_address or "unknown",
            "timestamp": now.strftime("%Y-%m-%d %H:%M:%S"),
            "date": now.strftime("%Y-%m-%d"),
            "document_id": session.document_id,
            "session_id": session.id,
        }
        text = render_watermark(policy.watermark_text or DEFAULT_WATERMARK_TEMPLATE, values)

        opacity = policy.watermark_opacity
        if opacity is None:
            opacity = self._default_opacity
        position = policy.watermark_position.value if policy.watermark_position else self._default_position

        return WatermarkDirective(text=text, opacity=opacity, position=position)

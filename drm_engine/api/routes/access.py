"""
Routes: viewer-facing access flow.

create-session → validate → (admit | track-view), plus violation reports.
"""

from fastapi import APIRouter, Depends, Request

from drm_engine.api.dependencies import AccessServices, client_ip, get_services
from drm_engine.api.schemas.requests import (
    AdmitRequest,
    CreateSessionRequest,
    TrackViewRequest,
    ViolationRequest,
)
from drm_engine.api.schemas.responses import SessionResponse, SuccessResponse, VerdictResponse
from drm_engine.core.use_cases.manage_sessions import AccessContext
from drm_engine.infrastructure.fingerprint.signal_hash_identifier import signals_from_headers

router = APIRouter()


@router.post("/documents/{document_id}/sessions", response_model=SessionResponse)
def create_session(
    document_id: str,
    request: Request,
    body: CreateSessionRequest | None = None,
    ip: str = Depends(client_ip),
    services: AccessServices = Depends(get_services),
):
    """
    Create an access session for this client.

    The viewer stores the returned token (e.g. keyed by document id) and
    sends it on every later visit until it is revoked.
    """
    body = body or CreateSessionRequest()
    signals = dict(body.signals)
    if not body.device_fingerprint and not signals:
        signals = signals_from_headers(request.headers)

    context = AccessContext(
        ip=ip,
        user_agent=body.user_agent or request.headers.get("user-agent", ""),
        device_fingerprint=body.device_fingerprint or "",
        signals=signals,
    )
    token = services.sessions.create_session(document_id, context)
    return SessionResponse(session_token=token)


@router.get("/documents/{document_id}/access", response_model=VerdictResponse)
def validate_access(
    document_id: str,
    session_token: str | None = None,
    services: AccessServices = Depends(get_services),
):
    """Admit/deny verdict. A denial is a normal 200 response with allowed=false."""
    verdict = services.evaluator.validate_access(document_id, session_token)
    return VerdictResponse.from_verdict(verdict)


@router.post("/documents/{document_id}/admit", response_model=VerdictResponse)
def admit_view(
    document_id: str,
    body: AdmitRequest,
    services: AccessServices = Depends(get_services),
):
    """Validate and record the view in one step; the quota cannot be overrun."""
    verdict = services.admission.execute(document_id, body.session_token, body.page_number)
    return VerdictResponse.from_verdict(verdict)


@router.post("/sessions/{session_token}/views", response_model=SuccessResponse)
def track_view(
    session_token: str,
    body: TrackViewRequest | None = None,
    services: AccessServices = Depends(get_services),
):
    page_number = body.page_number if body else None
    services.tracker.track_view(session_token, page_number)
    return SuccessResponse()


@router.post("/sessions/{session_token}/violations", response_model=SuccessResponse)
def report_violation(
    session_token: str,
    body: ViolationRequest,
    services: AccessServices = Depends(get_services),
):
    """Record an attempted copy/print/screenshot. Never changes admission."""
    services.violations.execute(session_token, body.violation_type)
    return SuccessResponse()

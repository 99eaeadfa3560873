"""
Routes: owner-only document administration.

Policy settings, revocation, statistics and violation reports.
All endpoints require the X-Owner-Key header.
"""

from fastapi import APIRouter, Depends

from drm_engine.api.dependencies import AccessServices, get_services, require_owner
from drm_engine.api.schemas.requests import DocumentUpdateRequest, DRMSettingsRequest, RevokeRequest
from drm_engine.api.schemas.responses import (
    DocumentResponse,
    DRMSettingsResponse,
    RevokeAllResponse,
    RevokeSessionResponse,
    SessionStateResponse,
    StatsResponse,
    ViolationResponse,
)

router = APIRouter(dependencies=[Depends(require_owner)])


@router.put("/documents/{document_id}", response_model=DocumentResponse)
def update_document(
    document_id: str,
    body: DocumentUpdateRequest,
    services: AccessServices = Depends(get_services),
):
    """Register a document or toggle its DRM protection."""
    document = services.policies.set_drm_enabled(document_id, body.drm_enabled)
    return DocumentResponse.from_entity(document)


@router.put("/documents/{document_id}/drm-settings", response_model=DRMSettingsResponse)
def save_drm_settings(
    document_id: str,
    body: DRMSettingsRequest,
    services: AccessServices = Depends(get_services),
):
    """Save the document's policy. Enables DRM on the document."""
    policy = services.policies.save(body.to_policy(document_id))
    return DRMSettingsResponse.from_entity(policy)


@router.get("/documents/{document_id}/drm-settings", response_model=DRMSettingsResponse)
def get_drm_settings(document_id: str, services: AccessServices = Depends(get_services)):
    return DRMSettingsResponse.from_entity(services.policies.get(document_id))


@router.post("/documents/{document_id}/revoke", response_model=RevokeAllResponse)
def revoke_all(
    document_id: str,
    body: RevokeRequest | None = None,
    services: AccessServices = Depends(get_services),
):
    count = services.revocation.revoke_all(document_id, body.reason if body else None)
    return RevokeAllResponse(revoked_sessions=count)


@router.post("/sessions/{session_token}/revoke", response_model=RevokeSessionResponse)
def revoke_session(
    session_token: str,
    body: RevokeRequest | None = None,
    services: AccessServices = Depends(get_services),
):
    session = services.revocation.revoke_one(session_token, body.reason if body else None)
    return RevokeSessionResponse(session=SessionStateResponse.from_entity(session))


@router.get("/documents/{document_id}/stats", response_model=StatsResponse)
def get_stats(document_id: str, services: AccessServices = Depends(get_services)):
    return StatsResponse.from_entity(services.stats.get_stats(document_id))


@router.get("/documents/{document_id}/violations", response_model=list[ViolationResponse])
def list_violations(
    document_id: str,
    limit: int = 100,
    services: AccessServices = Depends(get_services),
):
    return [ViolationResponse.from_entity(v) for v in services.violations.list_for_document(document_id, limit)]

"""
Dependency wiring — builds the use cases with concrete adapters.

Routes receive AccessServices through Depends(get_services), so tests can
swap the whole graph with app.dependency_overrides.
"""

import logging
import secrets
from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, Request

from drm_engine.config.settings import Settings, get_settings
from drm_engine.core.clock import Clock, local_clock
from drm_engine.core.interfaces.access_repository import IAccessRepository
from drm_engine.core.interfaces.device_identifier import IDeviceIdentifier
from drm_engine.core.interfaces.geolocation import IGeolocationResolver
from drm_engine.core.use_cases.access_stats import AccessStatisticsUseCase
from drm_engine.core.use_cases.admit_view import AdmitViewUseCase
from drm_engine.core.use_cases.evaluate_policy import PolicyEvaluator
from drm_engine.core.use_cases.manage_sessions import SessionManager
from drm_engine.core.use_cases.policy_settings import PolicySettingsUseCase
from drm_engine.core.use_cases.report_violation import ReportViolationUseCase
from drm_engine.core.use_cases.revoke_access import RevocationService
from drm_engine.core.use_cases.track_view import ViewTracker
from drm_engine.infrastructure.db.database import Database, get_database
from drm_engine.infrastructure.db.repository import SqlAlchemyAccessRepository
from drm_engine.infrastructure.fingerprint.signal_hash_identifier import SignalHashDeviceIdentifier
from drm_engine.infrastructure.geo.ip_api_resolver import IpApiGeolocationResolver
from drm_engine.infrastructure.geo.static_resolver import StaticGeolocationResolver

logger = logging.getLogger(__name__)


@dataclass
class AccessServices:
    """All use cases, sharing one repository and one clock."""
    database: Database
    repository: IAccessRepository
    device_identifier: IDeviceIdentifier
    sessions: SessionManager
    evaluator: PolicyEvaluator
    tracker: ViewTracker
    admission: AdmitViewUseCase
    revocation: RevocationService
    stats: AccessStatisticsUseCase
    policies: PolicySettingsUseCase
    violations: ReportViolationUseCase


def build_geolocation(settings: Settings) -> IGeolocationResolver | None:
    provider = settings.geo_provider.lower()
    if provider == "ip-api":
        return IpApiGeolocationResolver(
            url_template=settings.geo_api_url,
            timeout_seconds=settings.geo_timeout_seconds,
        )
    if provider == "static":
        return StaticGeolocationResolver(settings.geo_static_countries)
    if provider != "none":
        logger.warning(f"Unknown geo_provider '{settings.geo_provider}', geolocation disabled")
    return None


def build_services(
    settings: Settings,
    database: Database | None = None,
    geolocation: IGeolocationResolver | None = None,
    clock: Clock | None = None,
) -> AccessServices:
    """Factory — build every use case with concrete adapters."""
    database = database or get_database()
    clock = clock or local_clock(settings.policy_timezone)
    repository = SqlAlchemyAccessRepository(database)
    devices = SignalHashDeviceIdentifier()

    sessions = SessionManager(
        repository,
        geolocation=geolocation,
        device_identifier=devices,
        token_bytes=settings.session_token_bytes,
        clock=clock,
    )
    evaluator = PolicyEvaluator(
        repository,
        sessions,
        clock=clock,
        default_watermark_opacity=settings.default_watermark_opacity,
        default_watermark_position=settings.default_watermark_position,
    )
    tracker = ViewTracker(repository, clock=clock)

    return AccessServices(
        database=database,
        repository=repository,
        device_identifier=devices,
        sessions=sessions,
        evaluator=evaluator,
        tracker=tracker,
        admission=AdmitViewUseCase(evaluator, tracker),
        revocation=RevocationService(repository, clock=clock),
        stats=AccessStatisticsUseCase(repository),
        policies=PolicySettingsUseCase(repository),
        violations=ReportViolationUseCase(repository, clock=clock),
    )


# Lazy singleton
_services = None


def get_services() -> AccessServices:
    global _services
    if _services is None:
        settings = get_settings()
        _services = build_services(settings, geolocation=build_geolocation(settings))
    return _services


def client_ip(request: Request, settings: Settings = Depends(get_settings)) -> str:
    """Client address: first X-Forwarded-For hop when trusted, else the socket peer."""
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else "unknown"


def require_owner(
    x_owner_key: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Owner-only endpoints need the shared owner key."""
    if not x_owner_key or not secrets.compare_digest(x_owner_key, settings.owner_api_key):
        raise HTTPException(status_code=401, detail="Owner key required")

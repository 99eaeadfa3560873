"""Shared fixtures: in-memory database, fixed clock, fake geolocation, wired services."""

import pytest

from drm_engine.api.dependencies import build_services
from drm_engine.core.entities import DRMPolicy
from drm_engine.core.use_cases.manage_sessions import AccessContext
from drm_engine.infrastructure.db.database import Database
from tests.fakes import CN_IP, GB_IP, US_IP, FakeGeolocation, FixedClock, make_settings


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.init_db()
    yield db
    db.engine.dispose()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def geo():
    return FakeGeolocation({US_IP: "US", GB_IP: "GB", CN_IP: "CN"})


@pytest.fixture
def services(settings, database, geo, clock):
    return build_services(settings, database=database, geolocation=geo, clock=clock)


@pytest.fixture
def protected_document(services):
    """Factory: create a DRM-enabled document with the given policy fields."""
    counter = {"n": 0}

    def _create(**policy_fields) -> str:
        counter["n"] += 1
        document_id = f"doc-{counter['n']}"
        services.policies.save(DRMPolicy(document_id=document_id, **policy_fields))
        return document_id

    return _create


@pytest.fixture
def open_session(services):
    """Factory: create a session for a document from the given IP/device."""

    def _open(document_id: str, ip: str = US_IP, device: str = "device-a", user_agent: str = "pytest") -> str:
        context = AccessContext(ip=ip, user_agent=user_agent, device_fingerprint=device)
        return services.sessions.create_session(document_id, context)

    return _open

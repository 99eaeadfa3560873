"""Concurrent admissions against a file-backed database never overrun the quota."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from drm_engine.api.dependencies import build_services
from drm_engine.core.entities import DenialCode, DRMPolicy
from drm_engine.core.use_cases.manage_sessions import AccessContext
from drm_engine.infrastructure.db.database import Database
from tests.fakes import US_IP, make_settings

MAX_VIEWS = 5
ATTEMPTS = 24


@pytest.fixture
def file_services(tmp_path, geo, clock):
    database = Database(f"sqlite:///{tmp_path}/concurrency.db")
    database.init_db()
    yield build_services(make_settings(), database=database, geolocation=geo, clock=clock)
    database.engine.dispose()


def test_parallel_admissions_respect_max_views(file_services):
    services = file_services
    services.policies.save(DRMPolicy(document_id="doc", max_views=MAX_VIEWS))
    tokens = [
        services.sessions.create_session("doc", AccessContext(ip=US_IP, device_fingerprint=f"device-{i}"))
        for i in range(ATTEMPTS)
    ]

    with ThreadPoolExecutor(max_workers=8) as pool:
        verdicts = list(pool.map(lambda token: services.admission.execute("doc", token), tokens))

    admitted = [v for v in verdicts if v.allowed]
    denied = [v for v in verdicts if not v.allowed]
    assert len(admitted) == MAX_VIEWS
    assert all(v.reason_code == DenialCode.VIEW_LIMIT_REACHED for v in denied)
    assert services.repository.count_views("doc") == MAX_VIEWS


def test_parallel_tracking_respects_max_views(file_services):
    services = file_services
    services.policies.save(DRMPolicy(document_id="doc", max_views=MAX_VIEWS))
    token = services.sessions.create_session("doc", AccessContext(ip=US_IP, device_fingerprint="shared"))

    def track(_):
        try:
            services.tracker.track_view(token)
            return True
        except Exception as e:
            return type(e).__name__

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(track, range(ATTEMPTS)))

    assert results.count(True) == MAX_VIEWS
    assert set(results) - {True} == {"ViewQuotaExceeded"}
    assert services.repository.count_views("doc") == MAX_VIEWS


def test_parallel_sessions_respect_max_unique_devices(file_services):
    services = file_services
    services.policies.save(DRMPolicy(document_id="doc", max_unique_devices=2))

    def open_from(i):
        try:
            services.sessions.create_session("doc", AccessContext(ip=US_IP, device_fingerprint=f"device-{i}"))
            return True
        except Exception as e:
            return type(e).__name__

    with ThreadPoolExecutor(max_workers=16) as pool:
        results = list(pool.map(open_from, range(32)))

    assert results.count(True) == 2
    assert set(results) - {True} == {"DeviceLimitReached"}
    assert services.stats.get_stats("doc").unique_devices == 2


def test_parallel_sessions_from_known_device(file_services):
    services = file_services
    services.policies.save(DRMPolicy(document_id="doc", max_unique_devices=1))
    services.sessions.create_session("doc", AccessContext(ip=US_IP, device_fingerprint="laptop"))

    with ThreadPoolExecutor(max_workers=8) as pool:
        tokens = list(pool.map(
            lambda _: services.sessions.create_session("doc", AccessContext(ip=US_IP, device_fingerprint="laptop")),
            range(10),
        ))

    assert len(set(tokens)) == 10
    assert services.stats.get_stats("doc").active_sessions == 11

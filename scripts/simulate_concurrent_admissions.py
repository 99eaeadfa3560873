"""
Concurrent Admission Simulation — fire K parallel admissions at a document
with max_views = N and check that no more than N views get recorded.

Runs against DATABASE_URL from .env (defaults to a throwaway SQLite file).
"""
import argparse
import os
import sys
import time
import uuid
from concurrent.futures import ThreadPoolExecutor

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), ".env"))

from drm_engine.api.dependencies import build_services
from drm_engine.config.settings import Settings
from drm_engine.core.entities import DRMPolicy
from drm_engine.core.use_cases.manage_sessions import AccessContext
from drm_engine.infrastructure.db.database import Database


def main():
    parser = argparse.ArgumentParser(description="Stress the view quota with concurrent admissions")
    parser.add_argument("--max-views", type=int, default=5, help="Quota N")
    parser.add_argument("--requests", type=int, default=50, help="Concurrent admissions K")
    parser.add_argument("--workers", type=int, default=16, help="Thread pool size")
    parser.add_argument("--database-url", default=os.getenv("DATABASE_URL", "sqlite:///stress_drm.db"))
    args = parser.parse_args()

    settings = Settings(database_url=args.database_url, geo_provider="none")
    database = Database(args.database_url)
    database.init_db()
    services = build_services(settings, database=database)

    document_id = f"stress-{uuid.uuid4().hex[:8]}"
    services.policies.save(DRMPolicy(document_id=document_id, max_views=args.max_views))

    tokens = [
        services.sessions.create_session(
            document_id, AccessContext(ip="203.0.113.7", device_fingerprint=f"device-{i}")
        )
        for i in range(args.requests)
    ]

    print("=" * 70)
    print(f"  {args.requests} concurrent admissions, max_views={args.max_views}")
    print(f"  database: {database.kind}")
    print("=" * 70)

    t0 = time.perf_counter()
    with ThreadPoolExecutor(max_workers=args.workers) as pool:
        verdicts = list(pool.map(lambda t: services.admission.execute(document_id, t), tokens))
    elapsed_ms = (time.perf_counter() - t0) * 1000

    admitted = sum(1 for v in verdicts if v.allowed)
    recorded = services.repository.count_views(document_id)
    denied_reasons = {}
    for v in verdicts:
        if not v.allowed:
            denied_reasons[v.reason] = denied_reasons.get(v.reason, 0) + 1

    print(f"  admitted:       {admitted}")
    print(f"  views recorded: {recorded}")
    print(f"  denied:         {denied_reasons}")
    print(f"  elapsed:        {elapsed_ms:.0f} ms")

    if recorded > args.max_views:
        print(f"  FAIL: quota overrun by {recorded - args.max_views}")
        sys.exit(1)
    print("  OK: quota held")


if __name__ == "__main__":
    main()

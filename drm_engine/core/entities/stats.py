"""
Entity: Access Statistics

Read-only aggregation shown to document owners.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class DeviceActivity:
    fingerprint: str
    access_count: int = 0
    last_access_at: datetime | None = None


@dataclass
class AccessStats:
    document_id: str
    total_views: int = 0
    unique_devices: int = 0
    active_sessions: int = 0
    revoked_sessions: int = 0
    per_device: list[DeviceActivity] = field(default_factory=list)

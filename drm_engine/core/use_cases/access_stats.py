"""
Use Case: Access Statistics

Read-only summary used by document owners to audit viewers and pick
sessions to revoke.
"""

from drm_engine.core.entities import AccessStats, DeviceActivity
from drm_engine.core.errors import DocumentNotFoundError
from drm_engine.core.interfaces.access_repository import IAccessRepository


class AccessStatisticsUseCase:

    def __init__(self, repository: IAccessRepository):
        self._repo = repository

    def get_stats(self, document_id: str) -> AccessStats:
        if self._repo.get_document(document_id) is None:
            raise DocumentNotFoundError(document_id)

        sessions = self._repo.list_sessions(document_id)
        active = [s for s in sessions if not s.is_revoked]

        # Devices are counted over active sessions only; their activity
        # includes every session ever opened from that device.
        fingerprints = sorted({s.device_fingerprint for s in active if s.device_fingerprint})
        per_device = []
        for fingerprint in fingerprints:
            device_sessions = [s for s in sessions if s.device_fingerprint == fingerprint]
            accesses = [s.last_access_at for s in device_sessions if s.last_access_at]
            per_device.append(DeviceActivity(
                fingerprint=fingerprint,
                access_count=sum(s.access_count for s in device_sessions),
                last_access_at=max(accesses) if accesses else None,
            ))
        per_device.sort(key=lambda d: (d.last_access_at is not None, d.last_access_at), reverse=True)

        return AccessStats(
            document_id=document_id,
            total_views=self._repo.count_views(document_id),
            unique_devices=len(fingerprints),
            active_sessions=len(active),
            revoked_sessions=len(sessions) - len(active),
            per_device=per_device,
        )

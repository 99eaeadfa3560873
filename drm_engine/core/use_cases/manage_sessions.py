"""
Use Case: Session Manager

Creates access sessions (one per client device/browser slot) and looks
them up by token. A token is a bearer credential scoped to one document.
"""

import logging
import secrets
import uuid
from dataclasses import dataclass, field

from drm_engine.core.clock import Clock, local_clock, to_utc_naive
from drm_engine.core.entities import AccessSession
from drm_engine.core.errors import (
    DeviceLimitReached,
    DocumentNotFoundError,
    SessionNotFoundError,
)
from drm_engine.core.interfaces.access_repository import IAccessRepository
from drm_engine.core.interfaces.device_identifier import IDeviceIdentifier
from drm_engine.core.interfaces.geolocation import IGeolocationResolver

logger = logging.getLogger(__name__)


def short_token(token: str | None) -> str:
    """Loggable prefix of a session token."""
    if not token:
        return "<none>"
    return f"{token[:12]}..."


@dataclass
class AccessContext:
    """Client context captured on the first access attempt."""
    ip: str = ""
    user_agent: str = ""
    device_fingerprint: str = ""
    signals: dict[str, str] = field(default_factory=dict)


class SessionManager:
    """
    Use Case: create and look up access sessions.

    Geolocation is resolved once here and cached on the session, so policy
    evaluation never calls the external resolver.
    """

    TOKEN_PREFIX = "sess_"

    def __init__(
        self,
        repository: IAccessRepository,
        geolocation: IGeolocationResolver | None = None,
        device_identifier: IDeviceIdentifier | None = None,
        token_bytes: int = 32,
        clock: Clock | None = None,
    ):
        self._repo = repository
        self._geo = geolocation
        self._devices = device_identifier
        self._token_bytes = token_bytes
        self._clock = clock or local_clock()

    def generate_token(self) -> str:
        return f"{self.TOKEN_PREFIX}{secrets.token_urlsafe(self._token_bytes)}"

    def create_session(self, document_id: str, context: AccessContext) -> str:
        """
        Persist a new, non-revoked session and return its token.

        Raises:
            DocumentNotFoundError: unknown document.
            DeviceLimitReached: a new device would exceed max_unique_devices.
            PersistenceError: store unreachable.
        """
        document = self._repo.get_document(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)

        fingerprint = self._resolve_fingerprint(context)
        max_devices = self._device_ceiling(document_id) if document.drm_enabled and fingerprint else None

        geolocation = self._geo.resolve(context.ip) if self._geo else None
        now = to_utc_naive(self._clock())

        session = AccessSession(
            id=str(uuid.uuid4()),
            token=self.generate_token(),
            document_id=document_id,
            ip_address=context.ip or "",
            device_fingerprint=fingerprint,
            user_agent=context.user_agent or "",
            geolocation=geolocation,
            created_at=now,
            last_access_at=now,
        )
        if not self._repo.create_session(session, max_devices=max_devices):
            logger.warning(f"Device limit {max_devices} reached for document {document_id}")
            raise DeviceLimitReached(document_id, max_devices)

        country = geolocation.country_code if geolocation else "-"
        logger.info(
            f"Created session {short_token(session.token)} for document {document_id} "
            f"(country={country})"
        )
        return session.token

    def lookup_session(self, token: str, document_id: str) -> AccessSession:
        """
        Exact match on token and document.

        Raises:
            SessionNotFoundError: no such session for this document.
        """
        session = self._repo.find_session(token, document_id=document_id)
        if session is None:
            raise SessionNotFoundError()
        return session

    def _resolve_fingerprint(self, context: AccessContext) -> str:
        if context.device_fingerprint:
            return context.device_fingerprint
        if self._devices is None:
            return ""
        signals = dict(context.signals)
        if context.user_agent:
            signals.setdefault("user_agent", context.user_agent)
        if not signals:
            return ""
        return self._devices.identify(signals).digest

    def _device_ceiling(self, document_id: str) -> int | None:
        policy = self._repo.get_policy(document_id)
        return policy.max_unique_devices if policy else None

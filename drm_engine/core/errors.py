"""
Domain errors.

A policy denial is not an error (see AccessVerdict). These exceptions cover
missing entities, storage failures and the conflicts the storage boundary
detects.
"""


class AccessEngineError(Exception):
    """Base class for all engine errors."""


class NotFoundError(AccessEngineError):
    pass


class DocumentNotFoundError(NotFoundError):
    def __init__(self, document_id: str):
        super().__init__("document not found")
        self.document_id = document_id


class SessionNotFoundError(NotFoundError):
    def __init__(self, message: str = "invalid session"):
        super().__init__(message)


class PersistenceError(AccessEngineError):
    """The store was unreachable or rejected the operation. Callers may retry."""


class ExternalServiceDegraded(AccessEngineError):
    """An external lookup (geolocation, IP) failed or timed out."""


class ViewQuotaExceeded(AccessEngineError):
    """The document's view quota was exhausted when the view was recorded."""

    def __init__(self, document_id: str, max_views: int):
        super().__init__(f"View limit of {max_views} reached for document {document_id}")
        self.document_id = document_id
        self.max_views = max_views
        self.remaining_views = 0


class DeviceLimitReached(AccessEngineError):
    def __init__(self, document_id: str, max_unique_devices: int):
        super().__init__(
            f"Device limit of {max_unique_devices} reached for document {document_id}"
        )
        self.document_id = document_id
        self.max_unique_devices = max_unique_devices


class InvalidPolicyError(AccessEngineError):
    def __init__(self, problems: list[str]):
        super().__init__("; ".join(problems))
        self.problems = problems

"""
Use Case: Policy Settings

Owner-side writes: register a document, toggle DRM, save and read its
policy. Saving a policy turns DRM on for the document.
"""

import logging

from drm_engine.core.entities import Document, DRMPolicy
from drm_engine.core.errors import InvalidPolicyError
from drm_engine.core.interfaces.access_repository import IAccessRepository

logger = logging.getLogger(__name__)


class PolicySettingsUseCase:

    def __init__(self, repository: IAccessRepository):
        self._repo = repository

    def set_drm_enabled(self, document_id: str, enabled: bool) -> Document:
        document = self._repo.get_document(document_id) or Document(id=document_id)
        document.drm_enabled = enabled
        saved = self._repo.save_document(document)
        logger.info(f"Document {document_id} DRM {'enabled' if enabled else 'disabled'}")
        return saved

    def save(self, policy: DRMPolicy) -> DRMPolicy:
        """
        Validate and store a policy, enabling DRM on its document.

        Raises:
            InvalidPolicyError: inconsistent settings.
        """
        problems = policy.validate()
        if problems:
            raise InvalidPolicyError(problems)

        policy.allowed_countries = {c.strip().upper() for c in policy.allowed_countries if c.strip()}
        policy.blocked_countries = {c.strip().upper() for c in policy.blocked_countries if c.strip()}

        self.set_drm_enabled(policy.document_id, True)
        saved = self._repo.save_policy(policy)
        logger.info(f"Saved DRM policy for document {policy.document_id}")
        return saved

    def get(self, document_id: str) -> DRMPolicy:
        """Stored policy, or a permissive default when none exists."""
        return self._repo.get_policy(document_id) or DRMPolicy(document_id=document_id)

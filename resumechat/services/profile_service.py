"""
Profile management: creation with defaults, overwrites and tool updates.
"""

from typing import Any, Dict, Optional

from resumechat.config import Settings
from resumechat.models import ProfileUpdate, UserProfile
from resumechat.services.storage_service import DocumentStore
from resumechat.utils.logger import get_logger

logger = get_logger(__name__)


class ProfileService:
    """Read and write user profiles."""

    def __init__(self, settings: Settings, store: DocumentStore):
        self.settings = settings
        self.store = store

    def get_profile(self, uid: str, email: Optional[str] = None, display_name: Optional[str] = None) -> UserProfile:
        """
        Return the user's profile, creating a default one on first access.

        Args:
            uid: User id
            email: E-mail to store on a new profile
            display_name: Name to use instead of the default one

        Returns:
            The stored profile
        """
        profile = self.store.get_profile(uid)
        if profile is not None:
            return profile

        defaults = self.settings.default_profile
        profile = UserProfile(
            uid=uid,
            email=email or None,
            name=display_name or defaults.name,
            phone=defaults.phone,
            headline=defaults.headline,
            summary=defaults.summary,
        )
        logger.info(f"Created default profile for {uid}")
        return self.store.save_profile(profile)

    def update_profile(self, uid: str, data: Dict[str, Any]) -> UserProfile:
        """
        Overwrite profile fields with ``data`` (last write wins).

        ``uid`` cannot be changed; a ``uid`` key in ``data`` is ignored.
        """
        current = self.get_profile(uid)
        merged = current.model_dump()
        merged.update({k: v for k, v in data.items() if k != "uid" and k in UserProfile.model_fields})
        merged["uid"] = uid
        profile = UserProfile.model_validate(merged)
        self.store.save_profile(profile)
        logger.info(f"Profile {uid} updated: {sorted(k for k in data if k != 'uid')}")
        return profile

    def apply_tool_update(self, uid: str, update: ProfileUpdate) -> UserProfile:
        """
        Apply an ``updateUserProfile`` tool call.

        Text fields that already hold something get the new text appended on a
        new line; empty fields and non-text fields are replaced.
        """
        current = self.get_profile(uid)
        changes: Dict[str, Any] = {}
        for field, value in update.model_dump(exclude_none=True).items():
            existing = getattr(current, field)
            if isinstance(existing, str) and existing and isinstance(value, str):
                changes[field] = f"{existing}\n{value}"
            else:
                changes[field] = value
        if not changes:
            return current
        return self.update_profile(uid, changes)

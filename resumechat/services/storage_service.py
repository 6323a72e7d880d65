"""
Document store for profiles and resumes.

Two interchangeable backends: an in-memory store (tests, throwaway sessions)
and a JSON file store that keeps one document per collection on disk.
Writes overwrite; the last write wins.
"""

import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from resumechat.config import Settings
from resumechat.exceptions import ResumeNotFoundError
from resumechat.models import Resume, ResumeDraft, UserProfile
from resumechat.utils.file_utils import load_json, save_json
from resumechat.utils.logger import get_logger
from resumechat.utils.paths import PROFILES_FILE, RESUMES_FILE, get_store_file_path

logger = get_logger(__name__)


class DocumentStore(ABC):
    """Persistence interface used by the services."""

    @abstractmethod
    def get_profile(self, uid: str) -> Optional[UserProfile]:
        """Return the stored profile or None."""

    @abstractmethod
    def save_profile(self, profile: UserProfile) -> UserProfile:
        """Create or overwrite a profile."""

    @abstractmethod
    def get_resume(self, resume_id: str) -> Optional[Resume]:
        """Return the stored resume or None."""

    @abstractmethod
    def list_resumes(self, user_id: str) -> List[Resume]:
        """Return every resume owned by ``user_id``, newest first."""

    @abstractmethod
    def save_resume(self, draft: ResumeDraft, user_id: str) -> Resume:
        """Store a new resume, assigning id and creation time."""

    @abstractmethod
    def update_resume(self, resume_id: str, data: Dict[str, Any]) -> Resume:
        """Merge ``data`` into an existing resume."""

    @abstractmethod
    def delete_resume(self, resume_id: str) -> bool:
        """Delete a resume; return False if it did not exist."""

    @staticmethod
    def _new_resume(draft: ResumeDraft, user_id: str) -> Resume:
        return Resume(
            **draft.model_dump(),
            id=uuid.uuid4().hex,
            user_id=user_id,
            created_at=datetime.now(),
        )

    @staticmethod
    def _merged_resume(existing: Resume, data: Dict[str, Any]) -> Resume:
        # id, owner and creation time are fixed once the resume exists
        protected = {"id", "user_id", "created_at"}
        merged = existing.model_dump()
        merged.update({k: v for k, v in data.items() if k not in protected})
        return Resume.model_validate(merged)


class InMemoryStore(DocumentStore):
    """Dictionary backed store."""

    def __init__(self):
        self.profiles: Dict[str, UserProfile] = {}
        self.resumes: Dict[str, Resume] = {}

    def get_profile(self, uid: str) -> Optional[UserProfile]:
        return self.profiles.get(uid)

    def save_profile(self, profile: UserProfile) -> UserProfile:
        self.profiles[profile.uid] = profile
        return profile

    def get_resume(self, resume_id: str) -> Optional[Resume]:
        return self.resumes.get(resume_id)

    def list_resumes(self, user_id: str) -> List[Resume]:
        owned = [r for r in self.resumes.values() if r.user_id == user_id]
        return sorted(owned, key=lambda r: r.created_at, reverse=True)

    def save_resume(self, draft: ResumeDraft, user_id: str) -> Resume:
        resume = self._new_resume(draft, user_id)
        self.resumes[resume.id] = resume
        return resume

    def update_resume(self, resume_id: str, data: Dict[str, Any]) -> Resume:
        existing = self.resumes.get(resume_id)
        if existing is None:
            raise ResumeNotFoundError(resume_id)
        updated = self._merged_resume(existing, data)
        self.resumes[resume_id] = updated
        return updated

    def delete_resume(self, resume_id: str) -> bool:
        return self.resumes.pop(resume_id, None) is not None


class JsonFileStore(DocumentStore):
    """
    Store that keeps each collection in a JSON file.

    ``profiles.json`` maps uid -> profile, ``resumes.json`` maps id -> resume.
    A process-wide lock serialises read-modify-write cycles.
    """

    _lock = threading.RLock()

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.profiles_path = get_store_file_path(self.data_dir, PROFILES_FILE)
        self.resumes_path = get_store_file_path(self.data_dir, RESUMES_FILE)
        logger.info(f"JSON store at {self.profiles_path.parent}")

    def _read(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        return load_json(path)

    def get_profile(self, uid: str) -> Optional[UserProfile]:
        with self._lock:
            data = self._read(self.profiles_path).get(uid)
        return UserProfile.model_validate(data) if data else None

    def save_profile(self, profile: UserProfile) -> UserProfile:
        with self._lock:
            profiles = self._read(self.profiles_path)
            profiles[profile.uid] = profile.model_dump(mode="json")
            save_json(profiles, self.profiles_path)
        return profile

    def get_resume(self, resume_id: str) -> Optional[Resume]:
        with self._lock:
            data = self._read(self.resumes_path).get(resume_id)
        return Resume.model_validate(data) if data else None

    def list_resumes(self, user_id: str) -> List[Resume]:
        with self._lock:
            resumes = self._read(self.resumes_path)
        owned = [Resume.model_validate(r) for r in resumes.values() if r.get("user_id") == user_id]
        return sorted(owned, key=lambda r: r.created_at, reverse=True)

    def save_resume(self, draft: ResumeDraft, user_id: str) -> Resume:
        resume = self._new_resume(draft, user_id)
        with self._lock:
            resumes = self._read(self.resumes_path)
            resumes[resume.id] = resume.to_dict()
            save_json(resumes, self.resumes_path)
        return resume

    def update_resume(self, resume_id: str, data: Dict[str, Any]) -> Resume:
        with self._lock:
            resumes = self._read(self.resumes_path)
            if resume_id not in resumes:
                raise ResumeNotFoundError(resume_id)
            updated = self._merged_resume(Resume.model_validate(resumes[resume_id]), data)
            resumes[resume_id] = updated.to_dict()
            save_json(resumes, self.resumes_path)
        return updated

    def delete_resume(self, resume_id: str) -> bool:
        with self._lock:
            resumes = self._read(self.resumes_path)
            if resumes.pop(resume_id, None) is None:
                return False
            save_json(resumes, self.resumes_path)
        return True


def create_store(settings: Settings) -> DocumentStore:
    """Build the store selected by ``settings.storage.backend``."""
    if settings.storage.backend == "memory":
        logger.info("Using in-memory document store")
        return InMemoryStore()
    return JsonFileStore(settings.storage.data_dir)

"""Service layer modules."""

from .ai_service import AIService
from .chat_service import ChatService
from .pdf_service import PdfService
from .profile_service import ProfileService
from .resume_service import ResumeService
from .storage_service import DocumentStore, InMemoryStore, JsonFileStore, create_store

__all__ = [
    "AIService",
    "ChatService",
    "PdfService",
    "ProfileService",
    "ResumeService",
    "DocumentStore",
    "InMemoryStore",
    "JsonFileStore",
    "create_store",
]

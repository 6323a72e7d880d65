"""Data models for the application."""

from .chat import ChatDecision, ChatResponse, Message, ToolCall
from .profile import TEXT_FIELDS, Link, ProfileUpdate, UserProfile
from .resume import Resume, ResumeDraft

__all__ = [
    "ChatDecision",
    "ChatResponse",
    "Message",
    "ToolCall",
    "TEXT_FIELDS",
    "Link",
    "ProfileUpdate",
    "UserProfile",
    "Resume",
    "ResumeDraft",
]

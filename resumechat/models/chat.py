"""Chat turn and structured LLM output models."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from .profile import UserProfile


class Message(BaseModel):
    """A single chat turn. Never persisted."""
    role: Literal["user", "assistant"]
    content: str


class ToolCall(BaseModel):
    """A side-effect requested by the model."""
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ChatDecision(BaseModel):
    """Schema the chat model must answer with."""
    reply: Optional[str] = Field(None, description="Your conversational reply.")
    is_resume_request: Optional[bool] = Field(
        None, description="Set to true if the user is asking to generate a resume."
    )
    job_description: Optional[str] = Field(
        None, description="The extracted job description for the resume."
    )
    title: Optional[str] = Field(
        None, description='A suitable title for the resume (e.g., "Software Engineer at Google").'
    )
    tool_calls: List[ToolCall] = Field(
        default_factory=list, description="Tools to run, e.g. updateUserProfile."
    )


class ChatResponse(BaseModel):
    """What the chat flow returns to the caller."""
    reply: str
    resume_content: Optional[str] = None
    title: Optional[str] = None
    job_description: Optional[str] = None
    profile: Optional[UserProfile] = None
    resume_id: Optional[str] = None

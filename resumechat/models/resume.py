"""Resume related data models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ResumeDraft(BaseModel):
    """A generated resume that has not been saved yet."""
    title: str
    job_description: str = ""
    latex_content: str
    pdf_data_uri: Optional[str] = None

    @field_validator("latex_content")
    @classmethod
    def latex_not_empty(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("LaTeX content cannot be empty")
        return value


class Resume(ResumeDraft):
    """Represents a saved resume document."""
    id: str
    user_id: str
    created_at: datetime = Field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        """Convert to a JSON-ready dictionary."""
        return self.model_dump(mode="json")

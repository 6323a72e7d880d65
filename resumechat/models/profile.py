"""User profile related data models."""

from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field


# Free-text career fields that grow as the user talks to the assistant
TEXT_FIELDS = (
    "summary",
    "skills",
    "experience",
    "education",
    "projects",
    "extracurriculars",
    "honors_and_awards",
)


class Link(BaseModel):
    """A labelled external link (portfolio, LinkedIn, GitHub...)."""
    label: str
    url: str


class UserProfile(BaseModel):
    """Represents a user's professional profile."""
    uid: str = Field(..., frozen=True)
    name: str = ""
    email: Optional[EmailStr] = None
    phone: str = ""
    headline: str = ""
    links: List[Link] = Field(default_factory=list)
    summary: str = ""
    skills: str = ""
    experience: str = ""
    education: str = ""
    projects: str = ""
    extracurriculars: str = ""
    honors_and_awards: str = ""

    def to_prompt_text(self) -> str:
        """Render the profile as the plain text block fed to resume prompts."""
        lines = [
            f"Name: {self.name}",
            f"Email: {self.email or ''}",
            f"Phone: {self.phone}",
            f"Headline: {self.headline}",
        ]
        if self.links:
            lines.append("Links: " + ", ".join(f"{link.label}: {link.url}" for link in self.links))
        for field in TEXT_FIELDS:
            value = getattr(self, field).strip()
            if value:
                lines.append(f"{field.replace('_', ' ').title()}:")
                lines.append(value)
        return "\n".join(lines)


class ProfileUpdate(BaseModel):
    """
    Arguments of the ``updateUserProfile`` tool.

    Every field is optional; only the fields the model sends are applied.
    """
    name: Optional[str] = Field(None, description="The user's full name.")
    headline: Optional[str] = Field(
        None, description="The user's professional headline (e.g., 'Senior Software Engineer')."
    )
    phone: Optional[str] = Field(None, description="The user's phone number.")
    links: Optional[List[Link]] = Field(
        None, description="The user's links (e.g., portfolio, LinkedIn, GitHub)."
    )
    summary: Optional[str] = Field(None, description="Addition to the professional summary.")
    skills: Optional[str] = Field(None, description="Addition to the user's skills.")
    experience: Optional[str] = Field(None, description="Addition to the user's work experience.")
    education: Optional[str] = Field(None, description="Addition to the user's education.")
    projects: Optional[str] = Field(None, description="Addition to the user's projects.")
    extracurriculars: Optional[str] = Field(
        None, description="Addition to the user's extracurricular activities."
    )
    honors_and_awards: Optional[str] = Field(
        None, description="Addition to the user's honors and awards."
    )

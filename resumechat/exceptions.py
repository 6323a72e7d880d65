"""Exceptions raised by the service layer."""


class ResumeChatError(Exception):
    """Base class for application errors."""


class AIServiceError(ResumeChatError):
    """The LLM call failed or returned something unusable."""


class ResumeGenerationError(ResumeChatError):
    """The model did not produce any LaTeX."""


class PdfCompilationError(ResumeChatError):
    """The LaTeX could not be compiled to a PDF."""


class ResumeNotFoundError(ResumeChatError, KeyError):
    """No resume exists with the requested id."""

    def __init__(self, resume_id: str):
        super().__init__(resume_id)
        self.resume_id = resume_id

    def __str__(self) -> str:
        return f"Resume not found: {self.resume_id}"

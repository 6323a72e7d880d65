"""Conversational resume builder: chat a profile together, generate LaTeX resumes."""

__version__ = "0.1.0"

"""Application configuration."""

from .settings import (
    AISettings,
    CompilerSettings,
    DefaultProfile,
    Settings,
    StorageSettings,
    get_settings,
)

__all__ = [
    "AISettings",
    "CompilerSettings",
    "DefaultProfile",
    "Settings",
    "StorageSettings",
    "get_settings",
]

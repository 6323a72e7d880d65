"""
Configuration settings management with environment variable support.
"""

import json
from pathlib import Path
from typing import Dict, Literal, Optional
from functools import lru_cache

from pydantic import AliasChoices, BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

from resumechat.utils.logger import get_logger


# Load environment variables
load_dotenv()

logger = get_logger(__name__)


class AISettings(BaseModel):
    """AI model settings configuration."""
    model: str = "llama3.1"
    temperature: float = 0.7
    max_tokens: int = 4000
    chat_temperature: float = 0.4
    resume_temperature: float = 0.3


class CompilerSettings(BaseModel):
    """LaTeX to PDF compilation settings."""
    engine: Literal["remote", "local"] = "remote"
    url: str = "https://pdf-compiler.vertex-ai.cloud.goog/compile"
    timeout: int = 60
    local_binary: str = "pdflatex"


class StorageSettings(BaseModel):
    """Document store settings."""
    backend: Literal["memory", "json"] = "json"
    data_dir: Path = Path("data/store")


class DefaultProfile(BaseModel):
    """Values used when a profile is created for a new user."""
    name: str = "John Doe"
    phone: str = "123-456-7890"
    headline: str = "Experienced Software Developer"
    summary: str = (
        "A highly motivated and results-oriented software developer with over 5 years of "
        "experience in building and maintaining web applications. Proficient in JavaScript, "
        "React, and Node.js. Passionate about creating clean, efficient, and user-friendly code."
    )


class Settings(BaseSettings):
    """Main application settings."""

    ai_settings: AISettings = Field(default_factory=AISettings)
    compiler: CompilerSettings = Field(default_factory=CompilerSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    default_profile: DefaultProfile = Field(default_factory=DefaultProfile)

    # Application settings from environment
    debug: bool = Field(default=False, validation_alias=AliasChoices("debug", "DEBUG"))
    log_level: str = Field(default="INFO", validation_alias=AliasChoices("log_level", "LOG_LEVEL"))
    log_file: Optional[str] = Field(default=None, validation_alias=AliasChoices("log_file", "LOG_FILE"))
    host: str = Field(default="0.0.0.0", validation_alias=AliasChoices("host", "HOST"))
    port: int = Field(default=5001, validation_alias=AliasChoices("port", "PORT"))

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_nested_delimiter = "__"
        case_sensitive = False
        extra = "ignore"

    @classmethod
    def from_json(cls, config_path: str = "config.json") -> "Settings":
        """
        Load settings from JSON configuration file.

        Args:
            config_path: Path to JSON configuration file

        Returns:
            Settings instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = json.load(f)

            return cls(**config_data)

        except FileNotFoundError:
            raise FileNotFoundError(
                f"❌ Config file not found: {config_path}\n"
                "   Copy config.example.json to config.json to customise the app"
            )
        except json.JSONDecodeError as e:
            raise ValueError(f"❌ Invalid JSON in config file: {e}")
        except ValidationError as e:
            raise ValueError(f"❌ Invalid configuration: {e}")

    def to_dict(self) -> Dict:
        """Convert settings to dictionary."""
        return self.model_dump(mode="json", exclude_none=True)


@lru_cache()
def get_settings(config_path: str = "config.json") -> Settings:
    """
    Get cached settings instance.

    Falls back to defaults plus environment variables when the JSON file
    does not exist.

    Args:
        config_path: Path to JSON configuration file

    Returns:
        Settings instance (cached)
    """
    if not Path(config_path).exists():
        logger.warning(f"⚠️ {config_path} not found, using defaults and environment")
        return Settings()
    return Settings.from_json(config_path)

"""
Path constants and utilities for data file management.
"""

from pathlib import Path
from datetime import datetime
from typing import Optional


# Base directories
PROJECT_ROOT = Path(__file__).parent.parent.parent
DATA_DIR = PROJECT_ROOT / "data"
STORE_DIR = DATA_DIR / "store"
LOGS_DIR = DATA_DIR / "logs"

# Collection file names used by the JSON document store
PROFILES_FILE = "profiles.json"
RESUMES_FILE = "resumes.json"


def ensure_data_directories():
    """Ensure all data directories exist."""
    for directory in (DATA_DIR, STORE_DIR, LOGS_DIR):
        directory.mkdir(parents=True, exist_ok=True)


def get_timestamped_filename(prefix: str, extension: str, timestamp: Optional[datetime] = None) -> str:
    """
    Generate a timestamped filename.

    Args:
        prefix: Filename prefix (e.g., 'resumechat')
        extension: File extension without dot (e.g., 'log')
        timestamp: Optional timestamp, defaults to now

    Returns:
        Filename string like 'resumechat_20251103_105621.log'
    """
    if timestamp is None:
        timestamp = datetime.now()

    timestamp_str = timestamp.strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp_str}.{extension}"


def get_log_file_path(timestamp: Optional[datetime] = None) -> Path:
    """
    Get path for a run log file.

    Args:
        timestamp: Optional timestamp, defaults to now

    Returns:
        Path object for the log file
    """
    ensure_data_directories()
    return LOGS_DIR / get_timestamped_filename("resumechat", "log", timestamp)


def get_store_file_path(data_dir: Path, collection_file: str) -> Path:
    """Resolve a collection file inside a store directory, relative to the project root."""
    base = data_dir if data_dir.is_absolute() else PROJECT_ROOT / data_dir
    return base / collection_file

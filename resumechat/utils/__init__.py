"""Utility modules."""

from .logger import get_logger, log_banner, setup_logging
from .file_utils import ensure_directory, save_json, load_json, safe_filename
from .latex_preview import render_latex_preview, strip_preamble
from .latex_template import LATEX_TEMPLATE, TEMPLATE_COMMANDS
from .paths import (
    ensure_data_directories,
    get_log_file_path,
    get_store_file_path,
    get_timestamped_filename,
    DATA_DIR,
    STORE_DIR,
    LOGS_DIR,
)

__all__ = [
    "get_logger",
    "log_banner",
    "setup_logging",
    "ensure_directory",
    "save_json",
    "load_json",
    "safe_filename",
    "render_latex_preview",
    "strip_preamble",
    "LATEX_TEMPLATE",
    "TEMPLATE_COMMANDS",
    "ensure_data_directories",
    "get_log_file_path",
    "get_store_file_path",
    "get_timestamped_filename",
    "DATA_DIR",
    "STORE_DIR",
    "LOGS_DIR",
]

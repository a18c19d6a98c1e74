"""Utility functions and helpers for shellagent."""

from .logging import logger
from .helpers import (
    get_current_timestamp,
    get_clock_time,
    get_nested_value,
    get_system_info,
    get_environment_facts,
    format_template_string,
    ensure_directory_exists,
    safe_file_write,
    get_install_hint,
)

__all__ = [
    "logger",
    "get_current_timestamp",
    "get_clock_time",
    "get_nested_value",
    "get_system_info",
    "get_environment_facts",
    "format_template_string",
    "ensure_directory_exists",
    "safe_file_write",
    "get_install_hint",
]

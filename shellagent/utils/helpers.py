"""Helper utility functions for shellagent."""

import datetime
import os
import platform
from pathlib import Path
from typing import Any, Dict, Optional

from ..utils.logging import logger

ARCH_RELEASE_FILE = Path("/etc/arch-release")


def get_current_timestamp() -> str:
    """Returns the current timestamp in YYYY-MM-DD HH:MM:SS format."""
    return datetime.datetime.now().strftime('%Y-%m-%d %H:%M:%S')


def get_clock_time() -> str:
    """Returns the current wall-clock time in HH:MM:SS format."""
    return datetime.datetime.now().strftime('%H:%M:%S')


def get_nested_value(data: Dict[str, Any], path: str, default: Any = None) -> Any:
    """Access a nested value in a dictionary using a dot-separated path."""
    keys = path.split('.')
    current = data
    for key in keys:
        if isinstance(current, dict) and key in current:
            current = current[key]
        elif isinstance(current, list):
            try:
                idx = int(key)
                if 0 <= idx < len(current):
                    current = current[idx]
                else:
                    return default
            except ValueError:
                return default
        else:
            return default
    return current


def get_system_info() -> str:
    """One-line system identification, equivalent to `uname -a`."""
    info = platform.uname()
    parts = [info.system, info.node, info.release, info.version, info.machine]
    return " ".join(part for part in parts if part)


def get_environment_facts() -> Dict[str, str]:
    """Static facts about the machine, captured once at the start of a run."""
    return {
        'system_info': get_system_info(),
        'current_directory': os.getcwd(),
        'started_at': get_current_timestamp(),
    }


def format_template_string(template: str, **kwargs) -> str:
    """Safely format a template string with context variables."""
    try:
        return template.format(**kwargs)
    except KeyError as e:
        logger.error(f"Missing template variable: {e}")
        return template
    except (IndexError, ValueError) as e:
        logger.error(f"Template formatting error: {e}")
        return template


def ensure_directory_exists(directory: Path) -> None:
    """Ensure a directory exists, creating it if necessary."""
    try:
        directory.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Directory ensured: {directory}")
    except OSError as e:
        logger.error(f"Failed to create directory {directory}: {e}")
        raise


def safe_file_write(file_path: Path, content: str, description: Optional[str] = None) -> bool:
    """Safely write content to a file with error handling."""
    desc = description or f"file {file_path}"
    try:
        file_path.write_text(content, encoding="utf-8")
        logger.debug(f"Wrote {desc}")
        return True
    except OSError as e:
        logger.error(f"Failed to write {desc}: {e}")
        return False


def get_install_hint(binary_name: str) -> Optional[str]:
    """Suggest a package-manager command for a missing binary, when the distro is known."""
    if ARCH_RELEASE_FILE.exists():
        return f"sudo pacman -S {binary_name}"
    return None

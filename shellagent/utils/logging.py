"""Console logging for shellagent."""

import sys
import datetime
from typing import Dict, Optional, TextIO, Tuple

from ..constants import (
    CLR_RESET, CLR_CYAN, CLR_BOLD_CYAN, CLR_GREEN, CLR_BOLD_GREEN,
    CLR_MAGENTA, CLR_BOLD_MAGENTA, CLR_BLUE, CLR_BOLD_BLUE,
    CLR_YELLOW, CLR_BOLD_YELLOW, CLR_WHITE, CLR_BOLD_WHITE,
    CLR_RED, CLR_BOLD_RED
)

# level -> (header color, content color)
LEVEL_STYLES: Dict[str, Tuple[str, str]] = {
    "System": (CLR_CYAN, CLR_BOLD_CYAN),
    "User": (CLR_GREEN, CLR_BOLD_GREEN),
    "Agent": (CLR_MAGENTA, CLR_BOLD_MAGENTA),
    "LLM": (CLR_WHITE, CLR_BOLD_WHITE),
    "Command": (CLR_BLUE, CLR_BOLD_BLUE),
    "Error": (CLR_RED, CLR_BOLD_RED),
    "Warning": (CLR_YELLOW, CLR_BOLD_YELLOW),
    "Debug": (CLR_WHITE, CLR_BOLD_WHITE),
}

ERROR_LEVELS = ("Error", "Warning")


class Logger:
    """Color-coded console logger.

    Every line is prefixed with the wall-clock time and the level; continuation
    lines of a multi-line message are indented under the first one. Errors and
    warnings go to the error stream, everything else to the output stream.
    """

    def __init__(self, debug_enabled: bool = False,
                 out: Optional[TextIO] = None, err: Optional[TextIO] = None):
        self.debug_enabled = debug_enabled
        # Resolved lazily so pytest's capture and colorama's wrapping apply
        self._out = out
        self._err = err

    def set_debug(self, enabled: bool) -> None:
        """Enable or disable debug logging."""
        self.debug_enabled = enabled

    def _stream(self, level: str) -> TextIO:
        if level in ERROR_LEVELS:
            return self._err or sys.stderr
        return self._out or sys.stdout

    def log_message(self, level: str, message: str) -> None:
        """Write one message at ``level``."""
        if level == "Debug" and not self.debug_enabled:
            return

        header_color, content_color = LEVEL_STYLES.get(level, (CLR_WHITE, CLR_BOLD_WHITE))
        prefix = f"[{datetime.datetime.now().strftime('%H:%M:%S')}] [{level}]: "
        indent = ' ' * len(prefix)
        stream = self._stream(level)

        lines = message.splitlines() or [""]
        print(f"{header_color}{prefix}{CLR_RESET}{content_color}{lines[0]}{CLR_RESET}", file=stream)
        for line in lines[1:]:
            print(f"{indent}{content_color}{line}{CLR_RESET}", file=stream)
        stream.flush()

    def iteration(self, number: int, total: int) -> None:
        """Banner separating agent loop iterations."""
        self.log_message("Agent", f"--- Iteration {number} of {total} ---")

    def block(self, title: str, body: str) -> None:
        """System message followed by an indented multi-line body."""
        indented = "\n".join(f"  {line}" for line in body.splitlines())
        self.log_message("System", f"{title}\n{indented}" if indented else title)

    def system(self, message: str) -> None:
        self.log_message("System", message)

    def user(self, message: str) -> None:
        self.log_message("User", message)

    def agent(self, message: str) -> None:
        self.log_message("Agent", message)

    def llm(self, message: str) -> None:
        """Requests to and replies from the generation service."""
        self.log_message("LLM", message)

    def command(self, message: str) -> None:
        self.log_message("Command", message)

    def error(self, message: str) -> None:
        self.log_message("Error", message)

    def warning(self, message: str) -> None:
        self.log_message("Warning", message)

    def debug(self, message: str) -> None:
        """Only shown in verbose mode."""
        self.log_message("Debug", message)


# Global logger instance (debug setting is applied by the application)
logger = Logger()

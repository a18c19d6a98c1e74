"""Structural syntax checks for commands before execution.

These are heuristics, not a shell parser. Quote and bracket balance is
measured by raw character counts, so a quote inside a quoted string of the
other kind still counts. Compound-command checks only look for keywords in
command position (start of line or after a separator), which keeps words
like ``if`` inside an argument from triggering them.
"""

import re
from typing import Optional, Tuple

from ..utils.logging import logger

# Start of the command or just after a separator / compound keyword
_COMMAND_POSITION = r"(?:^|[;&|(]|\bthen\b|\bdo\b|\belse\b)\s*"

_TRAILING_CONTINUATION = re.compile(r"\\\s*$")
_LOOP_HEADER = re.compile(_COMMAND_POSITION + r"(?:for|while|until)\s")
_FOR_HEADER = re.compile(_COMMAND_POSITION + r"for\s")
_IF_HEADER = re.compile(_COMMAND_POSITION + r"if\s")
_DO = re.compile(r"\bdo\b")
_DONE = re.compile(r"\bdone\b")
_THEN = re.compile(r"\bthen\b")
_FI_CLOSED = re.compile(r"\bfi\s*(?:$|;)")

MSG_TRAILING_CONTINUATION = (
    "Command ends with a backslash (line continuation character) but has nothing to continue to."
)
MSG_INCOMPLETE_OPENER = "Command appears to be incomplete. Missing proper loop/conditional closure."
MSG_UNMATCHED_DOUBLE_QUOTES = "Command has unmatched double quotes."
MSG_UNMATCHED_SINGLE_QUOTES = "Command has unmatched single quotes."
MSG_UNBALANCED_PARENTHESES = "Command has unbalanced parentheses."
MSG_UNBALANCED_BRACES = "Command has unbalanced braces."
MSG_FOR_MISSING_DO_DONE = "For loop is missing 'do' or 'done'."
MSG_IF_MISSING_FI = "If statement is missing 'fi'."


def _has_unterminated_opener(command: str) -> bool:
    """True when a loop header has no ``do`` after it or an ``if`` has no ``then``."""
    for match in _LOOP_HEADER.finditer(command):
        if not _DO.search(command, match.end()):
            return True
    for match in _IF_HEADER.finditer(command):
        if not _THEN.search(command, match.end()):
            return True
    return False


def validate_command(command: str) -> Tuple[bool, Optional[str]]:
    """Check a command for structural problems.

    Returns:
        Tuple of (is_valid, reason). ``reason`` is the message of the first
        rule that failed, or None when the command passes.
    """
    if _TRAILING_CONTINUATION.search(command):
        return False, MSG_TRAILING_CONTINUATION

    if _has_unterminated_opener(command):
        return False, MSG_INCOMPLETE_OPENER

    if command.count('"') % 2 != 0:
        return False, MSG_UNMATCHED_DOUBLE_QUOTES

    if command.count("'") % 2 != 0:
        return False, MSG_UNMATCHED_SINGLE_QUOTES

    if command.count("(") != command.count(")"):
        return False, MSG_UNBALANCED_PARENTHESES

    if command.count("{") != command.count("}"):
        return False, MSG_UNBALANCED_BRACES

    if _FOR_HEADER.search(command):
        if not _DO.search(command) or not _DONE.search(command):
            return False, MSG_FOR_MISSING_DO_DONE

    if _IF_HEADER.search(command):
        if not _FI_CLOSED.search(command):
            return False, MSG_IF_MISSING_FI

    return True, None


class CommandValidator:
    """Validates commands before they reach the executor."""

    def validate(self, command: str) -> Tuple[bool, Optional[str]]:
        """Validate a command, logging the reason for any rejection."""
        is_valid, reason = validate_command(command)
        if not is_valid:
            logger.debug(f"Command rejected by validator: {reason} ({command!r})")
        return is_valid, reason


def create_command_validator() -> CommandValidator:
    """Create a command validator."""
    return CommandValidator()

"""Privilege escalation gating for shellagent."""

from typing import Callable, Optional

from ..utils.logging import logger
from ..constants import CLR_YELLOW, CLR_BOLD_YELLOW, CLR_RESET

# Confirmation port: receives the prompt text, answers yes (True) or no (False)
ConfirmFn = Callable[[str], bool]


def console_confirm(prompt: str) -> bool:
    """Ask the operator on the terminal. Anything but y/yes is a decline."""
    try:
        answer = input(f"{CLR_YELLOW}{prompt} {CLR_BOLD_YELLOW}[y/N]{CLR_RESET} ")
    except EOFError:
        # No terminal to ask on
        return False
    return answer.strip().lower() in ("y", "yes")


class PrivilegeGate:
    """Decides whether a command may be escalated with sudo."""

    def __init__(self, force_root: bool = False, confirm: Optional[ConfirmFn] = None):
        """Initialize the gate.

        Args:
            force_root: Skip operator confirmation for every sudo command
            confirm: Confirmation port, defaults to asking on the console
        """
        self.force_root = force_root
        self.confirm = confirm or console_confirm

    def allow(self, command: str) -> bool:
        """Return True when ``command`` may run with elevated privileges."""
        if self.force_root:
            logger.debug(f"Force-root mode: sudo allowed without confirmation for '{command}'")
            return True

        logger.warning(f"This command requires root permissions: {command}")
        allowed = self.confirm("Allow execution with sudo?")
        if allowed:
            logger.user(f"Allowed sudo for '{command}'.")
        else:
            logger.user(f"Declined sudo for '{command}'.")
        return allowed


def create_privilege_gate(force_root: bool = False, confirm: Optional[ConfirmFn] = None) -> PrivilegeGate:
    """Create a privilege gate."""
    return PrivilegeGate(force_root, confirm)

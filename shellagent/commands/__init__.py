"""Command validation, privilege gating and execution for shellagent."""

from .executor import CommandExecutor, create_command_executor
from .permissions import PrivilegeGate, console_confirm, create_privilege_gate
from .validator import CommandValidator, validate_command, create_command_validator

__all__ = [
    "CommandExecutor",
    "create_command_executor",
    "PrivilegeGate",
    "console_confirm",
    "create_privilege_gate",
    "CommandValidator",
    "validate_command",
    "create_command_validator",
]

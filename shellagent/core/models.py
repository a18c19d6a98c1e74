"""Data model for the agent loop: plan decisions, execution outcomes, history entries."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from ..constants import (
    STATUS_SUCCESS, STATUS_FAILURE, STATUS_NOT_FOUND,
    STATUS_TIMED_OUT, STATUS_SYNTAX_INVALID
)


# --- Plan decisions ---

class PlanDecision:
    """Structured interpretation of one generation-service reply."""


@dataclass(frozen=True)
class Continue(PlanDecision):
    command: str
    requires_sudo: bool = False
    explanation: str = ""


@dataclass(frozen=True)
class Complete(PlanDecision):
    summary: str
    final_output: str


@dataclass(frozen=True)
class Unparseable(PlanDecision):
    raw_text: str


# --- Execution outcomes ---

class ExecutionOutcome:
    """Classified result of attempting to run a command."""

    status_code = STATUS_FAILURE
    label = "FAILED"

    @property
    def succeeded(self) -> bool:
        return self.status_code == STATUS_SUCCESS

    def describe(self) -> str:
        """Short one-line diagnostic for the console and the command log."""
        raise NotImplementedError


@dataclass(frozen=True)
class Success(ExecutionOutcome):
    captured_output: str = ""

    status_code = STATUS_SUCCESS
    label = "SUCCESS"

    def describe(self) -> str:
        return "Command completed successfully"


@dataclass(frozen=True)
class Failure(ExecutionOutcome):
    exit_code: int
    captured_output: str = ""

    status_code = STATUS_FAILURE
    label = "FAILED"

    def describe(self) -> str:
        return f"Command failed with exit code {self.exit_code}"


@dataclass(frozen=True)
class NotFound(ExecutionOutcome):
    binary_name: str
    install_hint: Optional[str] = None

    status_code = STATUS_NOT_FOUND
    label = "COMMAND NOT FOUND"

    def describe(self) -> str:
        return f"Command not found: {self.binary_name}"


@dataclass(frozen=True)
class TimedOut(ExecutionOutcome):
    timeout_seconds: float
    captured_output: str = ""

    status_code = STATUS_TIMED_OUT
    label = "TIMED OUT"

    def describe(self) -> str:
        return f"Command timed out after {self.timeout_seconds:g} seconds"


@dataclass(frozen=True)
class SyntaxInvalid(ExecutionOutcome):
    reason: str

    status_code = STATUS_SYNTAX_INVALID
    label = "INVALID SYNTAX"

    def describe(self) -> str:
        return f"Command validation failed: {self.reason}"


@dataclass(frozen=True)
class CancelledByUser(ExecutionOutcome):
    status_code = STATUS_FAILURE
    label = "CANCELLED"

    def describe(self) -> str:
        return "Command execution cancelled by user"


# --- History and run results ---

@dataclass(frozen=True)
class HistoryEntry:
    """Durable record of one iteration.

    ``outcome`` is None only for iterations whose reply could not be parsed;
    those carry the raw reply in ``raw_response`` instead.
    """
    iteration: int
    command: str
    requires_sudo: bool
    explanation: str
    outcome: Optional[ExecutionOutcome]
    raw_response: Optional[str] = None

    @property
    def was_parsed(self) -> bool:
        return self.outcome is not None


class RunStatus(Enum):
    """How a run ended."""
    COMPLETED = "COMPLETED"
    BUDGET_EXHAUSTED = "BUDGET_EXHAUSTED"


@dataclass(frozen=True)
class RunResult:
    status: RunStatus
    iterations: int
    entries: Tuple[HistoryEntry, ...]
    report_path: Path
    summary: str = ""
    copied_to: Optional[Path] = None

    @property
    def completed(self) -> bool:
        return self.status is RunStatus.COMPLETED

    @property
    def issued_commands(self) -> list[str]:
        return [entry.command for entry in self.entries if entry.was_parsed]

"""Core agent logic for shellagent."""

from .models import (
    PlanDecision, Continue, Complete, Unparseable,
    ExecutionOutcome, Success, Failure, NotFound, TimedOut, SyntaxInvalid, CancelledByUser,
    HistoryEntry, RunResult, RunStatus,
)
from .history import History
from .session import Session, create_session
from .task_handler import AgentLoop, create_agent_loop
from .application import ShellAgent, create_application

__all__ = [
    "PlanDecision",
    "Continue",
    "Complete",
    "Unparseable",
    "ExecutionOutcome",
    "Success",
    "Failure",
    "NotFound",
    "TimedOut",
    "SyntaxInvalid",
    "CancelledByUser",
    "HistoryEntry",
    "RunResult",
    "RunStatus",
    "History",
    "Session",
    "create_session",
    "AgentLoop",
    "create_agent_loop",
    "ShellAgent",
    "create_application",
]

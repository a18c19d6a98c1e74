"""Agent loop: plan, validate, execute and record until done or out of budget."""

from pathlib import Path
from typing import Callable, Mapping, Optional

from ..commands.executor import CommandExecutor
from ..commands.validator import CommandValidator
from ..constants import OUTPUT_PREVIEW_BYTES, OUTPUT_PREVIEW_LINES
from ..llm.planner import PlanRequester
from ..utils.helpers import get_environment_facts
from ..utils.logging import logger
from .history import History
from .models import (
    Complete, Continue, HistoryEntry, RunResult, RunStatus,
    TimedOut, NotFound, Unparseable
)
from .session import Session, create_session

SessionFactory = Callable[[str, Path, Optional[str]], Session]


def build_output_preview(output: str, artifact: Path) -> str:
    """Whole output when short, otherwise the first lines and a pointer to the artifact."""
    if len(output.encode("utf-8")) <= OUTPUT_PREVIEW_BYTES:
        return output.rstrip() or "(no output)"
    head = "\n".join(output.splitlines()[:OUTPUT_PREVIEW_LINES])
    return f"{head}\n... (output truncated, full output in {artifact})"


class AgentLoop:
    """Drives iterations of request -> validate -> execute -> record."""

    def __init__(self,
                 planner: PlanRequester,
                 executor: CommandExecutor,
                 output_dir: Path,
                 max_iterations: int = 5,
                 command_timeout: float = 30,
                 output_file: Optional[str] = None,
                 validator: Optional[CommandValidator] = None,
                 env_facts: Optional[Mapping[str, str]] = None,
                 session_factory: SessionFactory = create_session):
        """Initialize the agent loop.

        Args:
            planner: Requests the next decision from the generation service
            executor: Runs validated commands
            output_dir: Parent directory of the per-run session directory
            max_iterations: Iteration budget
            command_timeout: Per-command deadline in seconds
            output_file: Where to copy the final report, if anywhere
            validator: Syntax check applied before the executor is involved
            env_facts: Static environment facts, captured at start when None
            session_factory: Creates and starts the run's session
        """
        self.planner = planner
        self.executor = executor
        self.output_dir = Path(output_dir)
        self.max_iterations = max_iterations
        self.command_timeout = command_timeout
        self.output_file = output_file
        self.validator = validator or CommandValidator()
        self.env_facts = env_facts
        self.session_factory = session_factory

    def run(self, task: str) -> RunResult:
        """Run the task to completion or until the iteration budget is spent.

        ServiceError raised by the planner aborts the run and propagates.
        """
        session = self.session_factory(task, self.output_dir, self.output_file)
        env_facts = dict(self.env_facts) if self.env_facts is not None else get_environment_facts()
        history = History()
        iteration = 0

        logger.agent(f"Agent started for task: '{task}'")
        logger.system(f"Working in directory: {session.session_dir}")

        while iteration < self.max_iterations:
            logger.iteration(iteration + 1, self.max_iterations)

            decision = self.planner.request_plan(task, env_facts, history)
            if isinstance(decision, Complete):
                return self._complete(session, decision, iteration, history)

            entry = self._run_iteration(session, iteration + 1, decision)
            history = history.append(entry)
            iteration += 1
            logger.debug(f"Recorded iteration {iteration}")

        return self._exhausted(session, iteration, history)

    def _run_iteration(self, session: Session, number: int, decision) -> HistoryEntry:
        """Validate and execute one decision, returning its history entry."""
        if isinstance(decision, Unparseable):
            logger.error("Could not parse a command from the reply. Skipping this iteration.")
            session.log_command(f"ERROR: Failed to parse command from the reply in iteration {number}")
            return HistoryEntry(
                iteration=number,
                command="",
                requires_sudo=False,
                explanation="",
                outcome=None,
                raw_response=decision.raw_text,
            )

        if not isinstance(decision, Continue):
            raise TypeError(f"Unexpected plan decision: {decision!r}")

        command = decision.command
        artifact = session.artifact_path(number)
        logger.command(f"Command: {command}")
        if decision.explanation:
            logger.agent(f"Purpose: {decision.explanation}")

        session.log_execution_start(command)

        # Rejected commands never reach execute(); the executor still owns the artifact text
        is_valid, reason = self.validator.validate(command)
        if not is_valid:
            outcome = self.executor.reject(reason, artifact)
        else:
            outcome = self.executor.execute(
                command,
                requires_sudo=decision.requires_sudo,
                timeout=self.command_timeout,
                output_file=artifact,
            )

        session.log_command(outcome.describe())
        self._report_outcome(outcome)

        captured = artifact.read_text(encoding="utf-8", errors="replace") if artifact.exists() else ""
        logger.block("Output:", build_output_preview(captured, artifact))
        session.log_output(number, command, captured)

        return HistoryEntry(
            iteration=number,
            command=command,
            requires_sudo=decision.requires_sudo,
            explanation=decision.explanation,
            outcome=outcome,
        )

    def _report_outcome(self, outcome) -> None:
        if outcome.succeeded:
            logger.command(outcome.describe())
            return
        logger.warning(outcome.describe())
        if isinstance(outcome, TimedOut):
            logger.system("You can increase the per-command timeout with the -t option.")
        elif isinstance(outcome, NotFound) and outcome.install_hint:
            logger.system(f"You might be able to install it with: {outcome.install_hint}")

    def _complete(self, session: Session, decision: Complete, iteration: int, history: History) -> RunResult:
        report = session.write_completed_report(decision.summary, decision.final_output)
        session.log_command(f"Task marked complete: {decision.summary}")
        logger.agent("Task complete!")
        logger.agent(f"Summary: {decision.summary}")
        logger.system(f"Final output saved to: {report}")
        copied = self._copy_report(session)
        self._finish(session)
        return RunResult(
            status=RunStatus.COMPLETED,
            iterations=iteration,
            entries=history.entries,
            report_path=report,
            summary=decision.summary,
            copied_to=copied,
        )

    def _exhausted(self, session: Session, iteration: int, history: History) -> RunResult:
        commands = [entry.command for entry in history if entry.was_parsed]
        report = session.write_incomplete_report(self.max_iterations, commands)
        session.log_command(f"Reached maximum iterations ({self.max_iterations}) without completing the task")
        logger.warning(f"Reached maximum iterations ({self.max_iterations}) without completing the task.")
        logger.system("Review the logs to see what was accomplished.")
        copied = self._copy_report(session)
        self._finish(session)
        return RunResult(
            status=RunStatus.BUDGET_EXHAUSTED,
            iterations=iteration,
            entries=history.entries,
            report_path=report,
            copied_to=copied,
        )

    def _copy_report(self, session: Session) -> Optional[Path]:
        copied = session.copy_report()
        if copied:
            logger.system(f"Output also saved to: {copied}")
        return copied

    @staticmethod
    def _finish(session: Session) -> None:
        logger.system(f"Agent run complete. Session ID: {session.session_id}")
        logger.system(f"All logs and outputs saved in: {session.session_dir}")


def create_agent_loop(planner: PlanRequester, executor: CommandExecutor, config: Mapping) -> AgentLoop:
    """Create an agent loop from resolved configuration."""
    return AgentLoop(
        planner=planner,
        executor=executor,
        output_dir=Path(config["output_dir"]),
        max_iterations=config["max_iterations"],
        command_timeout=config["command_timeout"],
        output_file=config.get("output_file"),
    )

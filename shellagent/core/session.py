"""Run-scoped session: identity, output directory, running logs and reports."""

import datetime
import shutil
from pathlib import Path
from typing import Iterable, Optional

from ..constants import (
    COMMAND_LOG_NAME, OUTPUT_LOG_NAME, FINAL_OUTPUT_NAME,
    ARTIFACT_NAME_TEMPLATE, SESSION_ID_FORMAT
)
from ..utils.helpers import ensure_directory_exists, get_clock_time
from ..utils.logging import logger


def resolve_output_file(output_file: Optional[str], session_dir: Path) -> Optional[Path]:
    """A bare file name lands in the session directory; a path is used as given."""
    if not output_file:
        return None
    if "/" not in output_file:
        return session_dir / output_file
    return Path(output_file).expanduser()


class Session:
    """Identity and output directory for one agent run.

    Files under the session directory are only ever appended to or written;
    the session itself does not change after creation.
    """

    def __init__(self, task: str, output_dir: Path, output_file: Optional[str] = None,
                 now: Optional[datetime.datetime] = None):
        started = now or datetime.datetime.now()
        self.task = task
        self.started_at = started
        self.session_id = started.strftime(SESSION_ID_FORMAT)
        self.session_dir = Path(output_dir).expanduser() / self.session_id
        self.command_log = self.session_dir / COMMAND_LOG_NAME
        self.output_log = self.session_dir / OUTPUT_LOG_NAME
        self.final_output = self.session_dir / FINAL_OUTPUT_NAME
        self.output_file = resolve_output_file(output_file, self.session_dir)

    def start(self) -> None:
        """Create the session directory and write the log headers."""
        ensure_directory_exists(self.session_dir)
        started = self.started_at.strftime('%a %b %d %H:%M:%S %Y')
        self.command_log.write_text(
            f"# Agent Task: {self.task}\n"
            f"Started at {started}\n"
            f"Session ID: {self.session_id}\n\n",
            encoding="utf-8",
        )
        self.output_log.write_text(
            "# Agent Session Output\n"
            f"Task: {self.task}\n"
            f"Started at {started}\n"
            f"Session ID: {self.session_id}\n\n",
            encoding="utf-8",
        )
        logger.debug(f"Session {self.session_id} started in {self.session_dir}")

    def artifact_path(self, iteration: int) -> Path:
        return self.session_dir / ARTIFACT_NAME_TEMPLATE.format(iteration=iteration)

    def log_command(self, message: str) -> None:
        """Append a line to the running command log."""
        self._append(self.command_log, message + "\n")

    def log_execution_start(self, command: str) -> None:
        self.log_command(f"## {get_clock_time()} Executing: {command}")

    def log_output(self, iteration: int, command: str, output: str) -> None:
        """Append one iteration's captured output to the running output log."""
        body = output if output.endswith("\n") or not output else output + "\n"
        self._append(
            self.output_log,
            f"## Command {iteration}: {command}\n\n```\n{body}```\n\n",
        )

    def write_completed_report(self, summary: str, final_output: str) -> Path:
        """Write the final report of a completed run."""
        content = (
            f"# Task Results: {self.task}\n\n"
            f"## Summary\n\n{summary}\n\n"
            f"{final_output.rstrip()}\n"
        )
        self.final_output.write_text(content, encoding="utf-8")
        return self.final_output

    def write_incomplete_report(self, max_iterations: int, commands: Iterable[str]) -> Path:
        """Write the partial report of a run that ran out of iterations."""
        command_lines = "\n".join(f"- `{command}`" for command in commands) or "- (none)"
        content = (
            f"# Task Results (Incomplete): {self.task}\n\n"
            f"This task reached the maximum number of iterations ({max_iterations}) "
            "without being marked as complete.\n\n"
            "## Commands Executed\n\n"
            f"{command_lines}\n\n"
            "## Raw Output Log\n\n"
            f"See the full output log at: {self.output_log}\n"
        )
        self.final_output.write_text(content, encoding="utf-8")
        return self.final_output

    def copy_report(self) -> Optional[Path]:
        """Copy the final report to the operator's output file, if one was given."""
        if self.output_file is None:
            return None
        ensure_directory_exists(self.output_file.parent)
        shutil.copyfile(self.final_output, self.output_file)
        return self.output_file

    @staticmethod
    def _append(path: Path, text: str) -> None:
        with open(path, "a", encoding="utf-8") as f:
            f.write(text)


def create_session(task: str, output_dir: Path, output_file: Optional[str] = None) -> Session:
    """Create and start a session."""
    session = Session(task, output_dir, output_file)
    session.start()
    return session

from __future__ import annotations

from pathlib import Path

import pytest

from shellagent.commands.executor import CommandExecutor
from shellagent.commands.permissions import PrivilegeGate
from shellagent.core.history import History
from shellagent.core.models import (
    CancelledByUser,
    Complete,
    Continue,
    PlanDecision,
    RunStatus,
    Success,
    SyntaxInvalid,
    TimedOut,
    Unparseable,
)
from shellagent.core.task_handler import AgentLoop, build_output_preview
from shellagent.errors import ServiceError

FACTS = {"system_info": "Linux test 6.1.0 x86_64", "current_directory": "/tmp", "started_at": "now"}


class ScriptedPlanner:
    """Returns scripted decisions; repeats the last one when the script runs out."""

    def __init__(self, decisions: list[PlanDecision]) -> None:
        self.decisions = decisions
        self.calls = 0
        self.histories: list[History] = []
        self.rendered: list[str] = []

    def request_plan(self, task: str, env_facts, history: History) -> PlanDecision:
        assert task == "inspect the machine"
        assert env_facts == FACTS
        self.histories.append(history)
        self.rendered.append(history.render())
        decision = self.decisions[min(self.calls, len(self.decisions) - 1)]
        self.calls += 1
        return decision


class FailingPlanner:
    def request_plan(self, task, env_facts, history):
        raise ServiceError("API Error: overloaded")


class FakeExecutor:
    def __init__(self, outcome=None) -> None:
        self.outcome = outcome or Success("ok\n")
        self.calls: list[tuple[str, bool, float, Path]] = []

    def execute(self, command, requires_sudo=False, timeout=None, output_file=None):
        self.calls.append((command, requires_sudo, timeout, output_file))
        if output_file is not None:
            output_file.write_text(getattr(self.outcome, "captured_output", ""), encoding="utf-8")
        return self.outcome


def _loop(planner, executor, tmp_path: Path, **kwargs) -> AgentLoop:
    return AgentLoop(
        planner=planner,
        executor=executor,
        output_dir=tmp_path / "out",
        env_facts=FACTS,
        **kwargs,
    )


def test_completion_on_first_request_ends_run(tmp_path) -> None:
    planner = ScriptedPlanner([Complete(summary="Disk usage collected", final_output="| / | 42% |")])
    executor = FakeExecutor()

    result = _loop(planner, executor, tmp_path).run("inspect the machine")

    assert result.status is RunStatus.COMPLETED
    assert result.completed
    assert result.iterations == 0
    assert planner.calls == 1
    assert executor.calls == []
    report = result.report_path.read_text(encoding="utf-8")
    assert "# Task Results: inspect the machine" in report
    assert "Disk usage collected" in report
    assert "| / | 42% |" in report


def test_completion_on_iteration_k_stops_before_k_plus_one(tmp_path) -> None:
    planner = ScriptedPlanner(
        [
            Continue(command="uname -a", explanation="kernel"),
            Continue(command="df -h", explanation="disks"),
            Complete(summary="done", final_output="report"),
            Continue(command="never", explanation="must not run"),
        ]
    )
    executor = FakeExecutor()

    result = _loop(planner, executor, tmp_path, max_iterations=10).run("inspect the machine")

    assert result.status is RunStatus.COMPLETED
    assert planner.calls == 3
    assert [call[0] for call in executor.calls] == ["uname -a", "df -h"]
    assert result.iterations == 2
    assert [entry.iteration for entry in result.entries] == [1, 2]


def test_budget_exhaustion_after_exactly_max_iterations(tmp_path) -> None:
    planner = ScriptedPlanner(
        [
            Continue(command="uname -a"),
            Continue(command="lscpu"),
            Continue(command="free -h"),
        ]
    )
    executor = FakeExecutor()

    result = _loop(planner, executor, tmp_path, max_iterations=3).run("inspect the machine")

    assert result.status is RunStatus.BUDGET_EXHAUSTED
    assert not result.completed
    assert result.iterations == 3
    assert planner.calls == 3
    assert len(executor.calls) == 3
    assert result.issued_commands == ["uname -a", "lscpu", "free -h"]
    report = result.report_path.read_text(encoding="utf-8")
    assert "Incomplete" in report
    assert "maximum number of iterations (3)" in report
    for command in ("uname -a", "lscpu", "free -h"):
        assert f"- `{command}`" in report


def test_history_grows_by_one_entry_per_iteration(tmp_path) -> None:
    planner = ScriptedPlanner([Continue(command=f"echo {n}") for n in range(4)])

    _loop(planner, FakeExecutor(), tmp_path, max_iterations=4).run("inspect the machine")

    assert [len(history) for history in planner.histories] == [0, 1, 2, 3]
    for earlier, later in zip(planner.rendered[1:], planner.rendered[2:]):
        assert later.startswith(earlier)


def test_unparseable_reply_is_recorded_and_skipped(tmp_path) -> None:
    planner = ScriptedPlanner(
        [
            Unparseable(raw_text="maybe try ls?"),
            Complete(summary="done", final_output="ok"),
        ]
    )
    executor = FakeExecutor()

    result = _loop(planner, executor, tmp_path).run("inspect the machine")

    assert executor.calls == []
    assert result.iterations == 1
    entry = result.entries[0]
    assert not entry.was_parsed
    assert entry.raw_response == "maybe try ls?"
    assert "maybe try ls?" in planner.rendered[1]
    assert result.issued_commands == []


def test_invalid_command_is_rejected_without_execution(tmp_path, monkeypatch) -> None:
    planner = ScriptedPlanner(
        [
            Continue(command='echo "unterminated'),
            Complete(summary="done", final_output="ok"),
        ]
    )
    executor = CommandExecutor()
    monkeypatch.setattr(executor, "execute", lambda *args, **kwargs: pytest.fail("execute was called"))
    monkeypatch.setattr(executor, "_run", lambda *args, **kwargs: pytest.fail("command was spawned"))

    result = _loop(planner, executor, tmp_path).run("inspect the machine")

    outcome = result.entries[0].outcome
    assert isinstance(outcome, SyntaxInvalid)
    assert "unmatched double quotes" in outcome.reason
    session_dir = result.report_path.parent
    assert "Invalid command syntax" in (session_dir / "cmd_1_output.txt").read_text(encoding="utf-8")
    assert "INVALID SYNTAX" in planner.rendered[1]


def test_cancelled_sudo_does_not_abort_the_run(tmp_path) -> None:
    planner = ScriptedPlanner(
        [
            Continue(command="fdisk -l", requires_sudo=True, explanation="partitions"),
            Continue(command="lsblk", explanation="block devices"),
            Complete(summary="done", final_output="ok"),
        ]
    )
    executor = FakeExecutor(outcome=CancelledByUser())

    result = _loop(planner, executor, tmp_path).run("inspect the machine")

    assert result.status is RunStatus.COMPLETED
    assert executor.calls[0][1] is True
    assert len(executor.calls) == 2
    assert "CANCELLED_BY_USER" in planner.rendered[1]


def test_service_error_propagates(tmp_path) -> None:
    with pytest.raises(ServiceError):
        _loop(FailingPlanner(), FakeExecutor(), tmp_path).run("inspect the machine")


def test_session_logs_and_artifacts_with_real_executor(tmp_path, monkeypatch) -> None:
    workdir = tmp_path / "work"
    workdir.mkdir()
    (workdir / "listing-marker.txt").write_text("x", encoding="utf-8")
    monkeypatch.chdir(workdir)
    planner = ScriptedPlanner(
        [
            Continue(command="ls -la", requires_sudo=False, explanation="list files"),
            Complete(summary="listed", final_output="files listed"),
        ]
    )

    result = _loop(planner, CommandExecutor(default_timeout=10), tmp_path, command_timeout=10).run(
        "inspect the machine"
    )

    outcome = result.entries[0].outcome
    assert isinstance(outcome, Success)
    assert "listing-marker.txt" in outcome.captured_output
    assert outcome.captured_output in planner.rendered[1]

    session_dir = result.report_path.parent
    assert (session_dir / "cmd_1_output.txt").read_text(encoding="utf-8") == outcome.captured_output
    command_log = (session_dir / "commands.log").read_text(encoding="utf-8")
    assert "# Agent Task: inspect the machine" in command_log
    assert "Executing: ls -la" in command_log
    assert "Command completed successfully" in command_log
    output_log = (session_dir / "output.log").read_text(encoding="utf-8")
    assert "## Command 1: ls -la" in output_log
    assert "listing-marker.txt" in output_log


def test_timed_out_command_moves_on_to_next_iteration(tmp_path) -> None:
    planner = ScriptedPlanner(
        [
            Continue(command="sleep 100", explanation="wait"),
            Complete(summary="gave up waiting", final_output="timeout observed"),
        ]
    )
    gate = PrivilegeGate(confirm=lambda prompt: pytest.fail("no sudo expected"))

    result = _loop(planner, CommandExecutor(privilege_gate=gate), tmp_path, command_timeout=1).run(
        "inspect the machine"
    )

    assert isinstance(result.entries[0].outcome, TimedOut)
    assert planner.calls == 2
    assert result.status is RunStatus.COMPLETED
    assert "TIMED OUT" in planner.rendered[1]


def test_report_copied_into_session_dir_for_bare_file_name(tmp_path) -> None:
    planner = ScriptedPlanner([Complete(summary="s", final_output="body")])

    result = _loop(planner, FakeExecutor(), tmp_path, output_file="report.md").run("inspect the machine")

    assert result.copied_to == result.report_path.parent / "report.md"
    assert result.copied_to.read_text(encoding="utf-8") == result.report_path.read_text(encoding="utf-8")


def test_report_copied_to_explicit_path_on_exhaustion(tmp_path) -> None:
    target = tmp_path / "reports" / "nested" / "final.md"
    planner = ScriptedPlanner([Continue(command="uptime")])

    result = _loop(planner, FakeExecutor(), tmp_path, max_iterations=1, output_file=str(target)).run(
        "inspect the machine"
    )

    assert result.status is RunStatus.BUDGET_EXHAUSTED
    assert result.copied_to == target
    assert "Incomplete" in target.read_text(encoding="utf-8")


def test_output_preview_truncates_long_output(tmp_path) -> None:
    artifact = tmp_path / "cmd_1_output.txt"
    long_output = "\n".join(f"line {n} " + "x" * 60 for n in range(100))

    preview = build_output_preview(long_output, artifact)

    assert preview.splitlines()[0] == "line 0 " + "x" * 60
    assert len(preview.splitlines()) == 21
    assert str(artifact) in preview
    assert build_output_preview("", artifact) == "(no output)"

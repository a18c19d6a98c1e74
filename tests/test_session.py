from __future__ import annotations

import datetime
from pathlib import Path

from shellagent.core.session import Session, create_session, resolve_output_file

STARTED = datetime.datetime(2025, 3, 14, 9, 26, 53)


def _session(tmp_path: Path, output_file: str | None = None) -> Session:
    session = Session("collect hardware info", tmp_path / "runs", output_file, now=STARTED)
    session.start()
    return session


def test_session_id_and_layout(tmp_path) -> None:
    session = _session(tmp_path)

    assert session.session_id == "20250314_092653"
    assert session.session_dir == tmp_path / "runs" / "20250314_092653"
    assert session.session_dir.is_dir()
    assert session.artifact_path(2) == session.session_dir / "cmd_2_output.txt"
    assert session.final_output.name == "final_output.md"


def test_start_writes_log_headers(tmp_path) -> None:
    session = _session(tmp_path)

    command_log = session.command_log.read_text(encoding="utf-8")
    output_log = session.output_log.read_text(encoding="utf-8")
    assert command_log.startswith("# Agent Task: collect hardware info\n")
    assert "Session ID: 20250314_092653" in command_log
    assert output_log.startswith("# Agent Session Output\n")
    assert "Task: collect hardware info" in output_log


def test_logs_are_appended_in_order(tmp_path) -> None:
    session = _session(tmp_path)

    session.log_execution_start("lscpu")
    session.log_command("Command completed successfully")
    session.log_output(1, "lscpu", "Architecture: x86_64")
    session.log_output(2, "free -h", "")

    command_log = session.command_log.read_text(encoding="utf-8")
    assert command_log.index("Executing: lscpu") < command_log.index("Command completed successfully")
    output_log = session.output_log.read_text(encoding="utf-8")
    assert "## Command 1: lscpu\n\n```\nArchitecture: x86_64\n```\n" in output_log
    assert "## Command 2: free -h\n\n```\n```\n" in output_log


def test_completed_report(tmp_path) -> None:
    session = _session(tmp_path)

    path = session.write_completed_report("Disk usage collected", "| / | 42% |\n\n")

    assert path == session.final_output
    assert path.read_text(encoding="utf-8") == (
        "# Task Results: collect hardware info\n\n"
        "## Summary\n\nDisk usage collected\n\n"
        "| / | 42% |\n"
    )


def test_incomplete_report_lists_commands(tmp_path) -> None:
    session = _session(tmp_path)

    text = session.write_incomplete_report(2, ["lscpu", "lsblk -f"]).read_text(encoding="utf-8")

    assert text.startswith("# Task Results (Incomplete): collect hardware info")
    assert "maximum number of iterations (2)" in text
    assert "- `lscpu`\n- `lsblk -f`" in text
    assert str(session.output_log) in text


def test_incomplete_report_without_commands(tmp_path) -> None:
    text = _session(tmp_path).write_incomplete_report(1, []).read_text(encoding="utf-8")

    assert "- (none)" in text


def test_resolve_output_file(tmp_path) -> None:
    assert resolve_output_file(None, tmp_path) is None
    assert resolve_output_file("", tmp_path) is None
    assert resolve_output_file("report.md", tmp_path) == tmp_path / "report.md"
    assert resolve_output_file("/srv/out/report.md", tmp_path) == Path("/srv/out/report.md")


def test_copy_report_without_output_file_is_noop(tmp_path) -> None:
    session = _session(tmp_path)
    session.write_completed_report("s", "body")

    assert session.copy_report() is None


def test_copy_report_creates_parent_directories(tmp_path) -> None:
    target = tmp_path / "elsewhere" / "deep" / "report.md"
    session = _session(tmp_path, output_file=str(target))
    session.write_completed_report("s", "body")

    assert session.copy_report() == target
    assert target.read_text(encoding="utf-8") == session.final_output.read_text(encoding="utf-8")


def test_create_session_starts_it(tmp_path) -> None:
    session = create_session("task", tmp_path)

    assert session.command_log.exists()
    assert session.output_log.exists()

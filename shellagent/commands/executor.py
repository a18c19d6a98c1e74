"""Command execution utilities for shellagent."""

import os
import shutil
import signal
import subprocess
import sys
from pathlib import Path
from typing import Optional, Tuple

from ..core.models import (
    ExecutionOutcome, Success, Failure, NotFound, TimedOut, SyntaxInvalid, CancelledByUser
)
from ..constants import SHELL_BUILTINS, SHELL_RESERVED_WORDS, SHELL_CONTROL_OPERATORS
from ..utils.helpers import get_install_hint, safe_file_write
from ..utils.logging import logger
from .permissions import PrivilegeGate
from .validator import CommandValidator

_TERM_GRACE_PERIOD = 2  # seconds between SIGTERM and SIGKILL
_KILL_WAIT_TIMEOUT = 5  # seconds to wait for the process group to die after SIGKILL
_SUDO_REFRESH_TIMEOUT = 120  # the operator may need to type a password


def extract_binary_name(command: str) -> str:
    """Return the leading token of a command."""
    parts = command.strip().split()
    return parts[0] if parts else ""


def needs_existence_check(command: str) -> bool:
    """Whether the leading token of ``command`` must be found on PATH before running it.

    Compound commands (pipes, redirections, && / ||), shell builtins and
    reserved words are assumed to always resolve.
    """
    if any(operator in command for operator in SHELL_CONTROL_OPERATORS):
        return False
    binary = extract_binary_name(command)
    if not binary:
        return False
    return binary not in SHELL_BUILTINS and binary not in SHELL_RESERVED_WORDS


def _signal_group(proc: subprocess.Popen, sig: int) -> None:
    try:
        os.killpg(proc.pid, sig)
    except ProcessLookupError:
        pass  # group already gone
    except PermissionError:
        logger.warning(
            f"Not permitted to send signal {sig} to process group {proc.pid}; "
            "a privileged child may still be running"
        )


def _kill_process_tree(proc: subprocess.Popen) -> None:
    """Terminate a process and every process in its group, then wait for exit.

    SIGTERM goes first so sudo can forward it to the root-owned command it
    started; whatever is left after the grace period gets SIGKILL.
    """
    _signal_group(proc, signal.SIGTERM)
    try:
        proc.wait(timeout=_TERM_GRACE_PERIOD)
    except subprocess.TimeoutExpired:
        pass
    _signal_group(proc, signal.SIGKILL)
    try:
        proc.kill()
    except OSError:
        pass
    try:
        proc.wait(timeout=_KILL_WAIT_TIMEOUT)
    except subprocess.TimeoutExpired:
        logger.warning(f"Process {proc.pid} did not exit after SIGKILL")


class CommandExecutor:
    """Executes validated shell commands with a deadline and sudo gating."""

    def __init__(self,
                 default_timeout: float = 30,
                 privilege_gate: Optional[PrivilegeGate] = None,
                 validator: Optional[CommandValidator] = None,
                 shell: str = "/bin/bash"):
        """Initialize command executor.

        Args:
            default_timeout: Default timeout for command execution in seconds
            privilege_gate: Decides whether sudo commands may run
            validator: Syntax validator re-run before every execution
            shell: Shell used to interpret commands
        """
        self.default_timeout = default_timeout
        self.privilege_gate = privilege_gate or PrivilegeGate()
        self.validator = validator or CommandValidator()
        self.shell = shell if Path(shell).exists() else (shutil.which("bash") or "/bin/sh")

    def execute(self,
                command: str,
                requires_sudo: bool = False,
                timeout: Optional[float] = None,
                output_file: Optional[Path] = None) -> ExecutionOutcome:
        """Validate, gate and run a command, classifying the result.

        Args:
            command: Shell command to execute
            requires_sudo: Run the command through sudo
            timeout: Wall-clock deadline in seconds (uses default if None)
            output_file: Per-iteration artifact receiving the captured output

        Returns:
            The classified ExecutionOutcome
        """
        if timeout is None:
            timeout = self.default_timeout

        is_valid, reason = self.validator.validate(command)
        if not is_valid:
            return self.reject(reason, output_file)

        if needs_existence_check(command):
            binary = extract_binary_name(command)
            if shutil.which(binary) is None:
                return self._not_found(binary, output_file)

        if requires_sudo:
            if not self.privilege_gate.allow(command):
                self._write_artifact(output_file, "CANCELLED_BY_USER\n")
                return CancelledByUser()
            if shutil.which("sudo") is None:
                return self._not_found("sudo", output_file)
            refreshed, refresh_error = self._refresh_sudo_credentials()
            if not refreshed:
                self._write_artifact(output_file, f"ERROR: {refresh_error}\n")
                return Failure(exit_code=1, captured_output=refresh_error)
            command = f"sudo -n {command}"

        logger.command(f"Executing: {command} - timeout: {timeout:g}s")
        exit_code, output = self._run(command, timeout, keep_terminal=requires_sudo)

        if exit_code is None:
            self._write_artifact(
                output_file,
                output + f"ERROR: Command timed out after {timeout:g} seconds. "
                "You can increase the timeout with the -t option.\n"
            )
            return TimedOut(timeout_seconds=timeout, captured_output=output)

        if exit_code != 0:
            self._write_artifact(output_file, output + f"ERROR: Command failed with exit code {exit_code}\n")
            return Failure(exit_code=exit_code, captured_output=output)

        self._write_artifact(output_file, output)
        return Success(captured_output=output)

    def reject(self, reason: str, output_file: Optional[Path] = None) -> SyntaxInvalid:
        """Record a validation failure in the artifact without running anything."""
        self._write_artifact(output_file, f"ERROR: Invalid command syntax. {reason}\n")
        return SyntaxInvalid(reason)

    def _run(self, command: str, timeout: float, keep_terminal: bool = False) -> Tuple[Optional[int], str]:
        """Spawn the command in its own process group.

        Args:
            command: Command line passed to ``shell -c``
            timeout: Wall-clock deadline in seconds
            keep_terminal: Stay in the operator's session so ``sudo -n`` finds
                the credentials cached for this terminal by ``sudo -v``

        Returns:
            Tuple of (exit_code, combined_output). ``exit_code`` is None when
            the deadline expired and the process group was killed.
        """
        if keep_terminal:
            group_kwargs = {"preexec_fn": os.setpgrp}
        else:
            group_kwargs = {"start_new_session": True}

        try:
            proc = subprocess.Popen(
                [self.shell, "-c", command],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                errors="replace",
                **group_kwargs,
            )
        except OSError as e:
            logger.error(f"Error starting command: {e}")
            return -1, f"Error starting command: {e}\n"

        try:
            output, _ = proc.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            _kill_process_tree(proc)
            try:
                output, _ = proc.communicate(timeout=_KILL_WAIT_TIMEOUT)
            except (subprocess.TimeoutExpired, ValueError):
                # A detached grandchild may still hold the pipe open
                output = ""
            return None, output or ""
        except BaseException:
            # The group never sees the operator's Ctrl-C
            _kill_process_tree(proc)
            raise

        return proc.returncode, output or ""

    def _refresh_sudo_credentials(self) -> Tuple[bool, str]:
        """Let sudo authenticate on the terminal before the non-interactive `sudo -n` run."""
        if hasattr(os, "geteuid") and os.geteuid() == 0:
            return True, ""
        try:
            result = subprocess.run(["sudo", "-v"], timeout=_SUDO_REFRESH_TIMEOUT, stdin=sys.stdin)
        except subprocess.TimeoutExpired:
            return False, "sudo authentication timed out"
        except OSError as e:
            return False, f"sudo authentication failed: {e}"
        if result.returncode != 0:
            return False, f"sudo authentication failed with exit code {result.returncode}"
        return True, ""

    def _not_found(self, binary: str, output_file: Optional[Path]) -> NotFound:
        hint = get_install_hint(binary)
        content = f"ERROR: Command '{binary}' not found. Please install it before proceeding.\n"
        if hint:
            content += f"You might be able to install it with: {hint}\n"
        self._write_artifact(output_file, content)
        return NotFound(binary_name=binary, install_hint=hint)

    @staticmethod
    def _write_artifact(output_file: Optional[Path], content: str) -> None:
        if output_file is not None:
            safe_file_write(output_file, content, f"command output {output_file.name}")


def create_command_executor(timeout: float = 30,
                            privilege_gate: Optional[PrivilegeGate] = None) -> CommandExecutor:
    """Create a command executor with the specified default timeout."""
    return CommandExecutor(timeout, privilege_gate)

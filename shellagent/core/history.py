"""Append-only iteration history and its rendering into prompt context."""

from dataclasses import dataclass
from typing import Iterator, Tuple

from .models import HistoryEntry, Success, NotFound, TimedOut, SyntaxInvalid, CancelledByUser

EMPTY_HISTORY_TEXT = "(no commands have been run yet)"


def _fenced(text: str) -> str:
    body = text if text.endswith("\n") or not text else text + "\n"
    return f"```\n{body}```\n"


def render_entry(entry: HistoryEntry) -> str:
    """Render one entry as the text block embedded in later prompts."""
    if not entry.was_parsed:
        return (
            f"## Iteration {entry.iteration}\n"
            f"ERROR: Failed to parse a command from the response in iteration {entry.iteration}.\n"
            f"Response:\n{_fenced(entry.raw_response or '')}"
        )

    outcome = entry.outcome
    header = (
        f"## Iteration {entry.iteration}\n"
        f"Command: {entry.command}\n"
        f"Requires sudo: {'true' if entry.requires_sudo else 'false'}\n"
        f"Explanation: {entry.explanation}\n"
    )

    if isinstance(outcome, Success):
        return header + f"Output of: {entry.command}\n" + _fenced(outcome.captured_output)

    if isinstance(outcome, NotFound):
        detail = f"Command '{outcome.binary_name}' not found."
        if outcome.install_hint:
            detail += f" You may need to install it with:\n{outcome.install_hint}"
    elif isinstance(outcome, TimedOut):
        detail = (
            f"Command timed out after {outcome.timeout_seconds:g} seconds. "
            "The command might be hanging or taking too long to complete.\n"
            + outcome.captured_output
        )
    elif isinstance(outcome, SyntaxInvalid):
        detail = f"ERROR: Invalid command syntax. {outcome.reason}"
    elif isinstance(outcome, CancelledByUser):
        detail = "CANCELLED_BY_USER: the operator declined to run this command with sudo."
    else:
        output = outcome.captured_output
        if output and not output.endswith("\n"):
            output += "\n"
        detail = output + f"Exit code: {outcome.exit_code}"

    return header + f"Output of: {entry.command} ({outcome.label})\n" + _fenced(detail)


@dataclass(frozen=True)
class History:
    """Immutable, ordered log of past iterations.

    ``append`` returns a new History; rendering is a pure projection, so an
    entry's text never changes once recorded.
    """
    entries: Tuple[HistoryEntry, ...] = ()

    def append(self, entry: HistoryEntry) -> "History":
        return History(self.entries + (entry,))

    def render(self) -> str:
        """Concatenate every entry in iteration order, without truncation."""
        if not self.entries:
            return EMPTY_HISTORY_TEXT
        return "\n".join(render_entry(entry) for entry in self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(self.entries)

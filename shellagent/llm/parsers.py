"""Parsing of generation-service replies into plan decisions.

The envelope is lenient: JSON objects are located anywhere in the reply, so
surrounding prose and markdown fences are ignored. The payload is strict:
an object either has the expected fields with the expected types or the
reply is Unparseable. Fields are never scraped piecemeal.
"""

import json
from typing import Any, Dict, Iterator

from ..constants import COMPLETION_MARKER
from ..core.models import PlanDecision, Continue, Complete, Unparseable
from ..utils.logging import logger

_decoder = json.JSONDecoder()


def iter_json_objects(text: str) -> Iterator[Dict[str, Any]]:
    """Yield every top-level JSON object embedded in ``text``, in order."""
    idx = text.find("{")
    while idx != -1:
        try:
            obj, end = _decoder.raw_decode(text, idx)
        except json.JSONDecodeError:
            idx = text.find("{", idx + 1)
            continue
        if isinstance(obj, dict):
            yield obj
        idx = text.find("{", end)


def has_completion_marker(text: str) -> bool:
    return COMPLETION_MARKER in text


def parse_completion(text: str) -> PlanDecision:
    """Decode the summary object that accompanies a completion marker."""
    for obj in iter_json_objects(text):
        summary = obj.get("summary")
        final_output = obj.get("final_output")
        if isinstance(summary, str) and isinstance(final_output, str):
            return Complete(summary=summary, final_output=final_output)
    logger.debug("Completion marker present but no summary/final_output object found")
    return Unparseable(raw_text=text)


def parse_command(text: str) -> PlanDecision:
    """Decode the first object carrying a ``command`` field."""
    for obj in iter_json_objects(text):
        if "command" not in obj:
            continue

        command = obj["command"]
        requires_sudo = obj.get("requires_sudo", False)
        explanation = obj.get("explanation", "")

        if not isinstance(command, str) or not command.strip():
            logger.debug(f"Reply 'command' is not a non-empty string: {command!r}")
            return Unparseable(raw_text=text)
        if not isinstance(requires_sudo, bool):
            logger.debug(f"Reply 'requires_sudo' is not a boolean: {requires_sudo!r}")
            return Unparseable(raw_text=text)
        if explanation is None:
            explanation = ""
        if not isinstance(explanation, str):
            logger.debug(f"Reply 'explanation' is not a string: {explanation!r}")
            return Unparseable(raw_text=text)

        return Continue(command=command.strip(), requires_sudo=requires_sudo, explanation=explanation.strip())

    return Unparseable(raw_text=text)


def parse_plan_reply(text: str) -> PlanDecision:
    """Interpret one reply: completion first, then a next-command object."""
    if has_completion_marker(text):
        return parse_completion(text)
    return parse_command(text)

"""Prompt and request payload preparation for shellagent."""

from typing import Any, Dict, Mapping, Optional

from ..config.templates import PLAN_PROMPT_TEMPLATE
from ..constants import COMPLETION_MARKER, DEFAULT_MODEL, DEFAULT_MAX_TOKENS
from ..utils.helpers import format_template_string


class PayloadBuilder:
    """Builds prompts and JSON request bodies for the generation service."""

    def __init__(self,
                 model: str = DEFAULT_MODEL,
                 max_tokens: int = DEFAULT_MAX_TOKENS,
                 prompt_template: Optional[str] = None):
        """Initialize payload builder.

        Args:
            model: Model identifier sent with every request
            max_tokens: Maximum size of each reply
            prompt_template: Overrides the built-in plan prompt
        """
        self.model = model
        self.max_tokens = max_tokens
        self.prompt_template = prompt_template or PLAN_PROMPT_TEMPLATE

    def build_prompt(self, task: str, env_facts: Mapping[str, str], history_text: str) -> str:
        """Embed the task, environment facts and rendered history into the prompt."""
        context = {
            "system_info": "",
            "current_directory": "",
            "started_at": "",
        }
        context.update(
            (key, value) for key, value in env_facts.items()
            if key not in ("task", "history", "completion_marker")
        )
        return format_template_string(
            self.prompt_template,
            task=task,
            history=history_text,
            completion_marker=COMPLETION_MARKER,
            **context,
        )

    def build_request(self, prompt: str) -> Dict[str, Any]:
        """Request body carrying the model, output limit and a single user message."""
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [
                {
                    "role": "user",
                    "content": prompt,
                }
            ],
        }


def create_payload_builder(config: Mapping[str, Any]) -> PayloadBuilder:
    """Create a configured payload builder instance."""
    return PayloadBuilder(
        model=config.get("model", DEFAULT_MODEL),
        max_tokens=config.get("max_tokens", DEFAULT_MAX_TOKENS),
        prompt_template=config.get("prompt_template"),
    )

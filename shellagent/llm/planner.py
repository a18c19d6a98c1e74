"""Plan requester: asks the generation service for the next step."""

from typing import Mapping

from ..core.history import History
from ..core.models import PlanDecision, Continue, Complete
from ..utils.logging import logger
from .client import LLMClient
from .parsers import parse_plan_reply
from .payload import PayloadBuilder


class PlanRequester:
    """Builds the prompt, calls the service and parses the reply."""

    def __init__(self, client: LLMClient, payload_builder: PayloadBuilder):
        self.client = client
        self.payload_builder = payload_builder

    def request_plan(self, task: str, env_facts: Mapping[str, str], history: History) -> PlanDecision:
        """Request the next decision. ServiceError from the client propagates."""
        prompt = self.payload_builder.build_prompt(task, env_facts, history.render())
        payload = self.payload_builder.build_request(prompt)

        reply = self.client.send_request(payload)
        logger.debug(f"Reply:\n{reply}")

        decision = parse_plan_reply(reply)
        if isinstance(decision, Continue):
            logger.llm(f"Proposed command: {decision.command} (sudo: {decision.requires_sudo})")
        elif isinstance(decision, Complete):
            logger.llm("Reply signals task completion")
        else:
            logger.warning("Could not parse a command from the reply")
        return decision


def create_plan_requester(client: LLMClient, payload_builder: PayloadBuilder) -> PlanRequester:
    """Create a plan requester."""
    return PlanRequester(client, payload_builder)

"""Generation-service integration for shellagent."""

from .client import LLMClient, create_llm_client
from .payload import PayloadBuilder, create_payload_builder
from .parsers import parse_plan_reply, iter_json_objects
from .planner import PlanRequester, create_plan_requester

__all__ = [
    "LLMClient",
    "create_llm_client",
    "PayloadBuilder",
    "create_payload_builder",
    "parse_plan_reply",
    "iter_json_objects",
    "PlanRequester",
    "create_plan_requester",
]

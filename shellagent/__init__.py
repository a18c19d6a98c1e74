"""
shellagent - autonomous shell task agent.

Given a natural-language task, the agent repeatedly asks a text-generation
service for one shell command, validates it, runs it under a deadline (asking
before any sudo escalation) and feeds the command history back into the next
request until the service reports completion or the iteration budget runs out.
"""

__version__ = "1.0.0"

# Main API imports
from .core.application import ShellAgent, create_application
from .core.task_handler import AgentLoop, create_agent_loop
from .config.manager import ConfigManager, create_config_manager

__all__ = [
    "ShellAgent",
    "create_application",
    "AgentLoop",
    "create_agent_loop",
    "ConfigManager",
    "create_config_manager",
    "__version__",
]

"""Configuration management for shellagent."""

from .manager import ConfigManager, create_config_manager, DEFAULTS
from .templates import CONFIG_TEMPLATE, PLAN_PROMPT_TEMPLATE

__all__ = [
    "ConfigManager",
    "create_config_manager",
    "DEFAULTS",
    "CONFIG_TEMPLATE",
    "PLAN_PROMPT_TEMPLATE",
]

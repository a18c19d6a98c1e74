"""Main application class for shellagent."""

import signal
import sys
from pathlib import Path
from typing import Any, Mapping, Optional

from ..commands.executor import create_command_executor
from ..commands.permissions import ConfirmFn, create_privilege_gate
from ..config.manager import create_config_manager
from ..constants import API_KEY_ENV_VAR
from ..errors import ConfigError, ServiceError
from ..llm.client import create_llm_client
from ..llm.payload import create_payload_builder
from ..llm.planner import create_plan_requester
from ..utils.logging import logger
from .models import RunResult
from .task_handler import create_agent_loop


class ShellAgent:
    """Wires configuration, the generation service and the agent loop together."""

    def __init__(self,
                 config_dir: Optional[str] = None,
                 overrides: Optional[Mapping[str, Any]] = None,
                 debug: bool = False,
                 confirm: Optional[ConfirmFn] = None):
        """Initialize the application.

        Args:
            config_dir: Custom configuration directory path
            overrides: Command-line settings taking precedence over the config file
            debug: Enable debug logging
            confirm: Confirmation port for sudo commands (console prompt by default)

        Raises:
            ConfigError: if the configuration is invalid or no API key is available
        """
        logger.set_debug(debug)

        config_path = Path(config_dir) if config_dir else None
        self.config_manager = create_config_manager(config_path, overrides)
        self.config = self.config_manager.config

        if not debug and self.config.get("enable_debug", False):
            logger.set_debug(True)

        if not self.config.get("api_key"):
            raise ConfigError(
                f"No API key configured. Set {API_KEY_ENV_VAR} or 'api_key' in {self.config_manager.config_file}."
            )

        self.client = create_llm_client(self.config)
        self.payload_builder = create_payload_builder(self.config)
        self.planner = create_plan_requester(self.client, self.payload_builder)
        self.privilege_gate = create_privilege_gate(self.config["force_root"], confirm)
        self.executor = create_command_executor(self.config["command_timeout"], self.privilege_gate)
        self.loop = create_agent_loop(self.planner, self.executor, self.config)

        self._setup_signal_handlers()

        logger.debug("Application initialization complete")

    def run_task(self, task: str) -> Optional[RunResult]:
        """Run one task.

        Returns:
            The RunResult, or None when the run was aborted by a service error
            or an interrupt
        """
        try:
            return self.loop.run(task)
        except ServiceError as e:
            logger.error(f"{e}")
            logger.error("Error calling the generation service. Check your API key and internet connection.")
            return None
        except KeyboardInterrupt:
            logger.system("Task interrupted by user")
            return None

    def _setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown."""
        def signal_handler(sig, frame):
            logger.system(f"Received signal {sig}, shutting down...")
            sys.exit(1)

        signal.signal(signal.SIGTERM, signal_handler)

        # Handle SIGHUP on Unix systems
        if hasattr(signal, 'SIGHUP'):
            signal.signal(signal.SIGHUP, signal_handler)


def create_application(config_dir: Optional[str] = None,
                       overrides: Optional[Mapping[str, Any]] = None,
                       debug: bool = False,
                       confirm: Optional[ConfirmFn] = None) -> ShellAgent:
    """Create and initialize a ShellAgent application instance."""
    return ShellAgent(config_dir, overrides, debug, confirm)

"""Exception types for shellagent."""


class ShellAgentError(Exception):
    """Base class for errors that abort a run."""


class ServiceError(ShellAgentError):
    """The generation service could not be reached or answered with an error."""


class ConfigError(ShellAgentError):
    """The configuration file or command-line settings are invalid."""

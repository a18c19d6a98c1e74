"""Constants used throughout the shellagent package."""

from pathlib import Path
from colorama import Fore, Style

# Configuration paths
CONFIG_DIR = Path.home() / ".config" / "shell-agent"

# ANSI Color Codes (using colorama)
CLR_RESET = Style.RESET_ALL
CLR_RED = Fore.RED
CLR_BOLD_RED = Style.BRIGHT + Fore.RED
CLR_GREEN = Fore.GREEN
CLR_BOLD_GREEN = Style.BRIGHT + Fore.GREEN
CLR_YELLOW = Fore.YELLOW
CLR_BOLD_YELLOW = Style.BRIGHT + Fore.YELLOW
CLR_BLUE = Fore.BLUE
CLR_BOLD_BLUE = Style.BRIGHT + Fore.BLUE
CLR_MAGENTA = Fore.MAGENTA
CLR_BOLD_MAGENTA = Style.BRIGHT + Fore.MAGENTA
CLR_CYAN = Fore.CYAN
CLR_BOLD_CYAN = Style.BRIGHT + Fore.CYAN
CLR_WHITE = Fore.WHITE
CLR_BOLD_WHITE = Style.BRIGHT + Fore.WHITE

# Generation service defaults
DEFAULT_ENDPOINT = "https://api.anthropic.com/v1/messages"
DEFAULT_ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MODEL = "claude-3-7-sonnet-20250219"
DEFAULT_MAX_TOKENS = 4096
DEFAULT_REQUEST_TIMEOUT = 120
API_KEY_ENV_VAR = "ANTHROPIC_API_KEY"

# Agent loop defaults
DEFAULT_OUTPUT_DIR = Path.home() / "shell_agent"
DEFAULT_MAX_ITERATIONS = 5
DEFAULT_COMMAND_TIMEOUT = 30
DEFAULT_ENABLE_DEBUG = False

# Literal signal in a reply meaning the task is finished
COMPLETION_MARKER = "TASK_COMPLETE"

# Session file names
COMMAND_LOG_NAME = "commands.log"
OUTPUT_LOG_NAME = "output.log"
FINAL_OUTPUT_NAME = "final_output.md"
ARTIFACT_NAME_TEMPLATE = "cmd_{iteration}_output.txt"
SESSION_ID_FORMAT = "%Y%m%d_%H%M%S"

# Execution status codes
STATUS_SUCCESS = 0
STATUS_FAILURE = 1
STATUS_NOT_FOUND = 2
STATUS_TIMED_OUT = 3
STATUS_SYNTAX_INVALID = 4

# Commands that are always resolvable by the shell
SHELL_BUILTINS = frozenset([
    "cd", "echo", "printf", "pwd", "exit", "test", "[",
    "source", "export", "unset", "alias", "eval", "exec",
])

# Reserved words that open compound commands
SHELL_RESERVED_WORDS = frozenset([
    "for", "while", "until", "if", "case", "select", "{", "(", "!", "[[",
])

# Operators that make the leading token an unreliable binary name
SHELL_CONTROL_OPERATORS = ("&&", "||", "|", ">")

# Console output preview limits
OUTPUT_PREVIEW_BYTES = 1000
OUTPUT_PREVIEW_LINES = 20

"""Command-line interface for shellagent."""

import argparse
import sys
from typing import Any, Dict, List, Optional

from colorama import init as colorama_init

from .constants import DEFAULT_OUTPUT_DIR, DEFAULT_MODEL, DEFAULT_MAX_ITERATIONS, DEFAULT_COMMAND_TIMEOUT
from .core.application import create_application
from .errors import ConfigError
from .utils.logging import logger
from . import __version__


def create_parser() -> argparse.ArgumentParser:
    """Create the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="shell-agent",
        description="shell-agent: runs shell commands proposed by an LLM, one at a time, until a task is done.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  shell-agent "Collect all hardware information about my computer"
  shell-agent -o system_report.md "Generate a system report"
  shell-agent -i 10 -t 60 "Find the largest files in my home directory"
        """
    )

    parser.add_argument(
        'task',
        nargs='+',
        help="Task description"
    )

    parser.add_argument(
        '-o', '--output-file',
        help="Save the final report to this file (a bare name is placed in the session directory)"
    )

    parser.add_argument(
        '-d', '--output-dir',
        help=f"Output directory (default: {DEFAULT_OUTPUT_DIR})"
    )

    parser.add_argument(
        '-m', '--model',
        help=f"Model identifier (default: {DEFAULT_MODEL})"
    )

    parser.add_argument(
        '-i', '--max-iterations',
        type=int,
        help=f"Maximum iterations (default: {DEFAULT_MAX_ITERATIONS})"
    )

    parser.add_argument(
        '-t', '--timeout',
        type=float,
        dest='command_timeout',
        help=f"Command timeout in seconds (default: {DEFAULT_COMMAND_TIMEOUT})"
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help="Verbose mode (show API requests and responses)"
    )

    parser.add_argument(
        '-r', '--force-root',
        action='store_true',
        help="Run sudo commands without asking for confirmation"
    )

    parser.add_argument(
        '--config-dir',
        type=str,
        help="Custom configuration directory path"
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'shell-agent {__version__}'
    )

    return parser


def build_overrides(parsed_args: argparse.Namespace) -> Dict[str, Any]:
    """Command-line settings that take precedence over the config file."""
    overrides = {
        "output_file": parsed_args.output_file,
        "output_dir": parsed_args.output_dir,
        "model": parsed_args.model,
        "max_iterations": parsed_args.max_iterations,
        "command_timeout": parsed_args.command_timeout,
    }
    if parsed_args.force_root:
        overrides["force_root"] = True
    if parsed_args.verbose:
        overrides["enable_debug"] = True
    return overrides


def main(args: Optional[List[str]] = None) -> None:
    """Main entry point for the CLI."""
    colorama_init(autoreset=True)

    parser = create_parser()
    parsed_args = parser.parse_args(args)

    task = " ".join(parsed_args.task).strip()
    if not task:
        logger.error("You must provide a task description")
        sys.exit(1)

    try:
        app = create_application(
            config_dir=parsed_args.config_dir,
            overrides=build_overrides(parsed_args),
            debug=parsed_args.verbose,
        )
    except ConfigError as e:
        logger.error(f"{e}")
        sys.exit(1)

    result = app.run_task(task)
    sys.exit(0 if result is not None else 1)


if __name__ == "__main__":
    main()

"""Configuration and prompt templates for shellagent."""

PLAN_PROMPT_TEMPLATE = """\
You are Shell Agent, a CLI assistant that helps Linux users accomplish tasks by executing shell commands.

TASK: {task}

SYSTEM INFORMATION:
{system_info}
Working directory: {current_directory}
Session started: {started_at}

PREVIOUS COMMANDS AND OUTPUTS:
{history}

Your job is to decide what command to run next to accomplish the task. Follow these guidelines:
1. Provide exactly ONE command to run to make progress toward completing the task
2. For data collection or system information tasks, think step by step, collecting all relevant information
3. Specify if the command requires root privileges (sudo); do not include sudo in the command itself
4. Be precise with command syntax for the system described above
5. Don't perform destructive actions - focus on reading system state, not modifying it
6. Avoid overly complex commands with multiple operations (&&, ||, |) when possible - prefer simpler, focused commands
7. Don't use commands that may hang or take too long to complete without a good reason
8. Loops and conditionals must be COMPLETE with proper syntax (do/done, if/then/fi) - no partial commands
9. Keep commands simple and direct - ONE SINGLE LINE commands are strongly preferred
10. If the task is complete or you need no more commands, reply with '{completion_marker}' and a summary of what was accomplished

Respond with a single JSON object in this format:
{{
    "requires_sudo": true or false,
    "command": "the exact command to execute",
    "explanation": "brief explanation of what this command does and why it's needed"
}}

Or if the task is complete:
{{
    "status": "{completion_marker}",
    "summary": "summary of what was accomplished",
    "final_output": "markdown formatted final output that combines all the findings"
}}
"""

CONFIG_TEMPLATE = """\
# config.yaml - shell-agent configuration
# Ensure this is valid YAML. Every key is optional; command-line flags take precedence.
#
# endpoint: URL of the Anthropic Messages API.
# api_key: API key for the endpoint. The ANTHROPIC_API_KEY environment variable overrides it.
# anthropic_version: Value of the anthropic-version request header.
# model: Model identifier sent with every request (-m).
# max_tokens: Maximum size of each reply.
# max_iterations: Iteration budget for one run (-i).
# command_timeout: Per-command deadline in seconds (-t).
# request_timeout: Network timeout for one request in seconds.
# output_dir: Directory holding one sub-directory per session (-d).
# enable_debug: Verbose logging of requests and replies (-v).
# prompt_template: Replaces the built-in prompt. Available fields:
#   {{task}} {{system_info}} {{current_directory}} {{started_at}} {{history}} {{completion_marker}}

endpoint: "{endpoint}"
# api_key: "YOUR_API_KEY_HERE"
anthropic_version: "{anthropic_version}"
model: "{model}"
max_tokens: {max_tokens}
max_iterations: {max_iterations}
command_timeout: {command_timeout}
request_timeout: {request_timeout}
output_dir: "{output_dir}"
enable_debug: false
"""

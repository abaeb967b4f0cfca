"""
Exit codes and the exception hierarchy used across flowtee.

Every error that should end the program carries the exit code it maps to,
so the CLI layer can translate it without knowing the concrete type.
"""

SUCCESS = 0
GENERAL_ERROR = 1
USAGE_ERROR = 2
INTERRUPTED = 130


class CommandError(Exception):
    """Base class for errors that carry a process exit code."""

    exit_code = GENERAL_ERROR

    def __init__(self, message, exit_code=None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class FlowteeError(CommandError):
    """Base class for workflow execution errors."""


class ConfigError(FlowteeError):
    """Workflow file is missing, unreadable, or structurally invalid."""


class StepNotFoundError(FlowteeError):
    """A step name was not present in the workflow."""

    def __init__(self, name):
        super().__init__(f"Step '{name}' not found in workflow")
        self.name = name


class SpawnError(FlowteeError):
    """The pseudo-terminal or the child process could not be created."""


class RemoteDispatchError(FlowteeError):
    """A tmux control command failed."""


def get_exit_code_for_exception(exc):
    """
    Map an exception to the exit code the process should end with.

    Args:
        exc: The exception that ended a command.

    Returns:
        int: Exit code.
    """
    if isinstance(exc, CommandError):
        return exc.exit_code
    if isinstance(exc, KeyboardInterrupt):
        return INTERRUPTED
    return GENERAL_ERROR

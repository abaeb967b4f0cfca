"""
Common CLI utilities and decorators for consistent command behavior.
"""

import logging
import sys
from functools import wraps

import click

from .config import set_log_level
from .exit_codes import (
    INTERRUPTED, CommandError, get_exit_code_for_exception
)

logger = logging.getLogger(__name__)


def handle_errors(func):
    """
    Decorator that turns errors into a log line and an exit code:
    - CommandError subclasses exit with their own code
    - KeyboardInterrupt exits with INTERRUPTED
    - click exceptions are left to click
    - anything else exits with GENERAL_ERROR
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except click.ClickException:
            raise
        except KeyboardInterrupt:
            logger.error("Interrupted by user")
            sys.exit(INTERRUPTED)
        except CommandError as e:
            logger.error(str(e))
            sys.exit(e.exit_code)
        except Exception as e:
            logger.error(f"Command failed: {e}")
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


def apply_verbosity(verbose, quiet):
    """Map -v/-q flags onto the log level."""
    if verbose:
        set_log_level(logging.DEBUG)
    elif quiet:
        set_log_level(logging.WARNING)


common_options = {
    'workflow': click.option('-w', '--workflow', default=None,
                             help='Workflow name in the config directory'),
    'file': click.option('-f', '--file', 'workflow_file', type=click.Path(),
                         help='Path to a workflow YAML file (overrides -w)'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('workflow', 'file')
        def my_command(workflow, workflow_file):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator

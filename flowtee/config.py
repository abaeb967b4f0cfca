"""
Runtime settings and logging setup for flowtee.

Settings come from environment variables with fixed fallbacks; there is no
config file of its own, only the directory that holds named workflows.
"""
import logging
import os
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

def resolve_log_level(name):
    """Numeric logging level for `name`, or INFO when it names no level."""
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


# stdout carries step output, so diagnostics go to stderr
console = Console(stderr=True)

logging.basicConfig(
    level=resolve_log_level(os.environ.get('FLOWTEE_LOG_LEVEL', 'INFO')),
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)]
)

logger = logging.getLogger("flowtee")

DEFAULT_PROGRAM = "flowtee"
DEFAULT_WORKFLOW = "default"
FALLBACK_TERMINAL_SIZE = (80, 24)


def set_log_level(level):
    """Change the level of the root logger (e.g. from -v/-q flags)."""
    logging.getLogger().setLevel(level)


def get_config_dir():
    """
    Directory holding named workflow files.

    Returns:
        Path: $FLOWTEE_CONFIG_DIR, or ~/.config/flowtee.
    """
    override = os.environ.get('FLOWTEE_CONFIG_DIR')
    if override:
        return Path(override).expanduser()
    return Path.home() / '.config' / 'flowtee'


def get_workflow_path(name):
    """Path of the named workflow inside the config directory."""
    return get_config_dir() / f"{name}.yaml"


def get_program_name():
    """Command used when a step is re-invoked inside a tmux session."""
    return os.environ.get('FLOWTEE_PROGRAM', DEFAULT_PROGRAM)


def get_default_workflow():
    return os.environ.get('FLOWTEE_WORKFLOW', DEFAULT_WORKFLOW)


def probe_terminal_size():
    """
    Size of the terminal flowtee is attached to.

    Returns:
        tuple: (columns, rows), or None when stdout is not a terminal.
    """
    try:
        size = os.get_terminal_size(sys.__stdout__.fileno())
    except (AttributeError, OSError, ValueError):
        return None
    if size.columns <= 0 or size.lines <= 0:
        return None
    return size.columns, size.lines

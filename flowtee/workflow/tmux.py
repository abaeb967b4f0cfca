"""
Remote dispatch: hand a step over to a running tmux window.
"""

import logging
import os
import shlex
import subprocess
from typing import List, Optional

from ..exit_codes import RemoteDispatchError
from .models import TmuxTarget

logger = logging.getLogger(__name__)


def tmux(args: List[str]) -> subprocess.CompletedProcess:
    """Run a tmux command in the current directory without capturing output.

    Raises:
        RemoteDispatchError: If the tmux binary cannot be executed.
    """
    try:
        return subprocess.run(
            ["tmux", *args],
            cwd=os.getcwd(),
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            check=False,
        )
    except OSError as e:
        raise RemoteDispatchError(f"Failed to run tmux: {e}") from e


def send_keys(target: str, *keys: str):
    """Send keys to a tmux pane.

    Raises:
        RemoteDispatchError: If tmux rejects the command.
    """
    result = tmux(["send-keys", "-t", target, *keys])
    if result.returncode != 0:
        stderr = (result.stderr or b"").decode('utf-8', errors='replace').strip()
        raise RemoteDispatchError(
            f"tmux send-keys to '{target}' failed with exit code {result.returncode}"
            + (f": {stderr}" if stderr else "")
        )


def cancel_copy_mode(target: str):
    """Leave copy/scroll mode if the pane is in it."""
    result = tmux(["send-keys", "-t", target, "-X", "cancel"])
    if result.returncode != 0:
        # tmux refuses -X when the pane is not in a mode
        logger.debug(f"No mode to cancel on {target}")


def careful_run_command(target: str, command: str, fish_vi_mode: bool = False):
    """Type `command` into a tmux pane and press Enter.

    Fire-and-forget: the command's own outcome is not observed.
    """
    cancel_copy_mode(target)
    if fish_vi_mode:
        send_keys(target, "Escape")
        send_keys(target, "i")
    send_keys(target, "-l", command)
    send_keys(target, "Enter")


def reinvocation_command(program: str, step_name: str,
                         workflow: Optional[str] = None,
                         workflow_file: Optional[str] = None) -> str:
    """Command line that runs a single step locally.

    Example:
        >>> reinvocation_command("flowtee", "build", workflow="docx")
        'flowtee step -l -w docx -s build'
    """
    parts = [program, "step", "-l"]
    if workflow_file:
        parts += ["-f", workflow_file]
    else:
        parts += ["-w", workflow]
    parts += ["-s", step_name]
    return ' '.join(shlex.quote(part) for part in parts)


def dispatch_step(tmux_target: TmuxTarget, command: str):
    """Forward a step's re-invocation to its tmux window."""
    logger.info(f"Dispatching to tmux {tmux_target.target}: {command}")
    careful_run_command(tmux_target.target, command, tmux_target.fish_vi_mode)

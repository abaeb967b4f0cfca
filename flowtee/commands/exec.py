"""
Handles the 'exec' command: run a single command on a pseudo-terminal.
"""

import logging
import os
import sys

import click

from ..ansi import strip_ansi
from ..cli_utils import handle_errors
from ..config import probe_terminal_size
from ..exit_codes import GENERAL_ERROR, SUCCESS
from ..render import StepOutput
from ..workflow.pty_session import PtySession
from ..workflow.registry import ProcessGroupRegistry
from ..workflow.scanner import search_window

logger = logging.getLogger(__name__)


def run_and_search(command, args, terms, size=None):
    """
    Run a command on a PTY, echo its output and look for search terms.

    Terms are matched the way step scans are: against the trailing window
    of the ANSI-stripped output after each chunk.

    Returns:
        tuple: (exit status, list of terms that were seen)
    """
    found = []
    buffer = bytearray()
    registry = ProcessGroupRegistry()

    with StepOutput(os.path.basename(command)) as output:
        with PtySession.spawn(command, args, size=size, registry=registry) as session:
            for chunk in session.read_chunks():
                output.write(chunk)
                buffer.extend(strip_ansi(chunk))
                for term in terms:
                    if term not in found and search_window(buffer, term):
                        found.append(term)
            returncode = session.wait()

    return returncode, found


@click.command(name='exec', context_settings={'ignore_unknown_options': True})
@click.option('-s', '--search', 'terms', multiple=True,
              help='Look for this text in the output (ANSI codes are ignored)')
@click.argument('command')
@click.argument('args', nargs=-1, type=click.UNPROCESSED)
@handle_errors
def exec_handler(terms, command, args):
    """Execute a command and capture its output.

    \b
    Useful for checking how scan patterns will behave before putting them
    in a workflow.

    Examples:

    \b
        flowtee exec -s ready -- ./server --port 8080
        flowtee exec -s PASS -s FAIL -- make test
    """
    returncode, found = run_and_search(command, list(args), terms, size=probe_terminal_size())

    for term in terms:
        if term in found:
            logger.info(f"Found '{term}'")
        else:
            logger.warning(f"Not found: '{term}'")

    sys.exit(SUCCESS if returncode == 0 else GENERAL_ERROR)

"""
Run a command attached to a pseudo-terminal and stream its output.
"""

import fcntl
import logging
import os
import struct
import subprocess
import termios
from typing import Dict, Iterator, Optional, Sequence, Tuple

from ..config import FALLBACK_TERMINAL_SIZE
from ..exit_codes import SpawnError

logger = logging.getLogger(__name__)

READ_SIZE = 1024


def set_window_size(fd: int, columns: int, rows: int):
    """Set the window size of the terminal behind `fd`."""
    fcntl.ioctl(fd, termios.TIOCSWINSZ, struct.pack('HHHH', rows, columns, 0, 0))


def acquire_controlling_terminal():
    """Make stdin the controlling terminal of the calling session leader.

    Runs in the child between fork and exec, after `setsid`.
    """
    fcntl.ioctl(0, termios.TIOCSCTTY, 0)


class PtySession:
    """A child process whose stdin/stdout/stderr are one pseudo-terminal.

    The child leads its own session with the terminal as its controlling
    tty, so its pid is also its process group id and /dev/tty works.
    Use `spawn` to create one.
    """

    def __init__(self, process: subprocess.Popen, master_fd: int):
        self.process = process
        self.master_fd = master_fd

    @property
    def pid(self) -> int:
        return self.process.pid

    @classmethod
    def spawn(cls,
              command: str,
              args: Sequence[str] = (),
              cwd: Optional[str] = None,
              env: Optional[Dict[str, str]] = None,
              size: Optional[Tuple[int, int]] = None,
              registry=None) -> 'PtySession':
        """Start `command` on a new pseudo-terminal.

        Args:
            command: Program to execute.
            args: Its arguments.
            cwd: Working directory (defaults to the current one).
            env: Variables added on top of the current environment.
            size: (columns, rows); falls back to 80x24.
            registry: ProcessGroupRegistry the child's group is added to
                before any output is read.

        Raises:
            SpawnError: If the terminal or the process cannot be created.
        """
        columns, rows = size or FALLBACK_TERMINAL_SIZE

        try:
            master_fd, slave_fd = os.openpty()
        except OSError as e:
            raise SpawnError(f"Failed to open PTY: {e}") from e

        child_env = dict(os.environ)
        if env:
            child_env.update(env)

        try:
            set_window_size(slave_fd, columns, rows)
            process = subprocess.Popen(
                [command, *args],
                stdin=slave_fd,
                stdout=slave_fd,
                stderr=slave_fd,
                cwd=cwd or os.getcwd(),
                env=child_env,
                start_new_session=True,
                preexec_fn=acquire_controlling_terminal,
                close_fds=True,
            )
        except (OSError, subprocess.SubprocessError) as e:
            os.close(master_fd)
            raise SpawnError(f"Failed to spawn command: {e}") from e
        finally:
            # EOF arrives only once every slave descriptor is closed
            os.close(slave_fd)

        if registry is not None:
            registry.register(process.pid)

        logger.debug(f"Spawned pid {process.pid} ({columns}x{rows}): {command} {' '.join(args)}")
        return cls(process, master_fd)

    def read_chunks(self, size: int = READ_SIZE) -> Iterator[bytes]:
        """Yield output as it arrives until the terminal closes.

        A read error ends the stream as if it were end-of-file.
        """
        while True:
            try:
                data = os.read(self.master_fd, size)
            except InterruptedError:
                continue
            except OSError as e:
                # Linux reports EIO once every slave descriptor is closed
                logger.debug(f"PTY read for pid {self.pid} ended: {e}")
                break
            if not data:
                break
            yield data

    def wait(self) -> int:
        """Block until the child exits and return its exit status."""
        return self.process.wait()

    def close(self):
        if self.master_fd is not None:
            os.close(self.master_fd)
            self.master_fd = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

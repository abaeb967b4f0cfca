"""
Process-group registry and global terminate.
"""

import logging
import os
import signal
import threading
from typing import Callable, List

logger = logging.getLogger(__name__)


class ProcessGroupRegistry:
    """Append-only list of process groups spawned during this run.

    Entries are never removed, even after the group has exited.
    """

    def __init__(self, exit_func: Callable[[int], None] = os._exit):
        self._lock = threading.Lock()
        self._pgids: List[int] = []
        self._exit = exit_func

    def register(self, pgid: int):
        with self._lock:
            self._pgids.append(pgid)
        logger.debug(f"Registered process group {pgid}")

    def snapshot(self) -> List[int]:
        with self._lock:
            return list(self._pgids)

    def signal_all(self, sig=signal.SIGTERM) -> int:
        """Send `sig` to every registered group.

        Returns:
            Number of groups the signal was delivered to.
        """
        delivered = 0
        for pgid in self.snapshot():
            try:
                os.killpg(pgid, sig)
                delivered += 1
            except ProcessLookupError:
                logger.debug(f"Process group {pgid} already gone")
            except PermissionError as e:
                logger.warning(f"Cannot signal process group {pgid}: {e}")
        return delivered

    def terminate_all(self, exit_code: int):
        """SIGTERM every registered group, then end the process.

        Does not wait for the signaled groups to exit.
        """
        delivered = self.signal_all(signal.SIGTERM)
        logger.info(f"Terminating: signaled {delivered} process group(s), exit code {exit_code}")
        self._exit(exit_code)

    def exit(self, exit_code: int):
        """End the process without signaling anything."""
        self._exit(exit_code)

    def __len__(self):
        with self._lock:
            return len(self._pgids)

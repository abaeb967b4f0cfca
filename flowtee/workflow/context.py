"""
Shared state of one flowtee invocation.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from ..config import get_program_name, probe_terminal_size
from .models import Workflow
from .registry import ProcessGroupRegistry

logger = logging.getLogger(__name__)


@dataclass
class StepTask:
    """Handle for a follow-on step running on its own thread."""
    step_name: str
    thread: Optional[threading.Thread] = None
    error: Optional[BaseException] = None

    @property
    def running(self) -> bool:
        return self.thread is not None and self.thread.is_alive()

    def join(self, timeout: Optional[float] = None):
        if self.thread is not None:
            self.thread.join(timeout)


@dataclass
class RunContext:
    """Everything the step engine shares across steps of one run.

    The workflow is read-only once loaded. The registry and the task list
    are shared by every thread of the run.
    """
    workflow: Workflow
    workflow_name: Optional[str] = None
    workflow_file: Optional[str] = None
    program: str = field(default_factory=get_program_name)
    registry: ProcessGroupRegistry = field(default_factory=ProcessGroupRegistry)
    terminal_size: Callable[[], Optional[Tuple[int, int]]] = probe_terminal_size
    cancelled: threading.Event = field(default_factory=threading.Event)
    tasks: List[StepTask] = field(default_factory=list)
    _tasks_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def track(self, task: StepTask):
        with self._tasks_lock:
            self.tasks.append(task)

    def pending_tasks(self) -> List[StepTask]:
        with self._tasks_lock:
            return [task for task in self.tasks if task.running]

    def wait_for_tasks(self):
        """Join follow-on tasks until none is left running.

        Tasks may launch further tasks while being waited on.
        """
        while True:
            pending = self.pending_tasks()
            if not pending:
                return
            for task in pending:
                task.join()

    def terminate(self, exit_code: int):
        """Cancel the run, signal every process group and exit."""
        self.cancelled.set()
        self.registry.terminate_all(exit_code)

    def abort(self, exit_code: int):
        """Exit immediately without signaling any process group."""
        self.cancelled.set()
        self.registry.exit(exit_code)

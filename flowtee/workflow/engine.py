"""
Core step execution engine.

A step either runs locally on a pseudo-terminal or is handed to a tmux
window. While a local step runs, its output is scanned; the first scan
impulse may launch a follow-on step on its own thread. When the process
exits, the exit impulse picks the next step of the current chain.
"""

import logging
import threading
from collections import deque
from typing import Callable, Optional

from ..exit_codes import GENERAL_ERROR, SpawnError, StepNotFoundError
from ..render import StepOutput
from .context import RunContext, StepTask
from .links import resolve_link
from .models import Impulse, Step
from .pty_session import PtySession
from .scanner import OutputScanner
from .tmux import dispatch_step, reinvocation_command

logger = logging.getLogger(__name__)

SHELL = "/bin/sh"


class WorkflowEngine:
    """Run workflow steps and follow their links.

    Args:
        context: Shared state of the run.
        spawn: Factory with the signature of `PtySession.spawn`.
        dispatch: Callable(tmux_target, command) used for remote steps.
    """

    def __init__(self,
                 context: RunContext,
                 spawn: Callable[..., PtySession] = PtySession.spawn,
                 dispatch: Callable = dispatch_step):
        self.context = context
        self._spawn = spawn
        self._dispatch = dispatch

    def execute(self, step_name: str, local_only: bool = False):
        """Run a step and then the chain its exit links lead to.

        Blocks until the chain ends. Steps launched by scan impulses keep
        running on their own threads (see `RunContext.wait_for_tasks`).

        Raises:
            StepNotFoundError: If any step of the chain does not exist.
            RemoteDispatchError: If handing a step to tmux fails.
        """
        queue = deque([(step_name, local_only)])
        while queue:
            if self.context.cancelled.is_set():
                logger.debug(f"Run cancelled, not starting step '{queue[0][0]}'")
                return
            name, local = queue.popleft()
            next_step = self.run_step(name, local)
            if next_step is not None:
                queue.append((next_step, False))

    def run_step(self, name: str, local_only: bool = False) -> Optional[str]:
        """Run one step.

        Returns:
            Name of the step its exit link leads to, or None.
        """
        step = self.context.workflow.find_step(name)
        if step is None:
            raise StepNotFoundError(name)

        if step.tmux is not None and not local_only:
            self.dispatch_remote(step)
            return None

        impulse = self.run_local(step)
        return self.follow_exit(step, impulse)

    def dispatch_remote(self, step: Step):
        command = reinvocation_command(
            self.context.program,
            step.name,
            workflow=self.context.workflow_name,
            workflow_file=self.context.workflow_file,
        )
        self._dispatch(step.tmux, command)

    def run_local(self, step: Step) -> Impulse:
        """Run a step's command on a PTY and stream its output.

        Returns:
            EXIT_OK or EXIT_ERR.
        """
        logger.info(f"Running step '{step.name}': {step.command}")
        scanner = OutputScanner(step.scan_ok, step.scan_err)

        with StepOutput(step.name, step.output_file) as output:
            try:
                session = self._spawn(
                    SHELL,
                    ["-c", step.command],
                    cwd=step.pwd,
                    env=step.env,
                    size=self.context.terminal_size(),
                    registry=self.context.registry,
                )
            except SpawnError as e:
                logger.error(str(e))
                self.context.abort(GENERAL_ERROR)
                raise

            with session:
                for chunk in session.read_chunks():
                    output.write(chunk)
                    impulse = scanner.feed(chunk)
                    if impulse is not None:
                        self.follow_scan(step, impulse)
                returncode = session.wait()

        impulse = Impulse.from_returncode(returncode)
        logger.debug(f"Step '{step.name}' exited with {returncode}")
        return impulse

    def follow_scan(self, step: Step, impulse: Impulse) -> Optional[StepTask]:
        """Act on a scan impulse without blocking the running step."""
        logger.debug(f"Step '{step.name}' recorded {impulse.value}")
        target = resolve_link(step, impulse)
        if target is None:
            return None
        if target.is_end:
            self.terminate(step, impulse)
            return None
        return self.launch(target.step)

    def follow_exit(self, step: Step, impulse: Impulse) -> Optional[str]:
        """Act on an exit impulse; returns the next step of the chain."""
        target = resolve_link(step, impulse)
        if target is None:
            return None
        if target.is_end:
            self.terminate(step, impulse)
            return None
        logger.debug(f"Step '{step.name}' {impulse.value} -> '{target.step}'")
        return target.step

    def launch(self, step_name: str) -> Optional[StepTask]:
        """Start `step_name` on a new thread and return its handle.

        Errors in the launched chain are logged and kept on the handle.
        """
        if self.context.cancelled.is_set():
            return None

        task = StepTask(step_name)

        def run():
            try:
                self.execute(step_name)
            except Exception as e:
                task.error = e
                logger.error(f"Error running step {step_name}: {e}")

        task.thread = threading.Thread(target=run, name=f"flowtee-{step_name}", daemon=True)
        logger.info(f"Launching step '{step_name}'")
        task.thread.start()
        self.context.track(task)
        return task

    def terminate(self, step: Step, impulse: Impulse):
        logger.info(f"Step '{step.name}' {impulse.value} ends the workflow")
        self.context.terminate(impulse.exit_code)

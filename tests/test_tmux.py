"""Tests for remote dispatch through tmux."""

import subprocess
from unittest.mock import call, patch

import pytest

from flowtee.exit_codes import RemoteDispatchError
from flowtee.workflow.models import TmuxTarget
from flowtee.workflow.tmux import (
    careful_run_command,
    dispatch_step,
    reinvocation_command,
    send_keys,
    tmux,
)


def completed(returncode=0, stderr=b""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stderr=stderr)


class TestReinvocationCommand:
    """Test the command typed into the remote window."""

    def test_named_workflow(self):
        """Named workflows use -w."""
        assert reinvocation_command("ft", "build", workflow="docx") == "ft step -l -w docx -s build"

    def test_workflow_file(self):
        """Workflows loaded from a file use -f."""
        command = reinvocation_command("flowtee", "build", workflow="docx",
                                       workflow_file="/work/flow.yaml")
        assert command == "flowtee step -l -f /work/flow.yaml -s build"

    def test_arguments_are_quoted(self):
        """Names with spaces survive the shell."""
        command = reinvocation_command("flowtee", "run tests", workflow="my flow")
        assert command == "flowtee step -l -w 'my flow' -s 'run tests'"


class TestSendKeys:
    """Test tmux control commands."""

    @patch('flowtee.workflow.tmux.subprocess.run')
    def test_careful_run_command_sequence(self, mock_run):
        """Cancel copy mode, type the command, press Enter."""
        mock_run.return_value = completed()

        careful_run_command("dev:1", "make test")

        commands = [c.args[0] for c in mock_run.call_args_list]
        assert commands == [
            ["tmux", "send-keys", "-t", "dev:1", "-X", "cancel"],
            ["tmux", "send-keys", "-t", "dev:1", "-l", "make test"],
            ["tmux", "send-keys", "-t", "dev:1", "Enter"],
        ]

    @patch('flowtee.workflow.tmux.subprocess.run')
    def test_fish_vi_mode_enters_insert_mode(self, mock_run):
        """fish vi mode sends Escape and i before the text."""
        mock_run.return_value = completed()

        careful_run_command("dev:1", "make", fish_vi_mode=True)

        keys = [c.args[0][4:] for c in mock_run.call_args_list]
        assert keys == [["-X", "cancel"], ["Escape"], ["i"], ["-l", "make"], ["Enter"]]

    @patch('flowtee.workflow.tmux.subprocess.run')
    def test_cancel_failure_ignored(self, mock_run):
        """A pane not in copy mode is not an error."""
        mock_run.side_effect = [completed(1, b"not in a mode"), completed(), completed()]

        careful_run_command("dev:1", "make")

        assert mock_run.call_count == 3

    @patch('flowtee.workflow.tmux.subprocess.run')
    def test_unknown_target_raises(self, mock_run):
        """A failing send-keys is a RemoteDispatchError."""
        mock_run.return_value = completed(1, b"can't find session: nope")

        with pytest.raises(RemoteDispatchError, match="can't find session"):
            send_keys("nope:1", "Enter")

    @patch('flowtee.workflow.tmux.subprocess.run', side_effect=FileNotFoundError("tmux"))
    def test_missing_tmux_binary(self, mock_run):
        """A missing tmux binary is a RemoteDispatchError."""
        with pytest.raises(RemoteDispatchError):
            tmux(["list-sessions"])

    @patch('flowtee.workflow.tmux.careful_run_command')
    def test_dispatch_step(self, mock_careful):
        """dispatch_step targets session:window."""
        dispatch_step(TmuxTarget("dev", "2", fish_vi_mode=True), "flowtee step -l -w x -s y")

        assert mock_careful.call_args == call("dev:2", "flowtee step -l -w x -s y", True)

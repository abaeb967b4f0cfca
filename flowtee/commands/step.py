"""
Handles the 'step' command: run a workflow step and the chain it starts.
"""

import os

import click

from ..cli_utils import add_common_options, handle_errors
from ..config import get_default_workflow
from ..workflow import RunContext, WorkflowEngine, WorkflowParser


def load_selected_workflow(workflow, workflow_file):
    """
    Load the workflow chosen by the -w/-f options.

    Returns:
        tuple: (Workflow, workflow name, absolute file path or None)
    """
    workflow_name = workflow or get_default_workflow()
    if workflow_file:
        path = os.path.abspath(workflow_file)
        return WorkflowParser.load_workflow(path), workflow_name, path
    return WorkflowParser.load_named_workflow(workflow_name), workflow_name, None


@click.command(name='step')
@click.option('-s', '--step', 'name', required=True, help='Name of the step to execute')
@add_common_options('workflow', 'file')
@click.option('-l', '--local', is_flag=True,
              help='Run the step here even if it targets a tmux window')
@handle_errors
def step_handler(name, workflow, workflow_file, local):
    """Execute a workflow step.

    \b
    The step's links decide what runs next: scan links fire while the
    command is still running, exit links once it has finished.

    Examples:

    \b
        flowtee step -s build                  # ~/.config/flowtee/default.yaml
        flowtee step -w docx -s render         # ~/.config/flowtee/docx.yaml
        flowtee step -f ./flow.yaml -s test    # explicit file
        flowtee step -l -w docx -s render      # skip tmux dispatch
    """
    loaded, workflow_name, path = load_selected_workflow(workflow, workflow_file)

    context = RunContext(workflow=loaded, workflow_name=workflow_name, workflow_file=path)
    engine = WorkflowEngine(context)
    engine.execute(name, local_only=local)
    context.wait_for_tasks()

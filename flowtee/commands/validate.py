"""
Handles the 'validate' command: load a workflow and show its steps.
"""

import sys

import click
from rich.console import Console

from ..cli_utils import add_common_options, handle_errors
from ..exit_codes import GENERAL_ERROR
from ..render import render_workflow_table
from .step import load_selected_workflow

console = Console()


def find_dangling_links(workflow):
    """
    Links that point at steps the workflow does not define.

    Returns:
        list: (step name, link name, target step name) tuples
    """
    names = set(workflow.step_names())
    dangling = []
    for step in workflow.steps:
        for link_name, target in step.links.items():
            if not target.is_end and target.step not in names:
                dangling.append((step.name, link_name, target.step))
    return dangling


@click.command(name='validate')
@add_common_options('workflow', 'file')
@handle_errors
def validate_handler(workflow, workflow_file):
    """Validate a workflow definition.

    Examples:

    \b
        flowtee validate -w docx
        flowtee validate -f ./flow.yaml
    """
    loaded, workflow_name, path = load_selected_workflow(workflow, workflow_file)

    console.print(render_workflow_table(loaded, title=path or workflow_name))

    dangling = find_dangling_links(loaded)
    if dangling:
        for step_name, link_name, target in dangling:
            console.print(f"[red]✗[/red] {step_name}.{link_name} → unknown step '{target}'")
        sys.exit(GENERAL_ERROR)

    console.print(f"[green]✓[/green] Workflow is valid ({len(loaded.steps)} steps)")

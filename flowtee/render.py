"""
Output rendering functions for flowtee.
Handles the live, prefixed step output and the workflow summary table.
"""
import click
from rich.table import Table

from .ansi import strip_ansi


class LinePrefixer:
    """Prefix every line of a chunked text stream.

    Tracks whether the stream is at the start of a line, so a line split
    across two chunks is prefixed once.
    """

    def __init__(self, prefix):
        self.prefix = prefix
        self.at_line_start = True

    def __call__(self, text):
        if not text:
            return text
        lines = text.split('\n')
        last = len(lines) - 1
        out = []
        for i, line in enumerate(lines):
            if i > 0:
                out.append('\n')
            # an empty trailing segment belongs to the next chunk
            if (line or i < last) and (i > 0 or self.at_line_start):
                out.append(self.prefix)
            out.append(line)
        self.at_line_start = text.endswith('\n')
        return ''.join(out)


class StepOutput:
    """
    Sink for a running step's output.

    Echoes decoded, prefixed text to stdout and, if configured, appends the
    ANSI-stripped bytes to a file.

    Args:
        step_name: Used for the "<name>| " line prefix.
        output_file: Optional path, truncated when the sink opens.
    """

    def __init__(self, step_name, output_file=None):
        self.prefixer = LinePrefixer(f"{step_name}| ")
        self.output_file = output_file
        self._file = None

    def open(self):
        if self.output_file:
            self._file = open(self.output_file, 'wb')
        return self

    def write(self, chunk):
        if self._file is not None:
            self._file.write(strip_ansi(chunk))
            self._file.flush()
        click.echo(self.prefixer(chunk.decode('utf-8', errors='replace')), nl=False)

    def close(self):
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


def render_workflow_table(workflow, title=None):
    """
    Build a table of a workflow's steps.

    Args:
        workflow: Parsed Workflow
        title: Optional table title

    Returns:
        rich.table.Table
    """
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Step", style="cyan")
    table.add_column("Command", style="white")
    table.add_column("Scan", style="dim")
    table.add_column("Where")
    table.add_column("Links")

    for step in workflow.steps:
        scans = []
        if step.scan_ok is not None:
            scans.append(f"ok: {step.scan_ok}")
        if step.scan_err is not None:
            scans.append(f"err: {step.scan_err}")
        where = f"tmux {step.tmux.target}" if step.tmux else "local"
        links = ', '.join(f"{name[3:]} → {target}" for name, target in step.links.items())
        if step.final:
            links = "[yellow]final[/yellow]" + (f" ({links})" if links else "")
        table.add_row(step.name, step.command, '\n'.join(scans) or '-', where, links or '-')

    return table

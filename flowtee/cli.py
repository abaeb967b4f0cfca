#!/usr/bin/env python3

import click

from flowtee import __version__
from flowtee.cli_utils import apply_verbosity
from flowtee.commands.exec import exec_handler
from flowtee.commands.step import step_handler
from flowtee.commands.validate import validate_handler


@click.group()
@click.version_option(__version__)
@click.option('-v', '--verbose', is_flag=True, help='Show debug logging')
@click.option('-q', '--quiet', is_flag=True, help='Only log warnings and errors')
def cli(verbose, quiet):
    """A command execution and output capture tool."""
    apply_verbosity(verbose, quiet)


cli.add_command(step_handler)
cli.add_command(exec_handler)
cli.add_command(validate_handler)


def main():
    cli()

if __name__ == "__main__":
    main()

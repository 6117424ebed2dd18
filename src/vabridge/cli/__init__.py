"""
Module that contains the command line app.

Why does this file exist, and why not put this in __main__?

  You might be tempted to import things from __main__ later, but that will cause
  problems: the code will get executed twice:

  - When you run `python -mvabridge` python will execute
    ``__main__.py`` as a script. That means there won't be any
    ``vabridge.__main__`` in ``sys.modules``.
  - When you import __main__ it will get executed again (as a module) because
    there's no ``vabridge.__main__`` in ``sys.modules``.
"""

import logging
from typing import Optional

import typer
from rich import print
from typing_extensions import Annotated

from vabridge.application import Application
from vabridge.exceptions import ConfigurationError, ValidationError
from vabridge.numbering import generate
from vabridge.server.engine import Engine
from vabridge.utils.logging import configure_logging

logger = logging.getLogger(__name__)

# Create the Typer app
#   `no_args_is_help=True` will show the help message when no arguments are passed
app = typer.Typer(no_args_is_help=True)


def version_callback(value: bool):
    if value:
        from vabridge import __version__

        typer.echo(f"vabridge {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool, typer.Option(help="Show version information", callback=version_callback)
    ] = False,
):
    """
    vabridge CLI
    """


@app.command()
def server(
    config: Annotated[
        str, typer.Option(help="Configuration file, or directory to look for one in")
    ] = ".",
    test_mode: Annotated[Optional[bool], typer.Option()] = False,
    debug: Annotated[Optional[bool], typer.Option()] = False,
):
    """Run the VA and notification dispatchers"""
    try:
        application = Application.from_path(config)
    except ConfigurationError as exc:
        msg = f"Error loading configuration: {exc.args[0]}"
        print(msg)  # Required for tests to capture output
        logger.error(msg)

        raise typer.Abort()

    configure_logging("DEBUG" if debug else application.settings.log_level)

    engine = Engine(application, test_mode=test_mode, debug=debug)
    engine.run()

    if engine.exit_code != 0:
        raise typer.Exit(code=engine.exit_code)


@app.command()
def number(
    seed: Annotated[str, typer.Argument(help="Payer number followed by bill type code")],
    length: Annotated[int, typer.Option(help="Digits to generate")],
    prefix: Annotated[str, typer.Option(help="Bank prefix to prepend")] = "",
):
    """Show the VA number generated for a seed"""
    try:
        typer.echo(f"{prefix}{generate(seed, length)}")
    except ValidationError as exc:
        print(f"Invalid input: {exc}")
        raise typer.Exit(code=2)

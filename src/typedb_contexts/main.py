"""Main CLI entry point for typedb-contexts."""

import logging
import sys
from typing import Optional

import structlog
import typer

from . import __version__
from .config import get_settings


def setup_logging(debug: bool = False, json_logs: bool = False) -> None:
    """Configure structured logging (to stderr, keeping stdout for command output)."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if debug else logging.WARNING
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


# Create main app
app = typer.Typer(
    name="typedb-contexts",
    help="Provision and switch TypeDB lesson and demo contexts",
    no_args_is_help=True,
)


# Global state
class GlobalState:
    json_output: bool = False
    verbose: bool = False

state = GlobalState()


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        print(f"typedb-contexts version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    json_output: bool = typer.Option(
        False, "--json", "-j",
        help="Output as JSON instead of tables"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Show debug logs"
    ),
    version: Optional[bool] = typer.Option(
        None, "--version", "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    ),
) -> None:
    """typedb-contexts - materialize schema + seed contexts into TypeDB databases."""
    state.json_output = json_output
    state.verbose = verbose

    settings = get_settings()
    setup_logging(debug=verbose or settings.debug, json_logs=settings.json_logs)


# Import and register command groups
from .commands import config_cmd, contexts, databases

app.add_typer(config_cmd.app, name="config")
app.add_typer(contexts.app, name="contexts")
app.add_typer(databases.app, name="databases")


if __name__ == "__main__":
    app()

"""fxprofile CLI entry point.

Provides commands for offline sweep analysis and for inspecting, translating
and invalidating stored parameter profiles.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from .analyze import analyze_command
from .config import ProfilerConfig, SAMPLE_PLANS, load_config, validate_config, write_config
from .profiles import (
    export_command,
    invalidate_command,
    list_command,
    show_command,
    translate_command,
)

# Create the main app
app = typer.Typer(
    name="fxp",
    help="Plugin parameter profiling: classify sweeps and translate values",
    invoke_without_command=True,
)

# Create subcommands
profiles_app = typer.Typer(help="Inspect and manage stored parameter profiles")

app.add_typer(profiles_app, name="profiles")

app.command("analyze")(analyze_command)

# Register profile commands directly from implementation modules
profiles_app.command("list")(list_command)
profiles_app.command("show")(show_command)
profiles_app.command("translate")(translate_command)
profiles_app.command("invalidate")(invalidate_command)
profiles_app.command("export")(export_command)


@app.command("init")
def init(
    min_confidence: Optional[float] = typer.Option(None, "--min-confidence", help="Confidence threshold for consumers"),
    db_path: Optional[str] = typer.Option(None, "--db", help="SQLite profile database path"),
    sample_plan: Optional[str] = typer.Option(None, "--sample-plan", help=f"One of {', '.join(SAMPLE_PLANS)}"),
    sample_timeout: Optional[float] = typer.Option(None, "--sample-timeout", help="Per-parameter sweep timeout in seconds"),
):
    """Write a [tool.fxprofile] table to pyproject.toml."""
    try:
        current = load_config()
    except ValueError:
        current = ProfilerConfig()

    config = ProfilerConfig(
        min_confidence=min_confidence if min_confidence is not None else current.min_confidence,
        db_path=db_path or current.db_path,
        sample_plan=sample_plan or current.sample_plan,
        sample_timeout=sample_timeout if sample_timeout is not None else current.sample_timeout,
    )

    errors = validate_config(config.to_dict())
    if errors:
        for error in errors:
            typer.echo(f"Error: {error}", err=True)
        raise typer.Exit(1)

    path = write_config(config, Path.cwd())
    typer.echo(f"✓ Wrote [tool.fxprofile] to {path}")


@app.command("version")
def version():
    """Show version information."""
    from .. import __version__
    typer.echo(f"fxprofile CLI version {__version__}")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output")
):
    """Plugin parameter profiling: classify sweeps and translate values."""
    if verbose:
        logging.basicConfig(level=logging.INFO)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        typer.echo("\nError: Missing command.", err=True)
        raise typer.Exit(1)


def cli_main():
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("\nAborted", err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli_main()

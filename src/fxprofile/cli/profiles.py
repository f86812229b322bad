"""Commands over a stored profile database."""

import json
import re
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from typer.models import OptionInfo

from ..cache import ProfileCache, SQLiteProfileStore
from ..describe import describe_owner, describe_profile
from ..errors import ProfileStoreError
from ..mapping import ValueMapper
from ..parameters import OwnerIdentity, ParameterIdentity
from ..wire import profile_to_dict
from .config import load_config


def _normalize_option_value(value):
    """Support calling the Typer command functions directly in tests."""
    return value.default if isinstance(value, OptionInfo) else value


def _export_path(owner: OwnerIdentity) -> Path:
    """Default export file for an owner, e.g. "reacomp-vst3.json"."""
    slug = re.sub(r"[^a-z0-9]+", "-", f"{owner.plugin_name} {owner.plugin_format}".lower()).strip("-")
    return Path(f"{slug or 'profiles'}.json")


@contextmanager
def _open_cache(db: Optional[str]) -> Iterator[ProfileCache]:
    """Open the configured profile database, exiting with an error if unavailable."""
    try:
        db_path = db or load_config().db_path
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if not Path(db_path).exists():
        typer.echo(f"Error: profile database not found: {db_path}", err=True)
        raise typer.Exit(1)

    store = SQLiteProfileStore(db_path)
    try:
        store.initialize()
        yield ProfileCache(store)
    except ProfileStoreError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    finally:
        store.close()


def list_command(
    plugin_name: str = typer.Argument(..., help="Plugin name"),
    plugin_format: str = typer.Argument(..., help="Plugin format (e.g. VST3)"),
    db: Optional[str] = typer.Option(None, "--db", help="Profile database (default from config)"),
    min_confidence: Optional[float] = typer.Option(None, "--min-confidence", help="Only show profiles at or above this confidence"),
    show_all: bool = typer.Option(False, "--all", help="Include low-confidence profiles"),
):
    """List the profiles stored for a plugin."""
    db = _normalize_option_value(db)
    min_confidence = _normalize_option_value(min_confidence)
    show_all = _normalize_option_value(show_all)

    threshold = min_confidence
    if not show_all and threshold is None:
        try:
            threshold = load_config().min_confidence
        except ValueError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)

    owner = OwnerIdentity(plugin_name, plugin_format)
    with _open_cache(db) as cache:
        if show_all:
            profiles = cache.list_profiles(owner)
        else:
            profiles = cache.list_confident_profiles(owner, threshold)
    typer.echo(describe_owner(owner, profiles))


def show_command(
    plugin_name: str = typer.Argument(..., help="Plugin name"),
    plugin_format: str = typer.Argument(..., help="Plugin format"),
    index: int = typer.Argument(..., help="Parameter index"),
    db: Optional[str] = typer.Option(None, "--db", help="Profile database (default from config)"),
):
    """Show one profile with its samples."""
    db = _normalize_option_value(db)

    identity = ParameterIdentity(OwnerIdentity(plugin_name, plugin_format), index)
    with _open_cache(db) as cache:
        profile = cache.get_profile(identity)
    if profile is None:
        typer.echo(f"Error: no profile for {identity}", err=True)
        raise typer.Exit(1)

    typer.echo(describe_profile(profile))
    for sample in profile.samples:
        number = f"{sample.numeric_value:g}" if sample.is_numeric else "-"
        typer.echo(f"  {sample.normalized_value:6.3f}  {sample.formatted_value!r:24}  {number}")


def translate_command(
    plugin_name: str = typer.Argument(..., help="Plugin name"),
    plugin_format: str = typer.Argument(..., help="Plugin format"),
    index: int = typer.Argument(..., help="Parameter index"),
    normalized: Optional[float] = typer.Option(None, "--normalized", "-n", help="Normalized value to display"),
    formatted: Optional[str] = typer.Option(None, "--formatted", "-f", help="Display value to normalize"),
    db: Optional[str] = typer.Option(None, "--db", help="Profile database (default from config)"),
):
    """Translate between normalized and display values using a stored profile."""
    normalized = _normalize_option_value(normalized)
    formatted = _normalize_option_value(formatted)
    db = _normalize_option_value(db)

    if (normalized is None) == (formatted is None):
        typer.echo("Error: pass exactly one of --normalized or --formatted", err=True)
        raise typer.Exit(1)

    identity = ParameterIdentity(OwnerIdentity(plugin_name, plugin_format), index)
    with _open_cache(db) as cache:
        profile = cache.get_profile(identity)
    if profile is None:
        typer.echo(f"Error: no profile for {identity}", err=True)
        raise typer.Exit(1)

    mapper = ValueMapper(profile)
    if normalized is not None:
        try:
            result = mapper.to_formatted(normalized)
        except ValueError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)
    else:
        value = mapper.to_normalized(formatted)
        result = f"{value:.6f}" if value is not None else None

    if result is None:
        typer.echo("Error: no match", err=True)
        raise typer.Exit(1)
    typer.echo(result)


def invalidate_command(
    plugin_name: str = typer.Argument(..., help="Plugin name"),
    plugin_format: str = typer.Argument(..., help="Plugin format"),
    db: Optional[str] = typer.Option(None, "--db", help="Profile database (default from config)"),
):
    """Delete every stored profile of a plugin."""
    db = _normalize_option_value(db)

    owner = OwnerIdentity(plugin_name, plugin_format)
    with _open_cache(db) as cache:
        deleted = cache.invalidate_owner(owner)
    typer.echo(f"✓ Invalidated {deleted} profiles for {owner}")


def export_command(
    plugin_name: str = typer.Argument(..., help="Plugin name"),
    plugin_format: str = typer.Argument(..., help="Plugin format"),
    db: Optional[str] = typer.Option(None, "--db", help="Profile database (default from config)"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output file (defaults to <plugin>-<format>.json)"),
):
    """Export every stored profile of a plugin as JSON."""
    db = _normalize_option_value(db)
    output = _normalize_option_value(output)

    owner = OwnerIdentity(plugin_name, plugin_format)
    with _open_cache(db) as cache:
        profiles = cache.list_profiles(owner)

    output_path = Path(output) if output else _export_path(owner)
    with open(output_path, "w") as f:
        json.dump([profile_to_dict(p) for p in profiles], f, indent=2)
    typer.echo(f"✓ Exported {len(profiles)} profiles to {output_path}")

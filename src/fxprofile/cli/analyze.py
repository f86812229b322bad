"""Analyze command: profile recorded sweeps offline."""

import json
import time
from pathlib import Path
from typing import Dict, List, Optional

import typer
from typer.models import OptionInfo

from ..cache import InMemoryProfileStore, ProfileCache, SQLiteProfileStore
from ..describe import describe_profile
from ..errors import InvalidSamplePointsError, ProfileStoreError, SamplingAborted
from ..parameters import OwnerIdentity, ParameterProfile
from ..profiler import AnalysisReport, ParameterProfiler
from ..sampling import plan_by_name
from ..wire import load_sweeps, profile_to_dict
from .config import load_config


def _normalize_option_value(value):
    """Support calling the Typer command functions directly in tests."""
    return value.default if isinstance(value, OptionInfo) else value


def _print_report(report: AnalysisReport, min_confidence: float) -> None:
    typer.echo(f"\n{report.owner}: {len(report.profiles)} parameters")
    for profile in report.profiles:
        marker = "✓" if profile.confidence >= min_confidence else "?"
        typer.echo(f"  {marker} {describe_profile(profile)}")
    for index, message in sorted(report.failed.items()):
        typer.echo(f"  ✗ Parameter {index}: {message}")
    distribution = ", ".join(f"{label} {count} ({percent:.1f}%)" for label, count, percent in report.type_distribution())
    typer.echo(f"  Distribution: {distribution or '-'}")


def analyze_command(
    sweep_file: str = typer.Argument(..., help="CSV of recorded sweeps (plugin_name, plugin_format, param_index, normalized_value, formatted_value)"),
    db: Optional[str] = typer.Option(None, "--db", help="SQLite profile database to store results in"),
    min_confidence: Optional[float] = typer.Option(None, "--min-confidence", help="Threshold for marking confident profiles"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write profiles as JSON to this file"),
):
    """Classify recorded parameter sweeps and optionally store the profiles.

    Sweeps that contain every point of the configured sample plan are
    replayed at those points, so results match a live analysis; other
    sweeps are replayed at every recorded point.
    """
    sweep_file = _normalize_option_value(sweep_file)
    db = _normalize_option_value(db)
    min_confidence = _normalize_option_value(min_confidence)
    output = _normalize_option_value(output)

    try:
        config = load_config()
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    threshold = min_confidence if min_confidence is not None else config.min_confidence
    plan_points = plan_by_name(config.sample_plan).points()

    try:
        sweeps = load_sweeps(sweep_file)
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    store = SQLiteProfileStore(db) if db else InMemoryProfileStore()
    try:
        if isinstance(store, SQLiteProfileStore):
            store.initialize()
        profiler = ParameterProfiler(ProfileCache(store))

        reports: Dict[OwnerIdentity, AnalysisReport] = {}
        profiles: List[ParameterProfile] = []
        for sweep in sweeps:
            report = reports.setdefault(sweep.identity.owner, AnalysisReport(owner=sweep.identity.owner))
            started = time.monotonic()
            try:
                profile = profiler.analyze_parameter(
                    sweep.identity,
                    sweep.query,
                    points=plan_points if sweep.covers(plan_points) else sweep.points,
                    name=sweep.name,
                    timeout=config.sample_timeout,
                    refresh=True,
                )
            except (InvalidSamplePointsError, SamplingAborted) as e:
                report.failed[sweep.identity.parameter_index] = str(e)
                continue
            finally:
                report.duration += time.monotonic() - started
            report.profiles.append(profile)
            profiles.append(profile)
    except ProfileStoreError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    finally:
        if isinstance(store, SQLiteProfileStore):
            store.close()

    for report in reports.values():
        _print_report(report, threshold)

    confident = sum(1 for p in profiles if p.confidence >= threshold)
    typer.echo(f"\n✓ Analyzed {len(profiles)} parameters ({confident} at confidence ≥ {threshold:.2f})")
    if db:
        typer.echo(f"  Stored in {db}")

    if output:
        output_path = Path(output)
        with open(output_path, "w") as f:
            json.dump([profile_to_dict(p) for p in profiles], f, indent=2)
        typer.echo(f"  Wrote {output_path}")

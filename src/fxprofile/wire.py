"""Serialization of profiles and recorded sweeps.

This module provides:
- profile_to_dict / profile_from_dict for JSON export
- samples_to_frame for tabular inspection with polars
- RecordedSweep / load_sweeps for replaying sweeps captured from a host
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple, Union

import polars as pl

from .parameters import (
    Classification,
    OwnerIdentity,
    ParameterIdentity,
    ParameterProfile,
    ParameterSample,
)

SWEEP_COLUMNS: Tuple[str, ...] = (
    "plugin_name",
    "plugin_format",
    "param_index",
    "normalized_value",
    "formatted_value",
)


def identity_to_dict(identity: ParameterIdentity) -> Dict[str, Any]:
    return {
        "plugin_name": identity.owner.plugin_name,
        "plugin_format": identity.owner.plugin_format,
        "param_index": identity.parameter_index,
    }


def profile_to_dict(profile: ParameterProfile) -> Dict[str, Any]:
    """Convert a profile to a JSON-serializable dict."""
    return {
        **identity_to_dict(profile.identity),
        "name": profile.name,
        "classification": profile.classification.to_dict(),
        "unit": profile.unit,
        "enum_values": list(profile.enum_values) if profile.enum_values is not None else None,
        "min_formatted": profile.min_formatted,
        "max_formatted": profile.max_formatted,
        "samples": [s.to_dict() for s in profile.samples],
    }


def profile_from_dict(data: Dict[str, Any]) -> ParameterProfile:
    """Reconstruct a profile from ``profile_to_dict`` output.

    Raises:
        KeyError: If a required field is missing
        ValueError: If a field fails validation
    """
    owner = OwnerIdentity(data["plugin_name"], data["plugin_format"])
    classification = data["classification"]
    return ParameterProfile(
        identity=ParameterIdentity(owner, int(data["param_index"])),
        classification=Classification(
            classification["type"],
            classification.get("scaling"),
            float(classification["confidence"]),
        ),
        samples=[ParameterSample(**s) for s in data.get("samples", [])],
        enum_values=data.get("enum_values"),
        unit=data.get("unit"),
        min_formatted=data.get("min_formatted", ""),
        max_formatted=data.get("max_formatted", ""),
        name=data.get("name", ""),
    )


def samples_to_frame(samples: List[ParameterSample]) -> pl.DataFrame:
    """Tabular view of samples."""
    return pl.DataFrame(
        [s.to_dict() for s in samples],
        schema={
            "normalized_value": pl.Float64,
            "formatted_value": pl.Utf8,
            "numeric_value": pl.Float64,
            "is_numeric": pl.Boolean,
        },
    )


@dataclass(frozen=True)
class RecordedSweep:
    """Display strings captured from a host for one parameter.

    ``query`` replays the recording so offline analysis goes through the
    same Sampler as live analysis.

    Attributes:
        identity: Parameter the sweep belongs to
        name: Parameter display name
        recorded: Normalized value → display string
    """
    identity: ParameterIdentity
    name: str = ""
    recorded: Dict[float, str] = field(default_factory=dict)

    @property
    def points(self) -> List[float]:
        return sorted(self.recorded)

    def covers(self, points: Sequence[float]) -> bool:
        """Whether every one of ``points`` was recorded."""
        return all(p in self.recorded for p in points)

    def query(self, normalized: float) -> str:
        """Recorded display string at a point.

        Raises:
            KeyError: If the point was not recorded
        """
        return self.recorded[normalized]


def load_sweeps(path: Union[str, Path]) -> List[RecordedSweep]:
    """Load recorded sweeps from a CSV file.

    Required columns: plugin_name, plugin_format, param_index,
    normalized_value, formatted_value. Optional: param_name.
    Missing display strings are read as gaps ("").

    Returns:
        One sweep per (plugin_name, plugin_format, param_index), sorted by identity

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If required columns are missing
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Sweep file not found: {path}")

    # Read everything as text; "5" must stay a display string
    df = pl.read_csv(path, infer_schema=False)
    missing = [c for c in SWEEP_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Sweep file {path} is missing columns: {missing}")
    if "param_name" not in df.columns:
        df = df.with_columns(pl.lit("").alias("param_name"))

    df = df.with_columns(
        pl.col("plugin_format").fill_null(""),
        pl.col("formatted_value").fill_null(""),
        pl.col("param_name").cast(pl.Utf8).fill_null(""),
        pl.col("param_index").cast(pl.Int64),
        pl.col("normalized_value").cast(pl.Float64),
    )

    sweeps: Dict[ParameterIdentity, Tuple[str, Dict[float, str]]] = {}
    for row in df.iter_rows(named=True):
        identity = ParameterIdentity(
            OwnerIdentity(row["plugin_name"], row["plugin_format"]),
            int(row["param_index"]),
        )
        name, recorded = sweeps.setdefault(identity, (row["param_name"], {}))
        recorded[float(row["normalized_value"])] = row["formatted_value"]

    return [
        RecordedSweep(identity=identity, name=name, recorded=recorded)
        for identity, (name, recorded) in sorted(sweeps.items())
    ]

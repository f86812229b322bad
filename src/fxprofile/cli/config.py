"""Configuration handling for the fxprofile CLI.

Reads and writes the [tool.fxprofile] table of pyproject.toml.
"""

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional
import tomllib

import toml

from ..constants import DEFAULT_DB_PATH, DEFAULT_MIN_CONFIDENCE

KNOWN_KEYS = ("min_confidence", "db_path", "sample_plan", "sample_timeout")
SAMPLE_PLANS = ("default", "dense")


@dataclass(frozen=True)
class ProfilerConfig:
    """Settings for profiling runs.

    Attributes:
        min_confidence: Threshold for consumer-facing profile listings
        db_path: SQLite profile database
        sample_plan: Named sample plan used when a parameter has no step metadata
        sample_timeout: Seconds before a single parameter sweep is cancelled
    """
    min_confidence: float = DEFAULT_MIN_CONFIDENCE
    db_path: str = DEFAULT_DB_PATH
    sample_plan: str = "default"
    sample_timeout: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Export as TOML-friendly dict (None values omitted)."""
        return {k: v for k, v in asdict(self).items() if v is not None}


def read_pyproject(root: Optional[Path] = None) -> Dict[str, Any]:
    """Read the [tool.fxprofile] table.

    Args:
        root: Directory containing pyproject.toml (default: cwd)

    Returns:
        The [tool.fxprofile] section, or empty dict if not present

    Raises:
        tomllib.TOMLDecodeError: If TOML is malformed
    """
    pyproject_path = (root or Path.cwd()) / "pyproject.toml"
    if not pyproject_path.exists():
        return {}

    with open(pyproject_path, "rb") as f:
        data = tomllib.load(f)

    return data.get("tool", {}).get("fxprofile", {})


def validate_config(config: Dict[str, Any]) -> List[str]:
    """Validate an fxprofile configuration table.

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    for key in config:
        if key not in KNOWN_KEYS:
            errors.append(f"Unknown setting: {key}")

    min_confidence = config.get("min_confidence", DEFAULT_MIN_CONFIDENCE)
    if isinstance(min_confidence, bool) or not isinstance(min_confidence, (int, float)):
        errors.append(f"min_confidence must be a number, got {min_confidence!r}")
    elif not (0.0 <= min_confidence <= 1.0):
        errors.append(f"min_confidence must be in [0, 1], got {min_confidence}")

    db_path = config.get("db_path", DEFAULT_DB_PATH)
    if not isinstance(db_path, str) or not db_path:
        errors.append("db_path must be a non-empty string")

    sample_plan = config.get("sample_plan", "default")
    if sample_plan not in SAMPLE_PLANS:
        errors.append(f"sample_plan must be one of {list(SAMPLE_PLANS)}, got {sample_plan!r}")

    timeout = config.get("sample_timeout")
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            errors.append(f"sample_timeout must be a positive number, got {timeout!r}")

    return errors


def load_config(root: Optional[Path] = None) -> ProfilerConfig:
    """Load and validate configuration, falling back to defaults.

    Raises:
        ValueError: If the [tool.fxprofile] table is invalid
    """
    raw = read_pyproject(root)
    errors = validate_config(raw)
    if errors:
        raise ValueError("Invalid [tool.fxprofile] configuration: " + "; ".join(errors))

    timeout = raw.get("sample_timeout")
    return ProfilerConfig(
        min_confidence=float(raw.get("min_confidence", DEFAULT_MIN_CONFIDENCE)),
        db_path=str(raw.get("db_path", DEFAULT_DB_PATH)),
        sample_plan=str(raw.get("sample_plan", "default")),
        sample_timeout=float(timeout) if timeout is not None else None,
    )


def write_config(config: ProfilerConfig, root: Optional[Path] = None) -> Path:
    """Add or update the [tool.fxprofile] table in pyproject.toml.

    Other tables in the file are preserved.

    Returns:
        Path of the written pyproject.toml
    """
    pyproject_path = (root or Path.cwd()) / "pyproject.toml"

    if pyproject_path.exists():
        with open(pyproject_path, "r", encoding="utf-8") as f:
            data = toml.load(f)
    else:
        data = {}

    data.setdefault("tool", {})["fxprofile"] = config.to_dict()

    with open(pyproject_path, "w", encoding="utf-8") as f:
        toml.dump(data, f)

    return pyproject_path

"""Public API for fxprofile.

This module provides the complete public API for parameter profiling,
including sampling, classification, value mapping and profile caching.
"""

# Parameter types
from .parameters import (
    ParameterType,
    ScalingType,
    Classification,
    OwnerIdentity,
    ParameterIdentity,
    ParameterSample,
    ParameterProfile,
)

# Sampling
from .sampling import (
    SamplePlan,
    DefaultPlan,
    DensePlan,
    StepPlan,
    TogglePlan,
    Sampler,
    extract_numeric_value,
    plan_for_parameter,
)

# Analysis
from .analysis import (
    TypeClassifier,
    ScalingAnalyzer,
    classify,
    analyze_scaling,
)

# Value mapping
from .mapping import ValueMapper

# Caching
from .cache import (
    ProfileStore,
    InMemoryProfileStore,
    SQLiteProfileStore,
    ProfileCache,
)

# Orchestration
from .profiler import AnalysisReport, ParameterProfiler, build_profile

# Serialization and summaries
from .wire import RecordedSweep, load_sweeps, profile_from_dict, profile_to_dict
from .describe import describe_owner, describe_profile

# Errors
from .errors import (
    FxProfileError,
    InvalidSamplePointsError,
    SamplingAborted,
    ProfileStoreError,
)

# CLI utilities (for programmatic use)
from .cli.config import ProfilerConfig, load_config, read_pyproject, validate_config, write_config

# Version
try:
    from importlib.metadata import version
    __version__ = version("fxprofile")
except Exception:
    __version__ = "0.1.0"

# Public API Export List
__all__ = [
    # Parameter types
    "ParameterType",
    "ScalingType",
    "Classification",
    "OwnerIdentity",
    "ParameterIdentity",
    "ParameterSample",
    "ParameterProfile",

    # Sampling
    "SamplePlan",
    "DefaultPlan",
    "DensePlan",
    "StepPlan",
    "TogglePlan",
    "Sampler",
    "extract_numeric_value",
    "plan_for_parameter",

    # Analysis
    "TypeClassifier",
    "ScalingAnalyzer",
    "classify",
    "analyze_scaling",

    # Value mapping
    "ValueMapper",

    # Caching
    "ProfileStore",
    "InMemoryProfileStore",
    "SQLiteProfileStore",
    "ProfileCache",

    # Orchestration
    "AnalysisReport",
    "ParameterProfiler",
    "build_profile",

    # Serialization and summaries
    "RecordedSweep",
    "load_sweeps",
    "profile_from_dict",
    "profile_to_dict",
    "describe_owner",
    "describe_profile",

    # Errors
    "FxProfileError",
    "InvalidSamplePointsError",
    "SamplingAborted",
    "ProfileStoreError",

    # CLI utilities
    "ProfilerConfig",
    "load_config",
    "read_pyproject",
    "validate_config",
    "write_config",

    # Version
    "__version__",
]

"""Sampling-to-cache pipeline.

ParameterProfiler wires the stages together: Sampler → TypeClassifier →
profile assembly → ProfileCache. Each stage only depends on the ones before
it; the value mapper is built from cached profiles by the caller.
"""

from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple
import logging
import threading
import time

import polars as pl

from .analysis import TypeClassifier, distinct_values, extract_unit
from .cache import ProfileCache
from .errors import ProfileStoreError, SamplingAborted
from .parameters import (
    Classification,
    OwnerIdentity,
    ParameterIdentity,
    ParameterProfile,
    ParameterSample,
    ParameterType,
)
from .sampling import QueryFn, SamplePlan, Sampler

logger = logging.getLogger(__name__)

# (owner, parameter index, normalized value) -> display string
HostQueryFn = Callable[[OwnerIdentity, int, float], str]

LOG_PREFIX = "Parameter Analysis"


def build_profile(
    identity: ParameterIdentity,
    samples: Sequence[ParameterSample],
    classification: Classification,
    name: str = "",
) -> ParameterProfile:
    """Assemble a profile from samples and their classification.

    Enum values are recorded only for enumerated parameters; min/max display
    strings come from the boundary samples.
    """
    samples = tuple(samples)
    enum_values = None
    if classification.type is ParameterType.ENUMERATED:
        enum_values = tuple(distinct_values(samples))

    min_formatted = samples[0].formatted_value if samples and samples[0].normalized_value == 0.0 else ""
    max_formatted = samples[-1].formatted_value if samples and samples[-1].normalized_value == 1.0 else ""

    return ParameterProfile(
        identity=identity,
        classification=classification,
        samples=samples,
        enum_values=enum_values,
        unit=extract_unit(samples),
        min_formatted=min_formatted,
        max_formatted=max_formatted,
        name=name,
    )


def log_profile(profile: ParameterProfile) -> None:
    """Log the per-parameter analysis block."""
    title = profile.name or f"param {profile.identity.parameter_index}"
    logger.info(f"  Parameter #{profile.identity.parameter_index + 1}: {title}")
    logger.info(f"    Detected type: {profile.classification.label} (confidence: {profile.confidence:.2f})")
    logger.info(f"    Min: {profile.min_formatted!r}, Max: {profile.max_formatted!r}")
    logger.info(f"    Sample points: [{', '.join(f'{s.normalized_value:.2f}' for s in profile.samples)}]")
    logger.info(f"    Formatted values: [{', '.join(repr(s.formatted_value) for s in profile.samples)}]")
    if any(s.is_numeric for s in profile.samples):
        numbers = ", ".join(f"{s.numeric_value:.4f}" if s.is_numeric else "null" for s in profile.samples)
        logger.info(f"    Numeric values: [{numbers}]")


@dataclass
class AnalysisReport:
    """Result of analysing every parameter of one owner.

    Attributes:
        owner: Plugin that was analysed
        profiles: Profiles built, in parameter order
        failed: Parameter index → error message for parameters that could not be stored
        duration: Wall-clock seconds spent
    """
    owner: OwnerIdentity
    profiles: List[ParameterProfile] = field(default_factory=list)
    failed: Dict[int, str] = field(default_factory=dict)
    duration: float = 0.0

    def to_frame(self) -> pl.DataFrame:
        """One row per analysed parameter."""
        return pl.DataFrame(
            {
                "param_index": [p.identity.parameter_index for p in self.profiles],
                "name": [p.name for p in self.profiles],
                "label": [p.classification.label for p in self.profiles],
                "confidence": [p.confidence for p in self.profiles],
                "unit": [p.unit for p in self.profiles],
                "min_formatted": [p.min_formatted for p in self.profiles],
                "max_formatted": [p.max_formatted for p in self.profiles],
            },
            schema={
                "param_index": pl.Int64,
                "name": pl.Utf8,
                "label": pl.Utf8,
                "confidence": pl.Float64,
                "unit": pl.Utf8,
                "min_formatted": pl.Utf8,
                "max_formatted": pl.Utf8,
            },
        )

    def type_distribution(self) -> List[Tuple[str, int, float]]:
        """(label, count, percent) sorted by count descending, then label."""
        if not self.profiles:
            return []
        counts = (
            self.to_frame()
            .group_by("label")
            .agg(pl.len().alias("count"))
            .sort(["count", "label"], descending=[True, False])
        )
        total = len(self.profiles)
        return [
            (row["label"], int(row["count"]), row["count"] / total * 100.0)
            for row in counts.iter_rows(named=True)
        ]

    def log_summary(self) -> None:
        """Log the statistics block."""
        logger.info("=====================================================")
        logger.info(f"{LOG_PREFIX} - STATISTICS")
        logger.info("=====================================================")
        logger.info(f"Total parameters analyzed: {len(self.profiles)}")
        logger.info(f"Analysis duration: {self.duration:.3f}s")
        logger.info("Parameter type distribution:")
        for label, count, percent in self.type_distribution():
            logger.info(f"  {label}: {count} ({percent:.1f}%)")
        if self.failed:
            logger.warning(f"Failed parameters: {sorted(self.failed)}")


class ParameterProfiler:
    """Sample, classify and cache parameter profiles.

    Example:
        >>> profiler = ParameterProfiler(ProfileCache(InMemoryProfileStore()))
        >>> profile = profiler.analyze_parameter(identity, query=lambda x: f"{x * 10:.1f}")
        >>> profile.classification.label
        'LINEAR'
    """

    def __init__(
        self,
        cache: ProfileCache,
        sampler: Optional[Sampler] = None,
        classifier: Optional[TypeClassifier] = None,
    ):
        self.cache = cache
        self.sampler = sampler or Sampler()
        self.classifier = classifier or TypeClassifier()

    def analyze_parameter(
        self,
        identity: ParameterIdentity,
        query: QueryFn,
        points: Optional[Sequence[float]] = None,
        name: str = "",
        abort: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
        refresh: bool = False,
    ) -> ParameterProfile:
        """Profile one parameter, reusing the cached profile unless ``refresh`` is set.

        Args:
            identity: Parameter to profile
            query: Host primitive for this parameter (normalized → display string)
            points: Sample points; defaults to the sampler's plan
            name: Parameter display name
            abort: Cancellation event checked between sample points
            timeout: Seconds before sampling is cancelled
            refresh: Re-sample and replace the cached profile

        Returns:
            The cached or newly built profile

        Raises:
            InvalidSamplePointsError: If points are malformed
            SamplingAborted: If sampling was cancelled; nothing is cached
            ProfileStoreError: If the cache store is unavailable
        """
        if not refresh:
            cached = self.cache.get(identity)
            if cached is not None:
                return cached

        samples = self.sampler.sample(query, points=points, abort=abort, timeout=timeout)
        classification = self.classifier.classify(samples)
        profile = build_profile(identity, samples, classification, name=name)
        log_profile(profile)

        self.cache.put(identity, profile)
        return profile

    def refresh(self, identity: ParameterIdentity, query: QueryFn, **kwargs) -> ParameterProfile:
        """Re-analyse a parameter and replace its cached profile."""
        return self.analyze_parameter(identity, query, refresh=True, **kwargs)

    def analyze_owner(
        self,
        owner: OwnerIdentity,
        query: HostQueryFn,
        parameter_count: int,
        names: Optional[Sequence[str]] = None,
        plans: Optional[Mapping[int, SamplePlan]] = None,
        abort: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
        refresh: bool = False,
    ) -> AnalysisReport:
        """Profile every parameter of an owner in index order.

        A parameter whose profile cannot be stored is recorded in the report
        and the run continues. Cancellation stops the whole run.

        Args:
            owner: Plugin to analyse
            query: Host primitive taking (owner, index, normalized value)
            parameter_count: Number of parameters the owner exposes
            names: Optional parameter display names by index
            plans: Optional per-index sample plans (e.g. from step metadata)
            abort: Cancellation event checked between sample points
            timeout: Seconds allowed for sampling each parameter
            refresh: Re-sample parameters that already have cached profiles

        Raises:
            SamplingAborted: If the run was cancelled
        """
        if parameter_count < 0:
            raise ValueError(f"parameter_count must be >= 0, got {parameter_count}")

        started = time.monotonic()
        report = AnalysisReport(owner=owner)

        logger.info("=====================================================")
        logger.info(f"{LOG_PREFIX} - {owner}")
        logger.info("=====================================================")
        logger.info(f"  Parameter count: {parameter_count}")

        for index in range(parameter_count):
            identity = ParameterIdentity(owner, index)
            name = names[index] if names is not None and index < len(names) else ""
            plan = plans.get(index) if plans is not None else None
            try:
                profile = self.analyze_parameter(
                    identity,
                    partial(query, owner, index),
                    points=plan.points() if plan is not None else None,
                    name=name,
                    abort=abort,
                    timeout=timeout,
                    refresh=refresh,
                )
            except SamplingAborted:
                logger.info(f"Analysis of {owner} aborted at parameter {index}")
                raise
            except ProfileStoreError as e:
                logger.error(f"Error processing parameter {index} for {owner}: {e}")
                report.failed[index] = str(e)
                continue
            report.profiles.append(profile)

        report.duration = time.monotonic() - started
        report.log_summary()
        return report

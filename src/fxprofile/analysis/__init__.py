"""Classification and scaling analysis of sampled parameters."""

from .classifier import TypeClassifier, classify, distinct_values, extract_unit
from .scaling import ScalingAnalyzer, ScalingResult, analyze_scaling

__all__ = [
    "TypeClassifier",
    "classify",
    "distinct_values",
    "extract_unit",
    "ScalingAnalyzer",
    "ScalingResult",
    "analyze_scaling",
]

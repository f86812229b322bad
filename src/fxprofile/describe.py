"""Text summaries of profiles for presentation layers (UI, prompt building)."""

from typing import List, Sequence

from .parameters import OwnerIdentity, ParameterProfile, ParameterType


def describe_profile(profile: ParameterProfile) -> str:
    """One-line summary of a profile.

    Example:
        "Threshold (index: 0): CONTINUOUS/LINEAR, confidence 0.98, range -60 dB → 0 dB"
    """
    classification = profile.classification
    kind = classification.type.value
    if classification.type is ParameterType.CONTINUOUS and classification.scaling is not None:
        kind = f"{kind}/{classification.scaling.value}"

    title = profile.name or f"Parameter {profile.identity.parameter_index}"
    line = f"{title} (index: {profile.identity.parameter_index}): {kind}, confidence {classification.confidence:.2f}"

    if profile.enum_values:
        line += f", values: {', '.join(profile.enum_values)}"
    elif profile.min_formatted or profile.max_formatted:
        line += f", range {profile.min_formatted} → {profile.max_formatted}"
    if profile.unit:
        line += f", unit {profile.unit}"
    return line


def describe_owner(owner: OwnerIdentity, profiles: Sequence[ParameterProfile]) -> str:
    """Multi-line block describing the profiles of one owner.

    Callers pass only the profiles they trust (see
    ``ProfileCache.list_confident_profiles``).
    """
    lines: List[str] = [f"{owner}:"]
    if not profiles:
        lines.append("  (no confidently classified parameters)")
    for profile in profiles:
        lines.append(f"  - {describe_profile(profile)}")
    return "\n".join(lines)

"""Normalized ↔ display value mapping."""

from .value_mapper import ValueMapper, format_number

__all__ = [
    "ValueMapper",
    "format_number",
]

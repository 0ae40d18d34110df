"""
Unit conversion between physical dimensions and stitch/row counts.

All physical dimensions are in centimetres unless otherwise noted.
All functions are pure and keep no state.

Integer conversions round half up (``2.5 -> 3``), the convention knitters use
when reading a count off a tape measure; Python's built-in ``round`` rounds
half to even and is never used for stitch or row counts.
"""

from __future__ import annotations

import math

from .types import CM_PER_INCH, Gauge


def inches_to_cm(inches: float) -> float:
    """Convert inches to centimetres."""
    return inches * CM_PER_INCH


def cm_to_inches(cm: float) -> float:
    """Convert centimetres to inches."""
    return cm / CM_PER_INCH


def to_cm(value: float, unit: str) -> float:
    """Convert *value* in ``"cm"`` or ``"inch"`` to centimetres."""
    if unit == "inch":
        return inches_to_cm(value)
    if unit == "cm":
        return value
    raise ValueError(f"unit must be 'cm' or 'inch', got {unit!r}")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward positive infinity."""
    return math.floor(value + 0.5)


def cm_to_stitches(cm: float, stitches_per_cm: float) -> int:
    """Convert a width in cm to a whole stitch count."""
    return round_half_up(cm * stitches_per_cm)


def cm_to_rows(cm: float, rows_per_cm: float) -> int:
    """Convert a length in cm to a whole row count."""
    return round_half_up(cm * rows_per_cm)


def physical_to_stitch_count(dimension_cm: float, gauge: Gauge) -> float:
    """Convert a physical dimension (cm) to a raw (non-integer) stitch count."""
    return dimension_cm * gauge.stitches_per_cm


def physical_to_row_count(dimension_cm: float, gauge: Gauge) -> float:
    """Convert a physical dimension (cm) to a raw (non-integer) row count."""
    return dimension_cm * gauge.rows_per_cm


def stitch_count_to_physical(count: float, gauge: Gauge) -> float:
    """Convert a stitch count to a physical width in cm."""
    return count / gauge.stitches_per_cm


def row_count_to_physical(count: float, gauge: Gauge) -> float:
    """Convert a row count to a physical length in cm."""
    return count / gauge.rows_per_cm

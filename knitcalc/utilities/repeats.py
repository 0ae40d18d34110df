"""
Pattern repeat arithmetic: stitch count validation and selection.

Finds valid stitch counts within a tolerance band that are divisible by a
pattern repeat, then selects the count nearest the gauge target.  Used where
a piece is worked in equal sections (e.g. a hat crown split into six wedges).
"""

from __future__ import annotations

import math

from .conversion import physical_to_stitch_count
from .types import Gauge


def find_valid_counts(
    raw_target: float,
    tolerance_stitches: float,
    stitch_repeat: int,
) -> list[int]:
    """
    Find all positive integer stitch counts within the tolerance band that
    are divisible by stitch_repeat.

    Args:
        raw_target: Non-integer raw stitch count from gauge conversion.
        tolerance_stitches: Half-width of the tolerance band in stitches.
        stitch_repeat: Pattern repeat (count must be divisible by this).

    Returns:
        Sorted list of valid integer stitch counts. Empty if none found.
    """
    if stitch_repeat < 1:
        raise ValueError(f"stitch_repeat must be >= 1, got {stitch_repeat}")
    if tolerance_stitches < 0:
        raise ValueError(f"tolerance_stitches must be >= 0, got {tolerance_stitches}")

    low = raw_target - tolerance_stitches
    high = raw_target + tolerance_stitches

    first = math.ceil(low / stitch_repeat) * stitch_repeat
    if first < 1:
        first = stitch_repeat  # stitch counts must be positive

    return list(range(first, math.floor(high) + 1, stitch_repeat))


def select_stitch_count(
    raw_target: float,
    tolerance_stitches: float,
    stitch_repeat: int,
) -> int | None:
    """
    Select the count closest to raw_target from the valid counts within tolerance.

    On a tie (two counts equidistant from target) the larger count wins,
    favouring slightly more ease over slightly less.

    Returns:
        The selected stitch count, or None if no valid count exists.
    """
    valid = find_valid_counts(raw_target, tolerance_stitches, stitch_repeat)
    if not valid:
        return None
    return min(valid, key=lambda c: (abs(c - raw_target), -c))


def nearest_multiple(dimension_cm: float, gauge: Gauge, stitch_repeat: int) -> int:
    """Return the multiple of *stitch_repeat* nearest the gauge count for *dimension_cm*.

    The tolerance band is one full repeat wide on each side, so a count is
    always found; the result is never smaller than one repeat.
    """
    raw_target = physical_to_stitch_count(dimension_cm, gauge)
    selected = select_stitch_count(raw_target, float(stitch_repeat), stitch_repeat)
    return selected if selected is not None else stitch_repeat

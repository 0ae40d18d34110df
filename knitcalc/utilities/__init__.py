"""
Shared utilities for the knitcalc pattern calculation engine.

Provides the deterministic tools every piece calculator relies on: gauge
types, unit conversion, pattern repeat arithmetic, and shaping distribution.
"""

from .conversion import (
    cm_to_inches,
    cm_to_rows,
    cm_to_stitches,
    inches_to_cm,
    physical_to_row_count,
    physical_to_stitch_count,
    round_half_up,
    row_count_to_physical,
    stitch_count_to_physical,
    to_cm,
)
from .repeats import find_valid_counts, nearest_multiple, select_stitch_count
from .shaping import (
    ShapingAction,
    ShapingEvent,
    ShapingInterval,
    ShapingSchedule,
    ShapingStep,
    distribute,
)
from .types import CM_PER_INCH, Gauge

__all__ = [
    # types
    "CM_PER_INCH",
    "Gauge",
    # conversion
    "inches_to_cm",
    "cm_to_inches",
    "to_cm",
    "round_half_up",
    "cm_to_stitches",
    "cm_to_rows",
    "physical_to_stitch_count",
    "physical_to_row_count",
    "stitch_count_to_physical",
    "row_count_to_physical",
    # repeats
    "find_valid_counts",
    "select_stitch_count",
    "nearest_multiple",
    # shaping
    "ShapingAction",
    "ShapingEvent",
    "ShapingInterval",
    "ShapingSchedule",
    "ShapingStep",
    "distribute",
]

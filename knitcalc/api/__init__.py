"""api: JSON-shaped entry points."""

from knitcalc.api.calculate import (
    calculate_pattern,
    calculate_pattern_async,
    parse_input,
    to_dict,
)

__all__ = ["calculate_pattern", "calculate_pattern_async", "parse_input", "to_dict"]

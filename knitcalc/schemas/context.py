"""
Calculation context: the state threaded through one engine run.

A context is never mutated.  Each pass that changes the coordination flags
produces a new context via :meth:`CalculationContext.with_flags`, so the
engine can compare successive values structurally to decide whether another
pass is needed.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from types import MappingProxyType
from typing import Any

from knitcalc.schemas.pattern_state import CalculationOptions, PatternState
from knitcalc.utilities.types import Gauge


@dataclass(frozen=True)
class InterdependencyFlags:
    """
    Cross-piece coordination targets set by the interdependency resolver.

    Each field belongs to exactly one coordination concern; there is no
    free-form bag.  Equality is structural, which makes the flags value its
    own change token.
    """

    raglan_requires_adjustment: bool = False
    raglan_target_length_cm: float | None = None
    armhole_recalculation_required: bool = False
    armhole_width_adjustment: bool = False
    armhole_target_width_cm: float | None = None

    def merge(self, **changes: Any) -> InterdependencyFlags:
        """Return a copy with *changes* applied.

        Raises:
            KeyError: If a change names a field that does not exist.
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise KeyError(f"Unknown interdependency flag(s): {unknown}")
        return replace(self, **changes)

    def as_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class CalculationContext:
    """
    Immutable per-run state shared by every calculator.

    Attributes:
        session_id: Echoed into the result.
        pattern_state: The pattern definition as entered.
        options: Per-call switches.
        gauge: Gauge normalised to stitches and rows per cm.
        finished_measurements: Measurement name → cm, ease already applied.
        interdependencies: Coordination flags from the resolver.
        calculated_at: ISO-8601 timestamp of the run.
    """

    session_id: str
    pattern_state: PatternState
    options: CalculationOptions
    gauge: Gauge
    finished_measurements: Mapping[str, float]
    interdependencies: InterdependencyFlags = InterdependencyFlags()
    calculated_at: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.finished_measurements, MappingProxyType):
            object.__setattr__(
                self, "finished_measurements", MappingProxyType(dict(self.finished_measurements))
            )

    @property
    def garment_type(self) -> str:
        return self.pattern_state.garment_type or ""

    def measurement(self, name: str, default: float | None = None) -> float | None:
        """Return the finished measurement *name* in cm, or *default* when absent."""
        return self.finished_measurements.get(name, default)

    def has_measurement(self, name: str) -> bool:
        return name in self.finished_measurements

    def with_flags(self, flags: InterdependencyFlags) -> CalculationContext:
        """Return a new context carrying *flags*; self is returned when unchanged."""
        if flags == self.interdependencies:
            return self
        return replace(self, interdependencies=flags)

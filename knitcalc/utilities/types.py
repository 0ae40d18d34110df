"""
Core type definitions for the shared utilities layer.

All types are frozen dataclasses with fail-fast validation in __post_init__.
"""

from __future__ import annotations

from dataclasses import dataclass

CM_PER_INCH: float = 2.54

_SWATCH_UNITS = ("cm", "inch")


@dataclass(frozen=True)
class Gauge:
    """
    Knitting gauge: stitch and row density per centimetre.

    Both values must be strictly positive. Gauges are immutable after
    construction and safe to share across calculators and passes.
    """

    stitches_per_cm: float
    rows_per_cm: float

    def __post_init__(self) -> None:
        if self.stitches_per_cm <= 0:
            raise ValueError(f"stitches_per_cm must be positive, got {self.stitches_per_cm}")
        if self.rows_per_cm <= 0:
            raise ValueError(f"rows_per_cm must be positive, got {self.rows_per_cm}")

    @classmethod
    def from_swatch(
        cls,
        stitch_count: float,
        row_count: float,
        measured_over: float = 1.0,
        unit: str = "cm",
    ) -> Gauge:
        """Build a per-cm gauge from a swatch count.

        Args:
            stitch_count: Stitches counted across the swatch.
            row_count: Rows counted up the swatch.
            measured_over: Swatch size the counts were taken over, in *unit*
                (``10`` for the usual "per 10 cm" swatch, ``4`` for
                "per 4 inches").
            unit: ``"cm"`` or ``"inch"``.

        Raises:
            ValueError: If *unit* is unknown, *measured_over* is not positive,
                or the resulting densities are not positive.
        """
        if unit not in _SWATCH_UNITS:
            raise ValueError(f"unit must be one of {_SWATCH_UNITS}, got {unit!r}")
        if measured_over <= 0:
            raise ValueError(f"measured_over must be positive, got {measured_over}")
        span_cm = measured_over * CM_PER_INCH if unit == "inch" else measured_over
        return cls(stitches_per_cm=stitch_count / span_cm, rows_per_cm=row_count / span_cm)

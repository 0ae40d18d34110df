"""
Neckline calculator: the front neck opening of sweaters and cardigans.

Width and depth are fixed fractions of the neck circumference, keyed by
style.  Round-family necklines (round, crew, scoop) bind off 40% of the
width at the centre and decrease the rest in pairs over the remaining depth.
A V-neck decreases the whole width in pairs from the centre outward, at the
spacing the distributor computes for the depth.

The neckline is a region of the front body rather than a separately cast-on
piece, so its cast-on and final stitch counts are both 0; the checkpoints
record the neckline stitches still to be worked off.
"""

from __future__ import annotations

from knitcalc.calculators.base import (
    CalculatorResult,
    ValidationResult,
    missing_measurements,
    prefixed,
    stitch_counts_at_rows,
    unsupported_garment_error,
)
from knitcalc.schemas.context import CalculationContext
from knitcalc.schemas.pattern_state import NecklineSection
from knitcalc.schemas.pieces import (
    CalculatedPieceDetails,
    FinishedDimensions,
    ShapingInstruction,
    ShapingType,
)
from knitcalc.utilities.conversion import cm_to_rows, cm_to_stitches, round_half_up
from knitcalc.utilities.shaping import distribute

SUPPORTED_GARMENTS = ("sweater", "cardigan")

DEFAULT_NECK_CM = 36.0
CENTER_BIND_OFF = 0.40

NO_NECKLINE_WARNING = "No neckline information specified - using default round neck"

# style → (width, depth) as fractions of the neck circumference
NECKLINE_PROPORTIONS: dict[str, tuple[float, float]] = {
    "round": (0.30, 0.15),
    "v-neck": (0.25, 0.25),
    "crew": (0.28, 0.12),
    "scoop": (0.35, 0.18),
}


def neckline_dimensions(style: str, neck_circumference: float) -> tuple[float, float]:
    """Return ``(width_cm, depth_cm)`` for *style*; unknown styles use round."""
    width, depth = NECKLINE_PROPORTIONS.get(style, NECKLINE_PROPORTIONS["round"])
    return neck_circumference * width, neck_circumference * depth


class NecklineCalculator:
    """Front neckline shaping."""

    calculator_type = "neckline"

    def get_dependencies(self) -> tuple[str, ...]:
        return ("body",)

    def validate_input(self, context: CalculationContext) -> ValidationResult:
        errors: list[str] = []
        warnings: list[str] = []
        if context.garment_type not in SUPPORTED_GARMENTS:
            errors.append(unsupported_garment_error(self.calculator_type, context.garment_type))
        if context.pattern_state.neckline is None:
            warnings.append(NO_NECKLINE_WARNING)
        return ValidationResult(
            errors=tuple(errors),
            warnings=tuple(warnings),
            missing_data=missing_measurements(context, ("neckCircumference",)),
        )

    def calculate(self, context: CalculationContext) -> CalculatorResult:
        if context.garment_type not in SUPPORTED_GARMENTS:
            return CalculatorResult.failed(
                [unsupported_garment_error(self.calculator_type, context.garment_type)]
            )
        neckline = context.pattern_state.neckline or NecklineSection()
        if neckline.style == "none":
            return CalculatorResult.ok([], ["No neckline shaping required"])
        try:
            return _calculate_neckline(context, neckline.style)
        except ValueError as exc:
            return CalculatorResult.failed([f"Neckline calculation failed: {exc}"])


def _calculate_neckline(context: CalculationContext, style: str) -> CalculatorResult:
    gauge = context.gauge
    detailed = context.options.include_detailed_shaping
    neck = context.measurement("neckCircumference", DEFAULT_NECK_CM)
    width_cm, depth_cm = neckline_dimensions(style, neck)
    width = cm_to_stitches(width_cm, gauge.stitches_per_cm)
    depth = cm_to_rows(depth_cm, gauge.rows_per_cm)

    warnings: list[str] = []
    shaping: list[ShapingInstruction] = []

    if style == "v-neck":
        schedule = distribute(width, 0, depth)
        warnings.extend(prefixed("V-neck", schedule.warnings))
        if schedule.has_shaping:
            shaping.append(
                ShapingInstruction.from_schedule(
                    ShapingType.NECKLINE,
                    schedule,
                    0,
                    label="Shape V-neck from the centre",
                    notes="One stitch at each side of the V per shaping row",
                    detailed=detailed,
                )
            )
    else:
        center = min(round_half_up(width * CENTER_BIND_OFF), width)
        if center > 0:
            shaping.append(
                ShapingInstruction.bind_off(
                    ShapingType.NECKLINE,
                    center,
                    0,
                    instruction=f"Bind off the centre {center} stitches.",
                    notes="Centre front neck",
                )
            )
        schedule = distribute(width - center, 0, max(depth - 1, 0))
        warnings.extend(prefixed("Neckline", schedule.warnings))
        if schedule.has_shaping:
            shaping.append(
                ShapingInstruction.from_schedule(
                    ShapingType.NECKLINE,
                    schedule,
                    1,
                    label="Shape neck edges",
                    notes="One stitch at each neck edge per shaping row",
                    detailed=detailed,
                )
            )

    piece = CalculatedPieceDetails(
        piece_key="necklineShaping",
        display_name=f"{style.capitalize()} Neckline",
        cast_on_stitches=0,
        length_in_rows=depth,
        final_stitch_count=0,
        finished_dimensions=FinishedDimensions(width_cm=width_cm, length_cm=depth_cm),
        shaping=tuple(shaping),
        stitch_counts_at_rows=stitch_counts_at_rows(width, shaping),
        construction_notes=(
            "Neckline shaping is worked on the front body from the base of the neck up.",
            "Pick up stitches around the neckline for the neckband.",
        ),
    )
    return CalculatorResult.ok([piece], warnings)

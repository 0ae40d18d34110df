"""
Sleeve calculator: left and right sleeves, worked cuff up.

Sleeve length is a fraction of the arm length keyed by style (short 30%,
three-quarter 75%, long 95%) or an explicit custom length.  The sleeve is
cast on at the wrist and tapered to the upper arm between row 10 (after the
cuff ribbing) and 80% of its length.  The cap occupies the final 15% of rows
and removes 30% of the upper-arm stitches: a sixth of that amount is bound
off at each edge on the first two cap rows, and the remainder is decreased
in pairs.
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
from knitcalc.schemas.pattern_state import SleevesSection
from knitcalc.schemas.pieces import (
    CalculatedPieceDetails,
    FinishedDimensions,
    ShapingInstruction,
    ShapingType,
)
from knitcalc.utilities.conversion import cm_to_rows, cm_to_stitches, round_half_up
from knitcalc.utilities.shaping import distribute

SUPPORTED_GARMENTS = ("sweater", "cardigan")
NO_SLEEVE_STYLES = ("sleeveless", "none")

DEFAULT_ARM_LENGTH_CM = 60.0
DEFAULT_UPPER_ARM_CM = 30.0
DEFAULT_WRIST_CM = 20.0

LENGTH_FRACTIONS = {
    "short": 0.30,
    "three-quarter": 0.75,
    "long": 0.95,
}
CUFF_ROWS = 10
TAPER_END = 0.80
CAP_START = 0.85
CAP_FRACTION = 0.30
CAP_BIND_OFF_ROWS = 2

NO_SLEEVES_WARNING = "No sleeve information specified - using default long set-in sleeves"

_SLEEVES = (("leftSleeve", "Left Sleeve"), ("rightSleeve", "Right Sleeve"))


class SleeveCalculator:
    """Left and right sleeves for set-in construction."""

    calculator_type = "sleeve"

    def get_dependencies(self) -> tuple[str, ...]:
        return ("body",)

    def validate_input(self, context: CalculationContext) -> ValidationResult:
        errors: list[str] = []
        warnings: list[str] = []
        if context.garment_type not in SUPPORTED_GARMENTS:
            errors.append(unsupported_garment_error(self.calculator_type, context.garment_type))
        if context.pattern_state.sleeves is None:
            warnings.append(NO_SLEEVES_WARNING)
        return ValidationResult(
            errors=tuple(errors),
            warnings=tuple(warnings),
            missing_data=missing_measurements(context, ("armLength", "upperArmCircumference")),
        )

    def calculate(self, context: CalculationContext) -> CalculatorResult:
        if context.garment_type not in SUPPORTED_GARMENTS:
            return CalculatorResult.failed(
                [unsupported_garment_error(self.calculator_type, context.garment_type)]
            )
        sleeves = context.pattern_state.sleeves or SleevesSection()
        if sleeves.style in NO_SLEEVE_STYLES:
            return CalculatorResult.ok([], ["No sleeves required for this garment"])
        try:
            return _calculate_sleeves(context, sleeves)
        except ValueError as exc:
            return CalculatorResult.failed([f"Sleeve calculation failed: {exc}"])


def sleeve_length_cm(arm_length: float, sleeves: SleevesSection) -> float:
    """Return the sleeve length for *arm_length* and the chosen style."""
    if sleeves.length == "custom":
        return sleeves.custom_length_cm if sleeves.custom_length_cm else arm_length
    return arm_length * LENGTH_FRACTIONS.get(sleeves.length, LENGTH_FRACTIONS["long"])


def _calculate_sleeves(context: CalculationContext, sleeves: SleevesSection) -> CalculatorResult:
    gauge = context.gauge
    detailed = context.options.include_detailed_shaping
    arm_length = context.measurement("armLength", DEFAULT_ARM_LENGTH_CM)
    upper_arm = context.measurement("upperArmCircumference", DEFAULT_UPPER_ARM_CM)
    wrist = context.measurement("wristCircumference", DEFAULT_WRIST_CM)

    length = sleeve_length_cm(arm_length, sleeves)
    rows = cm_to_rows(length, gauge.rows_per_cm)
    wrist_stitches = cm_to_stitches(wrist, gauge.stitches_per_cm)
    upper_stitches = cm_to_stitches(upper_arm, gauge.stitches_per_cm)
    if rows < 1 or wrist_stitches < 1 or upper_stitches < 1:
        raise ValueError(
            f"sleeve of {length:g} cm with {wrist:g}/{upper_arm:g} cm circumferences "
            "is too small for this gauge"
        )

    warnings: list[str] = []
    shaping: list[ShapingInstruction] = []

    taper_end = round_half_up(rows * TAPER_END)
    taper_start = min(CUFF_ROWS, taper_end)
    taper = distribute(wrist_stitches, upper_stitches, taper_end - taper_start)
    warnings.extend(prefixed("Sleeve taper", taper.warnings))
    if taper.has_shaping:
        shaping.append(
            ShapingInstruction.from_schedule(
                ShapingType.SLEEVE_SHAPING,
                taper,
                taper_start,
                label="Shape sleeve",
                notes="Taper from cuff to upper arm",
                detailed=detailed,
            )
        )

    shaping.extend(_cap_shaping(upper_stitches, rows, detailed, warnings))

    final = wrist_stitches + sum(s.stitch_count_change for s in shaping)
    checkpoints = stitch_counts_at_rows(wrist_stitches, shaping)
    pieces = [
        CalculatedPieceDetails(
            piece_key=key,
            display_name=name,
            cast_on_stitches=wrist_stitches,
            length_in_rows=rows,
            final_stitch_count=final,
            finished_dimensions=FinishedDimensions(
                width_cm=upper_arm, length_cm=length, circumference_cm=upper_arm
            ),
            shaping=tuple(shaping),
            stitch_counts_at_rows=checkpoints,
            construction_notes=(
                f"Cast on {wrist_stitches} stitches at the cuff.",
                f"Work {CUFF_ROWS} rows of cuff before shaping.",
            ),
        )
        for key, name in _SLEEVES
    ]
    return CalculatorResult.ok(pieces, warnings)


def _cap_shaping(
    upper_stitches: int, rows: int, detailed: bool, warnings: list[str]
) -> list[ShapingInstruction]:
    start = round_half_up(rows * CAP_START)
    cap_rows = rows - start
    cap_stitches = round_half_up(upper_stitches * CAP_FRACTION)
    if cap_stitches == 0 or cap_rows == 0:
        return []

    per_side = min(round_half_up(cap_stitches / 6), cap_stitches // 2)
    bind_off_rows = min(CAP_BIND_OFF_ROWS, cap_rows)
    shaping: list[ShapingInstruction] = []
    bound_off = 0
    if per_side > 0:
        bound_off = per_side * bind_off_rows
        shaping.append(
            ShapingInstruction.bind_off(
                ShapingType.SLEEVE_CAP,
                bound_off,
                start,
                rows=bind_off_rows,
                instruction=(
                    f"Bind off {per_side} stitches at the beginning of the next "
                    f"{bind_off_rows} rows."
                ),
                notes="Sleeve cap bind-off",
            )
        )

    schedule = distribute(
        upper_stitches - bound_off, upper_stitches - cap_stitches, cap_rows - bind_off_rows
    )
    warnings.extend(prefixed("Sleeve cap", schedule.warnings))
    if schedule.has_shaping:
        shaping.append(
            ShapingInstruction.from_schedule(
                ShapingType.SLEEVE_CAP,
                schedule,
                start + bind_off_rows,
                label="Shape cap",
                detailed=detailed,
            )
        )
    return shaping

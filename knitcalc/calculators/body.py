"""
Body calculator: front and back body panels for sweaters and cardigans.

Each panel is half the finished bust.  Shaping, in row order:

- Waist (only when bust and waist differ by more than 2 cm): the panel is
  taken to half the waist between 25% and 50% of its length and back to full
  width between 50% and 75%, one stitch at each edge per shaping row.
- Armhole (always): the last 25% of rows remove 10% of the cast-on.  A
  quarter of that amount is bound off at each edge on the first two armhole
  rows; the rest is decreased in pairs over the remaining armhole rows.
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
from knitcalc.schemas.pieces import (
    CalculatedPieceDetails,
    FinishedDimensions,
    ShapingInstruction,
    ShapingType,
)
from knitcalc.utilities.conversion import cm_to_rows, cm_to_stitches, round_half_up
from knitcalc.utilities.shaping import distribute

SUPPORTED_GARMENTS = ("sweater", "cardigan")

DEFAULT_BUST_CM = 90.0
DEFAULT_LENGTH_CM = 60.0

WAIST_SHAPING_THRESHOLD_CM = 2.0
WAIST_BAND = (0.25, 0.50, 0.75)
ARMHOLE_START = 0.75
ARMHOLE_FRACTION = 0.10
ARMHOLE_BIND_OFF_ROWS = 2

NO_BODY_STRUCTURE_WARNING = "No body structure specified - using default construction"

_PANELS = (("frontBody", "Front Body"), ("backBody", "Back Body"))


class BodyCalculator:
    """Front and back body panels."""

    calculator_type = "body"

    def get_dependencies(self) -> tuple[str, ...]:
        return ()

    def validate_input(self, context: CalculationContext) -> ValidationResult:
        errors: list[str] = []
        warnings: list[str] = []
        if context.garment_type not in SUPPORTED_GARMENTS:
            errors.append(unsupported_garment_error(self.calculator_type, context.garment_type))
        if context.pattern_state.body_structure is None:
            warnings.append(NO_BODY_STRUCTURE_WARNING)
        return ValidationResult(
            errors=tuple(errors),
            warnings=tuple(warnings),
            missing_data=missing_measurements(context, ("bust", "length", "waist")),
        )

    def calculate(self, context: CalculationContext) -> CalculatorResult:
        if context.garment_type not in SUPPORTED_GARMENTS:
            return CalculatorResult.failed(
                [unsupported_garment_error(self.calculator_type, context.garment_type)]
            )
        try:
            return _calculate_panels(context)
        except ValueError as exc:
            return CalculatorResult.failed([f"Body calculation failed: {exc}"])


def _calculate_panels(context: CalculationContext) -> CalculatorResult:
    gauge = context.gauge
    detailed = context.options.include_detailed_shaping
    bust = context.measurement("bust", DEFAULT_BUST_CM)
    length = context.measurement("length", DEFAULT_LENGTH_CM)
    waist = context.measurement("waist", bust)

    cast_on = cm_to_stitches(bust / 2, gauge.stitches_per_cm)
    rows = cm_to_rows(length, gauge.rows_per_cm)
    if cast_on < 1 or rows < 1:
        raise ValueError(
            f"bust {bust:g} cm and length {length:g} cm give {cast_on} stitches "
            f"and {rows} rows at this gauge"
        )

    warnings: list[str] = []
    shaping: list[ShapingInstruction] = []

    if abs(bust - waist) > WAIST_SHAPING_THRESHOLD_CM:
        shaping.extend(_waist_shaping(cast_on, rows, waist, context, warnings))
    shaping.extend(_armhole_shaping(cast_on, rows, detailed, warnings))

    body_structure = context.pattern_state.body_structure
    if body_structure is not None and body_structure.parameters.get("armholeRequiresRecalculation"):
        warnings.append("Armhole calculations may need adjustment based on sleeve type")

    final = cast_on + sum(s.stitch_count_change for s in shaping)
    checkpoints = stitch_counts_at_rows(cast_on, shaping)
    pieces = [
        CalculatedPieceDetails(
            piece_key=key,
            display_name=name,
            cast_on_stitches=cast_on,
            length_in_rows=rows,
            final_stitch_count=final,
            finished_dimensions=FinishedDimensions(width_cm=bust / 2, length_cm=length),
            shaping=tuple(shaping),
            stitch_counts_at_rows=checkpoints,
            construction_notes=(
                f"Cast on {cast_on} stitches and work {rows} rows in total.",
                "Work armhole shaping at both edges.",
            ),
        )
        for key, name in _PANELS
    ]
    return CalculatorResult.ok(pieces, warnings)


def _waist_shaping(
    cast_on: int,
    rows: int,
    waist: float,
    context: CalculationContext,
    warnings: list[str],
) -> list[ShapingInstruction]:
    detailed = context.options.include_detailed_shaping
    waist_stitches = cm_to_stitches(waist / 2, context.gauge.stitches_per_cm)
    start, middle, end = (round_half_up(rows * f) for f in WAIST_BAND)

    if waist_stitches < cast_on:
        first_type, second_type = ShapingType.WAIST_DECREASE, ShapingType.WAIST_INCREASE
    else:
        first_type, second_type = ShapingType.WAIST_INCREASE, ShapingType.WAIST_DECREASE

    to_waist = distribute(cast_on, waist_stitches, middle - start)
    from_waist = distribute(waist_stitches, cast_on, end - middle)
    warnings.extend(prefixed("Body waist", to_waist.warnings + from_waist.warnings))

    shaping: list[ShapingInstruction] = []
    if to_waist.has_shaping:
        shaping.append(
            ShapingInstruction.from_schedule(
                first_type, to_waist, start, label="Shape waist", detailed=detailed
            )
        )
    if from_waist.has_shaping:
        shaping.append(
            ShapingInstruction.from_schedule(
                second_type, from_waist, middle, label="Shape bust", detailed=detailed
            )
        )
    return shaping


def _armhole_shaping(
    cast_on: int, rows: int, detailed: bool, warnings: list[str]
) -> list[ShapingInstruction]:
    start = round_half_up(rows * ARMHOLE_START)
    armhole_rows = rows - start
    armhole_stitches = round_half_up(cast_on * ARMHOLE_FRACTION)
    if armhole_stitches == 0 or armhole_rows == 0:
        return []

    per_side = min(round_half_up(armhole_stitches / 4), armhole_stitches // 2)
    bind_off_rows = min(ARMHOLE_BIND_OFF_ROWS, armhole_rows)
    shaping: list[ShapingInstruction] = []
    bound_off = 0
    if per_side > 0:
        bound_off = per_side * bind_off_rows
        shaping.append(
            ShapingInstruction.bind_off(
                ShapingType.ARMHOLE,
                bound_off,
                start,
                rows=bind_off_rows,
                instruction=(
                    f"Bind off {per_side} stitches at the beginning of the next "
                    f"{bind_off_rows} rows."
                ),
                notes="Underarm bind-off",
            )
        )

    after_bind_off = cast_on - bound_off
    schedule = distribute(
        after_bind_off, cast_on - armhole_stitches, armhole_rows - bind_off_rows
    )
    warnings.extend(prefixed("Body armhole", schedule.warnings))
    if schedule.has_shaping:
        shaping.append(
            ShapingInstruction.from_schedule(
                ShapingType.ARMHOLE,
                schedule,
                start + bind_off_rows,
                label="Shape armhole",
                detailed=detailed,
            )
        )
    return shaping

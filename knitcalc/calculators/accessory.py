"""
Accessory calculator: hats and beanies, scarves, triangular shawls.

Hat
    Worked in the round from the brim.  The cast-on is the multiple of 6
    nearest the gauge count so the crown divides into six equal sections.
    Crown shaping starts at 80% of the height and decreases evenly in all six
    sections down to 6 stitches; the last round draws those closed, so a hat
    always finishes on 0 stitches.
Scarf
    A plain rectangle with no shaping.
Shawl
    Triangular, worked from the neck point: cast on 3 stitches and increase
    at both edges to the full width over the length.
"""

from __future__ import annotations

import math
from collections.abc import Collection

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
from knitcalc.utilities.repeats import nearest_multiple
from knitcalc.utilities.shaping import distribute

HAT_TYPES = ("hat", "beanie")
SUPPORTED_GARMENTS = HAT_TYPES + ("scarf", "shawl")

CROWN_SECTIONS = 6
CROWN_START = 0.80
SHAWL_START_STITCHES = 3

DEFAULTS_CM = {
    "headCircumference": 56.0,
    "hatHeight": 20.0,
    "scarfWidth": 20.0,
    "scarfLength": 150.0,
    "shawlWidth": 120.0,
    "shawlLength": 60.0,
}


class AccessoryCalculator:
    """Single-piece accessories."""

    calculator_type = "accessory"

    def get_dependencies(self) -> tuple[str, ...]:
        return ()

    def validate_input(self, context: CalculationContext) -> ValidationResult:
        garment = context.garment_type
        errors: list[str] = []
        warnings: list[str] = []
        missing: tuple[str, ...] = ()
        match garment:
            case "hat" | "beanie":
                missing = missing_measurements(context, ("headCircumference",))
            case "scarf" | "shawl":
                warnings.extend(size_warnings(garment, context.finished_measurements))
            case _:
                errors.append(unsupported_garment_error(self.calculator_type, garment))
        return ValidationResult(
            errors=tuple(errors), warnings=tuple(warnings), missing_data=missing
        )

    def calculate(self, context: CalculationContext) -> CalculatorResult:
        garment = context.garment_type
        try:
            match garment:
                case "hat" | "beanie":
                    piece, warnings = _hat(context)
                case "scarf":
                    piece, warnings = _scarf(context)
                case "shawl":
                    piece, warnings = _shawl(context)
                case _:
                    return CalculatorResult.failed(
                        [unsupported_garment_error(self.calculator_type, garment)]
                    )
        except ValueError as exc:
            return CalculatorResult.failed([f"Accessory calculation failed: {exc}"])
        return CalculatorResult.ok([piece], warnings)


def size_warnings(garment: str, measured: Collection[str]) -> list[str]:
    """Warnings for scarf or shawl sizes missing from *measured* that fall back to defaults."""
    return [
        f"No {garment} {dimension} specified - using default {dimension}"
        for dimension in ("length", "width")
        if f"{garment}{dimension.capitalize()}" not in measured
    ]


def _size(context: CalculationContext, name: str) -> float:
    return context.measurement(name, DEFAULTS_CM[name])


def _rows(length_cm: float, context: CalculationContext) -> int:
    rows = cm_to_rows(length_cm, context.gauge.rows_per_cm)
    if rows < 1:
        raise ValueError(f"a length of {length_cm:g} cm is less than one row at this gauge")
    return rows


def _hat(context: CalculationContext) -> tuple[CalculatedPieceDetails, list[str]]:
    head = _size(context, "headCircumference")
    height = _size(context, "hatHeight")
    detailed = context.options.include_detailed_shaping

    cast_on = nearest_multiple(head, context.gauge, CROWN_SECTIONS)
    rows = _rows(height, context)
    crown_start = round_half_up(rows * CROWN_START)
    crown_rows = rows - crown_start
    # The final crown round is reserved for drawing the last stitches closed.
    decrease_rows = crown_rows - 1 if crown_rows >= 2 else crown_rows

    # Keep every decrease round a multiple of the section count.
    section_decreases = (cast_on - CROWN_SECTIONS) // CROWN_SECTIONS
    per_section = max(1, math.ceil(section_decreases / decrease_rows)) if decrease_rows else 1
    schedule = distribute(
        cast_on, CROWN_SECTIONS, decrease_rows, stitches_per_event=CROWN_SECTIONS * per_section
    )
    warnings = prefixed("Hat crown", schedule.warnings)

    shaping: list[ShapingInstruction] = []
    if schedule.has_shaping:
        shaping.append(
            ShapingInstruction.from_schedule(
                ShapingType.CROWN,
                schedule,
                crown_start,
                label=f"Shape crown in {CROWN_SECTIONS} sections",
                notes="Decrease evenly in every section",
                detailed=detailed,
            )
        )
    shaping.append(
        ShapingInstruction.bind_off(
            ShapingType.CROWN,
            CROWN_SECTIONS,
            crown_start + decrease_rows,
            rows=crown_rows - decrease_rows,
            instruction=(
                f"Break yarn and draw it through the remaining {CROWN_SECTIONS} stitches."
            ),
            notes="Close the crown",
        )
    )

    piece = CalculatedPieceDetails(
        piece_key="hat",
        display_name="Hat",
        cast_on_stitches=cast_on,
        length_in_rows=rows,
        final_stitch_count=0,
        finished_dimensions=FinishedDimensions(
            width_cm=head, length_cm=height, circumference_cm=head
        ),
        shaping=tuple(shaping),
        stitch_counts_at_rows=stitch_counts_at_rows(cast_on, shaping),
        construction_notes=(
            f"Cast on {cast_on} stitches and join to work in the round.",
            f"Place a marker every {cast_on // CROWN_SECTIONS} stitches for the crown sections.",
        ),
    )
    return piece, warnings


def _scarf(context: CalculationContext) -> tuple[CalculatedPieceDetails, list[str]]:
    width = _size(context, "scarfWidth")
    length = _size(context, "scarfLength")
    cast_on = cm_to_stitches(width, context.gauge.stitches_per_cm)
    if cast_on < 1:
        raise ValueError(f"a width of {width:g} cm is less than one stitch at this gauge")
    rows = _rows(length, context)
    piece = CalculatedPieceDetails(
        piece_key="scarf",
        display_name="Scarf",
        cast_on_stitches=cast_on,
        length_in_rows=rows,
        final_stitch_count=cast_on,
        finished_dimensions=FinishedDimensions(width_cm=width, length_cm=length),
        stitch_counts_at_rows={0: cast_on},
        construction_notes=(
            f"Cast on {cast_on} stitches.",
            f"Work {rows} rows and bind off.",
        ),
    )
    return piece, []


def _shawl(context: CalculationContext) -> tuple[CalculatedPieceDetails, list[str]]:
    width = _size(context, "shawlWidth")
    length = _size(context, "shawlLength")
    detailed = context.options.include_detailed_shaping
    final = cm_to_stitches(width, context.gauge.stitches_per_cm)
    rows = _rows(length, context)

    schedule = distribute(SHAWL_START_STITCHES, final, rows - 1)
    warnings = prefixed("Shawl", schedule.warnings)
    shaping: list[ShapingInstruction] = []
    if schedule.has_shaping:
        shaping.append(
            ShapingInstruction.from_schedule(
                ShapingType.CUSTOM,
                schedule,
                1,
                label="Shape triangle",
                notes="One stitch at each edge per shaping row",
                detailed=detailed,
            )
        )

    piece = CalculatedPieceDetails(
        piece_key="shawl",
        display_name="Triangular Shawl",
        cast_on_stitches=SHAWL_START_STITCHES,
        length_in_rows=rows,
        final_stitch_count=final,
        finished_dimensions=FinishedDimensions(width_cm=width, length_cm=length),
        shaping=tuple(shaping),
        stitch_counts_at_rows=stitch_counts_at_rows(SHAWL_START_STITCHES, shaping),
        construction_notes=(
            f"Cast on {SHAWL_START_STITCHES} stitches at the neck point.",
            "Increase at both edges as indicated to form the triangle.",
        ),
    )
    return piece, warnings

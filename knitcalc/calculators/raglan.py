"""
Raglan yoke calculator: the top-down yoke of a raglan sweater or cardigan.

Only active when the body structure's construction method contains
"raglan"; for any other construction it succeeds with no pieces.

The yoke is cast on at the neck and split into back, front and two sleeves
separated by four raglan lines of ``raglanLineStitches`` each (default 2).
After reserving the line stitches, a third goes to the back, a third to the
front and a sixth to each sleeve, with any rounding remainder given to the
back.  Every increase round adds 8 stitches, one at each side of each
raglan line: 4 to the body and 2 to each sleeve.  Enough rounds are worked
for both the body and the sleeves to reach their bust and upper-arm counts,
spread evenly over the raglan line length.

The raglan line length is, in order of preference: the target length set
by the interdependency resolver when armhole depth and sleeve-cap height
disagree, the ``yokeDepth`` measurement, or the neckline depth plus 12 cm.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from knitcalc.calculators.base import (
    CalculatorResult,
    ValidationResult,
    missing_measurements,
    prefixed,
    stitch_counts_at_rows,
    unsupported_garment_error,
)
from knitcalc.calculators.neckline import DEFAULT_NECK_CM, neckline_dimensions
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
DEFAULT_UPPER_ARM_CM = 30.0
DEFAULT_LINE_STITCHES = 2
RAGLAN_LINES = 4
STITCHES_PER_ROUND = 8
NECK_TO_UNDERARM_CM = 12.0
UNDERARM_CM = 2.5
SEPARATION_TOLERANCE_CM = 2.0


@dataclass(frozen=True)
class YokeDistribution:
    """How the neck cast-on is split between panels and raglan lines."""

    back: int
    front: int
    sleeve: int
    line_stitches: int

    @property
    def total(self) -> int:
        return self.back + self.front + 2 * self.sleeve + RAGLAN_LINES * self.line_stitches


def distribute_neck_stitches(total: int, line_stitches: int) -> YokeDistribution:
    """Split *total* neck stitches into back, front and sleeves.

    Raises:
        ValueError: If too few stitches remain after reserving the raglan lines.
    """
    available = total - RAGLAN_LINES * line_stitches
    if available < 6:
        raise ValueError(
            f"{total} neck stitches leave only {available} after reserving "
            f"{RAGLAN_LINES} raglan lines of {line_stitches}"
        )
    back = round_half_up(available / 3)
    front = round_half_up(available / 3)
    sleeve = round_half_up(available / 6)
    back += available - (back + front + 2 * sleeve)
    return YokeDistribution(back=back, front=front, sleeve=sleeve, line_stitches=line_stitches)


def underarm_stitches(stitches_per_cm: float) -> int:
    """Underarm cast-on for 2.5 cm, rounded up to an even count."""
    count = round_half_up(UNDERARM_CM * stitches_per_cm)
    return count if count % 2 == 0 else count + 1


class RaglanCalculator:
    """Top-down raglan yoke."""

    calculator_type = "raglan"

    def get_dependencies(self) -> tuple[str, ...]:
        return ("body", "sleeve")

    def validate_input(self, context: CalculationContext) -> ValidationResult:
        if context.garment_type not in SUPPORTED_GARMENTS:
            return ValidationResult(
                errors=(unsupported_garment_error(self.calculator_type, context.garment_type),)
            )
        if not _is_raglan(context):
            return ValidationResult()
        return ValidationResult(
            missing_data=missing_measurements(
                context, ("neckCircumference", "bust", "upperArmCircumference")
            )
        )

    def calculate(self, context: CalculationContext) -> CalculatorResult:
        if context.garment_type not in SUPPORTED_GARMENTS:
            return CalculatorResult.failed(
                [unsupported_garment_error(self.calculator_type, context.garment_type)]
            )
        if not _is_raglan(context):
            return CalculatorResult.ok([])
        try:
            return _calculate_yoke(context)
        except ValueError as exc:
            return CalculatorResult.failed([f"Raglan calculation failed: {exc}"])


def _is_raglan(context: CalculationContext) -> bool:
    body_structure = context.pattern_state.body_structure
    return body_structure is not None and body_structure.is_raglan


def raglan_line_length_cm(context: CalculationContext) -> float:
    target = context.interdependencies.raglan_target_length_cm
    if target is not None:
        return target
    yoke_depth = context.measurement("yokeDepth")
    if yoke_depth is not None:
        return yoke_depth
    neckline = context.pattern_state.neckline
    style = neckline.style if neckline is not None else "round"
    _, depth = neckline_dimensions(style, context.measurement("neckCircumference", DEFAULT_NECK_CM))
    return depth + NECK_TO_UNDERARM_CM


def _calculate_yoke(context: CalculationContext) -> CalculatorResult:
    gauge = context.gauge
    spc = gauge.stitches_per_cm
    detailed = context.options.include_detailed_shaping
    body_structure = context.pattern_state.body_structure
    line_stitches = int(body_structure.parameters.get("raglanLineStitches", DEFAULT_LINE_STITCHES))

    neck_stitches = cm_to_stitches(context.measurement("neckCircumference", DEFAULT_NECK_CM), spc)
    split = distribute_neck_stitches(neck_stitches, line_stitches)

    bust = context.measurement("bust", DEFAULT_BUST_CM)
    upper_arm = context.measurement("upperArmCircumference", DEFAULT_UPPER_ARM_CM)
    underarm = underarm_stitches(spc)
    # Underarm stitches are cast on at separation, so the yoke supplies the rest.
    body_target = cm_to_stitches(bust, spc) - 2 * underarm
    sleeve_target = cm_to_stitches(upper_arm, spc) - underarm

    body_increases = max(0, body_target - (split.front + split.back + 2 * line_stitches))
    sleeve_increases = max(0, sleeve_target - (split.sleeve + line_stitches))
    rounds = max(math.ceil(body_increases / 4), math.ceil(sleeve_increases / 2))

    length_cm = raglan_line_length_cm(context)
    rows = cm_to_rows(length_cm, gauge.rows_per_cm)
    yoke_total = neck_stitches + STITCHES_PER_ROUND * rounds
    schedule = distribute(neck_stitches, yoke_total, rows, stitches_per_event=STITCHES_PER_ROUND)
    warnings = prefixed("Raglan yoke", schedule.warnings)

    shaping: list[ShapingInstruction] = []
    if schedule.has_shaping:
        shaping.append(
            ShapingInstruction.from_schedule(
                ShapingType.RAGLAN,
                schedule,
                0,
                label="Increase at each side of the 4 raglan lines",
                notes="1 stitch each side of every raglan line per increase round",
                detailed=detailed,
            )
        )

    body_at_separation = split.front + split.back + 4 * rounds + 2 * line_stitches
    sleeve_at_separation = split.sleeve + 2 * rounds + line_stitches
    body_cm = (body_at_separation + 2 * underarm) / spc
    if abs(body_cm - bust) > SEPARATION_TOLERANCE_CM:
        warnings.append(
            f"Raglan yoke body measures {body_cm:.1f} cm at separation against a "
            f"target of {bust:.1f} cm"
        )

    piece = CalculatedPieceDetails(
        piece_key="raglanYoke",
        display_name="Raglan Yoke",
        cast_on_stitches=neck_stitches,
        length_in_rows=rows,
        final_stitch_count=yoke_total,
        finished_dimensions=FinishedDimensions(
            width_cm=yoke_total / spc, length_cm=length_cm, circumference_cm=yoke_total / spc
        ),
        shaping=tuple(shaping),
        stitch_counts_at_rows=stitch_counts_at_rows(neck_stitches, shaping),
        construction_notes=(
            f"Cast on {neck_stitches} stitches: back {split.back}, front {split.front}, "
            f"sleeves {split.sleeve} each, raglan lines {line_stitches} each.",
            f"Work {rounds} increase rounds over {rows} rows.",
            f"Separate: {body_at_separation} body stitches and {sleeve_at_separation} "
            f"stitches for each sleeve; cast on {underarm} stitches at each underarm.",
        ),
    )
    return CalculatorResult.ok([piece], warnings)

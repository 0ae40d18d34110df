"""
Hammer sleeve calculator: T-shaped sleeve caps whose top extends across the
shoulder to the neckline.

Only active when the body structure's construction method contains
"hammer"; for any other construction it succeeds with no pieces.

Geometry, all in finished cm:

- shoulder extension = (total shoulder width - neckline width) / 2 per side
- the cap's vertical part is the upper-arm width wide and the armhole depth
  tall; it sits in a rectangular cutout of the same size in each body panel
- the extension is worked for 10 rows on top of the vertical part to meet
  the neckline; its first two rows take the cap from the upper-arm width
  to the extension width, half the change on each row
- the body panel at chest level is two shoulder straps (half the neckline
  width each) plus two cutouts; binding off the cutouts leaves the straps

Upper-arm width is the ``upperArmWidth`` measurement, or half the
``upperArmCircumference`` when only the circumference was taken.
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
from knitcalc.utilities.conversion import cm_to_rows, cm_to_stitches
from knitcalc.utilities.shaping import distribute

SUPPORTED_GARMENTS = ("sweater", "cardigan")

DEFAULT_SHOULDER_CM = 40.0
DEFAULT_UPPER_ARM_CM = 30.0
DEFAULT_ARMHOLE_DEPTH_CM = 20.0

EXTENSION_ROWS = 10
TRANSITION_ROWS = 2
CUTOUT_BIND_OFF_ROWS = 2
EXTENSION_RANGE_CM = (5.0, 25.0)
UPPER_ARM_WIDTH_RANGE_CM = (15.0, 50.0)
ARMHOLE_DEPTH_RANGE_CM = (15.0, 35.0)

_CAPS = (
    ("leftHammerCap", "Left Hammer Sleeve Cap"),
    ("rightHammerCap", "Right Hammer Sleeve Cap"),
)


@dataclass(frozen=True)
class HammerDimensions:
    """Finished hammer-sleeve dimensions in cm."""

    shoulder_width: float
    neckline_width: float
    upper_arm_width: float
    armhole_depth: float

    @property
    def extension_width(self) -> float:
        return (self.shoulder_width - self.neckline_width) / 2


def hammer_dimensions(context: CalculationContext) -> HammerDimensions:
    neckline = context.pattern_state.neckline
    style = neckline.style if neckline is not None else "round"
    neck_width, _ = neckline_dimensions(
        style, context.measurement("neckCircumference", DEFAULT_NECK_CM)
    )
    upper_arm = context.measurement("upperArmWidth")
    if upper_arm is None:
        upper_arm = context.measurement("upperArmCircumference", DEFAULT_UPPER_ARM_CM) / 2
    return HammerDimensions(
        shoulder_width=context.measurement("shoulderWidth", DEFAULT_SHOULDER_CM),
        neckline_width=neck_width,
        upper_arm_width=upper_arm,
        armhole_depth=context.measurement("armholeDepth", DEFAULT_ARMHOLE_DEPTH_CM),
    )


def check_dimensions(dims: HammerDimensions) -> tuple[list[str], list[str]]:
    """Return ``(errors, warnings)`` for *dims*."""
    errors: list[str] = []
    warnings: list[str] = []
    extension = dims.extension_width
    low, high = EXTENSION_RANGE_CM
    if dims.neckline_width >= dims.shoulder_width:
        errors.append("Neckline width must be smaller than total shoulder width")
    elif extension < low:
        errors.append(
            f"Shoulder extension width ({extension:.1f}cm) is too small. Minimum: {low:g}cm"
        )
    elif extension > high:
        warnings.append(
            f"Shoulder extension width ({extension:.1f}cm) is quite large. "
            f"Maximum recommended: {high:g}cm"
        )

    low, high = UPPER_ARM_WIDTH_RANGE_CM
    if dims.upper_arm_width < low:
        warnings.append(
            f"Upper arm width ({dims.upper_arm_width:g}cm) is quite small for an adult garment"
        )
    elif dims.upper_arm_width > high:
        warnings.append(f"Upper arm width ({dims.upper_arm_width:g}cm) is quite large")

    low, high = ARMHOLE_DEPTH_RANGE_CM
    if dims.armhole_depth < low:
        warnings.append(f"Armhole depth ({dims.armhole_depth:g}cm) is quite shallow")
    elif dims.armhole_depth > high:
        warnings.append(f"Armhole depth ({dims.armhole_depth:g}cm) is quite deep")
    return errors, warnings


class HammerSleeveCalculator:
    """Hammer sleeve caps and the matching body-panel cutout."""

    calculator_type = "hammer_sleeve"

    def get_dependencies(self) -> tuple[str, ...]:
        return ("body", "sleeve")

    def validate_input(self, context: CalculationContext) -> ValidationResult:
        if context.garment_type not in SUPPORTED_GARMENTS:
            return ValidationResult(
                errors=(unsupported_garment_error(self.calculator_type, context.garment_type),)
            )
        if not _is_hammer(context):
            return ValidationResult()
        errors, warnings = check_dimensions(hammer_dimensions(context))
        return ValidationResult(
            errors=tuple(errors),
            warnings=tuple(warnings),
            missing_data=missing_measurements(
                context, ("shoulderWidth", "armholeDepth", "neckCircumference")
            ),
        )

    def calculate(self, context: CalculationContext) -> CalculatorResult:
        if context.garment_type not in SUPPORTED_GARMENTS:
            return CalculatorResult.failed(
                [unsupported_garment_error(self.calculator_type, context.garment_type)]
            )
        if not _is_hammer(context):
            return CalculatorResult.ok([])
        dims = hammer_dimensions(context)
        errors, _ = check_dimensions(dims)
        if errors:
            return CalculatorResult.failed(errors)
        try:
            return _calculate_hammer(context, dims)
        except ValueError as exc:
            return CalculatorResult.failed([f"Hammer sleeve calculation failed: {exc}"])


def _is_hammer(context: CalculationContext) -> bool:
    body_structure = context.pattern_state.body_structure
    return body_structure is not None and body_structure.is_hammer_sleeve


def _calculate_hammer(context: CalculationContext, dims: HammerDimensions) -> CalculatorResult:
    spc = context.gauge.stitches_per_cm
    rpc = context.gauge.rows_per_cm

    extension = cm_to_stitches(dims.extension_width, spc)
    vertical = cm_to_stitches(dims.upper_arm_width, spc)
    depth_rows = cm_to_rows(dims.armhole_depth, rpc)
    strap = cm_to_stitches(dims.neckline_width / 2, spc)
    if extension < 1 or vertical < 1 or depth_rows < CUTOUT_BIND_OFF_ROWS:
        raise ValueError(
            f"upper arm {dims.upper_arm_width:g} cm and armhole depth "
            f"{dims.armhole_depth:g} cm are too small for this gauge"
        )

    warnings: list[str] = []
    caps = _caps(vertical, extension, depth_rows, dims, context, warnings)
    cutout = _cutout(strap, vertical, depth_rows, dims)
    return CalculatorResult.ok([*caps, cutout], warnings)


def _caps(
    vertical: int,
    extension: int,
    depth_rows: int,
    dims: HammerDimensions,
    context: CalculationContext,
    warnings: list[str],
) -> list[CalculatedPieceDetails]:
    # Half the width change on each of the first two extension rows.
    per_row = max(math.ceil(abs(vertical - extension) / TRANSITION_ROWS), 1)
    schedule = distribute(vertical, extension, TRANSITION_ROWS, stitches_per_event=per_row)
    warnings.extend(prefixed("Hammer sleeve cap", schedule.warnings))
    shaping: tuple[ShapingInstruction, ...] = ()
    if schedule.has_shaping:
        shaping = (
            ShapingInstruction.from_schedule(
                ShapingType.SLEEVE_CAP,
                schedule,
                depth_rows,
                label="Shape shoulder extension",
                notes="Split each row's change between the two edges",
                detailed=context.options.include_detailed_shaping,
            ),
        )
    rows = depth_rows + EXTENSION_ROWS
    return [
        CalculatedPieceDetails(
            piece_key=key,
            display_name=name,
            cast_on_stitches=vertical,
            length_in_rows=rows,
            final_stitch_count=extension,
            finished_dimensions=FinishedDimensions(
                width_cm=dims.upper_arm_width,
                length_cm=dims.armhole_depth + EXTENSION_ROWS / context.gauge.rows_per_cm,
            ),
            shaping=shaping,
            stitch_counts_at_rows=stitch_counts_at_rows(vertical, shaping),
            construction_notes=(
                f"Work the vertical part on {vertical} stitches for {depth_rows} rows.",
                f"Work the shoulder extension on {extension} stitches for "
                f"{EXTENSION_ROWS} rows, then bind off at the neckline.",
            ),
        )
        for key, name in _CAPS
    ]


def _cutout(
    strap: int, vertical: int, depth_rows: int, dims: HammerDimensions
) -> CalculatedPieceDetails:
    """The armhole cutout region of each body panel.

    Like the neckline, the cutout is part of the body panels rather than a
    separately cast-on piece, so its cast-on and final counts are 0 and the
    checkpoints carry the panel width at chest level.
    """
    chest = 2 * strap + 2 * vertical
    shaping = (
        ShapingInstruction.bind_off(
            ShapingType.ARMHOLE,
            2 * vertical,
            0,
            rows=CUTOUT_BIND_OFF_ROWS,
            instruction=(
                f"Bind off {vertical} stitches at the beginning of the next "
                f"{CUTOUT_BIND_OFF_ROWS} rows."
            ),
            notes="Rectangular cutout for the hammer sleeve cap",
        ),
    )
    return CalculatedPieceDetails(
        piece_key="hammerArmhole",
        display_name="Hammer Sleeve Armhole",
        cast_on_stitches=0,
        length_in_rows=depth_rows,
        final_stitch_count=0,
        finished_dimensions=FinishedDimensions(
            width_cm=dims.neckline_width + 2 * dims.upper_arm_width,
            length_cm=dims.armhole_depth,
        ),
        shaping=shaping,
        stitch_counts_at_rows=stitch_counts_at_rows(chest, shaping),
        construction_notes=(
            f"Each body panel measures {chest} stitches at chest level.",
            f"Work the {strap}-stitch shoulder straps for {depth_rows} rows above the cutout.",
        ),
    )

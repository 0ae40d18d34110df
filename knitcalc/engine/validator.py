"""
Boundary validator for engine input.

Checks the raw pattern state before any context is built.  Errors stop the
run; warnings are passed through to the result; missing data names the
measurements a garment normally needs.
"""

from __future__ import annotations

import numbers
from collections.abc import Mapping

from knitcalc.calculators.accessory import size_warnings
from knitcalc.calculators.base import ValidationResult
from knitcalc.calculators.body import NO_BODY_STRUCTURE_WARNING
from knitcalc.calculators.neckline import NO_NECKLINE_WARNING
from knitcalc.calculators.sleeve import NO_SLEEVES_WARNING
from knitcalc.schemas.pattern_state import (
    CRAFT_TYPES,
    UNITS,
    CoreCalculationInput,
    EaseSection,
    GaugeSection,
    MeasurementsSection,
    PatternState,
    YarnSection,
)
from knitcalc.utilities.types import Gauge

MAX_MEASUREMENT = 300.0
MAX_EASE_CM = 20.0
# Plausible counts over a 10 cm swatch.
STITCHES_PER_10CM_RANGE = (5.0, 50.0)
ROWS_PER_10CM_RANGE = (5.0, 80.0)


def _is_number(value: object) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def validate_input(calculation_input: CoreCalculationInput) -> ValidationResult:
    """Validate *calculation_input* at the engine boundary."""
    state = calculation_input.pattern_state
    if state is None:
        return ValidationResult(errors=("Pattern state is required",))

    errors: list[str] = []
    warnings: list[str] = []
    missing: list[str] = []

    if not state.session_id:
        errors.append("Session ID is required")
    if not state.garment_type:
        errors.append("Garment type must be selected")
    if not state.craft_type:
        errors.append("Craft type is required")
    elif state.craft_type not in CRAFT_TYPES:
        errors.append("Craft type must be either knitting or crochet")

    _check_gauge(state.gauge, errors, warnings)
    _check_measurements(state.measurements, errors, warnings)
    _check_ease(state.ease, errors, warnings)
    _check_yarn(state.yarn, warnings)
    if state.garment_type:
        _check_garment(state, warnings, missing)

    return ValidationResult(
        errors=tuple(errors), warnings=tuple(warnings), missing_data=tuple(missing)
    )


# ── Section checks ─────────────────────────────────────────────────────────────


def _check_gauge(gauge: GaugeSection | None, errors: list[str], warnings: list[str]) -> None:
    if gauge is None:
        errors.append("Gauge information is required")
        return

    stitches_ok = _is_number(gauge.stitch_count) and gauge.stitch_count > 0
    rows_ok = _is_number(gauge.row_count) and gauge.row_count > 0
    if not stitches_ok:
        errors.append("Valid stitch count is required for gauge")
    if not rows_ok:
        errors.append("Valid row count is required for gauge")
    if not gauge.unit:
        errors.append("Gauge unit is required")
    elif gauge.unit not in UNITS:
        errors.append("Gauge unit must be cm or inch")
    if not _is_number(gauge.measured_over) or gauge.measured_over <= 0:
        errors.append("Gauge swatch size must be positive")
    if not gauge.is_completed:
        warnings.append("Gauge section is not marked as completed")

    if stitches_ok and rows_ok and gauge.unit in UNITS and gauge.measured_over > 0:
        per_cm = Gauge.from_swatch(
            gauge.stitch_count, gauge.row_count, gauge.measured_over, gauge.unit
        )
        low, high = STITCHES_PER_10CM_RANGE
        if not low <= per_cm.stitches_per_cm * 10 <= high:
            warnings.append("Gauge stitch count seems unusual - please verify")
        low, high = ROWS_PER_10CM_RANGE
        if not low <= per_cm.rows_per_cm * 10 <= high:
            warnings.append("Gauge row count seems unusual - please verify")


def _check_measurements(
    measurements: MeasurementsSection | None, errors: list[str], warnings: list[str]
) -> None:
    if measurements is None:
        errors.append("Measurements are required")
        return
    if not measurements.measurements:
        errors.append("At least one measurement is required")
    if not measurements.unit:
        errors.append("Measurement unit is required")
    elif measurements.unit not in UNITS:
        errors.append("Measurement unit must be cm or inch")
    if not measurements.is_completed:
        warnings.append("Measurements section is not marked as completed")

    for name, value in measurements.measurements.items():
        if not _is_number(value):
            errors.append(f"Invalid measurement value for {name}: must be a number")
        elif value <= 0:
            errors.append(f"Invalid measurement value for {name}: must be positive")
        elif value > MAX_MEASUREMENT:
            warnings.append(
                f"Measurement value for {name} seems very large: {value:g}{measurements.unit}"
            )


def _check_ease(ease: EaseSection | None, errors: list[str], warnings: list[str]) -> None:
    if ease is None:
        warnings.append("No ease information provided - using default ease values")
        return
    if ease.unit is not None and ease.unit not in UNITS:
        errors.append("Ease unit must be cm or inch")
    if not ease.is_completed:
        warnings.append("Ease section is not marked as completed")
    if not ease.type:
        warnings.append("No ease type specified - using default")
    for name, value in ease.values.items():
        if _is_number(value) and abs(value) > MAX_EASE_CM:
            warnings.append(f"Ease value for {name} seems extreme: {value:g}{ease.unit or 'cm'}")


def _check_yarn(yarn: YarnSection | None, warnings: list[str]) -> None:
    if yarn is None:
        warnings.append("No yarn information provided - yarn estimates may be inaccurate")
        return
    if not yarn.is_completed:
        warnings.append("Yarn section is not marked as completed")
    if not yarn.weight:
        warnings.append("No yarn weight specified - estimates may be less accurate")


def _check_garment(state: PatternState, warnings: list[str], missing: list[str]) -> None:
    measured: Mapping[str, object] = state.measurements.measurements if state.measurements else {}
    match state.garment_type:
        case "sweater" | "cardigan":
            missing.extend(
                f"{name} measurement" for name in ("bust", "length") if not measured.get(name)
            )
            if state.body_structure is None:
                warnings.append(NO_BODY_STRUCTURE_WARNING)
            if state.sleeves is None:
                warnings.append(NO_SLEEVES_WARNING)
            if state.neckline is None:
                warnings.append(NO_NECKLINE_WARNING)
        case "hat" | "beanie":
            if not measured.get("headCircumference"):
                missing.append("headCircumference measurement")
        case "scarf" | "shawl":
            present = [name for name, value in measured.items() if value]
            warnings.extend(size_warnings(state.garment_type, present))
        case _:
            warnings.append(f"Unknown garment type: {state.garment_type}")

"""
JSON-shaped service boundary for the pattern calculation engine.

calculate_pattern() takes a camelCase payload as a web handler would receive
it and returns a camelCase dict.  Parsing is tolerant: absent sections
become ``None`` and non-numeric numbers become ``None`` so the engine's
boundary validator reports them as result errors instead of this layer
raising.
"""

from __future__ import annotations

import asyncio
import numbers
from collections.abc import Mapping
from typing import Any

from knitcalc.engine.engine import PatternCalculationEngine
from knitcalc.schemas.pattern_state import (
    BodyStructure,
    CalculationOptions,
    CoreCalculationInput,
    EaseSection,
    GaugeSection,
    MeasurementsSection,
    NecklineSection,
    PatternState,
    SleevesSection,
    YarnSection,
)
from knitcalc.schemas.pieces import (
    CalculatedPatternDetails,
    CalculatedPieceDetails,
    ShapingInstruction,
    YarnEstimation,
)
from knitcalc.utilities.conversion import inches_to_cm

# ── Parsing ───────────────────────────────────────────────────────────────────


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return None
    return value


def _section(payload: Mapping[str, Any], key: str) -> Mapping[str, Any] | None:
    value = payload.get(key)
    return value if isinstance(value, Mapping) else None


def _numbers(mapping: Any) -> dict[str, float | None]:
    if not isinstance(mapping, Mapping):
        return {}
    return {str(name): _number(value) for name, value in mapping.items()}


def _parse_gauge(data: Mapping[str, Any] | None) -> GaugeSection | None:
    if data is None:
        return None
    measured_over = _number(data.get("measuredOver", 1.0))
    return GaugeSection(
        stitch_count=_number(data.get("stitchCount")),
        row_count=_number(data.get("rowCount")),
        unit=data.get("unit"),
        measured_over=measured_over if measured_over is not None else 0.0,
        is_completed=bool(data.get("isCompleted", True)),
    )


def _parse_measurements(data: Mapping[str, Any] | None) -> MeasurementsSection | None:
    if data is None:
        return None
    return MeasurementsSection(
        measurements=_numbers(data.get("measurements")),
        unit=data.get("unit"),
        is_completed=bool(data.get("isCompleted", True)),
    )


def _parse_ease(data: Mapping[str, Any] | None) -> EaseSection | None:
    if data is None:
        return None
    return EaseSection(
        type=data.get("type"),
        values=_numbers(data.get("values")),
        unit=data.get("unit", "cm"),
        is_completed=bool(data.get("isCompleted", True)),
    )


def _custom_length(
    sleeves: Mapping[str, Any], measurements: MeasurementsSection | None
) -> float | None:
    """``customLength`` is given in the measurement unit; the section stores cm."""
    length = _number(sleeves.get("customLength"))
    if length is not None and measurements is not None and measurements.unit == "inch":
        return inches_to_cm(length)
    return length


def _parse_pattern_state(data: Mapping[str, Any] | None) -> PatternState | None:
    if data is None:
        return None

    measurements = _parse_measurements(_section(data, "measurements"))
    body = _section(data, "bodyStructure")
    sleeves = _section(data, "sleeves")
    neckline = _section(data, "neckline")
    yarn = _section(data, "yarn")

    return PatternState(
        session_id=data.get("sessionId"),
        craft_type=data.get("craftType"),
        garment_type=data.get("garmentType"),
        gauge=_parse_gauge(_section(data, "gauge")),
        measurements=measurements,
        ease=_parse_ease(_section(data, "ease")),
        body_structure=(
            BodyStructure(
                construction_method=body.get("constructionMethod"),
                parameters=body.get("parameters") or {},
            )
            if body is not None
            else None
        ),
        sleeves=(
            SleevesSection(
                style=sleeves.get("style") or "set-in",
                length=sleeves.get("length") or "long",
                custom_length_cm=_custom_length(sleeves, measurements),
            )
            if sleeves is not None
            else None
        ),
        neckline=(
            NecklineSection(style=neckline.get("style") or "round")
            if neckline is not None
            else None
        ),
        yarn=(
            YarnSection(weight=yarn.get("weight"), is_completed=bool(yarn.get("isCompleted", True)))
            if yarn is not None
            else None
        ),
    )


def parse_input(payload: Mapping[str, Any]) -> CoreCalculationInput:
    """Convert a camelCase request payload into a :class:`CoreCalculationInput`."""
    options = _section(payload, "options") or {}
    defaults = CalculationOptions()
    return CoreCalculationInput(
        pattern_state=_parse_pattern_state(_section(payload, "patternState")),
        options=CalculationOptions(
            include_detailed_shaping=bool(
                options.get("includeDetailedShaping", defaults.include_detailed_shaping)
            ),
            include_yarn_estimation=bool(
                options.get("includeYarnEstimation", defaults.include_yarn_estimation)
            ),
            validate_interdependencies=bool(
                options.get("validateInterdependencies", defaults.validate_interdependencies)
            ),
            debug_mode=bool(options.get("debugMode", defaults.debug_mode)),
            require_calculators=bool(
                options.get("requireCalculators", defaults.require_calculators)
            ),
        ),
    )


# ── Serialisation ─────────────────────────────────────────────────────────────


def _shaping_to_dict(shaping: ShapingInstruction) -> dict[str, Any]:
    out: dict[str, Any] = {
        "type": shaping.type.value,
        "instruction": shaping.instruction,
        "startRow": shaping.start_row,
        "endRow": shaping.end_row,
        "stitchCountChange": shaping.stitch_count_change,
    }
    if shaping.frequency is not None:
        out["frequency"] = shaping.frequency
    if shaping.repetitions is not None:
        out["repetitions"] = shaping.repetitions
    if shaping.notes:
        out["notes"] = shaping.notes
    if shaping.detail:
        out["detail"] = [
            {"actionRowOffset": line.action_row_offset, "instruction": line.instruction}
            for line in shaping.detail
        ]
    return out


def _piece_to_dict(piece: CalculatedPieceDetails, precision: int) -> dict[str, Any]:
    dims = piece.finished_dimensions
    finished: dict[str, Any] = {
        "width_cm": round(dims.width_cm, precision),
        "length_cm": round(dims.length_cm, precision),
    }
    if dims.circumference_cm is not None:
        finished["circumference_cm"] = round(dims.circumference_cm, precision)
    out: dict[str, Any] = {
        "pieceKey": piece.piece_key,
        "displayName": piece.display_name,
        "castOnStitches": piece.cast_on_stitches,
        "lengthInRows": piece.length_in_rows,
        "finalStitchCount": piece.final_stitch_count,
        "finishedDimensions": finished,
        "shaping": [_shaping_to_dict(s) for s in piece.shaping],
    }
    if piece.stitch_counts_at_rows:
        out["stitchCountsAtRows"] = {
            str(row): count for row, count in sorted(piece.stitch_counts_at_rows.items())
        }
    if piece.construction_notes:
        out["constructionNotes"] = list(piece.construction_notes)
    return out


def _yarn_to_dict(yarn: YarnEstimation) -> dict[str, Any]:
    return {
        "totalLength": yarn.total_length_m,
        "totalWeight": yarn.total_weight_g,
        "byPiece": {
            key: {"length": p.length_m, "weight": p.weight_g, "percentage": p.percentage}
            for key, p in yarn.by_piece.items()
        },
        "safetyMargin": yarn.safety_margin,
        "confidence": yarn.confidence,
        "factors": list(yarn.factors),
    }


def to_dict(details: CalculatedPatternDetails, precision: int = 1) -> dict[str, Any]:
    """Serialise *details* to the camelCase output contract.

    Empty warnings, errors and absent optional sections are omitted;
    dimensions are rounded to *precision* decimal places.
    """
    info = details.pattern_info
    out: dict[str, Any] = {
        "patternInfo": {
            "sessionId": info.session_id,
            "garmentType": info.garment_type,
            "craftType": info.craft_type,
            "calculatedAt": info.calculated_at,
            "schemaVersion": info.schema_version,
        },
        "pieces": {key: _piece_to_dict(p, precision) for key, p in details.pieces.items()},
    }
    if details.yarn_estimation is not None:
        out["yarnEstimation"] = _yarn_to_dict(details.yarn_estimation)
    if details.warnings:
        out["warnings"] = list(details.warnings)
    if details.errors:
        out["errors"] = list(details.errors)
    if details.debug is not None:
        out["debug"] = dict(details.debug)
    return out


# ── Entry points ──────────────────────────────────────────────────────────────


def calculate_pattern(
    payload: Mapping[str, Any], engine: PatternCalculationEngine | None = None
) -> dict[str, Any]:
    """
    Calculate a pattern from a camelCase request payload.

    Parameters
    ----------
    payload:
        ``{"patternState": {...}, "options": {...}}`` as described by the
        input contract.
    engine:
        Engine to use; a default engine is created when omitted.

    Returns
    -------
    dict
        The camelCase result.  Invalid input is reported under ``"errors"``;
        this function does not raise for mapping payloads.
    """
    engine = engine or PatternCalculationEngine()
    details = engine.calculate(parse_input(payload))
    return to_dict(details, engine.config.dimension_precision)


async def calculate_pattern_async(
    payload: Mapping[str, Any], engine: PatternCalculationEngine | None = None
) -> dict[str, Any]:
    """Run :func:`calculate_pattern` in a worker thread."""
    return await asyncio.to_thread(calculate_pattern, payload, engine)

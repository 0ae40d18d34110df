"""Rough yarn requirement for a set of calculated pieces."""

from __future__ import annotations

from collections.abc import Mapping

from knitcalc.config.loader import EngineConfig
from knitcalc.schemas.pieces import CalculatedPieceDetails, PieceYarn, YarnEstimation

CONFIDENCE = "medium"


def estimate_yarn(
    pieces: Mapping[str, CalculatedPieceDetails], config: EngineConfig
) -> YarnEstimation:
    """Estimate yarn length and weight for *pieces*.

    Each piece is treated as a rectangle of ``cast_on_stitches`` by
    ``length_in_rows``; shaping is ignored.  The safety margin is applied to
    the totals only, so per-piece lengths sum to the un-padded total.
    """
    stitches = {key: piece.cast_on_stitches * piece.length_in_rows for key, piece in pieces.items()}
    total_stitches = sum(stitches.values())
    digits = config.dimension_precision

    by_piece: dict[str, PieceYarn] = {}
    for key, count in stitches.items():
        length = count / config.stitches_per_meter
        by_piece[key] = PieceYarn(
            length_m=round(length, digits),
            weight_g=round(length / config.meters_per_gram, digits),
            percentage=round(100 * count / total_stitches, digits) if total_stitches else 0.0,
        )

    total_length = total_stitches / config.stitches_per_meter * (1 + config.yarn_safety_margin)
    return YarnEstimation(
        total_length_m=round(total_length, digits),
        total_weight_g=round(total_length / config.meters_per_gram, digits),
        by_piece=by_piece,
        safety_margin=config.yarn_safety_margin,
        confidence=CONFIDENCE,
        factors=(
            "Each piece approximated as cast-on stitches x rows",
            f"{config.stitches_per_meter:g} stitches per metre of yarn",
            f"{config.meters_per_gram:g} metres per gram",
            f"{config.yarn_safety_margin:.0%} safety margin",
        ),
    )

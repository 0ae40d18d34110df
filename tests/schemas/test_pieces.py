"""Tests for schemas.pieces: shaping instructions, pieces and the pattern result."""

from __future__ import annotations

from types import MappingProxyType

import pytest

from knitcalc.schemas.pieces import (
    CalculatedPatternDetails,
    CalculatedPieceDetails,
    FinishedDimensions,
    PatternInfo,
    ShapingInstruction,
    ShapingType,
)
from knitcalc.utilities.shaping import BreakdownLine, distribute

# ── Shared fixtures ────────────────────────────────────────────────────────────

_INFO = PatternInfo(
    session_id="s-1",
    garment_type="sweater",
    craft_type="knitting",
    calculated_at="2026-01-01T00:00:00+00:00",
    schema_version="1.0.0",
)


def _piece(**overrides) -> CalculatedPieceDetails:
    fields = dict(
        piece_key="frontBody",
        display_name="Front Body",
        cast_on_stitches=100,
        length_in_rows=120,
        final_stitch_count=90,
        finished_dimensions=FinishedDimensions(width_cm=50.0, length_cm=60.0),
    )
    fields.update(overrides)
    return CalculatedPieceDetails(**fields)


# ── ShapingType ────────────────────────────────────────────────────────────────


class TestShapingType:
    def test_wire_values(self):
        assert ShapingType.WAIST_DECREASE.value == "waistDecrease"
        assert ShapingType.SLEEVE_CAP.value == "sleeveCap"
        assert ShapingType.SLEEVE_SHAPING.value == "sleeveShaping"

    def test_is_string_enum(self):
        assert isinstance(ShapingType.ARMHOLE, str)


# ── ShapingInstruction ─────────────────────────────────────────────────────────


class TestShapingInstructionValidation:
    def test_negative_start_raises(self):
        with pytest.raises(ValueError, match="start_row must be >= 0"):
            ShapingInstruction(
                ShapingType.CUSTOM, "x", start_row=-1, end_row=2, stitch_count_change=0
            )

    def test_end_before_start_raises(self):
        with pytest.raises(ValueError, match="end_row"):
            ShapingInstruction(
                ShapingType.CUSTOM, "x", start_row=5, end_row=4, stitch_count_change=0
            )

    def test_zero_frequency_raises(self):
        with pytest.raises(ValueError, match="frequency and repetitions must be >= 1"):
            ShapingInstruction(
                ShapingType.CUSTOM, "x", 0, 10, -2, frequency=0, repetitions=1
            )

    def test_repeats_must_fit_span(self):
        with pytest.raises(ValueError, match="does not fit"):
            ShapingInstruction(
                ShapingType.CUSTOM, "x", 0, 10, -6, frequency=5, repetitions=3
            )

    def test_repeated_shaping_must_change_count(self):
        with pytest.raises(ValueError, match="must change the stitch count"):
            ShapingInstruction(
                ShapingType.CUSTOM, "x", 0, 10, 0, frequency=2, repetitions=2
            )

    def test_span(self):
        instruction = ShapingInstruction(ShapingType.CUSTOM, "x", 4, 10, -2)
        assert instruction.span == 6


class TestShapingInstructionFromSchedule:
    def test_fields(self):
        schedule = distribute(100, 80, 43)
        instruction = ShapingInstruction.from_schedule(
            ShapingType.WAIST_DECREASE, schedule, 10, label="Shape waist"
        )
        assert instruction.instruction == (
            "Shape waist: Decrease 2 stitches every 4th row 7 times, then every 5th row 3 times."
        )
        assert instruction.start_row == 10
        assert instruction.end_row == 53
        assert instruction.stitch_count_change == -20
        assert instruction.frequency == 4
        assert instruction.repetitions == 10
        assert instruction.detail == ()

    def test_detail_is_offset_by_start_row(self):
        schedule = distribute(100, 80, 43)
        instruction = ShapingInstruction.from_schedule(
            ShapingType.WAIST_DECREASE, schedule, 10, detailed=True
        )
        assert instruction.detail[:2] == (
            BreakdownLine(10, "Work 3 rows plain."),
            BreakdownLine(13, "Shaping row: decrease 2 stitches."),
        )

    def test_zero_row_schedule_has_no_frequency(self):
        instruction = ShapingInstruction.from_schedule(
            ShapingType.NECKLINE, distribute(10, 4, 0), 3
        )
        assert instruction.frequency is None
        assert instruction.repetitions is None
        assert instruction.span == 0

    def test_dense_schedule_satisfies_invariant(self):
        instruction = ShapingInstruction.from_schedule(
            ShapingType.CROWN, distribute(96, 6, 7, stitches_per_event=6), 0
        )
        assert instruction.frequency * instruction.repetitions <= instruction.span

    def test_empty_schedule_raises(self):
        with pytest.raises(ValueError, match="empty schedule"):
            ShapingInstruction.from_schedule(ShapingType.CUSTOM, distribute(10, 10, 5), 0)


class TestShapingInstructionBindOff:
    def test_fields(self):
        instruction = ShapingInstruction.bind_off(ShapingType.ARMHOLE, 5, 30, rows=2)
        assert instruction.stitch_count_change == -5
        assert instruction.start_row == 30
        assert instruction.end_row == 32
        assert instruction.instruction == "Bind off 5 stitches."
        assert instruction.frequency is None

    def test_negative_stitches_raise(self):
        with pytest.raises(ValueError, match="stitches must be >= 0"):
            ShapingInstruction.bind_off(ShapingType.ARMHOLE, -1, 0)


# ── CalculatedPieceDetails ─────────────────────────────────────────────────────


class TestCalculatedPieceDetails:
    @pytest.mark.parametrize(
        "field", ["cast_on_stitches", "length_in_rows", "final_stitch_count"]
    )
    def test_negative_counts_raise(self, field):
        with pytest.raises(ValueError, match=field):
            _piece(**{field: -1})

    def test_checkpoints_are_frozen(self):
        piece = _piece(stitch_counts_at_rows={0: 100, 90: 90})
        assert isinstance(piece.stitch_counts_at_rows, MappingProxyType)
        with pytest.raises(TypeError):
            piece.stitch_counts_at_rows[5] = 1  # type: ignore[index]

    def test_shaping_of_filters_by_type(self):
        bind_off = ShapingInstruction.bind_off(ShapingType.ARMHOLE, 4, 90, rows=2)
        waist = ShapingInstruction.from_schedule(
            ShapingType.WAIST_DECREASE, distribute(100, 90, 30), 30
        )
        piece = _piece(shaping=[waist, bind_off])
        assert piece.shaping_of(ShapingType.ARMHOLE) == (bind_off,)
        assert piece.shaping_of(ShapingType.SLEEVE_CAP) == ()


# ── CalculatedPatternDetails ───────────────────────────────────────────────────


class TestCalculatedPatternDetails:
    def test_success_without_errors(self):
        assert CalculatedPatternDetails(pattern_info=_INFO).success

    def test_failure_with_errors(self):
        details = CalculatedPatternDetails(pattern_info=_INFO, errors=("boom",))
        assert not details.success

    def test_pieces_are_frozen(self):
        details = CalculatedPatternDetails(pattern_info=_INFO, pieces={"frontBody": _piece()})
        assert isinstance(details.pieces, MappingProxyType)

"""Tests for the shaping distributor."""

import pytest

from knitcalc.utilities.shaping import (
    BreakdownLine,
    ShapingAction,
    ShapingInterval,
    ShapingStep,
    distribute,
    ordinal,
)


class TestShapingAction:
    def test_values(self):
        assert ShapingAction.INCREASE.value == "increase"
        assert ShapingAction.DECREASE.value == "decrease"

    def test_is_str(self):
        """ShapingAction inherits from str for serialization compatibility."""
        assert isinstance(ShapingAction.INCREASE, str)
        assert isinstance(ShapingAction.DECREASE, str)


class TestShapingInterval:
    def test_is_frozen(self):
        si = ShapingInterval(
            action=ShapingAction.DECREASE, every_n_rows=4, times=10, stitches_per_action=2
        )
        with pytest.raises(AttributeError):
            si.times = 5  # type: ignore[misc]


class TestOrdinal:
    @pytest.mark.parametrize(
        "n, expected",
        [
            (1, "1st"),
            (2, "2nd"),
            (3, "3rd"),
            (4, "4th"),
            (11, "11th"),
            (12, "12th"),
            (13, "13th"),
            (21, "21st"),
            (22, "22nd"),
            (101, "101st"),
            (111, "111th"),
        ],
    )
    def test_suffix(self, n, expected):
        assert ordinal(n) == expected


class TestDistributeEven:
    def test_equal_counts_produce_empty_schedule(self):
        schedule = distribute(50, 50, 10)
        assert not schedule.has_shaping
        assert schedule.event is None
        assert schedule.steps == ()
        assert schedule.frequency is None
        assert schedule.warnings == ()

    def test_even_increase(self):
        """+20 stitches over 40 rows, 2 per event → every 4th row 10 times."""
        schedule = distribute(80, 100, 40)
        assert schedule.intervals == (
            ShapingInterval(
                ShapingAction.INCREASE, every_n_rows=4, times=10, stitches_per_action=2
            ),
        )
        assert schedule.event.instructions_text_simple == (
            "Increase 2 stitches every 4th row 10 times."
        )
        assert schedule.frequency == 4
        assert schedule.repetitions == 10

    def test_events_land_on_last_row_of_interval(self):
        schedule = distribute(80, 100, 40)
        assert [s.row_offset for s in schedule.steps] == list(range(3, 40, 4))


class TestDistributeUneven:
    def test_shorter_intervals_come_first(self):
        """-20 over 43 rows: 43 = 7×4 + 3×5."""
        schedule = distribute(100, 80, 43)
        assert schedule.intervals == (
            ShapingInterval(ShapingAction.DECREASE, 4, 7, 2),
            ShapingInterval(ShapingAction.DECREASE, 5, 3, 2),
        )

    def test_text_summary(self):
        schedule = distribute(100, 80, 43)
        assert schedule.event.instructions_text_simple == (
            "Decrease 2 stitches every 4th row 7 times, then every 5th row 3 times."
        )

    def test_last_event_ends_on_last_row(self):
        schedule = distribute(100, 80, 43)
        assert schedule.steps[-1].row_offset == 42

    def test_odd_total_puts_remainder_on_last_event(self):
        schedule = distribute(100, 95, 20)
        assert [s.stitch_delta for s in schedule.steps] == [-2, -2, -1]
        assert [s.interval for s in schedule.steps] == [6, 7, 7]
        assert schedule.event.instructions_text_simple == (
            "Decrease 2 stitches every 6th row once, then every 7th row once, "
            "then decrease 1 stitch every 7th row once."
        )

    def test_custom_stitches_per_event(self):
        schedule = distribute(96, 6, 10, stitches_per_event=12)
        assert [s.stitch_delta for s in schedule.steps] == [-12] * 7 + [-6]
        assert [s.interval for s in schedule.steps] == [1] * 6 + [2] * 2
        assert schedule.warnings == ()


class TestDistributeClamping:
    def test_denser_than_budget_shapes_every_row(self):
        """10 events needed in 5 rows → 5 events of 4 stitches."""
        schedule = distribute(40, 20, 5)
        assert [s.interval for s in schedule.steps] == [1] * 5
        assert [s.stitch_delta for s in schedule.steps] == [-4] * 5
        assert len(schedule.warnings) == 1
        assert schedule.warnings[0].startswith("Shaping is denser than the row budget allows")

    def test_dense_uneven_puts_larger_events_first(self):
        schedule = distribute(0, 13, 4)
        assert [s.stitch_delta for s in schedule.steps] == [4, 3, 3, 3]
        assert schedule.event.stitches_per_event == 4

    def test_zero_rows_works_everything_on_one_row(self):
        schedule = distribute(10, 4, 0)
        assert schedule.steps == (ShapingStep(row_offset=0, interval=0, stitch_delta=-6),)
        assert schedule.frequency is None
        assert schedule.event.instructions_text_simple == (
            "Decrease 6 stitches on a single row once."
        )
        assert "No rows available for shaping" in schedule.warnings[0]

    def test_negative_rows_raise(self):
        with pytest.raises(ValueError, match="rows_available must be >= 0"):
            distribute(10, 4, -1)

    def test_zero_stitches_per_event_raises(self):
        with pytest.raises(ValueError, match="stitches_per_event must be >= 1"):
            distribute(10, 4, 10, stitches_per_event=0)


class TestDistributeConservation:
    @pytest.mark.parametrize(
        "start, end, rows, per_event",
        [
            (100, 80, 43, 2),
            (80, 100, 40, 2),
            (100, 95, 20, 2),
            (40, 20, 5, 2),
            (0, 13, 4, 2),
            (10, 4, 0, 2),
            (90, 6, 7, 12),
            (3, 240, 199, 2),
            (60, 61, 30, 2),
            (33, 0, 33, 1),
        ],
    )
    def test_stitches_and_rows_are_conserved(self, start, end, rows, per_event):
        schedule = distribute(start, end, rows, stitches_per_event=per_event)
        assert schedule.total_stitch_change == end - start
        assert schedule.total_rows == rows

    @pytest.mark.parametrize("start, end, rows", [(100, 80, 43), (3, 240, 199), (96, 6, 7)])
    def test_intervals_cover_every_step(self, start, end, rows):
        schedule = distribute(start, end, rows)
        assert sum(run.times for run in schedule.intervals) == len(schedule.steps)
        assert sum(run.every_n_rows * run.times for run in schedule.intervals) == rows


class TestBreakdown:
    def test_plain_rows_then_shaping_row(self):
        schedule = distribute(10, 6, 6)
        assert schedule.breakdown == (
            BreakdownLine(0, "Work 2 rows plain."),
            BreakdownLine(2, "Shaping row: decrease 2 stitches."),
            BreakdownLine(3, "Work 2 rows plain."),
            BreakdownLine(5, "Shaping row: decrease 2 stitches."),
        )

    def test_every_row_shaping_has_no_plain_lines(self):
        schedule = distribute(0, 4, 2)
        assert [line.instruction for line in schedule.breakdown] == [
            "Shaping row: increase 2 stitches.",
            "Shaping row: increase 2 stitches.",
        ]

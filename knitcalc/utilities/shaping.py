"""
Shaping distributor: spread increases/decreases evenly across a row budget.

Given a starting and ending stitch count and the number of rows available,
produces a row-by-row schedule of shaping events that every piece calculator
(waist, armhole, sleeve taper, sleeve cap, crown, neckline, shawl edges)
builds its shaping instructions from.

When the division is uneven, the shorter (more frequent) interval is worked
first, matching standard knitting pattern conventions (e.g. "decrease every
4th row 7 times, then every 5th row 3 times").

Every schedule conserves its inputs: the signed stitch deltas of its steps sum
to ``end_count - start_count`` and the row intervals of its steps sum to
``rows_available``.  Budgets that are too tight are clamped with a warning
instead of raising.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum


class ShapingAction(str, Enum):
    """Direction of a shaping operation."""

    INCREASE = "increase"
    DECREASE = "decrease"


@dataclass(frozen=True)
class ShapingInterval:
    """A run of identical shaping: perform action every N rows, repeated M times."""

    action: ShapingAction
    every_n_rows: int
    times: int
    stitches_per_action: int


@dataclass(frozen=True)
class ShapingStep:
    """One shaping event.

    ``row_offset`` is the 0-based row, relative to the start of the shaping
    band, on which the event is worked; ``interval`` is the number of rows the
    step consumes (plain rows plus the shaping row itself).
    """

    row_offset: int
    interval: int
    stitch_delta: int


@dataclass(frozen=True)
class BreakdownLine:
    """A single line of the row-by-row breakdown."""

    action_row_offset: int
    instruction: str


@dataclass(frozen=True)
class ShapingEvent:
    """Aggregate summary of a schedule."""

    type: ShapingAction
    total_stitches_to_change: int
    stitches_per_event: int
    num_shaping_events: int
    instructions_text_simple: str


@dataclass(frozen=True)
class ShapingSchedule:
    """Output of :func:`distribute`.

    An unshaped schedule (start == end) has no steps and ``event`` is None.
    """

    stitch_delta: int
    rows_available: int
    steps: tuple[ShapingStep, ...] = ()
    intervals: tuple[ShapingInterval, ...] = ()
    breakdown: tuple[BreakdownLine, ...] = ()
    event: ShapingEvent | None = None
    warnings: tuple[str, ...] = ()

    @property
    def has_shaping(self) -> bool:
        return bool(self.steps)

    @property
    def total_stitch_change(self) -> int:
        """Signed sum of all step deltas."""
        return sum(step.stitch_delta for step in self.steps)

    @property
    def total_rows(self) -> int:
        """Sum of all step intervals."""
        return sum(step.interval for step in self.steps)

    @property
    def frequency(self) -> int | None:
        """The most frequent interval, or None when no row spacing applies."""
        if not self.intervals or self.intervals[0].every_n_rows < 1:
            return None
        return min(run.every_n_rows for run in self.intervals)

    @property
    def repetitions(self) -> int:
        return len(self.steps)


def ordinal(n: int) -> str:
    """Return ``1st``, ``2nd``, ``3rd``, ``4th``, ... ``11th``, ``12th``, ``21st``."""
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def distribute(
    start_count: int,
    end_count: int,
    rows_available: int,
    stitches_per_event: int = 2,
) -> ShapingSchedule:
    """
    Distribute the change from *start_count* to *end_count* across a row budget.

    Args:
        start_count: Stitches on the needle when shaping begins.
        end_count: Stitches required when shaping ends.
        rows_available: Rows in the shaping band.
        stitches_per_event: Stitches changed per shaping row (default 2: one
            at each edge). The final event carries any remainder so the total
            is always exact.

    Returns:
        A :class:`ShapingSchedule`. Empty (``has_shaping`` False) when the
        counts are equal.

    Raises:
        ValueError: If rows_available < 0 or stitches_per_event < 1.
    """
    if rows_available < 0:
        raise ValueError(f"rows_available must be >= 0, got {rows_available}")
    if stitches_per_event < 1:
        raise ValueError(f"stitches_per_event must be >= 1, got {stitches_per_event}")

    delta = end_count - start_count
    if delta == 0:
        return ShapingSchedule(stitch_delta=0, rows_available=rows_available)

    action = ShapingAction.INCREASE if delta > 0 else ShapingAction.DECREASE
    sign = 1 if delta > 0 else -1
    total = abs(delta)
    num_events = math.ceil(total / stitches_per_event)
    warnings: list[str] = []

    if rows_available == 0:
        warnings.append(
            f"No rows available for shaping: all {total} stitches are worked on a single row"
        )
        sizes = [total]
        intervals = [0]
    elif num_events > rows_available:
        warnings.append(
            f"Shaping is denser than the row budget allows: {num_events} events needed "
            f"in {rows_available} rows; shaping every row instead"
        )
        sizes = _split_front_heavy(total, rows_available)
        intervals = [1] * rows_available
    else:
        sizes = [stitches_per_event] * (num_events - 1)
        sizes.append(total - stitches_per_event * (num_events - 1))
        intervals = _split_rows(rows_available, num_events)

    steps: list[ShapingStep] = []
    cumulative = 0
    for size, interval in zip(sizes, intervals):
        cumulative += interval
        steps.append(
            ShapingStep(
                row_offset=max(cumulative - 1, 0),
                interval=interval,
                stitch_delta=sign * size,
            )
        )

    runs = _group_runs(action, steps)
    event = ShapingEvent(
        type=action,
        total_stitches_to_change=total,
        stitches_per_event=max(sizes),
        num_shaping_events=len(steps),
        instructions_text_simple=_describe(runs),
    )
    return ShapingSchedule(
        stitch_delta=delta,
        rows_available=rows_available,
        steps=tuple(steps),
        intervals=tuple(runs),
        breakdown=tuple(_breakdown(action, steps)),
        event=event,
        warnings=tuple(warnings),
    )


# ── Helpers ────────────────────────────────────────────────────────────────────


def _split_rows(rows: int, parts: int) -> list[int]:
    """Split *rows* into *parts* intervals, shorter intervals first."""
    base, remainder = divmod(rows, parts)
    return [base] * (parts - remainder) + [base + 1] * remainder


def _split_front_heavy(total: int, parts: int) -> list[int]:
    """Split *total* stitches into *parts* events, larger events first."""
    base, remainder = divmod(total, parts)
    return [base + 1] * remainder + [base] * (parts - remainder)


def _group_runs(action: ShapingAction, steps: list[ShapingStep]) -> list[ShapingInterval]:
    runs: list[ShapingInterval] = []
    for step in steps:
        size = abs(step.stitch_delta)
        if runs and runs[-1].every_n_rows == step.interval and runs[-1].stitches_per_action == size:
            last = runs[-1]
            runs[-1] = ShapingInterval(action, last.every_n_rows, last.times + 1, size)
        else:
            runs.append(ShapingInterval(action, step.interval, 1, size))
    return runs


def _stitches(n: int) -> str:
    return f"{n} stitch" if n == 1 else f"{n} stitches"


def _times(n: int) -> str:
    return "once" if n == 1 else f"{n} times"


def _every(every_n_rows: int) -> str:
    if every_n_rows == 0:
        return "on a single row"
    if every_n_rows == 1:
        return "every row"
    return f"every {ordinal(every_n_rows)} row"


def _describe(runs: list[ShapingInterval]) -> str:
    parts: list[str] = []
    previous_size: int | None = None
    for run in runs:
        if previous_size is None:
            verb = "Increase" if run.action == ShapingAction.INCREASE else "Decrease"
            parts.append(f"{verb} {_stitches(run.stitches_per_action)} {_every(run.every_n_rows)}")
        elif run.stitches_per_action == previous_size:
            parts.append(f"then {_every(run.every_n_rows)}")
        else:
            size = _stitches(run.stitches_per_action)
            parts.append(f"then {run.action.value} {size} {_every(run.every_n_rows)}")
        parts[-1] += f" {_times(run.times)}"
        previous_size = run.stitches_per_action
    return ", ".join(parts) + "."


def _breakdown(action: ShapingAction, steps: list[ShapingStep]) -> list[BreakdownLine]:
    lines: list[BreakdownLine] = []
    row = 0
    for step in steps:
        plain = step.interval - 1
        if plain > 0:
            noun = "row" if plain == 1 else "rows"
            lines.append(BreakdownLine(row, f"Work {plain} {noun} plain."))
        lines.append(
            BreakdownLine(
                step.row_offset,
                f"Shaping row: {action.value} {_stitches(abs(step.stitch_delta))}.",
            )
        )
        row += step.interval
    return lines

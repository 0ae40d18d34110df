"""
Output schema: calculated pieces, shaping instructions and the pattern result.

All types are frozen dataclasses with fail-fast validation in __post_init__.
A ShapingInstruction that carries both ``frequency`` and ``repetitions`` is
only ever built from a distributor schedule (``from_schedule``), which keeps
its stitch change, row span and spacing mutually consistent.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from knitcalc.utilities.shaping import BreakdownLine, ShapingSchedule


class ShapingType(str, Enum):
    """Named shaping region of a piece."""

    WAIST_DECREASE = "waistDecrease"
    WAIST_INCREASE = "waistIncrease"
    ARMHOLE = "armhole"
    NECKLINE = "neckline"
    SLEEVE_CAP = "sleeveCap"
    SLEEVE_SHAPING = "sleeveShaping"
    RAGLAN = "raglan"
    CROWN = "crown"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ShapingInstruction:
    """
    One shaping region of a piece.

    Rows are 0-based and ``end_row`` is exclusive: the instruction covers
    ``end_row - start_row`` rows.  When both ``frequency`` and
    ``repetitions`` are present the shaping is worked at most every
    ``frequency`` rows, ``repetitions`` times, inside that span.
    """

    type: ShapingType
    instruction: str
    start_row: int
    end_row: int
    stitch_count_change: int
    frequency: int | None = None
    repetitions: int | None = None
    notes: str | None = None
    detail: tuple[BreakdownLine, ...] = ()

    def __post_init__(self) -> None:
        if self.start_row < 0:
            raise ValueError(f"start_row must be >= 0, got {self.start_row}")
        if self.end_row < self.start_row:
            raise ValueError(
                f"end_row ({self.end_row}) must be >= start_row ({self.start_row})"
            )
        if self.frequency is not None and self.repetitions is not None:
            if self.frequency < 1 or self.repetitions < 1:
                raise ValueError(
                    f"frequency and repetitions must be >= 1, got "
                    f"{self.frequency} and {self.repetitions}"
                )
            if self.frequency * self.repetitions > self.span:
                raise ValueError(
                    f"every {self.frequency} rows x {self.repetitions} does not fit in "
                    f"{self.span} rows"
                )
            if self.stitch_count_change == 0:
                raise ValueError("a repeated shaping instruction must change the stitch count")

    @property
    def span(self) -> int:
        return self.end_row - self.start_row

    @classmethod
    def from_schedule(
        cls,
        shaping_type: ShapingType,
        schedule: ShapingSchedule,
        start_row: int,
        label: str | None = None,
        notes: str | None = None,
        detailed: bool = False,
    ) -> ShapingInstruction:
        """Build an instruction covering *schedule*, starting at *start_row*.

        Raises:
            ValueError: If the schedule has no shaping.
        """
        if schedule.event is None:
            raise ValueError("cannot build a shaping instruction from an empty schedule")
        text = schedule.event.instructions_text_simple
        frequency = schedule.frequency
        detail: tuple[BreakdownLine, ...] = ()
        if detailed:
            detail = tuple(
                BreakdownLine(start_row + line.action_row_offset, line.instruction)
                for line in schedule.breakdown
            )
        return cls(
            type=shaping_type,
            instruction=f"{label}: {text}" if label else text,
            start_row=start_row,
            end_row=start_row + schedule.rows_available,
            stitch_count_change=schedule.total_stitch_change,
            frequency=frequency,
            repetitions=schedule.repetitions if frequency is not None else None,
            notes=notes,
            detail=detail,
        )

    @classmethod
    def bind_off(
        cls,
        shaping_type: ShapingType,
        stitches: int,
        start_row: int,
        rows: int = 1,
        instruction: str | None = None,
        notes: str | None = None,
    ) -> ShapingInstruction:
        """A bind-off of *stitches* worked over *rows* rows from *start_row*."""
        if stitches < 0:
            raise ValueError(f"stitches must be >= 0, got {stitches}")
        return cls(
            type=shaping_type,
            instruction=instruction or f"Bind off {stitches} stitches.",
            start_row=start_row,
            end_row=start_row + rows,
            stitch_count_change=-stitches,
            notes=notes,
        )


@dataclass(frozen=True)
class FinishedDimensions:
    width_cm: float
    length_cm: float
    circumference_cm: float | None = None


@dataclass(frozen=True)
class CalculatedPieceDetails:
    """
    One named garment piece (``frontBody``, ``leftSleeve``, ``hat``, ...).

    ``stitch_counts_at_rows`` is sparse: it records the stitch count at key
    checkpoints (cast-on, start and end of each shaping region), keyed by row.
    """

    piece_key: str
    display_name: str
    cast_on_stitches: int
    length_in_rows: int
    final_stitch_count: int
    finished_dimensions: FinishedDimensions
    shaping: tuple[ShapingInstruction, ...] = ()
    stitch_counts_at_rows: Mapping[int, int] = field(default_factory=dict)
    construction_notes: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.cast_on_stitches < 0:
            raise ValueError(f"cast_on_stitches must be >= 0, got {self.cast_on_stitches}")
        if self.length_in_rows < 0:
            raise ValueError(f"length_in_rows must be >= 0, got {self.length_in_rows}")
        if self.final_stitch_count < 0:
            raise ValueError(f"final_stitch_count must be >= 0, got {self.final_stitch_count}")
        object.__setattr__(self, "shaping", tuple(self.shaping))
        object.__setattr__(
            self, "stitch_counts_at_rows", MappingProxyType(dict(self.stitch_counts_at_rows))
        )
        object.__setattr__(self, "construction_notes", tuple(self.construction_notes))

    def shaping_of(self, shaping_type: ShapingType) -> tuple[ShapingInstruction, ...]:
        """Return this piece's instructions of *shaping_type*, in row order."""
        return tuple(s for s in self.shaping if s.type == shaping_type)


@dataclass(frozen=True)
class PieceYarn:
    length_m: float
    weight_g: float
    percentage: float


@dataclass(frozen=True)
class YarnEstimation:
    """Rough whole-garment yarn requirement, safety margin included."""

    total_length_m: float
    total_weight_g: float
    by_piece: Mapping[str, PieceYarn]
    safety_margin: float
    confidence: str
    factors: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "by_piece", MappingProxyType(dict(self.by_piece)))


@dataclass(frozen=True)
class PatternInfo:
    session_id: str
    garment_type: str
    craft_type: str
    calculated_at: str
    schema_version: str


@dataclass(frozen=True)
class CalculatedPatternDetails:
    """
    Result of one engine run.

    A run succeeded iff ``errors`` is empty.  Pieces produced before an error
    are still returned.
    """

    pattern_info: PatternInfo
    pieces: Mapping[str, CalculatedPieceDetails] = field(default_factory=dict)
    yarn_estimation: YarnEstimation | None = None
    warnings: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()
    debug: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "pieces", MappingProxyType(dict(self.pieces)))

    @property
    def success(self) -> bool:
        return not self.errors

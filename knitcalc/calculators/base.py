"""
Calculator contract shared by every piece calculator.

A calculator is any object satisfying the :class:`Calculator` protocol:

- ``calculator_type``: stable id used by the registry and by dependencies
- ``validate_input(context)``: errors block the calculator; warnings and
  missing data do not
- ``get_dependencies()``: calculator types that must run first in a pass
- ``calculate(context)``: pure function of the context

Calculators do not inherit from a common base class; the closed set of
implementations is dispatched through ``knitcalc.calculators.registry``.
The helpers below hold the logic the implementations share.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

from knitcalc.schemas.context import CalculationContext
from knitcalc.schemas.pieces import CalculatedPieceDetails, ShapingInstruction


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of ``validate_input``.  Only ``errors`` block calculation."""

    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    missing_data: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class CalculatorResult:
    """
    Outcome of ``calculate``.

    ``context_updates`` maps :class:`~knitcalc.schemas.context.InterdependencyFlags`
    field names to new values; it is the only way a calculator may ask for
    the shared context to change.
    """

    success: bool
    pieces: Mapping[str, CalculatedPieceDetails] = field(default_factory=dict)
    context_updates: Mapping[str, Any] = field(default_factory=dict)
    warnings: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "pieces", MappingProxyType(dict(self.pieces)))
        object.__setattr__(self, "context_updates", MappingProxyType(dict(self.context_updates)))

    @classmethod
    def ok(
        cls,
        pieces: Iterable[CalculatedPieceDetails],
        warnings: Iterable[str] = (),
        context_updates: Mapping[str, Any] | None = None,
    ) -> CalculatorResult:
        return cls(
            success=True,
            pieces={p.piece_key: p for p in pieces},
            context_updates=context_updates or {},
            warnings=tuple(warnings),
        )

    @classmethod
    def failed(cls, errors: Iterable[str], warnings: Iterable[str] = ()) -> CalculatorResult:
        return cls(success=False, errors=tuple(errors), warnings=tuple(warnings))


@runtime_checkable
class Calculator(Protocol):
    """Protocol that all piece calculators must satisfy."""

    calculator_type: str

    def validate_input(self, context: CalculationContext) -> ValidationResult:
        """Check the context before calculating."""
        ...

    def get_dependencies(self) -> tuple[str, ...]:
        """Calculator types that must run earlier in the same pass."""
        ...

    def calculate(self, context: CalculationContext) -> CalculatorResult:
        """Produce this calculator's pieces from *context*."""
        ...


# ── Shared helpers ─────────────────────────────────────────────────────────────


def unsupported_garment_error(calculator_type: str, garment_type: str) -> str:
    return f"{calculator_type} calculator does not apply to garment type {garment_type!r}"


def missing_measurements(context: CalculationContext, names: Iterable[str]) -> tuple[str, ...]:
    """Return the names in *names* that have no finished measurement."""
    return tuple(name for name in names if not context.has_measurement(name))


def stitch_counts_at_rows(
    start_count: int, shaping: Iterable[ShapingInstruction]
) -> dict[int, int]:
    """Sparse row → stitch-count checkpoints for a piece.

    Records *start_count* at row 0 and the running count at the start and end
    of every shaping region, applying regions in row order.
    """
    counts = {0: start_count}
    current = start_count
    for instruction in sorted(shaping, key=lambda s: (s.start_row, s.end_row)):
        counts.setdefault(instruction.start_row, current)
        current += instruction.stitch_count_change
        counts[instruction.end_row] = current
    return counts


def prefixed(piece_name: str, warnings: Iterable[str]) -> list[str]:
    """Prefix distributor warnings with the piece they came from."""
    return [f"{piece_name}: {w}" for w in warnings]

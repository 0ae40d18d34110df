"""
Interdependency resolver: cross-piece consistency checks after each pass.

Three independent checks run over the pieces accumulated so far:

1. Raglan line length: for raglan construction, the body's armhole depth
   and the sleeve's cap height must agree within 1 cm; otherwise the
   average becomes the raglan target length.
2. Armhole width: the width removed at the body armhole and the sleeve's
   finished width must agree within 2 cm; otherwise the average becomes the
   armhole target width.
3. Neckline/shoulder ratio: a neckline wider than 70% of the shoulder width
   is reported, but sets no flag.

Checks only ever set flags, so running them again over the same pieces is a
no-op.  Lengths are converted with the run's gauge.  The resolver never
raises: an unexpected failure is reported in the result and the incoming
context is returned unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from knitcalc.schemas.context import CalculationContext
from knitcalc.schemas.pieces import CalculatedPieceDetails, ShapingInstruction, ShapingType
from knitcalc.utilities.conversion import row_count_to_physical, stitch_count_to_physical

logger = logging.getLogger(__name__)

_BODY_KEYS = ("frontBody", "backBody")
_SLEEVE_KEYS = ("leftSleeve", "rightSleeve")
_NECKLINE_KEY = "necklineShaping"


@dataclass(frozen=True)
class InterdependencyResolutionResult:
    """Audit trail of one resolver pass."""

    success: bool
    resolved_context: CalculationContext
    actions: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()
    changed: bool = False


@dataclass(frozen=True)
class ResolverTolerances:
    raglan_length_cm: float = 1.0
    armhole_width_cm: float = 2.0
    neckline_shoulder_ratio: float = 0.7


@runtime_checkable
class Resolver(Protocol):
    """Protocol that all interdependency resolvers must satisfy."""

    def resolve(
        self,
        context: CalculationContext,
        pieces: Mapping[str, CalculatedPieceDetails],
    ) -> InterdependencyResolutionResult:
        """Check *pieces* against each other and return a possibly updated context."""
        ...


@dataclass
class _Findings:
    changes: dict[str, Any] = field(default_factory=dict)
    actions: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class InterdependencyResolver:
    """The built-in resolver running the raglan, armhole and neckline checks."""

    def __init__(self, tolerances: ResolverTolerances | None = None) -> None:
        self.tolerances = tolerances or ResolverTolerances()

    def resolve(
        self,
        context: CalculationContext,
        pieces: Mapping[str, CalculatedPieceDetails],
    ) -> InterdependencyResolutionResult:
        findings = _Findings()
        try:
            self._check_raglan(context, pieces, findings)
            self._check_armhole_width(context, pieces, findings)
            self._check_neckline(context, pieces, findings)
            flags = context.interdependencies.merge(**findings.changes)
        except Exception as exc:
            logger.exception("Interdependency resolution failed")
            return InterdependencyResolutionResult(
                success=False,
                resolved_context=context,
                errors=(f"Interdependency resolution failed: {exc}",),
            )

        changed = flags != context.interdependencies
        for action in findings.actions:
            logger.debug("Interdependency action: %s", action)
        return InterdependencyResolutionResult(
            success=True,
            resolved_context=context.with_flags(flags),
            actions=tuple(findings.actions),
            warnings=tuple(findings.warnings),
            changed=changed,
        )

    # ── Checks ─────────────────────────────────────────────────────────────────

    def _check_raglan(
        self,
        context: CalculationContext,
        pieces: Mapping[str, CalculatedPieceDetails],
        findings: _Findings,
    ) -> None:
        body_structure = context.pattern_state.body_structure
        if body_structure is None or not body_structure.is_raglan:
            return

        if body_structure.parameters.get("armholeRequiresRecalculation"):
            findings.changes["armhole_recalculation_required"] = True
            findings.actions.append("Flagged armhole shaping for recalculation")

        body = _first(pieces, _BODY_KEYS)
        sleeve = _first(pieces, _SLEEVE_KEYS)
        if body is None or sleeve is None:
            return

        armhole = body.shaping_of(ShapingType.ARMHOLE)
        cap = sleeve.shaping_of(ShapingType.SLEEVE_CAP)
        if not armhole or not cap:
            return

        armhole_depth = row_count_to_physical(_row_span(armhole), context.gauge)
        cap_height = row_count_to_physical(_row_span(cap), context.gauge)
        if abs(armhole_depth - cap_height) > self.tolerances.raglan_length_cm:
            target = (armhole_depth + cap_height) / 2
            findings.changes["raglan_requires_adjustment"] = True
            findings.changes["raglan_target_length_cm"] = target
            findings.warnings.append(
                f"Raglan line length mismatch: armhole depth {armhole_depth:.1f} cm, "
                f"sleeve cap height {cap_height:.1f} cm"
            )
            findings.actions.append(f"Set raglan target length to {target:.1f} cm")

    def _check_armhole_width(
        self,
        context: CalculationContext,
        pieces: Mapping[str, CalculatedPieceDetails],
        findings: _Findings,
    ) -> None:
        body = _first(pieces, _BODY_KEYS)
        sleeve = _first(pieces, _SLEEVE_KEYS)
        if body is None or sleeve is None:
            return
        armhole = body.shaping_of(ShapingType.ARMHOLE)
        if not armhole:
            return

        armhole_stitches = abs(sum(s.stitch_count_change for s in armhole))
        armhole_width = stitch_count_to_physical(armhole_stitches, context.gauge)
        cap_width = sleeve.finished_dimensions.width_cm
        if abs(armhole_width - cap_width) > self.tolerances.armhole_width_cm:
            target = (armhole_width + cap_width) / 2
            findings.changes["armhole_width_adjustment"] = True
            findings.changes["armhole_target_width_cm"] = target
            findings.warnings.append(
                f"Armhole width mismatch: armhole {armhole_width:.1f} cm, "
                f"sleeve cap {cap_width:.1f} cm"
            )
            findings.actions.append(f"Set armhole target width to {target:.1f} cm")

    def _check_neckline(
        self,
        context: CalculationContext,
        pieces: Mapping[str, CalculatedPieceDetails],
        findings: _Findings,
    ) -> None:
        neckline = pieces.get(_NECKLINE_KEY)
        body = _first(pieces, _BODY_KEYS)
        if neckline is None or body is None:
            return
        shoulder_width = stitch_count_to_physical(body.final_stitch_count, context.gauge)
        neck_width = neckline.finished_dimensions.width_cm
        if neck_width > self.tolerances.neckline_shoulder_ratio * shoulder_width:
            findings.warnings.append(
                f"Neckline width {neck_width:.1f} cm exceeds "
                f"{self.tolerances.neckline_shoulder_ratio:.0%} of the shoulder width "
                f"{shoulder_width:.1f} cm"
            )


# ── Helpers ────────────────────────────────────────────────────────────────────


def _first(
    pieces: Mapping[str, CalculatedPieceDetails], keys: Iterable[str]
) -> CalculatedPieceDetails | None:
    for key in keys:
        if key in pieces:
            return pieces[key]
    return None


def _row_span(instructions: tuple[ShapingInstruction, ...]) -> int:
    """Rows from the start of the first instruction to the end of the last."""
    return max(s.end_row for s in instructions) - min(s.start_row for s in instructions)

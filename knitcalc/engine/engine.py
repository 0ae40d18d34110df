"""
PatternCalculationEngine: turns a pattern state into calculated pieces.

Run stages:

  1. validate_input()              → keywords lowercased first; error-only
                                     result on failure
  2. build_context()               → gauge per cm, finished = raw + ease
  3. select calculators            → from the engine configuration
  4. derive_calculator_order()     → topological order from dependencies
  5. bounded loop                  → run calculators, merge pieces, resolve
                                     interdependencies; repeat while the
                                     context changes, at most max_iterations
  6. assemble the result           → deduplicated warnings and errors,
                                     optional yarn estimate and debug data

The engine never raises to its caller: unexpected exceptions are logged and
reported as result errors.  Configuration, resolver and calculator map can
all be injected.
"""

from __future__ import annotations

import logging
import numbers
from collections.abc import Iterable, Mapping
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

import knitcalc.calculators  # noqa: F401 (registers the built-in calculators)
from knitcalc.calculators import registry
from knitcalc.calculators.base import Calculator
from knitcalc.calculators.ordering import derive_calculator_order
from knitcalc.config.loader import EngineConfig, get_engine_config
from knitcalc.engine.validator import validate_input
from knitcalc.engine.yarn import estimate_yarn
from knitcalc.resolver.interdependency import (
    InterdependencyResolver,
    Resolver,
    ResolverTolerances,
)
from knitcalc.schemas.context import CalculationContext
from knitcalc.schemas.pattern_state import CalculationOptions, CoreCalculationInput, PatternState
from knitcalc.schemas.pieces import CalculatedPatternDetails, CalculatedPieceDetails, PatternInfo
from knitcalc.utilities.conversion import to_cm
from knitcalc.utilities.types import Gauge

logger = logging.getLogger(__name__)

UNKNOWN_GARMENT = "unknown"
DEFAULT_CRAFT = "knitting"


def build_context(
    pattern_state: PatternState,
    options: CalculationOptions,
    calculated_at: str = "",
) -> CalculationContext:
    """Build the run context from a validated *pattern_state*.

    Finished measurements are the raw measurements plus the matching ease
    delta, both converted to cm.  Ease for a measurement that was not taken
    is ignored, as are non-numeric values.

    Raises:
        ValueError: If the gauge or a unit is invalid.
    """
    gauge_section = pattern_state.gauge
    measurements = pattern_state.measurements
    if gauge_section is None or measurements is None:
        raise ValueError("gauge and measurements are required to build a context")

    gauge = Gauge.from_swatch(
        gauge_section.stitch_count,
        gauge_section.row_count,
        gauge_section.measured_over,
        gauge_section.unit or "cm",
    )

    finished: dict[str, float] = {}
    for name, value in measurements.measurements.items():
        if _is_number(value):
            finished[name] = to_cm(value, measurements.unit or "cm")

    ease = pattern_state.ease
    if ease is not None:
        for name, delta in ease.values.items():
            if name in finished and _is_number(delta):
                finished[name] += to_cm(delta, ease.unit or "cm")

    return CalculationContext(
        session_id=pattern_state.session_id or "",
        pattern_state=pattern_state,
        options=options,
        gauge=gauge,
        finished_measurements=finished,
        calculated_at=calculated_at,
    )


def _is_number(value: object) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _dedupe(messages: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(messages))


class PatternCalculationEngine:
    """
    Orchestrates calculators and the interdependency resolver for one pattern.

    Parameters
    ----------
    config:
        Engine settings; defaults to the packaged configuration singleton.
    resolver:
        Any object with a ``resolve(context, pieces)`` method; defaults to
        :class:`InterdependencyResolver` with the configured tolerances.
    calculators:
        Calculator instances keyed by type; defaults to a fresh instance of
        every enabled calculator from the registry.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        resolver: Resolver | None = None,
        calculators: Mapping[str, Calculator] | None = None,
    ) -> None:
        self.config = config or get_engine_config()
        self.resolver = resolver or InterdependencyResolver(
            ResolverTolerances(
                raglan_length_cm=self.config.raglan_length_tolerance_cm,
                armhole_width_cm=self.config.armhole_width_tolerance_cm,
                neckline_shoulder_ratio=self.config.neckline_shoulder_ratio,
            )
        )
        if calculators is None:
            calculators = {t: registry.get(t) for t in self.config.enabled_calculators}
        self.calculators: dict[str, Calculator] = dict(calculators)

    def calculate(self, calculation_input: CoreCalculationInput) -> CalculatedPatternDetails:
        """Calculate every piece of the garment described by *calculation_input*.

        Returns
        -------
        CalculatedPatternDetails
            Pieces produced, warnings and errors.  ``success`` is False when
            any error was reported; pieces produced before the error are
            still included.
        """
        calculated_at = datetime.now(timezone.utc).isoformat()
        try:
            return self._calculate(calculation_input, calculated_at)
        except Exception as exc:
            logger.exception("Pattern calculation failed")
            return self._error_result(
                calculation_input, calculated_at, [f"Pattern calculation failed: {exc}"]
            )

    # ── Stages ─────────────────────────────────────────────────────────────────

    def _calculate(
        self, calculation_input: CoreCalculationInput, calculated_at: str
    ) -> CalculatedPatternDetails:
        if calculation_input.pattern_state is not None:
            calculation_input = replace(
                calculation_input, pattern_state=calculation_input.pattern_state.normalized()
            )
        validation = validate_input(calculation_input)
        if not validation.is_valid:
            logger.info("Input validation failed with %d error(s)", len(validation.errors))
            return self._error_result(
                calculation_input, calculated_at, validation.errors, validation.warnings
            )

        state = calculation_input.pattern_state
        options = calculation_input.options
        context = build_context(state, options, calculated_at)

        warnings: list[str] = list(validation.warnings)
        errors: list[str] = []
        pieces: dict[str, CalculatedPieceDetails] = {}
        actions: list[str] = []

        active = self._select_calculators(context.garment_type, options, warnings, errors)
        try:
            order = derive_calculator_order(active, self.calculators)
        except ValueError as exc:
            errors.append(str(exc))
            order = []

        iterations = 0
        converged = True
        if order:
            logger.debug("Calculator order for %s: %s", context.garment_type, order)
            converged = False
            for iterations in range(1, self.config.max_iterations + 1):
                before = context
                context = self._run_pass(order, context, pieces, warnings, errors)
                changed = context.interdependencies != before.interdependencies
                if options.validate_interdependencies:
                    resolution = self.resolver.resolve(context, pieces)
                    warnings.extend(resolution.warnings)
                    errors.extend(resolution.errors)
                    actions.extend(resolution.actions)
                    if not resolution.success:
                        converged = True
                        break
                    context = resolution.resolved_context
                    changed = changed or resolution.changed
                logger.debug("Pass %d complete, context changed: %s", iterations, changed)
                if not changed:
                    converged = True
                    break

        if not converged:
            logger.warning(
                "Interdependency resolution did not converge in %d passes",
                self.config.max_iterations,
            )
            warnings.append(
                f"Maximum iterations ({self.config.max_iterations}) reached "
                "for interdependency resolution"
            )

        yarn = None
        if options.include_yarn_estimation:
            yarn = estimate_yarn(pieces, self.config)

        debug: dict[str, Any] | None = None
        if options.debug_mode:
            debug = {
                "iterations": iterations,
                "converged": converged,
                "calculator_order": list(order),
                "resolver_actions": list(actions),
                "interdependencies": context.interdependencies.as_dict(),
            }

        result = CalculatedPatternDetails(
            pattern_info=self._pattern_info(state, calculated_at),
            pieces=pieces,
            yarn_estimation=yarn,
            warnings=_dedupe(warnings),
            errors=_dedupe(errors),
            debug=debug,
        )
        logger.info(
            "Calculated %s: %d piece(s), %d pass(es), %d warning(s), %d error(s)",
            context.garment_type,
            len(result.pieces),
            iterations,
            len(result.warnings),
            len(result.errors),
        )
        return result

    def _select_calculators(
        self,
        garment_type: str,
        options: CalculationOptions,
        warnings: list[str],
        errors: list[str],
    ) -> list[str]:
        configured = self.config.calculators_for(garment_type)
        if not configured:
            message = f"No calculators available for garment type: {garment_type}"
            (errors if options.require_calculators else warnings).append(message)
            return []
        active = [t for t in configured if t in self.calculators]
        for calculator_type in configured:
            if calculator_type not in self.calculators:
                errors.append(f"Calculator not available: {calculator_type}")
        return active

    def _run_pass(
        self,
        order: list[str],
        context: CalculationContext,
        pieces: dict[str, CalculatedPieceDetails],
        warnings: list[str],
        errors: list[str],
    ) -> CalculationContext:
        """Run every calculator in *order* once, merging pieces by key."""
        for calculator_type in order:
            calculator = self.calculators[calculator_type]
            validation = calculator.validate_input(context)
            warnings.extend(validation.warnings)
            warnings.extend(
                f"{calculator_type}: missing {name} - using default"
                for name in validation.missing_data
            )
            if not validation.is_valid:
                errors.extend(validation.errors)
                continue

            try:
                result = calculator.calculate(context)
            except Exception as exc:
                logger.exception("Calculator %s raised", calculator_type)
                errors.append(f"{calculator_type} calculator failed: {exc}")
                continue

            warnings.extend(result.warnings)
            if not result.success:
                errors.extend(result.errors)
                continue
            pieces.update(result.pieces)
            if result.context_updates:
                try:
                    flags = context.interdependencies.merge(**result.context_updates)
                except KeyError as exc:
                    errors.append(f"{calculator_type}: {exc.args[0]}")
                else:
                    context = context.with_flags(flags)
        return context

    # ── Result helpers ─────────────────────────────────────────────────────────

    def _pattern_info(self, state: PatternState | None, calculated_at: str) -> PatternInfo:
        return PatternInfo(
            session_id=(state.session_id if state else None) or "",
            garment_type=(state.garment_type if state else None) or UNKNOWN_GARMENT,
            craft_type=(state.craft_type if state else None) or DEFAULT_CRAFT,
            calculated_at=calculated_at,
            schema_version=self.config.schema_version,
        )

    def _error_result(
        self,
        calculation_input: CoreCalculationInput | None,
        calculated_at: str,
        errors: Iterable[str],
        warnings: Iterable[str] = (),
    ) -> CalculatedPatternDetails:
        state = calculation_input.pattern_state if calculation_input is not None else None
        return CalculatedPatternDetails(
            pattern_info=self._pattern_info(state, calculated_at),
            warnings=_dedupe(warnings),
            errors=_dedupe(errors),
        )

"""
Input schema: the pattern-definition session state handed to the engine.

These records carry user data as entered.  Values are deliberately NOT
range-checked here: a zero gauge or a negative measurement is a user error
that the boundary validator (``knitcalc.engine.validator``) reports in the
result, not a programming error that should raise at construction.  Only the
shape is fixed: mappings are frozen into ``MappingProxyType`` so a pattern
state can be shared across passes without being mutated.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

CRAFT_TYPES = ("knitting", "crochet")
UNITS = ("cm", "inch")


def _freeze(mapping: Mapping[str, Any] | None) -> MappingProxyType:
    return MappingProxyType(dict(mapping or {}))


def _keyword(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


@dataclass(frozen=True)
class GaugeSection:
    """Swatch gauge as entered: counts over ``measured_over`` units."""

    stitch_count: float | None
    row_count: float | None
    unit: str | None = "cm"
    measured_over: float = 1.0
    is_completed: bool = True


@dataclass(frozen=True)
class MeasurementsSection:
    """Body measurements by name (``bust``, ``length``, ``headCircumference``, ...)."""

    measurements: Mapping[str, float | None] = field(default_factory=dict)
    unit: str | None = "cm"
    is_completed: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "measurements", _freeze(self.measurements))


@dataclass(frozen=True)
class EaseSection:
    """Signed ease deltas added to the matching measurement."""

    type: str | None = None
    values: Mapping[str, float | None] = field(default_factory=dict)
    unit: str | None = "cm"
    is_completed: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", _freeze(self.values))


@dataclass(frozen=True)
class BodyStructure:
    """Construction choice, e.g. ``"set-in"`` or ``"raglan"``, plus free parameters."""

    construction_method: str | None = None
    parameters: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", _freeze(self.parameters))

    @property
    def is_raglan(self) -> bool:
        return "raglan" in (self.construction_method or "").lower()

    @property
    def is_hammer_sleeve(self) -> bool:
        return "hammer" in (self.construction_method or "").lower()


@dataclass(frozen=True)
class SleevesSection:
    style: str = "set-in"
    length: str = "long"
    custom_length_cm: float | None = None


@dataclass(frozen=True)
class NecklineSection:
    style: str = "round"


@dataclass(frozen=True)
class YarnSection:
    weight: str | None = None
    is_completed: bool = True


@dataclass(frozen=True)
class PatternState:
    """
    Everything the user has entered for one pattern session.

    Attributes:
        session_id: Identifier echoed back in the result.
        craft_type: ``"knitting"`` or ``"crochet"``.
        garment_type: ``"sweater"``, ``"cardigan"``, ``"hat"``, ``"beanie"``,
            ``"scarf"`` or ``"shawl"``. Unknown types are accepted and yield
            no pieces.
        gauge / measurements / ease: Required sections; ``None`` when absent.
        body_structure / sleeves / neckline / yarn: Optional sections.
    """

    session_id: str | None
    craft_type: str | None
    garment_type: str | None
    gauge: GaugeSection | None = None
    measurements: MeasurementsSection | None = None
    ease: EaseSection | None = None
    body_structure: BodyStructure | None = None
    sleeves: SleevesSection | None = None
    neckline: NecklineSection | None = None
    yarn: YarnSection | None = None

    def normalized(self) -> PatternState:
        """Return a copy with craft, garment and style keywords lowercased.

        Keywords are matched against lowercase tables everywhere downstream,
        so ``"Sweater"`` and ``"V-Neck"`` select the same calculators and
        proportions as ``"sweater"`` and ``"v-neck"``.
        """
        sleeves = self.sleeves
        if sleeves is not None:
            sleeves = replace(
                sleeves, style=_keyword(sleeves.style), length=_keyword(sleeves.length)
            )
        neckline = self.neckline
        if neckline is not None:
            neckline = replace(neckline, style=_keyword(neckline.style))
        return replace(
            self,
            craft_type=_keyword(self.craft_type),
            garment_type=_keyword(self.garment_type),
            sleeves=sleeves,
            neckline=neckline,
        )


@dataclass(frozen=True)
class CalculationOptions:
    """Per-call switches.

    Attributes:
        include_detailed_shaping: Attach the row-by-row breakdown to each
            shaping instruction.
        include_yarn_estimation: Add a yarn estimate to the result.
        validate_interdependencies: Run the interdependency resolver after
            each calculator pass.
        debug_mode: Attach iteration count and resolver actions to the result.
        require_calculators: Treat a garment type with no applicable
            calculators as an error instead of a warning.
    """

    include_detailed_shaping: bool = False
    include_yarn_estimation: bool = False
    validate_interdependencies: bool = True
    debug_mode: bool = False
    require_calculators: bool = False


@dataclass(frozen=True)
class CoreCalculationInput:
    """Complete input bundle for :class:`~knitcalc.engine.engine.PatternCalculationEngine`."""

    pattern_state: PatternState | None
    options: CalculationOptions = field(default_factory=CalculationOptions)

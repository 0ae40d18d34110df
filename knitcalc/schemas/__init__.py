"""schemas: input, context and output records."""

from knitcalc.schemas.context import CalculationContext, InterdependencyFlags
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
    FinishedDimensions,
    PatternInfo,
    PieceYarn,
    ShapingInstruction,
    ShapingType,
    YarnEstimation,
)

__all__ = [
    # input
    "BodyStructure",
    "CalculationOptions",
    "CoreCalculationInput",
    "EaseSection",
    "GaugeSection",
    "MeasurementsSection",
    "NecklineSection",
    "PatternState",
    "SleevesSection",
    "YarnSection",
    # context
    "CalculationContext",
    "InterdependencyFlags",
    # output
    "CalculatedPatternDetails",
    "CalculatedPieceDetails",
    "FinishedDimensions",
    "PatternInfo",
    "PieceYarn",
    "ShapingInstruction",
    "ShapingType",
    "YarnEstimation",
]

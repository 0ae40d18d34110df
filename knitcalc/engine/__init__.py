"""engine: the pattern calculation engine public API."""

from knitcalc.engine.engine import PatternCalculationEngine, build_context
from knitcalc.engine.validator import validate_input
from knitcalc.engine.yarn import estimate_yarn

__all__ = ["PatternCalculationEngine", "build_context", "estimate_yarn", "validate_input"]

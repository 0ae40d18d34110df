"""calculators: piece calculators and their registry.

Importing this package registers every built-in calculator.
"""

from knitcalc.calculators import registry
from knitcalc.calculators.accessory import AccessoryCalculator
from knitcalc.calculators.base import Calculator, CalculatorResult, ValidationResult
from knitcalc.calculators.body import BodyCalculator
from knitcalc.calculators.hammer_sleeve import HammerSleeveCalculator
from knitcalc.calculators.neckline import NecklineCalculator
from knitcalc.calculators.ordering import derive_calculator_order
from knitcalc.calculators.raglan import RaglanCalculator
from knitcalc.calculators.sleeve import SleeveCalculator

for _factory in (
    BodyCalculator,
    SleeveCalculator,
    NecklineCalculator,
    RaglanCalculator,
    HammerSleeveCalculator,
    AccessoryCalculator,
):
    registry.register(_factory.calculator_type, _factory)

__all__ = [
    "AccessoryCalculator",
    "BodyCalculator",
    "Calculator",
    "CalculatorResult",
    "HammerSleeveCalculator",
    "NecklineCalculator",
    "RaglanCalculator",
    "SleeveCalculator",
    "ValidationResult",
    "derive_calculator_order",
]

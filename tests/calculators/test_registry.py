"""Tests for calculators.registry: calculator factory registry."""

from __future__ import annotations

import pytest

import knitcalc.calculators  # noqa: F401 (triggers registration of built-in calculators)
from knitcalc.calculators.base import Calculator
from knitcalc.calculators.body import BodyCalculator
from knitcalc.calculators.registry import _REGISTRY, get, list_types, register


class TestListTypes:
    def test_includes_built_ins(self):
        assert {"body", "sleeve", "neckline", "raglan", "hammer_sleeve", "accessory"} <= set(
            list_types()
        )

    def test_returns_sorted(self):
        types = list_types()
        assert types == sorted(types)


class TestGet:
    @pytest.mark.parametrize(
        "calculator_type", ["body", "sleeve", "neckline", "raglan", "hammer_sleeve", "accessory"]
    )
    def test_satisfies_protocol(self, calculator_type):
        calculator = get(calculator_type)
        assert isinstance(calculator, Calculator)
        assert calculator.calculator_type == calculator_type

    def test_returns_fresh_instance_each_call(self):
        assert get("body") is not get("body")

    def test_unknown_type_raises_key_error(self):
        with pytest.raises(KeyError, match="Unknown calculator type: 'nonexistent'"):
            get("nonexistent")


class TestRegister:
    def test_register_custom_factory(self):
        register("test-custom-body", BodyCalculator)
        try:
            assert "test-custom-body" in list_types()
            assert isinstance(get("test-custom-body"), BodyCalculator)
        finally:
            _REGISTRY.pop("test-custom-body")

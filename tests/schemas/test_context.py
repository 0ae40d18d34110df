"""Tests for schemas.context: InterdependencyFlags and CalculationContext."""

from __future__ import annotations

import pytest

from knitcalc.schemas.context import CalculationContext, InterdependencyFlags
from knitcalc.schemas.pattern_state import CalculationOptions, PatternState
from knitcalc.utilities.types import Gauge


def _context(**overrides) -> CalculationContext:
    fields = dict(
        session_id="s-1",
        pattern_state=PatternState(session_id="s-1", craft_type="knitting", garment_type="hat"),
        options=CalculationOptions(),
        gauge=Gauge(stitches_per_cm=1.6, rows_per_cm=2.0),
        finished_measurements={"headCircumference": 56.0},
    )
    fields.update(overrides)
    return CalculationContext(**fields)


class TestInterdependencyFlags:
    def test_defaults_are_unset(self):
        flags = InterdependencyFlags()
        assert not flags.raglan_requires_adjustment
        assert flags.raglan_target_length_cm is None
        assert flags.armhole_target_width_cm is None

    def test_merge_returns_new_value(self):
        flags = InterdependencyFlags()
        merged = flags.merge(raglan_requires_adjustment=True, raglan_target_length_cm=21.5)
        assert merged.raglan_target_length_cm == 21.5
        assert flags.raglan_target_length_cm is None

    def test_merge_unknown_flag_raises(self):
        with pytest.raises(KeyError, match="Unknown interdependency flag"):
            InterdependencyFlags().merge(armholeDepth=3)

    def test_structural_equality(self):
        a = InterdependencyFlags().merge(armhole_width_adjustment=True)
        b = InterdependencyFlags(armhole_width_adjustment=True)
        assert a == b
        assert a != InterdependencyFlags()

    def test_as_dict(self):
        assert InterdependencyFlags().as_dict() == {
            "raglan_requires_adjustment": False,
            "raglan_target_length_cm": None,
            "armhole_recalculation_required": False,
            "armhole_width_adjustment": False,
            "armhole_target_width_cm": None,
        }


class TestCalculationContext:
    def test_measurement_lookup(self):
        context = _context()
        assert context.measurement("headCircumference") == 56.0
        assert context.measurement("hatHeight", 20.0) == 20.0
        assert context.measurement("hatHeight") is None

    def test_has_measurement(self):
        context = _context()
        assert context.has_measurement("headCircumference")
        assert not context.has_measurement("bust")

    def test_measurements_are_read_only(self):
        context = _context()
        with pytest.raises(TypeError):
            context.finished_measurements["bust"] = 90.0  # type: ignore[index]

    def test_measurements_are_copied(self):
        source = {"headCircumference": 56.0}
        context = _context(finished_measurements=source)
        source["headCircumference"] = 10.0
        assert context.measurement("headCircumference") == 56.0

    def test_garment_type_defaults_to_empty(self):
        context = _context(
            pattern_state=PatternState(session_id="s", craft_type="knitting", garment_type=None)
        )
        assert context.garment_type == ""

    def test_with_same_flags_returns_self(self):
        context = _context()
        assert context.with_flags(InterdependencyFlags()) is context

    def test_with_new_flags_returns_new_context(self):
        context = _context()
        flags = InterdependencyFlags(armhole_width_adjustment=True)
        updated = context.with_flags(flags)
        assert updated is not context
        assert updated.interdependencies == flags
        assert context.interdependencies == InterdependencyFlags()

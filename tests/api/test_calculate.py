"""Tests for api.calculate: the camelCase service boundary."""

from __future__ import annotations

import asyncio
import json

import pytest

from knitcalc.api.calculate import (
    calculate_pattern,
    calculate_pattern_async,
    parse_input,
    to_dict,
)
from knitcalc.config.loader import EngineConfig
from knitcalc.engine.engine import PatternCalculationEngine

# ── Shared fixtures ────────────────────────────────────────────────────────────

_HAT_STATE = {
    "sessionId": "api-hat",
    "craftType": "knitting",
    "garmentType": "hat",
    "gauge": {"stitchCount": 16, "rowCount": 20, "unit": "cm", "measuredOver": 10},
    "measurements": {"measurements": {"headCircumference": 56}, "unit": "cm"},
    "ease": {"type": "standard", "values": {}},
    "yarn": {"weight": "worsted"},
}

_SWEATER_STATE = {
    "sessionId": "api-sweater",
    "craftType": "knitting",
    "garmentType": "sweater",
    "gauge": {"stitchCount": 20, "rowCount": 28, "unit": "cm", "measuredOver": 10},
    "measurements": {
        "measurements": {"bust": 100, "length": 60, "waist": 80},
        "unit": "cm",
    },
    "ease": {"type": "standard", "values": {}},
    "bodyStructure": {"constructionMethod": "set-in"},
    "sleeves": {"style": "set-in", "length": "long"},
    "neckline": {"style": "round"},
    "yarn": {"weight": "worsted"},
}


def _payload(state=_HAT_STATE, **options):
    return {"patternState": state, "options": options}


# ── parse_input ────────────────────────────────────────────────────────────────


class TestParseInput:
    def test_sections(self):
        state = parse_input(_payload(_SWEATER_STATE)).pattern_state
        assert state.session_id == "api-sweater"
        assert state.gauge.stitch_count == 20
        assert state.gauge.measured_over == 10
        assert state.measurements.measurements["bust"] == 100
        assert state.body_structure.construction_method == "set-in"
        assert state.sleeves.length == "long"
        assert state.neckline.style == "round"
        assert state.yarn.weight == "worsted"

    def test_options_map_from_camel_case(self):
        options = parse_input(
            _payload(includeYarnEstimation=True, debugMode=True, validateInterdependencies=False)
        ).options
        assert options.include_yarn_estimation
        assert options.debug_mode
        assert not options.validate_interdependencies
        assert not options.include_detailed_shaping

    def test_absent_sections_are_none(self):
        state = parse_input({"patternState": {"sessionId": "x"}}).pattern_state
        assert state.gauge is None
        assert state.measurements is None
        assert state.sleeves is None

    def test_missing_pattern_state(self):
        assert parse_input({}).pattern_state is None

    def test_non_numeric_values_become_none(self):
        state = {
            **_HAT_STATE,
            "gauge": {"stitchCount": "sixteen", "rowCount": True, "unit": "cm"},
            "measurements": {"measurements": {"headCircumference": "big"}},
        }
        parsed = parse_input(_payload(state)).pattern_state
        assert parsed.gauge.stitch_count is None
        assert parsed.gauge.row_count is None
        assert parsed.measurements.measurements["headCircumference"] is None

    def test_section_defaults(self):
        state = {**_SWEATER_STATE, "sleeves": {"customLength": 45}, "neckline": {}}
        parsed = parse_input(_payload(state)).pattern_state
        assert parsed.sleeves.style == "set-in"
        assert parsed.sleeves.custom_length_cm == 45
        assert parsed.neckline.style == "round"

    def test_custom_length_uses_measurement_unit(self):
        state = {
            **_SWEATER_STATE,
            "measurements": {"measurements": {"bust": 40, "length": 24}, "unit": "inch"},
            "sleeves": {"length": "custom", "customLength": 20},
        }
        parsed = parse_input(_payload(state)).pattern_state
        assert parsed.sleeves.custom_length_cm == pytest.approx(50.8)

    def test_custom_length_with_unknown_unit_is_left_for_the_validator(self):
        state = {
            **_SWEATER_STATE,
            "measurements": {"measurements": {"bust": 100}, "unit": "yards"},
            "sleeves": {"length": "custom", "customLength": 20},
        }
        assert parse_input(_payload(state)).pattern_state.sleeves.custom_length_cm == 20

    def test_capitalised_garment_is_calculated(self):
        result = calculate_pattern(_payload({**_HAT_STATE, "garmentType": "Hat"}))
        assert set(result["pieces"]) == {"hat"}
        assert result["patternInfo"]["garmentType"] == "hat"


# ── calculate_pattern ──────────────────────────────────────────────────────────


class TestCalculatePattern:
    @pytest.fixture(scope="class")
    def hat(self):
        return calculate_pattern(_payload(includeYarnEstimation=True))

    def test_pattern_info(self, hat):
        info = hat["patternInfo"]
        assert info["sessionId"] == "api-hat"
        assert info["garmentType"] == "hat"
        assert info["craftType"] == "knitting"
        assert info["schemaVersion"] == "1.0.0"
        assert info["calculatedAt"]

    def test_piece_is_camel_case(self, hat):
        piece = hat["pieces"]["hat"]
        assert piece["pieceKey"] == "hat"
        assert piece["castOnStitches"] == 90
        assert piece["lengthInRows"] == 40
        assert piece["finalStitchCount"] == 0
        assert set(piece["finishedDimensions"]) >= {"width_cm", "length_cm"}

    def test_shaping_entries(self, hat):
        crown = hat["pieces"]["hat"]["shaping"][0]
        assert crown["type"] == "crown"
        assert crown["startRow"] == 32
        assert crown["stitchCountChange"] == -84
        assert crown["repetitions"] == 7
        assert "detail" not in crown

    def test_stitch_counts_have_string_keys(self, hat):
        counts = hat["pieces"]["hat"]["stitchCountsAtRows"]
        assert counts["0"] == 90
        assert list(counts) == sorted(counts, key=int)

    def test_yarn_estimation(self, hat):
        yarn = hat["yarnEstimation"]
        assert set(yarn) == {
            "totalLength",
            "totalWeight",
            "byPiece",
            "safetyMargin",
            "confidence",
            "factors",
        }
        assert yarn["byPiece"]["hat"]["percentage"] == 100.0

    def test_clean_run_omits_messages(self, hat):
        assert "errors" not in hat
        assert "debug" not in hat

    def test_result_is_json_serialisable(self):
        result = calculate_pattern(_payload(_SWEATER_STATE, debugMode=True))
        assert json.loads(json.dumps(result)) == result
        assert result["debug"]["calculator_order"][0] == "body"

    def test_detailed_shaping(self):
        result = calculate_pattern(_payload(includeDetailedShaping=True))
        crown = result["pieces"]["hat"]["shaping"][0]
        assert crown["detail"]
        assert all(set(line) == {"actionRowOffset", "instruction"} for line in crown["detail"])

    def test_invalid_payload_reports_errors(self):
        result = calculate_pattern({"patternState": {"sessionId": "bad"}})
        assert result["pieces"] == {}
        assert "Gauge information is required" in result["errors"]
        assert result["patternInfo"]["garmentType"] == "unknown"

    def test_injected_engine_precision(self):
        engine = PatternCalculationEngine(config=EngineConfig(dimension_precision=0))
        result = calculate_pattern(_payload(_SWEATER_STATE), engine)
        width = result["pieces"]["frontBody"]["finishedDimensions"]["width_cm"]
        assert width == round(width)


class TestToDict:
    def test_default_precision(self):
        details = PatternCalculationEngine().calculate(parse_input(_payload()))
        assert to_dict(details)["pieces"]["hat"]["castOnStitches"] == 90


class TestCalculatePatternAsync:
    def test_matches_sync_result(self):
        result = asyncio.run(calculate_pattern_async(_payload()))
        assert result["pieces"]["hat"]["castOnStitches"] == 90

    def test_concurrent_calls_are_independent(self):
        async def run_both():
            return await asyncio.gather(
                calculate_pattern_async(_payload()),
                calculate_pattern_async(_payload(_SWEATER_STATE)),
            )

        hat, sweater = asyncio.run(run_both())
        assert set(hat["pieces"]) == {"hat"}
        assert "frontBody" in sweater["pieces"]

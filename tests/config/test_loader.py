"""
Tests for config.loader: EngineConfig and the YAML loader.

Covers:
  - Packaged defaults load and match the dataclass defaults
  - Loading from a custom file, with partial sections
  - Missing files, malformed YAML and invalid settings
  - with_overrides() and calculators_for()
"""

from __future__ import annotations

from types import MappingProxyType

import pytest

from knitcalc.config.loader import (
    DEFAULT_CONFIG_PATH,
    EngineConfig,
    get_engine_config,
    load_engine_config,
)


def _write(tmp_path, text: str):
    path = tmp_path / "engine.yaml"
    path.write_text(text)
    return path


# ── Packaged defaults ──────────────────────────────────────────────────────────


class TestPackagedConfig:
    def test_file_exists(self):
        assert DEFAULT_CONFIG_PATH.is_file()

    def test_matches_dataclass_defaults(self):
        assert load_engine_config() == EngineConfig()

    def test_singleton(self):
        assert get_engine_config() is get_engine_config()

    def test_values(self):
        config = get_engine_config()
        assert config.max_iterations == 5
        assert config.yarn_safety_margin == 0.15
        assert config.stitches_per_meter == 40.0
        assert config.neckline_shoulder_ratio == 0.7

    def test_garment_map_is_read_only(self):
        assert isinstance(get_engine_config().garment_calculators, MappingProxyType)


# ── Custom files ───────────────────────────────────────────────────────────────


class TestLoadEngineConfig:
    def test_partial_file_uses_defaults(self, tmp_path):
        text = "max_iterations: 3\nyarn:\n  meters_per_gram: 1.5\n"
        config = load_engine_config(_write(tmp_path, text))
        assert config.max_iterations == 3
        assert config.meters_per_gram == 1.5
        assert config.stitches_per_meter == 40.0
        assert config.calculators_for("hat") == ("accessory",)

    def test_empty_file_is_all_defaults(self, tmp_path):
        assert load_engine_config(_write(tmp_path, "")) == EngineConfig()

    def test_custom_garment_map(self, tmp_path):
        text = "enabled_calculators: [accessory]\ngarment_calculators:\n  mitten: [accessory]\n"
        config = load_engine_config(_write(tmp_path, text))
        assert config.calculators_for("mitten") == ("accessory",)
        assert config.calculators_for("sweater") == ()

    def test_accepts_str_path(self, tmp_path):
        path = _write(tmp_path, "schema_version: '2.0.0'\n")
        assert load_engine_config(str(path)).schema_version == "2.0.0"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Engine config file not found"):
            load_engine_config(tmp_path / "absent.yaml")

    def test_malformed_yaml(self, tmp_path):
        with pytest.raises(ValueError, match="Failed to parse engine config file"):
            load_engine_config(_write(tmp_path, "max_iterations: [1, 2\n"))

    def test_wrong_shape(self, tmp_path):
        with pytest.raises(ValueError, match="Invalid engine config"):
            load_engine_config(_write(tmp_path, "yarn: 12\n"))

    def test_zero_iterations_rejected(self, tmp_path):
        with pytest.raises(ValueError, match="max_iterations must be >= 1"):
            load_engine_config(_write(tmp_path, "max_iterations: 0\n"))

    def test_garment_using_disabled_calculator_rejected(self, tmp_path):
        text = "enabled_calculators: [body]\ngarment_calculators:\n  hat: [accessory]\n"
        with pytest.raises(ValueError, match="not enabled"):
            load_engine_config(_write(tmp_path, text))


# ── EngineConfig ───────────────────────────────────────────────────────────────


class TestEngineConfig:
    def test_frozen(self):
        with pytest.raises(AttributeError):
            EngineConfig().max_iterations = 9

    @pytest.mark.parametrize(
        "changes, match",
        [
            ({"max_iterations": 0}, "max_iterations"),
            ({"yarn_safety_margin": -0.1}, "yarn_safety_margin"),
            ({"stitches_per_meter": 0}, "must be positive"),
            ({"meters_per_gram": -2.0}, "must be positive"),
        ],
    )
    def test_invalid_values(self, changes, match):
        with pytest.raises(ValueError, match=match):
            EngineConfig(**changes)

    def test_with_overrides_returns_new_config(self):
        base = EngineConfig()
        changed = base.with_overrides(max_iterations=2)
        assert changed.max_iterations == 2
        assert base.max_iterations == 5

    def test_with_overrides_revalidates(self):
        with pytest.raises(ValueError):
            EngineConfig().with_overrides(garment_calculators={"hat": ("knitting-machine",)})

    def test_calculators_for(self):
        config = EngineConfig()
        assert config.calculators_for("cardigan") == (
            "body",
            "sleeve",
            "neckline",
            "raglan",
            "hammer_sleeve",
        )
        assert config.calculators_for("sock") == ()

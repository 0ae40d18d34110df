"""
Engine configuration: loads engine defaults from YAML at startup.

The configuration is a module-level singleton; call get_engine_config() to
obtain it.  It is loaded and validated once at import time and never written
afterwards.  Instantiate a different configuration with
load_engine_config(path) or derive one with EngineConfig.with_overrides().
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, cast

import yaml

_DATA_DIR = Path(__file__).parent / "data"
DEFAULT_CONFIG_PATH = _DATA_DIR / "engine.yaml"

_DEFAULT_ENABLED = ("body", "sleeve", "neckline", "raglan", "hammer_sleeve", "accessory")
_SWEATER = ("body", "sleeve", "neckline", "raglan", "hammer_sleeve")
_DEFAULT_GARMENT_CALCULATORS: dict[str, tuple[str, ...]] = {
    "sweater": _SWEATER,
    "cardigan": _SWEATER,
    "hat": ("accessory",),
    "beanie": ("accessory",),
    "scarf": ("accessory",),
    "shawl": ("accessory",),
}


@dataclass(frozen=True)
class EngineConfig:
    """
    Read-only engine settings.

    ``garment_calculators`` maps each supported garment type to the ordered
    calculator types that apply to it; every calculator named there must be
    listed in ``enabled_calculators``.
    """

    schema_version: str = "1.0.0"
    max_iterations: int = 5
    enabled_calculators: tuple[str, ...] = _DEFAULT_ENABLED
    garment_calculators: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: dict(_DEFAULT_GARMENT_CALCULATORS)
    )
    yarn_safety_margin: float = 0.15
    dimension_precision: int = 1
    stitches_per_meter: float = 40.0
    meters_per_gram: float = 2.0
    raglan_length_tolerance_cm: float = 1.0
    armhole_width_tolerance_cm: float = 2.0
    neckline_shoulder_ratio: float = 0.7

    def __post_init__(self) -> None:
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if self.yarn_safety_margin < 0:
            raise ValueError("yarn_safety_margin must be >= 0")
        if self.stitches_per_meter <= 0 or self.meters_per_gram <= 0:
            raise ValueError("stitches_per_meter and meters_per_gram must be positive")
        object.__setattr__(self, "enabled_calculators", tuple(self.enabled_calculators))
        garments = {k: tuple(v) for k, v in self.garment_calculators.items()}
        for garment, calculators in garments.items():
            unknown = [c for c in calculators if c not in self.enabled_calculators]
            if unknown:
                raise ValueError(
                    f"garment {garment!r} uses calculators that are not enabled: {unknown}"
                )
        object.__setattr__(self, "garment_calculators", MappingProxyType(garments))

    def calculators_for(self, garment_type: str) -> tuple[str, ...]:
        """Return the enabled calculators for *garment_type*; empty if unsupported."""
        return self.garment_calculators.get(garment_type, ())

    def with_overrides(self, **changes: Any) -> EngineConfig:
        """Return a copy with *changes* applied (validated again)."""
        return replace(self, **changes)


def load_engine_config(path: Path | str = DEFAULT_CONFIG_PATH) -> EngineConfig:
    """Load an :class:`EngineConfig` from a YAML file.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    ValueError
        If the file is not valid YAML or holds invalid settings.
    """
    path = Path(path)
    try:
        with open(path) as f:
            data = cast(dict[str, Any], yaml.safe_load(f)) or {}
    except FileNotFoundError:
        raise FileNotFoundError(f"Engine config file not found: {path}") from None
    except yaml.YAMLError as exc:
        raise ValueError(f"Failed to parse engine config file {path}: {exc}") from exc

    try:
        margins = data.get("safety_margins", {})
        precision = data.get("precision", {})
        yarn = data.get("yarn", {})
        tolerances = data.get("tolerances", {})
        return EngineConfig(
            schema_version=str(data.get("schema_version", "1.0.0")),
            max_iterations=int(data.get("max_iterations", 5)),
            enabled_calculators=tuple(data.get("enabled_calculators") or _DEFAULT_ENABLED),
            garment_calculators={
                garment: tuple(calculators)
                for garment, calculators in (
                    data.get("garment_calculators") or _DEFAULT_GARMENT_CALCULATORS
                ).items()
            },
            yarn_safety_margin=float(margins.get("yarn", 0.15)),
            dimension_precision=int(precision.get("dimensions", 1)),
            stitches_per_meter=float(yarn.get("stitches_per_meter", 40)),
            meters_per_gram=float(yarn.get("meters_per_gram", 2.0)),
            raglan_length_tolerance_cm=float(tolerances.get("raglan_length_cm", 1.0)),
            armhole_width_tolerance_cm=float(tolerances.get("armhole_width_cm", 2.0)),
            neckline_shoulder_ratio=float(tolerances.get("neckline_shoulder_ratio", 0.7)),
        )
    except (TypeError, AttributeError) as exc:
        raise ValueError(f"Invalid engine config in {path}: {exc}") from exc


# ── Module-level singleton ─────────────────────────────────────────────────────
#
# Loaded eagerly at import time; read-only after construction, so sharing it
# across threads is safe.

_config: EngineConfig = load_engine_config()


def get_engine_config() -> EngineConfig:
    """Return the module-level configuration singleton."""
    return _config

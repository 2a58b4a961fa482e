from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict

import yaml

from .models import parse_mode


MODULE_ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = MODULE_ROOT / "data"
INPUT_DIR = DATA_DIR / "inputs" / "txts"
OUTPUT_DIR = DATA_DIR / "outputs"

# Chart ring size, fixed for the lifetime of the process
HISTORY_CAPACITY = 200


@dataclass(frozen=True)
class StepDetectionParams:
    """Peak detector thresholds tuned for a waist / pocket mounted phone while running"""
    gravity: float = 9.8  # Seed of the smoothed magnitude (m/s²)
    smoothing_alpha: float = 0.1
    step_threshold: float = 11.0  # Smoothed magnitude that counts as a peak (m/s²)
    gyro_motion_threshold: float = 0.5  # rad/s, below this the phone is considered still
    refractory_ns: int = 250_000_000
    peak_log_threshold: float = 10.0  # Raw magnitude above which peak checks are logged (m/s²)


@dataclass(frozen=True)
class CadenceParams:
    min_interval_s: float = 0.25  # Shorter intervals are double triggers
    smoothing_weight: float = 0.5  # Weight of the previous cadence


@dataclass(frozen=True)
class ImpactParams:
    low_upper: float = 13.0
    medium_upper: float = 16.0


@dataclass(frozen=True)
class OrientationParams:
    ewma_alpha: float = 0.2
    fusion_beta: float = 0.98  # Trust in the integrated gyro angle


@dataclass(frozen=True)
class PipelineConfig:
    step: StepDetectionParams = StepDetectionParams()
    cadence: CadenceParams = CadenceParams()
    impact: ImpactParams = ImpactParams()
    orientation: OrientationParams = OrientationParams()
    default_mode: str = "custom_step_detector"


DEFAULT_PIPELINE_CONFIG = PipelineConfig()

_SECTIONS = {
    "step": StepDetectionParams,
    "cadence": CadenceParams,
    "impact": ImpactParams,
    "orientation": OrientationParams,
}


def _build_section(name: str, cls, values: Dict[str, Any]):
    if not isinstance(values, dict):
        raise ValueError(f"Config section '{name}' must be a mapping, got {type(values).__name__}")
    known = {f.name: f for f in fields(cls)}
    unknown = set(values) - set(known)
    if unknown:
        raise ValueError(f"Unknown keys in config section '{name}': {sorted(unknown)}")

    kwargs = {}
    for key, raw in values.items():
        default = getattr(cls(), key)
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise ValueError(f"Config value {name}.{key} must be numeric, got {raw!r}")
        kwargs[key] = int(raw) if isinstance(default, int) else float(raw)
    return cls(**kwargs)


def config_from_dict(data: Dict[str, Any] | None) -> PipelineConfig:
    data = data or {}
    if not isinstance(data, dict):
        raise ValueError("Pipeline config must be a mapping at the top level.")

    unknown = set(data) - set(_SECTIONS) - {"default_mode"}
    if unknown:
        raise ValueError(f"Unknown config sections: {sorted(unknown)}")

    config = DEFAULT_PIPELINE_CONFIG
    for name, cls in _SECTIONS.items():
        if name in data:
            config = replace(config, **{name: _build_section(name, cls, data[name])})

    if "default_mode" in data:
        parse_mode(data["default_mode"])
        config = replace(config, default_mode=str(data["default_mode"]))
    return config


def load_config(path: Path | str) -> PipelineConfig:
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    return config_from_dict(data)


def ensure_output_dir(output_dir: Path | None = None) -> Path:
    output_dir = output_dir or OUTPUT_DIR
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir

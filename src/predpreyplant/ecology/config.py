"""
Run settings for the ecology: world size, population caps, regrowth and mutation.

Settings are plain values handed to the spawner and the engine each tick; the engine
never validates them, so everything is checked here.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, Optional


@dataclass
class SimulationSettings:
    world_width: float = 1280.0
    world_height: float = 720.0
    paused: bool = False
    speed_factor: float = 1.0
    stats_history_length: int = 600  # ~10 min when sampled every second

    max_plants: int = 600
    initial_plants: int = 250
    plant_regen_per_second: float = 10.0

    initial_herbivores: int = 50
    initial_carnivores: int = 20
    mutation_rate: float = 0.08

    show_vision: bool = False
    show_vectors: bool = False


_FIELD_TYPES = {f.name: f.type for f in fields(SimulationSettings)}


def _coerce(name: str, value: object) -> object:
    kind = _FIELD_TYPES[name]
    if kind == "bool":
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("1", "true", "yes", "on"):
                return True
            if lowered in ("0", "false", "no", "off"):
                return False
            raise ValueError(f"Invalid boolean for {name}: {value!r}")
        return bool(value)
    if kind == "int":
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"Invalid integer for {name}: {value!r}")
        return int(value)
    return float(value)


def validate_settings(settings: SimulationSettings) -> SimulationSettings:
    # animals are clamped 2 units inside every edge
    if settings.world_width <= 4 or settings.world_height <= 4:
        raise ValueError(
            f"World must be larger than 4x4, got {settings.world_width}x{settings.world_height}"
        )
    for name in (
        "max_plants",
        "initial_plants",
        "initial_herbivores",
        "initial_carnivores",
        "plant_regen_per_second",
        "speed_factor",
    ):
        if getattr(settings, name) < 0:
            raise ValueError(f"{name} must be >= 0, got {getattr(settings, name)}")
    if not 0.0 <= settings.mutation_rate <= 1.0:
        raise ValueError(f"mutation_rate must be in [0, 1], got {settings.mutation_rate}")
    if settings.stats_history_length < 1:
        raise ValueError(
            f"stats_history_length must be >= 1, got {settings.stats_history_length}"
        )
    return settings


def load_settings(path: str | Path) -> SimulationSettings:
    with open(Path(path), "r", encoding="utf-8") as f:
        data = json.load(f)
    settings = SimulationSettings()
    for field_info in fields(SimulationSettings):
        name = field_info.name
        if name not in data:
            continue
        setattr(settings, name, _coerce(name, data[name]))
    return validate_settings(settings)


def build_settings(
    overrides: Optional[Dict[str, object]] = None, path: Optional[str | Path] = None
) -> SimulationSettings:
    settings = load_settings(path) if path is not None else SimulationSettings()
    if overrides:
        apply_overrides(settings, overrides)
    return validate_settings(settings)


def apply_overrides(settings: SimulationSettings, overrides: Dict[str, object]) -> SimulationSettings:
    for key, value in overrides.items():
        if key not in _FIELD_TYPES:
            raise ValueError(f"Unknown SimulationSettings field: {key}")
        setattr(settings, key, _coerce(key, value))
    return settings


def parse_override(text: str) -> Dict[str, object]:
    """Parse a ``key=value`` command line override into a typed single-item dict."""
    if "=" not in text:
        raise ValueError(f"Override must look like key=value, got {text!r}")
    key, raw = text.split("=", 1)
    key = key.strip()
    if key not in _FIELD_TYPES:
        raise ValueError(f"Unknown SimulationSettings field: {key}")
    return {key: _coerce(key, raw.strip())}

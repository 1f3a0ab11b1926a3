"""
Discrete heritable traits for herbivores and carnivores.

Every trait only ever takes one of three level values. Mutation moves a trait one
level up or down, so offspring always land on a valid level and genotypes stay
comparable across a run.
"""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from itertools import product
from typing import Dict, Iterator, Tuple

import numpy as np


SPEED_LEVELS: Tuple[float, ...] = (20.0, 35.0, 50.0)  # units / s
VISION_LEVELS: Tuple[float, ...] = (30.0, 60.0, 100.0)  # units
METABOLISM_LEVELS: Tuple[float, ...] = (0.6, 1.0, 1.6)  # energy / s
REPRODUCTION_ENERGY_LEVELS: Tuple[float, ...] = (40.0, 65.0, 100.0)
STEALTH_LEVELS: Tuple[float, ...] = (0.0, 0.25, 0.5)
STRENGTH_LEVELS: Tuple[float, ...] = (0.0, 0.6, 1.2)

TRAIT_LEVELS: Dict[str, Tuple[float, ...]] = {
    "speed": SPEED_LEVELS,
    "vision": VISION_LEVELS,
    "metabolism": METABOLISM_LEVELS,
    "reproduction_energy": REPRODUCTION_ENERGY_LEVELS,
    "stealth": STEALTH_LEVELS,
    "strength": STRENGTH_LEVELS,
}

NEUTRAL_STRENGTH = STRENGTH_LEVELS[0]

_FNV_OFFSET_BASIS = 0x811C9DC5
_FNV_PRIME = 16777619
_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


@dataclass(frozen=True)
class TraitSet:
    speed: float
    vision: float
    metabolism: float
    reproduction_energy: float
    stealth: float  # 0..1, shrinks a predator's detection range against this individual
    strength: float  # only carnivores use it

    def as_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def trait_levels(name: str) -> Tuple[float, ...]:
    try:
        return TRAIT_LEVELS[name]
    except KeyError:
        raise ValueError(f"Unknown trait: {name}") from None


def level_index(levels: Tuple[float, ...], value: float) -> int:
    """Index of ``value`` in ``levels`` by exact match; unknown values snap to level 0."""
    for idx, level in enumerate(levels):
        if level == value:
            return idx
    return 0


def default_herbivore_traits() -> TraitSet:
    return TraitSet(
        speed=SPEED_LEVELS[1],
        vision=VISION_LEVELS[1],
        metabolism=METABOLISM_LEVELS[1],
        reproduction_energy=REPRODUCTION_ENERGY_LEVELS[1],
        stealth=STEALTH_LEVELS[1],
        strength=NEUTRAL_STRENGTH,
    )


def default_carnivore_traits() -> TraitSet:
    return TraitSet(
        speed=SPEED_LEVELS[1],
        vision=VISION_LEVELS[1],
        metabolism=METABOLISM_LEVELS[2],
        reproduction_energy=REPRODUCTION_ENERGY_LEVELS[2],
        stealth=STEALTH_LEVELS[0],
        strength=STRENGTH_LEVELS[1],
    )


def _mutate_level(
    levels: Tuple[float, ...], value: float, mutation_rate: float, rng: np.random.Generator
) -> float:
    idx = level_index(levels, value)
    if rng.random() >= mutation_rate:
        return levels[idx]
    step = -1 if rng.random() < 0.5 else 1
    next_idx = max(0, min(len(levels) - 1, idx + step))
    return levels[next_idx]


def mutate_traits(
    base: TraitSet, mutation_rate: float, is_carnivore: bool, rng: np.random.Generator
) -> TraitSet:
    """
    Copy ``base`` with each trait independently shifted one level (up or down) with
    probability ``mutation_rate``. Herbivores always get neutral strength.
    """
    strength = (
        _mutate_level(STRENGTH_LEVELS, base.strength, mutation_rate, rng)
        if is_carnivore
        else NEUTRAL_STRENGTH
    )
    return TraitSet(
        speed=_mutate_level(SPEED_LEVELS, base.speed, mutation_rate, rng),
        vision=_mutate_level(VISION_LEVELS, base.vision, mutation_rate, rng),
        metabolism=_mutate_level(METABOLISM_LEVELS, base.metabolism, mutation_rate, rng),
        reproduction_energy=_mutate_level(
            REPRODUCTION_ENERGY_LEVELS, base.reproduction_energy, mutation_rate, rng
        ),
        stealth=_mutate_level(STEALTH_LEVELS, base.stealth, mutation_rate, rng),
        strength=strength,
    )


def energy_cost_per_second(traits: TraitSet, is_carnivore: bool) -> float:
    # base metabolism plus a surcharge for every trait above its cheapest level
    speed_cost = (traits.speed - SPEED_LEVELS[0]) * 0.015
    vision_cost = (traits.vision - VISION_LEVELS[0]) * 0.008
    stealth_cost = traits.stealth * 0.6
    strength_cost = traits.strength * 0.7 if is_carnivore else 0.0
    return traits.metabolism + speed_cost + vision_cost + stealth_cost + strength_cost


def _format_number(value: float) -> str:
    # integral values print without a fractional part: 35.0 -> "35", 0.25 -> "0.25"
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_DIGITS[rem])
    return "".join(reversed(digits))


def fnv1a_32(data: str) -> int:
    h = _FNV_OFFSET_BASIS
    for ch in data:
        h ^= ord(ch)
        h = (h * _FNV_PRIME) & 0xFFFFFFFF
    return h


def genotype_id(traits: TraitSet, is_carnivore: bool) -> str:
    """
    Short, platform independent id grouping individuals with identical traits.

    The trait tuple is joined with commas, hashed with 32-bit FNV-1a and written in
    base 36 behind a species tag, e.g. ``"Hbtk8t6"`` for the default herbivore.
    """
    strength = traits.strength if is_carnivore else NEUTRAL_STRENGTH
    data = ",".join(
        _format_number(v)
        for v in (
            traits.speed,
            traits.vision,
            traits.metabolism,
            traits.reproduction_energy,
            traits.stealth,
            strength,
        )
    )
    tag = "C" if is_carnivore else "H"
    return tag + _to_base36(fnv1a_32(data))


def iter_trait_sets(is_carnivore: bool) -> Iterator[TraitSet]:
    """Every valid trait combination for a species (243 herbivore, 729 carnivore)."""
    strengths = STRENGTH_LEVELS if is_carnivore else (NEUTRAL_STRENGTH,)
    for speed, vision, metabolism, repro, stealth, strength in product(
        SPEED_LEVELS,
        VISION_LEVELS,
        METABOLISM_LEVELS,
        REPRODUCTION_ENERGY_LEVELS,
        STEALTH_LEVELS,
        strengths,
    ):
        yield TraitSet(speed, vision, metabolism, repro, stealth, strength)


def with_trait(traits: TraitSet, name: str, value: float) -> TraitSet:
    """Copy of ``traits`` with one trait replaced; ``value`` must be one of its levels."""
    if value not in trait_levels(name):
        raise ValueError(f"{value} is not a level of trait {name}: {trait_levels(name)}")
    return replace(traits, **{name: value})

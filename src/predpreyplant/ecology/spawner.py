"""
Creation of plants and animals, initial seeding and plant regrowth.
"""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from predpreyplant.ecology.config import SimulationSettings
from predpreyplant.ecology.geometry import rand_range
from predpreyplant.ecology.traits import (
    TraitSet,
    default_carnivore_traits,
    default_herbivore_traits,
)
from predpreyplant.ecology.world import Agent, Plant, Species, World


logger = logging.getLogger(__name__)

# Spawned animals start with this share of their reproduction threshold
SPAWN_ENERGY_SHARE = 0.5


def spawn_plant(world: World, max_plants: int, rng: np.random.Generator) -> Optional[Plant]:
    if len(world.plants) >= max_plants:
        return None
    plant = Plant(
        id=world.allocate_id(),
        x=rand_range(rng, world.min_x, world.max_x),
        y=rand_range(rng, world.min_y, world.max_y),
    )
    world.plants.append(plant)
    return plant


def spawn_agent(
    world: World, species: Species, rng: np.random.Generator, traits: Optional[TraitSet] = None
) -> Agent:
    if traits is None:
        traits = default_carnivore_traits() if species.is_carnivore else default_herbivore_traits()
    # unpadded: new animals may appear right on the edge
    agent = Agent(
        id=world.allocate_id(),
        species=species,
        x=rand_range(rng, 0.0, world.width),
        y=rand_range(rng, 0.0, world.height),
        traits=traits,
        energy=traits.reproduction_energy * SPAWN_ENERGY_SHARE,
    )
    return world.add_agent(agent)


def spawn_herbivore(
    world: World, rng: np.random.Generator, traits: Optional[TraitSet] = None
) -> Agent:
    return spawn_agent(world, Species.HERBIVORE, rng, traits)


def spawn_carnivore(
    world: World, rng: np.random.Generator, traits: Optional[TraitSet] = None
) -> Agent:
    return spawn_agent(world, Species.CARNIVORE, rng, traits)


class PlantRegrowth:
    """
    Turns a continuous regrowth rate into whole plants.

    Credit accumulates as ``rate * dt``; whole units are spawned and the fractional
    remainder is carried into the next call.
    """

    def __init__(self, rate_per_second: float, max_plants: int):
        self.rate_per_second = rate_per_second
        self.max_plants = max_plants
        self.credit = 0.0

    def accumulate(self, dt: float) -> None:
        self.credit += dt * self.rate_per_second

    def spawn_due(self, world: World, rng: np.random.Generator) -> int:
        due = int(self.credit)
        if due <= 0:
            return 0
        self.credit -= due
        spawned = 0
        for _ in range(due):
            if spawn_plant(world, self.max_plants, rng) is not None:
                spawned += 1
        return spawned

    def reset(self) -> None:
        self.credit = 0.0


def init_world(settings: SimulationSettings, rng: np.random.Generator) -> World:
    world = World(width=settings.world_width, height=settings.world_height)
    for _ in range(settings.initial_plants):
        spawn_plant(world, settings.max_plants, rng)
    for _ in range(settings.initial_herbivores):
        spawn_herbivore(world, rng)
    for _ in range(settings.initial_carnivores):
        spawn_carnivore(world, rng)
    logger.debug(
        "Seeded world %sx%s: plants=%d herbivores=%d carnivores=%d",
        world.width,
        world.height,
        len(world.plants),
        len(world.herbivores),
        len(world.carnivores),
    )
    return world

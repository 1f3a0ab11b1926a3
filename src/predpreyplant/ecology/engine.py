"""
Continuous-space ecological engine with discrete heritable traits and no learning.

``advance`` moves the world forward by ``dt`` seconds of simulated time:
herbivores first, then carnivores (which therefore hunt the already-moved herbivores).
Each animal perceives, steers, moves, possibly eats, pays its metabolism, possibly
reproduces and dies when its energy runs out.

Callers should keep ``dt`` small (a fixed 1/60 s step, never more than 0.25 s) for
stable dynamics; the engine itself does not check it.
"""
from __future__ import annotations

import math
from typing import Dict, List, Optional

import numpy as np

from predpreyplant.ecology.geometry import clamp, distance_sq, normalize, rand_range, random_direction
from predpreyplant.ecology.traits import energy_cost_per_second, mutate_traits
from predpreyplant.ecology.world import Agent, Plant, World


DEFAULT_MUTATION_RATE = 0.08

EAT_RADIUS_PLANT_SQ = 4.0 * 4.0
EAT_RADIUS_PREY_SQ = 5.0 * 5.0
PLANT_ENERGY_GAIN = 20.0
PREY_ENERGY_GAIN = 35.0
STRENGTH_ENERGY_BONUS = 10.0
# prey stealth 1.0 would halve the predator's squared detection range
STEALTH_VISION_FACTOR = 0.5
STEERING_RATE = 8.0
CHILD_ENERGY_SHARE = 0.35
CHILD_JITTER = 5.0


def find_nearest_plant(agent: Agent, plants: List[Plant]) -> Optional[int]:
    vision_sq = agent.traits.vision * agent.traits.vision
    best_idx = None
    best_dist = math.inf
    for idx, plant in enumerate(plants):
        d2 = distance_sq(agent.x, agent.y, plant.x, plant.y)
        if d2 < best_dist and d2 <= vision_sq:
            best_dist = d2
            best_idx = idx
    return best_idx


def find_nearest_prey(predator: Agent, herbivores: List[Agent]) -> Optional[int]:
    """Nearest herbivore, where each prey's stealth shrinks the predator's range."""
    vision_sq = predator.traits.vision * predator.traits.vision
    best_idx = None
    best_dist = math.inf
    for idx, prey in enumerate(herbivores):
        effective_vision_sq = vision_sq * (1.0 - prey.traits.stealth * STEALTH_VISION_FACTOR)
        d2 = distance_sq(predator.x, predator.y, prey.x, prey.y)
        if d2 < best_dist and d2 <= effective_vision_sq:
            best_dist = d2
            best_idx = idx
    return best_idx


def _steer_and_move(
    agent: Agent, target_x: Optional[float], target_y: Optional[float], world: World, dt: float, rng: np.random.Generator
) -> None:
    if target_x is None:
        dir_x, dir_y = random_direction(rng)
    else:
        dir_x, dir_y = target_x - agent.x, target_y - agent.y
    dir_x, dir_y = normalize(dir_x, dir_y)

    speed = agent.traits.speed
    blend = 1.0 - math.exp(-STEERING_RATE * dt)
    agent.vx += (dir_x * speed - agent.vx) * blend
    agent.vy += (dir_y * speed - agent.vy) * blend

    agent.x = clamp(agent.x + agent.vx * dt, world.min_x, world.max_x)
    agent.y = clamp(agent.y + agent.vy * dt, world.min_y, world.max_y)


def _reproduce(
    parent: Agent, world: World, mutation_rate: float, rng: np.random.Generator
) -> Agent:
    parent.energy *= 0.5
    child_traits = mutate_traits(parent.traits, mutation_rate, parent.is_carnivore, rng)
    child = Agent(
        id=world.allocate_id(),
        species=parent.species,
        x=clamp(parent.x + rand_range(rng, -CHILD_JITTER, CHILD_JITTER), world.min_x, world.max_x),
        y=clamp(parent.y + rand_range(rng, -CHILD_JITTER, CHILD_JITTER), world.min_y, world.max_y),
        traits=child_traits,
        energy=child_traits.reproduction_energy * CHILD_ENERGY_SHARE,
    )
    return world.add_agent(child)


def _advance_herbivores(
    world: World, dt: float, mutation_rate: float, rng: np.random.Generator, events: Dict[str, int]
) -> None:
    plants = world.plants
    herbivores = world.herbivores
    # reverse order: removals and appended children never disturb unvisited indices
    for i in range(len(herbivores) - 1, -1, -1):
        herbivore = herbivores[i]
        herbivore.age += dt

        target_idx = find_nearest_plant(herbivore, plants)
        if target_idx is None:
            _steer_and_move(herbivore, None, None, world, dt, rng)
        else:
            plant = plants[target_idx]
            _steer_and_move(herbivore, plant.x, plant.y, world, dt, rng)
            if distance_sq(herbivore.x, herbivore.y, plant.x, plant.y) <= EAT_RADIUS_PLANT_SQ:
                herbivore.energy += PLANT_ENERGY_GAIN
                del plants[target_idx]
                events["plants_eaten"] += 1

        herbivore.energy -= energy_cost_per_second(herbivore.traits, False) * dt

        if herbivore.energy >= herbivore.traits.reproduction_energy:
            _reproduce(herbivore, world, mutation_rate, rng)
            events["births"] += 1

        if herbivore.energy <= 0:
            del herbivores[i]
            events["deaths"] += 1


def _advance_carnivores(
    world: World, dt: float, mutation_rate: float, rng: np.random.Generator, events: Dict[str, int]
) -> None:
    herbivores = world.herbivores
    carnivores = world.carnivores
    for i in range(len(carnivores) - 1, -1, -1):
        carnivore = carnivores[i]
        carnivore.age += dt

        prey_idx = find_nearest_prey(carnivore, herbivores)
        if prey_idx is None:
            _steer_and_move(carnivore, None, None, world, dt, rng)
        else:
            prey = herbivores[prey_idx]
            _steer_and_move(carnivore, prey.x, prey.y, world, dt, rng)
            if distance_sq(carnivore.x, carnivore.y, prey.x, prey.y) <= EAT_RADIUS_PREY_SQ:
                carnivore.energy += PREY_ENERGY_GAIN + carnivore.traits.strength * STRENGTH_ENERGY_BONUS
                del herbivores[prey_idx]
                events["kills"] += 1

        carnivore.energy -= energy_cost_per_second(carnivore.traits, True) * dt

        if carnivore.energy >= carnivore.traits.reproduction_energy:
            _reproduce(carnivore, world, mutation_rate, rng)
            events["births"] += 1

        if carnivore.energy <= 0:
            del carnivores[i]
            events["deaths"] += 1


def advance(
    world: World,
    dt: float,
    rng: np.random.Generator,
    mutation_rate: float = DEFAULT_MUTATION_RATE,
) -> Dict[str, int]:
    """
    Advance ``world`` in place by ``dt`` seconds.

    Args:
        world: the world to mutate; no reference is kept after returning.
        dt: simulated seconds, finite and non-negative.
        rng: source for wander directions, mutation and offspring placement.
        mutation_rate: per-trait probability that a child's trait shifts one level.

    Returns:
        Event counts for this call: births, deaths (starvation), plants_eaten, kills.
    """
    events = {"births": 0, "deaths": 0, "plants_eaten": 0, "kills": 0}
    world.time += dt
    _advance_herbivores(world, dt, mutation_rate, rng, events)
    _advance_carnivores(world, dt, mutation_rate, rng, events)
    return events


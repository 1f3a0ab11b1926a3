import numpy as np
import pytest

from predpreyplant.ecology.config import SimulationSettings
from predpreyplant.ecology.engine import (
    EAT_RADIUS_PLANT_SQ,
    advance,
    find_nearest_plant,
    find_nearest_prey,
)
from predpreyplant.ecology.spawner import init_world
from predpreyplant.ecology.traits import (
    TraitSet,
    default_carnivore_traits,
    default_herbivore_traits,
    energy_cost_per_second,
    with_trait,
)
from predpreyplant.ecology.world import Agent, Plant, Species, World


DT = 1.0 / 60.0


def _make_world(width=100.0, height=100.0):
    return World(width=width, height=height)


def _add_herbivore(world, x, y, energy=10.0, traits=None):
    agent = Agent(
        id=world.allocate_id(),
        species=Species.HERBIVORE,
        x=x,
        y=y,
        traits=traits or default_herbivore_traits(),
        energy=energy,
    )
    return world.add_agent(agent)


def _add_carnivore(world, x, y, energy=50.0, traits=None):
    agent = Agent(
        id=world.allocate_id(),
        species=Species.CARNIVORE,
        x=x,
        y=y,
        traits=traits or default_carnivore_traits(),
        energy=energy,
    )
    return world.add_agent(agent)


def _add_plant(world, x, y):
    plant = Plant(id=world.allocate_id(), x=x, y=y)
    world.plants.append(plant)
    return plant


def test_starving_herbivore_is_removed():
    world = _make_world()
    traits = TraitSet(speed=20.0, vision=30.0, metabolism=1.6, reproduction_energy=65.0, stealth=0.0, strength=0.0)
    _add_herbivore(world, 50.0, 50.0, energy=0.01, traits=traits)

    events = advance(world, 1.0, np.random.default_rng(0))

    assert world.herbivores == []
    assert events["deaths"] == 1


def test_all_starving_agents_removed_in_one_pass():
    world = _make_world()
    for x in (10.0, 30.0, 50.0, 70.0):
        _add_herbivore(world, x, 50.0, energy=0.001)
    for x in (20.0, 40.0):
        _add_carnivore(world, x, 80.0, energy=0.001)

    events = advance(world, DT, np.random.default_rng(0))

    assert world.herbivores == []
    assert world.carnivores == []
    assert events["deaths"] == 6


def test_herbivore_eats_plant_on_its_position():
    world = _make_world()
    herbivore = _add_herbivore(world, 10.0, 10.0, energy=10.0)
    plant = _add_plant(world, 10.0, 10.0)

    events = advance(world, DT, np.random.default_rng(0))

    assert plant not in world.plants
    assert world.plants == []
    cost = energy_cost_per_second(herbivore.traits, False) * DT
    assert herbivore.energy == pytest.approx(10.0 + 20.0 - cost)
    assert (herbivore.x, herbivore.y) == (10.0, 10.0)
    assert events["plants_eaten"] == 1


def test_carnivore_eats_herbivore_on_its_position():
    world = _make_world()
    prey_traits = with_trait(default_herbivore_traits(), "stealth", 0.0)
    prey = _add_herbivore(world, 50.0, 50.0, energy=20.0, traits=prey_traits)
    carnivore = _add_carnivore(world, 50.0, 50.0, energy=50.0)

    events = advance(world, DT, np.random.default_rng(0))

    assert prey not in world.herbivores
    assert world.herbivores == []
    gain = 35.0 + carnivore.traits.strength * 10.0
    cost = energy_cost_per_second(carnivore.traits, True) * DT
    assert carnivore.energy == pytest.approx(50.0 + gain - cost)
    assert events["kills"] == 1


def test_reproduction_when_eating_reaches_threshold():
    world = _make_world()
    parent = _add_herbivore(world, 10.0, 10.0, energy=65.0)
    _add_plant(world, 10.0, 10.0)

    events = advance(world, DT, np.random.default_rng(0), mutation_rate=0.0)

    assert len(world.herbivores) == 2
    child = world.herbivores[1]
    cost = energy_cost_per_second(parent.traits, False) * DT
    assert parent.energy == pytest.approx((65.0 + 20.0 - cost) / 2)
    assert child.traits == parent.traits
    assert child.energy == pytest.approx(0.35 * child.traits.reproduction_energy)
    assert child.genotype_id == parent.genotype_id
    assert child.id > parent.id
    assert abs(child.x - parent.x) <= 5.0 and abs(child.y - parent.y) <= 5.0
    # newborns do not act in the tick they are born
    assert child.age == 0.0
    assert (child.vx, child.vy) == (0.0, 0.0)
    assert events["births"] == 1


def test_energy_exactly_at_threshold_reproduces():
    world = _make_world()
    parent = _add_herbivore(world, 50.0, 50.0, energy=65.0)

    events = advance(world, 0.0, np.random.default_rng(0), mutation_rate=0.0)

    assert len(world.herbivores) == 2
    assert parent.energy == pytest.approx(32.5)
    assert events["births"] == 1


def test_newborn_herbivore_is_prey_in_its_birth_tick():
    # 5x5 world: padded bounds are [2, 3] on both axes, so every agent sits within eat range
    world = _make_world(5.0, 5.0)
    _add_herbivore(world, 2.5, 2.5, energy=80.0)
    _add_carnivore(world, 2.5, 2.5, energy=20.0)
    _add_carnivore(world, 2.5, 2.5, energy=20.0)

    events = advance(world, DT, np.random.default_rng(0), mutation_rate=0.0)

    assert events["births"] == 1
    assert events["kills"] == 2
    assert world.herbivores == []
    assert len(world.carnivores) == 2


def test_threshold_without_food_does_not_reproduce():
    world = _make_world()
    _add_herbivore(world, 50.0, 50.0, energy=65.0)

    advance(world, DT, np.random.default_rng(0))

    assert len(world.herbivores) == 1


def test_child_of_carnivore_has_own_genotype():
    world = _make_world()
    parent = _add_carnivore(world, 50.0, 50.0, energy=150.0)

    advance(world, DT, np.random.default_rng(5), mutation_rate=1.0)

    assert len(world.carnivores) == 2
    child = world.carnivores[1]
    assert child.traits != parent.traits
    assert child.genotype_id != parent.genotype_id
    assert child.genotype_id.startswith("C")
    assert child.energy == pytest.approx(0.35 * child.traits.reproduction_energy)


def test_energy_drops_by_metabolism_without_food():
    world = _make_world()
    herbivore = _add_herbivore(world, 50.0, 50.0, energy=30.0)
    carnivore = _add_carnivore(world, 5.0, 95.0, energy=60.0)

    advance(world, 0.1, np.random.default_rng(0))

    assert herbivore.energy == pytest.approx(30.0 - energy_cost_per_second(herbivore.traits, False) * 0.1)
    assert carnivore.energy == pytest.approx(60.0 - energy_cost_per_second(carnivore.traits, True) * 0.1)


def test_world_time_and_age_accumulate():
    world = _make_world()
    herbivore = _add_herbivore(world, 50.0, 50.0, energy=30.0)
    rng = np.random.default_rng(0)
    for _ in range(10):
        advance(world, 0.05, rng)
    assert world.time == pytest.approx(0.5)
    assert herbivore.age == pytest.approx(0.5)


def test_herbivore_moves_towards_visible_plant():
    world = _make_world()
    herbivore = _add_herbivore(world, 20.0, 50.0, energy=30.0)
    _add_plant(world, 60.0, 50.0)

    advance(world, DT, np.random.default_rng(0))

    assert herbivore.x > 20.0
    assert herbivore.y == pytest.approx(50.0)
    assert herbivore.vx > 0.0


def test_find_nearest_plant_respects_vision_and_keeps_first_tie():
    world = _make_world()
    herbivore = _add_herbivore(world, 50.0, 50.0)
    _add_plant(world, 50.0, 50.0 + 61.0)  # beyond vision 60
    assert find_nearest_plant(herbivore, world.plants) is None

    _add_plant(world, 40.0, 50.0)
    _add_plant(world, 60.0, 50.0)
    assert find_nearest_plant(herbivore, world.plants) == 1
    assert find_nearest_plant(herbivore, []) is None


def test_prey_stealth_shrinks_predator_detection_range():
    world = _make_world(200.0, 200.0)
    carnivore = _add_carnivore(world, 100.0, 100.0)  # vision 60
    hidden = _add_herbivore(world, 155.0, 100.0, traits=with_trait(default_herbivore_traits(), "stealth", 0.5))
    assert find_nearest_prey(carnivore, [hidden]) is None

    visible = _add_herbivore(world, 155.0, 100.0, traits=with_trait(default_herbivore_traits(), "stealth", 0.0))
    assert find_nearest_prey(carnivore, [hidden, visible]) == 1


def test_zero_length_direction_does_not_produce_nan():
    world = _make_world()
    herbivore = _add_herbivore(world, 30.0, 30.0, energy=30.0)
    _add_plant(world, 30.0, 30.0)
    advance(world, DT, np.random.default_rng(0))
    assert herbivore.vx == 0.0 and herbivore.vy == 0.0


def _seeded_world(seed):
    settings = SimulationSettings(
        world_width=200.0,
        world_height=150.0,
        initial_plants=80,
        max_plants=120,
        initial_herbivores=25,
        initial_carnivores=6,
    )
    rng = np.random.default_rng(seed)
    return init_world(settings, rng), rng


def test_agents_stay_inside_padded_bounds():
    world, rng = _seeded_world(11)
    for _ in range(300):
        advance(world, DT, rng, mutation_rate=0.2)
        for agent in world.herbivores + world.carnivores:
            assert 2.0 <= agent.x <= world.width - 2.0
            assert 2.0 <= agent.y <= world.height - 2.0


def test_energy_never_exceeds_best_meal():
    world, rng = _seeded_world(12)
    best_meal = 35.0 + 1.2 * 10.0
    for _ in range(200):
        before = {agent.id: agent.energy for agent in world.herbivores + world.carnivores}
        advance(world, DT, rng)
        for agent in world.herbivores + world.carnivores:
            if agent.id in before:
                assert agent.energy <= before[agent.id] + best_meal


def test_consumed_entities_are_gone_and_ids_unique():
    world, rng = _seeded_world(13)
    seen_ids = set()
    for _ in range(300):
        plant_ids = {p.id for p in world.plants}
        herbivore_ids = {h.id for h in world.herbivores}
        events = advance(world, DT, rng)
        remaining_plants = {p.id for p in world.plants}
        eaten = plant_ids - remaining_plants
        assert len(eaten) == events["plants_eaten"]
        assert not eaten & remaining_plants
        gone = herbivore_ids - {h.id for h in world.herbivores}
        assert not gone & {h.id for h in world.herbivores}
        ids = [e.id for e in world.plants + world.herbivores + world.carnivores]
        assert len(ids) == len(set(ids))
        assert all(i < world.next_entity_id for i in ids)
        seen_ids.update(ids)
    assert max(seen_ids) < world.next_entity_id


def test_same_seed_same_outcome():
    world_a, rng_a = _seeded_world(21)
    world_b, rng_b = _seeded_world(21)
    for _ in range(240):
        advance(world_a, DT, rng_a, mutation_rate=0.3)
        advance(world_b, DT, rng_b, mutation_rate=0.3)
    assert [(h.id, h.x, h.y, h.energy) for h in world_a.herbivores] == [
        (h.id, h.x, h.y, h.energy) for h in world_b.herbivores
    ]
    assert [c.genotype_id for c in world_a.carnivores] == [c.genotype_id for c in world_b.carnivores]


def test_eat_radius_constant():
    assert EAT_RADIUS_PLANT_SQ == 16.0

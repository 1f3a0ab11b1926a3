"""
World state: plants, herbivores, carnivores and the entity-id counter.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from predpreyplant.ecology.traits import TraitSet, genotype_id


# Agents are kept this far inside the world edge while moving
BOUNDS_PADDING = 2.0


class Species(str, Enum):
    HERBIVORE = "herbivore"
    CARNIVORE = "carnivore"

    @property
    def is_carnivore(self) -> bool:
        return self is Species.CARNIVORE


@dataclass
class Plant:
    id: int
    x: float
    y: float


@dataclass
class Agent:
    id: int
    species: Species
    x: float
    y: float
    traits: TraitSet
    energy: float
    vx: float = 0.0
    vy: float = 0.0
    age: float = 0.0
    genotype_id: str = ""

    def __post_init__(self) -> None:
        if not self.genotype_id:
            self.genotype_id = genotype_id(self.traits, self.is_carnivore)

    @property
    def is_carnivore(self) -> bool:
        return self.species.is_carnivore


@dataclass
class World:
    width: float
    height: float
    plants: List[Plant] = field(default_factory=list)
    herbivores: List[Agent] = field(default_factory=list)
    carnivores: List[Agent] = field(default_factory=list)
    time: float = 0.0
    next_entity_id: int = 1

    def allocate_id(self) -> int:
        entity_id = self.next_entity_id
        self.next_entity_id += 1
        return entity_id

    def agents_of(self, species: Species) -> List[Agent]:
        return self.carnivores if species.is_carnivore else self.herbivores

    def add_agent(self, agent: Agent) -> Agent:
        self.agents_of(agent.species).append(agent)
        return agent

    @property
    def min_x(self) -> float:
        return BOUNDS_PADDING

    @property
    def max_x(self) -> float:
        return self.width - BOUNDS_PADDING

    @property
    def min_y(self) -> float:
        return BOUNDS_PADDING

    @property
    def max_y(self) -> float:
        return self.height - BOUNDS_PADDING

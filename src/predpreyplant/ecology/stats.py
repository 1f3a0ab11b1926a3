"""
Population statistics sampled from a world between engine calls.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from predpreyplant.ecology.world import Agent, Species, World


GenotypeCounts = Dict[str, int]


@dataclass
class StatsEntry:
    t: float
    plants: int
    herbivores: int
    carnivores: int
    herbivores_by_genotype: GenotypeCounts = field(default_factory=dict)
    carnivores_by_genotype: GenotypeCounts = field(default_factory=dict)

    def by_genotype(self, species: Species) -> GenotypeCounts:
        if species.is_carnivore:
            return self.carnivores_by_genotype
        return self.herbivores_by_genotype


def genotype_counts(agents: Iterable[Agent]) -> GenotypeCounts:
    counts: GenotypeCounts = {}
    for agent in agents:
        counts[agent.genotype_id] = counts.get(agent.genotype_id, 0) + 1
    return counts


def collect_stats(world: World) -> StatsEntry:
    return StatsEntry(
        t=world.time,
        plants=len(world.plants),
        herbivores=len(world.herbivores),
        carnivores=len(world.carnivores),
        herbivores_by_genotype=genotype_counts(world.herbivores),
        carnivores_by_genotype=genotype_counts(world.carnivores),
    )


class StatsHistory:
    """Bounded list of samples; the oldest entries are dropped once full."""

    def __init__(self, max_length: int = 600):
        self.max_length = max_length
        self.entries: List[StatsEntry] = []

    def __len__(self) -> int:
        return len(self.entries)

    def push(self, entry: StatsEntry) -> None:
        self.entries.append(entry)
        overflow = len(self.entries) - self.max_length
        if overflow > 0:
            del self.entries[:overflow]

    def clear(self) -> None:
        self.entries.clear()

    @property
    def latest(self) -> Optional[StatsEntry]:
        return self.entries[-1] if self.entries else None

    def series(self, key: str) -> List[float]:
        return [getattr(entry, key) for entry in self.entries]

    def top_genotypes(self, species: Species, n: int = 4) -> List[str]:
        latest = self.latest
        if latest is None:
            return []
        counts = latest.by_genotype(species)
        # most common first; ties keep first-seen order
        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return [genotype for genotype, _ in ranked[:n]]

    def genotype_series(self, species: Species, genotype: str) -> List[int]:
        return [entry.by_genotype(species).get(genotype, 0) for entry in self.entries]

"""
Fixed-step driver around the engine.

Real frame time is scaled by ``speed_factor``, capped at 0.25 s and fed to ``advance``
in fixed 1/60 s steps (at most 5 per frame). Plants regrow from fractional credit and
population statistics are sampled once per second of frame time.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Optional

import numpy as np

from predpreyplant.ecology.config import SimulationSettings, apply_overrides, validate_settings
from predpreyplant.ecology.engine import advance
from predpreyplant.ecology.spawner import PlantRegrowth, init_world
from predpreyplant.ecology.stats import StatsHistory, collect_stats
from predpreyplant.ecology.world import Species, World


logger = logging.getLogger(__name__)

FIXED_STEP = 1.0 / 60.0
MAX_STEPS_PER_FRAME = 5
MAX_FRAME_DT = 0.25
STATS_INTERVAL = 1.0


class SimulationRunner:
    def __init__(self, settings: Optional[SimulationSettings] = None, seed: Optional[int] = None):
        self.settings = validate_settings(replace(settings) if settings is not None else SimulationSettings())
        self.rng = np.random.default_rng(seed)
        self.history = StatsHistory(self.settings.stats_history_length)
        self.plant_regrowth = PlantRegrowth(
            self.settings.plant_regen_per_second, self.settings.max_plants
        )
        self.world: World
        self.last_events: Dict[str, int] = {}
        self.reset()

    def reset(self) -> None:
        self.world = init_world(self.settings, self.rng)
        self.history.clear()
        self.plant_regrowth.reset()
        self._accumulator = 0.0
        self._stats_clock = 0.0
        self._extinct = {species: False for species in Species}
        self.last_events = {"births": 0, "deaths": 0, "plants_eaten": 0, "kills": 0}
        logger.info(
            "World reset: %sx%s plants=%d herbivores=%d carnivores=%d",
            self.world.width,
            self.world.height,
            len(self.world.plants),
            len(self.world.herbivores),
            len(self.world.carnivores),
        )

    @property
    def paused(self) -> bool:
        return self.settings.paused

    def set_paused(self, paused: bool) -> None:
        self.settings.paused = paused

    def update_settings(self, **changes: object) -> None:
        """Apply ``changes`` atomically; on ValueError the current settings stay in force."""
        updated = validate_settings(apply_overrides(replace(self.settings), changes))
        self.settings = updated
        self.history.max_length = self.settings.stats_history_length
        self.plant_regrowth.rate_per_second = self.settings.plant_regen_per_second
        self.plant_regrowth.max_plants = self.settings.max_plants

    def frame(self, real_dt: float) -> int:
        """Run the fixed steps owed for ``real_dt`` seconds of wall time; returns how many ran."""
        if self.settings.paused:
            return 0

        scaled = min(real_dt * (self.settings.speed_factor or 1.0), MAX_FRAME_DT)
        self._accumulator += scaled
        self.last_events = {"births": 0, "deaths": 0, "plants_eaten": 0, "kills": 0}
        steps = 0
        while self._accumulator >= FIXED_STEP and steps < MAX_STEPS_PER_FRAME:
            events = advance(self.world, FIXED_STEP, self.rng, self.settings.mutation_rate)
            for key, count in events.items():
                self.last_events[key] += count
            self.plant_regrowth.accumulate(FIXED_STEP)
            self._accumulator -= FIXED_STEP
            steps += 1
        self.plant_regrowth.spawn_due(self.world, self.rng)
        self._check_extinction()

        self._stats_clock += real_dt
        if self._stats_clock >= STATS_INTERVAL:
            self._stats_clock -= STATS_INTERVAL
            self.sample_stats()
        return steps

    def sample_stats(self) -> None:
        self.history.push(collect_stats(self.world))

    def totals(self) -> Dict[str, int]:
        return {
            "plants": len(self.world.plants),
            "herbivores": len(self.world.herbivores),
            "carnivores": len(self.world.carnivores),
        }

    def _check_extinction(self) -> None:
        for species in Species:
            alive = len(self.world.agents_of(species)) > 0
            if not alive and not self._extinct[species]:
                logger.info("%s population went extinct at t=%.2f", species.value, self.world.time)
            self._extinct[species] = not alive


def run_simulation(
    steps: int = 3600,
    seed: Optional[int] = 1,
    settings: Optional[SimulationSettings] = None,
    log_every: int = 60,
    render: bool = False,
    fps: int = 60,
    plot_path: Optional[str] = None,
) -> StatsHistory:
    """
    Run ``steps`` frames of 1/60 s each (one engine step per frame) and return the
    sampled statistics. With ``render`` the frames are paced by a pygame window instead.
    """
    runner = SimulationRunner(settings, seed=seed)
    renderer = None
    if render:
        try:
            from predpreyplant.ecology.pygame_renderer import PyGameRenderer
        except Exception as exc:
            raise RuntimeError("pygame is required for rendering") from exc
        renderer = PyGameRenderer(runner.world.width, runner.world.height, fps=fps)

    for frame_idx in range(steps):
        if renderer:
            real_dt = renderer.tick()
        else:
            real_dt = FIXED_STEP
        runner.frame(real_dt)
        if log_every > 0 and (frame_idx % log_every == 0 or frame_idx == steps - 1):
            totals = runner.totals()
            print(
                f"t={runner.world.time:7.2f} plants={totals['plants']:4d} "
                f"herb={totals['herbivores']:4d} carn={totals['carnivores']:4d} "
                f"births={runner.last_events['births']:2d} deaths={runner.last_events['deaths']:2d}"
            )
        if renderer:
            if not renderer.update(runner):
                break
    if renderer:
        renderer.close()
    if plot_path:
        from predpreyplant.ecology.plotting import plot_history

        plot_history(runner.history, plot_path)
    return runner.history

import os
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "hide")

import pygame  # noqa: E402

from predpreyplant.ecology.world import Species  # noqa: E402


Color = Tuple[int, int, int]

COOL_PALETTE: List[Color] = [
    (64, 162, 255),
    (92, 200, 255),
    (116, 185, 255),
    (129, 236, 236),
    (85, 239, 196),
    (46, 204, 113),
    (26, 188, 156),
    (162, 155, 254),
]
WARM_PALETTE: List[Color] = [
    (255, 90, 90),
    (255, 127, 80),
    (255, 167, 38),
    (255, 112, 67),
    (230, 126, 34),
    (231, 76, 60),
    (255, 138, 128),
    (255, 183, 77),
]


class GenotypePalette:
    """Gives every genotype a colour in first-seen order, stable for the whole run."""

    def __init__(self, palette: List[Color]):
        self.palette = palette
        self.colors: Dict[str, Color] = {}

    def color(self, genotype: str) -> Color:
        existing = self.colors.get(genotype)
        if existing is not None:
            return existing
        color = self.palette[len(self.colors) % len(self.palette)]
        self.colors[genotype] = color
        return color

    def clear(self) -> None:
        self.colors.clear()


@dataclass
class GuiStyle:
    margin: int = 10
    panel_width: int = 260
    panel_padding: int = 12
    background_color: tuple = (11, 14, 20)
    world_border: tuple = (42, 47, 58)
    panel_background: tuple = (20, 24, 33)
    plant_color: tuple = (71, 209, 106)
    text_color: tuple = (221, 227, 234)
    herbivore_radius: float = 2.2
    carnivore_radius: float = 2.6
    herbivore_vision: tuple = (40, 70, 110)
    carnivore_vision: tuple = (110, 50, 50)
    vector_color: tuple = (200, 200, 200)
    line_plants: tuple = (71, 209, 106)
    line_herbivores: tuple = (64, 162, 255)
    line_carnivores: tuple = (255, 90, 90)
    history_max: int = 300
    top_genotypes: int = 4
    vector_scale: float = 0.4
    speed_steps: tuple = field(default=(0.25, 0.5, 1.0, 2.0, 4.0))


class PyGameRenderer:
    """
    Live viewer for a SimulationRunner.

    Keys: SPACE pause, R reset, V vision circles, D velocity vectors, +/- speed factor.
    """

    def __init__(self, width: float, height: float, scale: float = 1.0, fps: int = 60):
        self.width = width
        self.height = height
        self.scale = scale
        self.fps = fps
        self.style = GuiStyle()
        self.herbivore_colors = GenotypePalette(COOL_PALETTE)
        self.carnivore_colors = GenotypePalette(WARM_PALETTE)

        window_width = self.style.margin * 2 + int(width * scale) + self.style.panel_width
        window_height = self.style.margin * 2 + int(height * scale)
        pygame.init()
        self.screen = pygame.display.set_mode((window_width, window_height))
        pygame.display.set_caption("Predator-Prey-Plant Ecology")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont(None, 20)
        self.small_font = pygame.font.SysFont(None, 16)

        self.history_plants: List[int] = []
        self.history_herbivores: List[int] = []
        self.history_carnivores: List[int] = []

    def tick(self) -> float:
        """Wait for the next frame and return the elapsed wall time in seconds."""
        return self.clock.tick(self.fps) / 1000.0

    def close(self) -> None:
        pygame.quit()

    def update(self, runner) -> bool:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == pygame.KEYDOWN:
                self._handle_key(runner, event.key)

        world = runner.world
        settings = runner.settings
        self.screen.fill(self.style.background_color)
        self._draw_world_border()
        self._draw_plants(world)
        self._draw_agents(world.herbivores, self.herbivore_colors, self.style.herbivore_radius,
                          self.style.herbivore_vision, settings)
        self._draw_agents(world.carnivores, self.carnivore_colors, self.style.carnivore_radius,
                          self.style.carnivore_vision, settings)
        self._draw_panel(runner)

        pygame.display.flip()
        return True

    def _handle_key(self, runner, key: int) -> None:
        settings = runner.settings
        if key == pygame.K_SPACE:
            runner.set_paused(not settings.paused)
        elif key == pygame.K_r:
            runner.reset()
            self.herbivore_colors.clear()
            self.carnivore_colors.clear()
            self.history_plants.clear()
            self.history_herbivores.clear()
            self.history_carnivores.clear()
        elif key == pygame.K_v:
            runner.update_settings(show_vision=not settings.show_vision)
        elif key == pygame.K_d:
            runner.update_settings(show_vectors=not settings.show_vectors)
        elif key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
            runner.update_settings(speed_factor=self._next_speed(settings.speed_factor, 1))
        elif key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            runner.update_settings(speed_factor=self._next_speed(settings.speed_factor, -1))

    def _next_speed(self, current: float, direction: int) -> float:
        steps = list(self.style.speed_steps)
        nearest = min(range(len(steps)), key=lambda i: abs(steps[i] - current))
        return steps[max(0, min(len(steps) - 1, nearest + direction))]

    def _to_screen(self, x: float, y: float) -> Tuple[int, int]:
        return (
            self.style.margin + int(x * self.scale),
            self.style.margin + int(y * self.scale),
        )

    def _draw_world_border(self) -> None:
        rect = pygame.Rect(
            self.style.margin,
            self.style.margin,
            int(self.width * self.scale),
            int(self.height * self.scale),
        )
        pygame.draw.rect(self.screen, self.style.world_border, rect, 1)

    def _draw_plants(self, world) -> None:
        size = max(2, int(2 * self.scale))
        for plant in world.plants:
            x_pix, y_pix = self._to_screen(plant.x, plant.y)
            pygame.draw.rect(self.screen, self.style.plant_color,
                             pygame.Rect(x_pix - size // 2, y_pix - size // 2, size, size))

    def _draw_agents(self, agents, palette: GenotypePalette, radius: float, vision_color, settings) -> None:
        radius_pix = max(2, int(radius * self.scale))
        for agent in agents:
            center = self._to_screen(agent.x, agent.y)
            if settings.show_vision:
                pygame.draw.circle(self.screen, vision_color, center,
                                   max(1, int(agent.traits.vision * self.scale)), 1)
            if settings.show_vectors:
                tip = self._to_screen(agent.x + agent.vx * self.style.vector_scale,
                                      agent.y + agent.vy * self.style.vector_scale)
                pygame.draw.line(self.screen, self.style.vector_color, center, tip, 1)
            pygame.draw.circle(self.screen, palette.color(agent.genotype_id), center, radius_pix)

    def _draw_panel(self, runner) -> None:
        world = runner.world
        panel_x = self.style.margin * 2 + int(self.width * self.scale)
        panel_y = self.style.margin
        panel_w = self.style.panel_width - self.style.margin
        panel_h = int(self.height * self.scale)
        pygame.draw.rect(self.screen, self.style.panel_background,
                         pygame.Rect(panel_x, panel_y, panel_w, panel_h))

        totals = runner.totals()
        self._push_history(totals)

        y = panel_y + self.style.panel_padding
        y = self._draw_panel_line(panel_x, y, f"t = {world.time:.1f} s", bold=True)
        state = "paused" if runner.paused else f"x{runner.settings.speed_factor:g}"
        y = self._draw_panel_line(panel_x, y, f"Speed: {state}")
        y = self._draw_panel_line(panel_x, y, f"Plants: {totals['plants']}")
        y = self._draw_panel_line(panel_x, y, f"Herbivores: {totals['herbivores']}")
        y = self._draw_panel_line(panel_x, y, f"Carnivores: {totals['carnivores']}")

        for species, palette, label in (
            (Species.HERBIVORE, self.herbivore_colors, "Herbivore genotypes:"),
            (Species.CARNIVORE, self.carnivore_colors, "Carnivore genotypes:"),
        ):
            y += 6
            y = self._draw_panel_line(panel_x, y, label, bold=True)
            for genotype in runner.history.top_genotypes(species, self.style.top_genotypes):
                count = runner.history.latest.by_genotype(species).get(genotype, 0)
                y = self._draw_panel_line(panel_x, y, f"  {genotype}: {count}",
                                          color=palette.color(genotype))

        spark_h = 90
        spark_y = panel_y + panel_h - spark_h - self.style.panel_padding
        spark_rect = pygame.Rect(panel_x + self.style.panel_padding, spark_y,
                                 panel_w - 2 * self.style.panel_padding, spark_h)
        pygame.draw.rect(self.screen, (15, 21, 35), spark_rect)
        self._draw_sparkline(spark_rect)

    def _push_history(self, totals: Dict[str, int]) -> None:
        self.history_plants.append(totals["plants"])
        self.history_herbivores.append(totals["herbivores"])
        self.history_carnivores.append(totals["carnivores"])
        if len(self.history_plants) > self.style.history_max:
            self.history_plants.pop(0)
            self.history_herbivores.pop(0)
            self.history_carnivores.pop(0)

    def _draw_panel_line(self, x: int, y: int, text: str, bold: bool = False, color=None) -> int:
        font = self.font if bold else self.small_font
        surface = font.render(text, True, color or self.style.text_color)
        self.screen.blit(surface, (x + self.style.panel_padding, y))
        return y + surface.get_height() + 2

    def _draw_sparkline(self, rect: pygame.Rect) -> None:
        n = len(self.history_plants)
        if n < 2:
            return
        max_count = max(max(self.history_plants), max(self.history_herbivores),
                        max(self.history_carnivores), 1)
        for series, color in (
            (self.history_plants, self.style.line_plants),
            (self.history_herbivores, self.style.line_herbivores),
            (self.history_carnivores, self.style.line_carnivores),
        ):
            for i in range(1, n):
                x0 = rect.x + int((i - 1) / (n - 1) * rect.width)
                x1 = rect.x + int(i / (n - 1) * rect.width)
                y0 = rect.y + rect.height - int(series[i - 1] / max_count * rect.height)
                y1 = rect.y + rect.height - int(series[i] / max_count * rect.height)
                pygame.draw.line(self.screen, color, (x0, y0), (x1, y1), 2)

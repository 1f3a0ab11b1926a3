from __future__ import annotations

import math
from typing import Tuple

import numpy as np


Vec2 = Tuple[float, float]


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def distance_sq(x1: float, y1: float, x2: float, y2: float) -> float:
    dx = x2 - x1
    dy = y2 - y1
    return dx * dx + dy * dy


def normalize(x: float, y: float) -> Vec2:
    # zero-length vectors stay zero instead of turning into NaN
    magnitude = math.hypot(x, y) or 1.0
    return x / magnitude, y / magnitude


def rand_range(rng: np.random.Generator, low: float, high: float) -> float:
    return float(rng.random() * (high - low) + low)


def random_direction(rng: np.random.Generator) -> Vec2:
    angle = rng.random() * 2.0 * math.pi
    return math.cos(angle), math.sin(angle)

# pathrunner/game/patterns.py
from __future__ import annotations
import math
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict


class PathPattern(str, Enum):
    RANDOM = "random"
    ZIGZAG = "zigzag"
    CURVE = "curve"
    SNAKE = "snake"
    SWERVE = "swerve"

    @property
    def label(self) -> str:
        return PATTERN_LABELS[self]

    @classmethod
    def from_name(cls, name: str) -> "PathPattern":
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unknown path pattern: {name!r}") from None


PATTERN_LABELS = {
    PathPattern.RANDOM: "Random Path",
    PathPattern.ZIGZAG: "Zigzag Path",
    PathPattern.CURVE: "Curved Path",
    PathPattern.SNAKE: "Snake Path",
    PathPattern.SWERVE: "Swerving Path",
}


@dataclass
class PatternState:
    """Active pattern plus the streak counter / direction it advances."""
    pattern: PathPattern = PathPattern.RANDOM
    counter: int = 0
    direction: int = 1   # +1 right, -1 left (zigzag)

    def next_shift(self, difficulty: int, rng: random.Random) -> float:
        """Lateral shift (surface widths) of the next segment's center."""
        return SHIFT_FUNCS[self.pattern](self, difficulty, rng)

    def switch_to(self, pattern: PathPattern):
        self.pattern = pattern
        self.counter = 0


def _amplitude(base: float, per_level: float, cap: float, difficulty: int) -> float:
    return min(cap, base + per_level * difficulty)


def _zigzag_shift(st: PatternState, difficulty: int, rng: random.Random) -> float:
    amp = _amplitude(0.1, 0.04, 0.3, difficulty)
    st.counter += 1
    if st.counter % 3 == 0:
        st.direction *= -1
    return amp * st.direction


def _curve_shift(st: PatternState, difficulty: int, rng: random.Random) -> float:
    amp = _amplitude(0.1, 0.03, 0.25, difficulty)
    st.counter += 1
    return math.sin(st.counter * 0.5) * amp


def _snake_shift(st: PatternState, difficulty: int, rng: random.Random) -> float:
    amp = _amplitude(0.15, 0.03, 0.3, difficulty)
    st.counter += 1
    return math.sin(st.counter * 0.3) * amp


def _swerve_shift(st: PatternState, difficulty: int, rng: random.Random) -> float:
    st.counter += 1
    if st.counter % 5 == 0:
        # sudden swerve, straight-ish stretch otherwise
        jump = rng.random() * 0.3 + 0.1
        return jump if rng.random() > 0.5 else -jump
    return rng.random() * 0.05 - 0.025


def _random_shift(st: PatternState, difficulty: int, rng: random.Random) -> float:
    max_shift = _amplitude(0.05, 0.03, 0.2, difficulty)
    return rng.uniform(-max_shift, max_shift)


SHIFT_FUNCS: Dict[PathPattern, Callable[[PatternState, int, random.Random], float]] = {
    PathPattern.RANDOM: _random_shift,
    PathPattern.ZIGZAG: _zigzag_shift,
    PathPattern.CURVE: _curve_shift,
    PathPattern.SNAKE: _snake_shift,
    PathPattern.SWERVE: _swerve_shift,
}

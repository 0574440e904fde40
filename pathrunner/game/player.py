# pathrunner/game/player.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from .config import (
    WIDTH, HEIGHT, PLAYER_RADIUS, PLAYER_START_Y, PLAYER_BASE_SPEED,
    PLAYER_SENSITIVITY,
)
from .geometry import clamp


class Tint(str, Enum):
    BLUE = "blue"
    GREEN = "green"

    def toggled(self) -> "Tint":
        return Tint.GREEN if self is Tint.BLUE else Tint.BLUE


@dataclass
class Player:
    """
    Round marker steered by a direction vector.
    - x, y are pixels on the WIDTH x HEIGHT surface (center of the marker)
    - dir_x, dir_y in [-1, 1]; 0.5 is the fine-control half speed
    """
    x: float
    y: float
    dir_x: float = 0.0
    dir_y: float = 0.0
    color: Tint = Tint.BLUE
    speed: float = PLAYER_BASE_SPEED
    radius: float = PLAYER_RADIUS

    @classmethod
    def spawn_at(cls, norm_x: float) -> "Player":
        """Place the player near the bottom of the screen at normalized x."""
        return cls(x=WIDTH * norm_x, y=HEIGHT * PLAYER_START_Y)

    def set_direction(self, dx: float, dy: float):
        self.dir_x = clamp(float(dx), -1.0, 1.0)
        self.dir_y = clamp(float(dy), -1.0, 1.0)

    def stop(self):
        self.dir_x = 0.0
        self.dir_y = 0.0

    def toggle_color(self) -> Tint:
        self.color = self.color.toggled()
        return self.color

    def integrate(self):
        """One tick of motion (per frame, not dt-scaled), clamped to the surface."""
        step = self.speed * PLAYER_SENSITIVITY
        self.x = clamp(self.x + self.dir_x * step, 0.0, float(WIDTH))
        self.y = clamp(self.y + self.dir_y * step, 0.0, float(HEIGHT))

    # Normalized view used by every overlap test. The radius is normalized by
    # the surface width only, as the path widths are.
    @property
    def norm_center(self) -> Tuple[float, float]:
        return self.x / WIDTH, self.y / HEIGHT

    @property
    def norm_radius(self) -> float:
        return self.radius / WIDTH

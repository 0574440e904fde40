# pathrunner/game/entities.py
from __future__ import annotations
import itertools
import logging
import math
import random
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .config import (
    WIDTH, TOTAL_SEGMENTS, SCROLL_SPEED, LATERAL_MIN_X, LATERAL_MAX_X,
    OBSTACLE_MIN_SCORE, OBSTACLE_COOLDOWN, OBSTACLE_CHANCE, OBSTACLE_ROW_HEIGHT,
    OBSTACLE_MAX_Y, OBSTACLE_MIN_SEGMENT_W, OBSTACLE_MAX_SIZE,
    PROJECTILE_MIN_SCORE, PROJECTILE_COOLDOWN, PROJECTILE_CHANCE,
    PROJECTILE_AIM_SPREAD, PROJECTILE_SIZE_PX, PROJECTILE_START_Y,
    PROJECTILE_BASE_SPEED, PROJECTILE_SPEED_JITTER, PROJECTILE_WARNING_S,
    PROJECTILE_LIFETIME_S, PROJECTILE_PASS_Y, PROJECTILE_FADE_S,
    SPAWN_DIFFICULTY_SCALE,
)
from .geometry import clamp
from .level import PathSegment
from .player import Tint
from .scheduler import EventQueue

logger = logging.getLogger(__name__)


@dataclass
class Obstacle:
    x: float
    y: float
    width: float
    height: float
    color: Tint
    row: float
    id: int = 0


@dataclass
class ProjectileWarning:
    """Marker shown where a projectile is about to drop."""
    x: float
    id: int = 0


@dataclass
class Projectile:
    x: float
    y: float
    width: float
    height: float
    speed: float                 # surface heights per second
    passed_player: bool = False
    id: int = 0

    @property
    def center(self):
        return self.x + self.width / 2, self.y + self.height / 2

    @property
    def radius(self) -> float:
        return self.width / 2


def row_band(y: float) -> float:
    return math.floor(y / OBSTACLE_ROW_HEIGHT) * OBSTACLE_ROW_HEIGHT


class EntitySpawner:
    """
    Owns obstacles, projectile warnings and projectiles.
    Spawning is best-effort: any attempt that finds no room is skipped.
    """
    def __init__(self, rng: random.Random, queue: EventQueue):
        self.rng = rng
        self.queue = queue
        self.obstacles: List[Obstacle] = []
        self.warnings: List[ProjectileWarning] = []
        self.projectiles: List[Projectile] = []
        self.last_obstacle_spawn = 0
        self.last_projectile_spawn = 0
        self._ids = itertools.count(1)

    # -------------------- Per-tick update --------------------

    def update(self, dt: float):
        """Obstacles ride the path; projectiles fall at their own speed."""
        dy = SCROLL_SPEED * dt / TOTAL_SEGMENTS
        for o in self.obstacles:
            o.y += dy
        self.obstacles = [o for o in self.obstacles if o.y < 1.0]

        for p in self.projectiles:
            p.y += p.speed * dt
            if not p.passed_player and p.center[1] > PROJECTILE_PASS_Y:
                self._mark_passed(p)

    def _mark_passed(self, p: Projectile):
        p.passed_player = True
        self.queue.schedule(PROJECTILE_FADE_S, lambda pid=p.id: self.remove_projectile(pid))

    # -------------------- Spawning --------------------

    @staticmethod
    def _trial_chance(base: float, difficulty: int) -> float:
        return base * (1 + difficulty * SPAWN_DIFFICULTY_SCALE)

    def maybe_spawn(self, score: int, difficulty: int, player_norm_x: float,
                    segments: Iterable[PathSegment]):
        """Run this tick's obstacle and projectile trials."""
        if (self.rng.random() < self._trial_chance(OBSTACLE_CHANCE, difficulty)
                and score - self.last_obstacle_spawn > OBSTACLE_COOLDOWN):
            self.spawn_obstacle(score, segments)

        if (self.rng.random() < self._trial_chance(PROJECTILE_CHANCE, difficulty)
                and score - self.last_projectile_spawn > PROJECTILE_COOLDOWN):
            self.spawn_projectile(score, difficulty, player_norm_x)

    def spawn_obstacle(self, score: int, segments: Iterable[PathSegment]) -> Optional[Obstacle]:
        if score < OBSTACLE_MIN_SCORE:
            return None

        eligible = [s for s in segments
                    if 0.0 <= s.y <= OBSTACLE_MAX_Y and s.width >= OBSTACLE_MIN_SEGMENT_W]
        if not eligible:
            logger.debug("Obstacle skipped: no eligible segment")
            return None
        seg = self.rng.choice(eligible)

        row = row_band(seg.y)
        row_end = row + OBSTACLE_ROW_HEIGHT
        if any(row <= o.y < row_end for o in self.obstacles):
            logger.debug("Obstacle skipped: row %.1f taken", row)
            return None

        w = min(OBSTACLE_MAX_SIZE, seg.width * 0.3)
        h = min(OBSTACLE_MAX_SIZE, seg.height * 0.7)
        # keep a gap on both sides so there is always a way around
        margin = w * 1.5
        min_x = seg.x + margin
        max_x = seg.x + seg.width - margin - w
        if max_x <= min_x:
            return None

        obstacle = Obstacle(
            x=self.rng.uniform(min_x, max_x),
            y=seg.y + seg.height * 0.2,
            width=w,
            height=h,
            color=self.rng.choice(list(Tint)),
            row=row,
            id=next(self._ids),
        )
        self.obstacles.append(obstacle)
        self.last_obstacle_spawn = score
        logger.debug("Obstacle %d (%s) at x=%.3f y=%.3f", obstacle.id, obstacle.color.value,
                     obstacle.x, obstacle.y)
        return obstacle

    def spawn_projectile(self, score: int, difficulty: int,
                         player_norm_x: float) -> Optional[ProjectileWarning]:
        """Show a warning now; the projectile itself drops PROJECTILE_WARNING_S later."""
        if score < PROJECTILE_MIN_SCORE:
            return None

        offset = (self.rng.random() - 0.5) * PROJECTILE_AIM_SPREAD
        target_x = clamp(player_norm_x + offset, LATERAL_MIN_X, LATERAL_MAX_X)
        warning = ProjectileWarning(x=target_x, id=next(self._ids))
        self.warnings.append(warning)
        self.last_projectile_spawn = score
        self.queue.schedule(PROJECTILE_WARNING_S,
                            lambda: self._materialize(warning, difficulty))
        logger.debug("Projectile warning %d at x=%.3f", warning.id, target_x)
        return warning

    def _materialize(self, warning: ProjectileWarning, difficulty: int):
        if warning not in self.warnings:
            return
        self.warnings.remove(warning)

        size = PROJECTILE_SIZE_PX / WIDTH
        speed = (PROJECTILE_BASE_SPEED
                 * (1 + self.rng.random() * PROJECTILE_SPEED_JITTER)
                 * difficulty)
        p = Projectile(
            x=warning.x - size / 2,
            y=PROJECTILE_START_Y,
            width=size,
            height=size,
            speed=speed,
            id=next(self._ids),
        )
        self.projectiles.append(p)
        self.queue.schedule(PROJECTILE_LIFETIME_S, lambda pid=p.id: self.remove_projectile(pid))

    # -------------------- Removal --------------------

    def remove_obstacle(self, obstacle: Obstacle):
        self.obstacles = [o for o in self.obstacles if o.id != obstacle.id]

    def remove_projectile(self, pid: int):
        self.projectiles = [p for p in self.projectiles if p.id != pid]

    def live_projectiles(self) -> List[Projectile]:
        """Projectiles that still take part in collision checks."""
        return [p for p in self.projectiles if not p.passed_player]

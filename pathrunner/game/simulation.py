# pathrunner/game/simulation.py
"""
One path-runner session: path, entities, player, score and the state machine.

    RUNNING --pause--> PAUSED --resume--> RUNNING
    RUNNING --off path / hit--> GAME_OVER
    any --restart--> RUNNING (fresh state)

Each `step(dt)` runs the tick in a fixed order: timers + scroll, spawn trials,
player integration, on-path test, collisions, score.
"""
from __future__ import annotations
import logging
import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional, Tuple

from .config import (
    MAX_DT, OBSTACLE_BONUS, PLAYER_SPEEDUP, SPEEDUP_EVERY, PATTERN_BANNER_S,
    ON_PATH_FRACTION,
)
from .entities import EntitySpawner, Obstacle, Projectile, ProjectileWarning
from .geometry import circle_rect_collide, circle_circle_collide
from .level import PathGen, PathSegment, difficulty_for_score
from .patterns import PathPattern
from .player import Player, Tint
from .scheduler import EventQueue

logger = logging.getLogger(__name__)


class Status(str, Enum):
    RUNNING = "running"
    PAUSED = "paused"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class SimEvent:
    """Notification for the UI: "pattern_change" or "game_over"."""
    kind: str
    pattern: Optional[PathPattern] = None
    score: Optional[int] = None
    cause: Optional[str] = None   # "off_path" | "obstacle" | "projectile"


@dataclass(frozen=True)
class Frame:
    """Read-only copy of everything a renderer needs for one tick."""
    status: Status
    score: int
    difficulty_level: int
    pattern: PathPattern
    banner: Optional[str]
    player: Player
    segments: Tuple[PathSegment, ...]
    obstacles: Tuple[Obstacle, ...]
    warnings: Tuple[ProjectileWarning, ...]
    projectiles: Tuple[Projectile, ...]


@dataclass
class SimulationState:
    seed: Optional[int]
    rng: random.Random
    queue: EventQueue
    path: PathGen
    spawner: EntitySpawner
    player: Player
    score: int = 0
    difficulty_level: int = 1
    status: Status = Status.RUNNING
    death_cause: Optional[str] = None
    banner: Optional[str] = None
    ticks: int = 0
    events: List[SimEvent] = field(default_factory=list)
    _banner_timer: Optional[int] = None

    @classmethod
    def fresh(cls, seed: int | None = None,
              rng: random.Random | None = None) -> "SimulationState":
        """Brand-new session: default pattern, difficulty 1, first screen of path laid out."""
        if rng is None:
            if seed is None:
                seed = random.randrange(0, 2**32 - 1)
            rng = random.Random(seed)
        queue = EventQueue()
        path = PathGen(seed=seed, rng=rng)
        bottom = path.bottom_segment()
        state = cls(
            seed=seed,
            rng=rng,
            queue=queue,
            path=path,
            spawner=EntitySpawner(rng, queue),
            player=Player.spawn_at(bottom.center_x),
        )
        path.on_pattern_change = state.announce_pattern
        return state

    def announce_pattern(self, pattern: PathPattern):
        self.events.append(SimEvent("pattern_change", pattern=pattern, score=self.score))
        self.banner = pattern.label
        if self._banner_timer is not None:
            self.queue.cancel(self._banner_timer)
        self._banner_timer = self.queue.schedule(PATTERN_BANNER_S, self._clear_banner)

    def _clear_banner(self):
        self.banner = None
        self._banner_timer = None


class Simulation:
    def __init__(self, seed: int | None = None, rng: random.Random | None = None):
        self.state = SimulationState.fresh(seed, rng)

    # -------------------- Read-only views --------------------

    @property
    def status(self) -> Status:
        return self.state.status

    @property
    def score(self) -> int:
        return self.state.score

    @property
    def seed(self) -> Optional[int]:
        return self.state.seed

    @property
    def player(self) -> Player:
        return self.state.player

    @property
    def difficulty_level(self) -> int:
        return self.state.difficulty_level

    @property
    def pattern(self) -> PathPattern:
        return self.state.path.pattern.pattern

    def frame(self) -> Frame:
        st = self.state
        sp = st.spawner
        return Frame(
            status=st.status,
            score=st.score,
            difficulty_level=st.difficulty_level,
            pattern=self.pattern,
            banner=st.banner,
            player=replace(st.player),
            segments=tuple(replace(s) for s in st.path.segments),
            obstacles=tuple(replace(o) for o in sp.obstacles),
            warnings=tuple(replace(w) for w in sp.warnings),
            projectiles=tuple(replace(p) for p in sp.projectiles),
        )

    def drain_events(self) -> List[SimEvent]:
        events, self.state.events = self.state.events, []
        return events

    # -------------------- Input --------------------

    def set_direction(self, dx: float, dy: float):
        if self.state.status is Status.RUNNING:
            self.state.player.set_direction(dx, dy)

    def toggle_color(self) -> Tint:
        if self.state.status is Status.RUNNING:
            self.state.player.toggle_color()
        return self.state.player.color

    def pause(self) -> bool:
        if self.state.status is not Status.RUNNING:
            return False
        self.state.status = Status.PAUSED
        self.state.player.stop()
        return True

    def resume(self) -> bool:
        if self.state.status is not Status.PAUSED:
            return False
        self.state.status = Status.RUNNING
        return True

    def restart(self, seed: int | None = None, rng: random.Random | None = None):
        """Drop every entity and pending timer and start over (seed=None draws a new seed)."""
        self.state = SimulationState.fresh(seed, rng)

    # -------------------- Tick --------------------

    def step(self, dt: float) -> Status:
        st = self.state
        if st.status is not Status.RUNNING:
            return st.status
        dt = min(max(0.0, float(dt)), MAX_DT)
        st.ticks += 1

        # 1) timers, then everything that scrolls or falls
        st.queue.advance(dt)
        st.path.update_and_generate(dt, st.score)
        st.spawner.update(dt)

        # 2) spawn trials
        st.spawner.maybe_spawn(st.score, st.difficulty_level,
                               st.player.norm_center[0], st.path.segments)

        # 3) player
        st.player.integrate()
        center = st.player.norm_center
        radius = st.player.norm_radius

        # 4) still on the path?
        if not st.path.is_on_path(center, radius, ON_PATH_FRACTION):
            self._game_over("off_path")
            return st.status

        # 5) obstacles / projectiles
        cause = self.resolve_collisions(center, radius)
        if cause is not None:
            self._game_over(cause)
            return st.status

        # 6) score
        st.score += 1
        st.difficulty_level = difficulty_for_score(st.score)
        if st.score % SPEEDUP_EVERY == 0:
            st.player.speed += PLAYER_SPEEDUP
        return st.status

    def resolve_collisions(self, center, radius: float) -> Optional[str]:
        """Pick up color-matched obstacles (+bonus); return the cause of death, if any."""
        st = self.state
        for o in list(st.spawner.obstacles):
            if not circle_rect_collide(center, radius, o):
                continue
            if o.color is st.player.color:
                st.spawner.remove_obstacle(o)
                st.score += OBSTACLE_BONUS
                continue
            return "obstacle"

        for p in st.spawner.live_projectiles():
            if circle_circle_collide(center, radius, p.center, p.radius):
                return "projectile"
        return None

    def _game_over(self, cause: str):
        st = self.state
        st.status = Status.GAME_OVER
        st.death_cause = cause
        st.player.stop()
        st.events.append(SimEvent("game_over", score=st.score, cause=cause))
        logger.info("Game over (%s) at score %d, seed %s", cause, st.score, st.seed)

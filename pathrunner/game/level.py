# pathrunner/game/level.py
from __future__ import annotations
import itertools
import logging
import math
import random
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .config import (
    TOTAL_SEGMENTS, SEGMENT_PITCH, VERTICAL_OVERLAP,
    BASE_PATH_WIDTH, MIN_PATH_WIDTH, MAX_PATH_WIDTH,
    LATERAL_MIN_X, LATERAL_MAX_X, WIDTH_DRIFT_PER_LEVEL,
    MIN_OVERLAP_RATIO, INITIAL_MAX_SHIFT, WIDTH_GROWTH_FACTOR, SCROLL_SPEED,
    MAX_DIFFICULTY, SCORE_PER_LEVEL, PATTERN_SWITCH_MIN, PATTERN_SWITCH_SPREAD,
    ON_PATH_FRACTION,
)
from .geometry import clamp, horizontal_overlap, circle_rect_overlap_fraction, Point
from .patterns import PathPattern, PatternState

logger = logging.getLogger(__name__)

_OVERLAP_EPS = 1e-9


def difficulty_for_score(score: int) -> int:
    """1 at the start, +1 every SCORE_PER_LEVEL points, capped at MAX_DIFFICULTY."""
    return min(MAX_DIFFICULTY, int(score) // SCORE_PER_LEVEL + 1)


@dataclass
class PathSegment:
    x: float
    y: float
    width: float
    height: float
    index: int
    id: int = 0

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2


def required_overlap(width_a: float, width_b: float) -> float:
    return MIN_OVERLAP_RATIO * min(width_a, width_b)


def segment_overlap(a: PathSegment, b: PathSegment) -> float:
    return horizontal_overlap(a.x, a.width, b.x, b.width)


def _clamp_x(x: float, width: float) -> float:
    return clamp(x, LATERAL_MIN_X, LATERAL_MAX_X - width)


def ensure_overlap(x: float, width: float, anchor: PathSegment) -> Tuple[float, float]:
    """
    Dead-end guard. Returns a corrected (x, width) so the candidate shares at
    least MIN_OVERLAP_RATIO of the narrower width with `anchor`:
      1) slide toward the anchor just far enough, clamp to lateral bounds;
      2) otherwise re-center on the anchor, clamp;
      3) otherwise grow the width (bounded by MAX_PATH_WIDTH), re-center, clamp.
    """
    def shortfall(x_: float, w_: float) -> float:
        need = required_overlap(w_, anchor.width)
        return need - horizontal_overlap(x_, w_, anchor.x, anchor.width)

    if shortfall(x, width) <= _OVERLAP_EPS:
        return x, width

    need = required_overlap(width, anchor.width)
    if x < anchor.x:
        x = anchor.x + need - width       # our right edge lands `need` inside the anchor
    else:
        x = anchor.right - need           # our left edge lands `need` inside the anchor
    x = _clamp_x(x, width)
    if shortfall(x, width) <= _OVERLAP_EPS:
        return x, width

    x = _clamp_x(anchor.center_x - width / 2, width)
    short = shortfall(x, width)
    if short <= _OVERLAP_EPS:
        return x, width

    width = min(MAX_PATH_WIDTH, width + short * WIDTH_GROWTH_FACTOR)
    x = _clamp_x(anchor.center_x - width / 2, width)
    if shortfall(x, width) > _OVERLAP_EPS:
        logger.warning("Overlap still short after width growth (x=%.3f w=%.3f)", x, width)
    return x, width


class PathGen:
    """
    Generates an endless corridor of segments scrolling down the screen.
    Segment i+1 (above) always overlaps segment i enough to stay reachable.
    """
    def __init__(self, seed: int | None = None, rng: random.Random | None = None,
                 on_pattern_change: Optional[Callable[[PathPattern], None]] = None):
        if rng is None:
            if seed is None:
                seed = random.randrange(0, 2**32 - 1)
            rng = random.Random(seed)
        self.seed = seed
        self.rng = rng
        self.on_pattern_change = on_pattern_change
        self.segments: List[PathSegment] = []
        self.pattern = PatternState()
        self.score = 0
        self.difficulty_level = 1
        self.last_pattern_change = 0
        self.switch_after = self._draw_switch_threshold()
        self.last_width = BASE_PATH_WIDTH
        self._last_created: Optional[PathSegment] = None
        self._ids = itertools.count(1)
        self._init_start()

    def _init_start(self):
        """Lay out the first screen top to bottom, each slice chained to the previous one."""
        self.last_width = BASE_PATH_WIDTH
        for i in range(TOTAL_SEGMENTS):
            self.add_segment(i, i * SEGMENT_PITCH - VERTICAL_OVERLAP, initial=True)

    # -------------------- Segment creation --------------------

    def set_progress(self, score: int):
        self.score = int(score)
        self.difficulty_level = difficulty_for_score(score)

    def add_segment(self, index: int, y: float,
                    anchor: Optional[PathSegment] = None,
                    initial: bool = False) -> PathSegment:
        """Create and store one segment at logical `index` / top `y`, connected to `anchor`."""
        self.maybe_switch_pattern()

        if anchor is None:
            anchor = self._last_created

        if anchor is None:
            width = BASE_PATH_WIDTH
            x = 0.5 - width / 2
        else:
            width = self._next_width()
            if initial:
                shift = self._initial_shift(anchor, width)
            else:
                shift = self.pattern.next_shift(self.difficulty_level, self.rng)
            x = _clamp_x(anchor.center_x - width / 2 + shift, width)
            x, width = ensure_overlap(x, width, anchor)

        seg = PathSegment(
            x=x,
            y=y,
            width=width,
            height=SEGMENT_PITCH + 2 * VERTICAL_OVERLAP,
            index=index,
            id=next(self._ids),
        )
        self.segments.append(seg)
        self._last_created = seg
        self.last_width = width
        return seg

    def _next_width(self) -> float:
        max_change = WIDTH_DRIFT_PER_LEVEL * self.difficulty_level
        delta = self.rng.uniform(-max_change, max_change)
        return clamp(self.last_width + delta, MIN_PATH_WIDTH, MAX_PATH_WIDTH)

    def _initial_shift(self, anchor: PathSegment, width: float) -> float:
        room_left = anchor.center_x - width / 2 - LATERAL_MIN_X
        room_right = LATERAL_MAX_X - (anchor.center_x + width / 2)
        max_shift = max(0.0, min(room_left, room_right, INITIAL_MAX_SHIFT))
        return self.rng.uniform(-max_shift, max_shift)

    # -------------------- Patterns --------------------

    def _draw_switch_threshold(self) -> int:
        return PATTERN_SWITCH_MIN + self.rng.randrange(PATTERN_SWITCH_SPREAD)

    def maybe_switch_pattern(self) -> bool:
        if self.score - self.last_pattern_change <= self.switch_after:
            return False
        self.switch_pattern()
        return True

    def switch_pattern(self) -> PathPattern:
        """Pick a pattern different from the current one and restart its streak."""
        current = self.pattern.pattern
        choices = [p for p in PathPattern if p is not current] or [current]
        new = self.rng.choice(choices)
        self.pattern.switch_to(new)
        self.last_pattern_change = self.score
        self.switch_after = self._draw_switch_threshold()
        logger.debug("Path pattern %s -> %s at score %d", current.value, new.value, self.score)
        if self.on_pattern_change is not None:
            self.on_pattern_change(new)
        return new

    # -------------------- Scrolling --------------------

    def topmost(self) -> Optional[PathSegment]:
        return min(self.segments, key=lambda s: s.y, default=None)

    def extend_above(self, count: int) -> List[PathSegment]:
        """Append `count` segments above the current topmost one."""
        anchor = self.topmost()
        if anchor is None:
            self._last_created = None
            self._init_start()
            return list(self.segments)
        created = []
        for _ in range(count):
            anchor = self.add_segment(anchor.index - 1, anchor.y - SEGMENT_PITCH, anchor=anchor)
            created.append(anchor)
        return created

    def update_and_generate(self, dt: float, score: int | None = None):
        """Scroll every segment down, drop the ones off screen, refill the top."""
        if score is not None:
            self.set_progress(score)

        dy = SCROLL_SPEED * dt / TOTAL_SEGMENTS
        for seg in self.segments:
            seg.y += dy
            seg.index = math.floor(seg.y * TOTAL_SEGMENTS)

        self.segments = [s for s in self.segments if s.y < 1.0]

        top = self.topmost()
        if top is None:
            self.extend_above(0)
        elif top.y > 0:
            self.extend_above(math.ceil(top.y * TOTAL_SEGMENTS))

        self.segments.sort(key=lambda s: s.y)

    # -------------------- Queries --------------------

    def on_path_fraction(self, center: Point, radius: float) -> float:
        """Best containment fraction of the circle over all segments."""
        return max((circle_rect_overlap_fraction(center, radius, s) for s in self.segments),
                   default=0.0)

    def is_on_path(self, center: Point, radius: float,
                   required: float = ON_PATH_FRACTION) -> bool:
        return self.on_path_fraction(center, radius) >= required

    def bottom_segment(self) -> Optional[PathSegment]:
        return max(self.segments, key=lambda s: s.y, default=None)

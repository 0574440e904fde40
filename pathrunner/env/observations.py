# pathrunner/env/observations.py
from __future__ import annotations
from typing import Iterable, Optional, Sequence, Tuple
import numpy as np

from pathrunner.game.config import WIDTH, HEIGHT, MAX_DIFFICULTY
from pathrunner.game.player import Tint
from pathrunner.game.simulation import Frame

# Rows above the player (surface heights) where the path edges are sampled
LOOKAHEAD_ROWS: Tuple[float, float, float] = (0.1, 0.2, 0.3)
OBS_SIZE = 4 + 2 * len(LOOKAHEAD_ROWS) + 3 + 3 + 2


def _clamp(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else (hi if x > hi else x)


def _path_edges_at(segments: Iterable, y: float, near_x: float) -> Tuple[float, float]:
    """
    (left, right) of the segment covering row y; where slices overlap, the one
    whose center is closest to near_x. Sentinel (0, 0) if no segment covers y.
    """
    best = None
    best_d = None
    for s in segments:
        if s.y <= y < s.y + s.height:
            d = abs((s.x + s.width / 2) - near_x)
            if best_d is None or d < best_d:
                best, best_d = s, d
    if best is None:
        return 0.0, 0.0
    return _clamp(best.x, 0.0, 1.0), _clamp(best.x + best.width, 0.0, 1.0)


def _nearest(points: Sequence[Tuple[float, float]], px: float, py: float) -> Optional[int]:
    if not points:
        return None
    arr = np.asarray(points, dtype=np.float64)
    d2 = (arr[:, 0] - px) ** 2 + (arr[:, 1] - py) ** 2
    return int(np.argmin(d2))


def build_observation(frame: Frame) -> np.ndarray:
    """
    Returns a fixed (18,) float32 vector:
      [ x, y, color, difficulty,
        left@0.1, right@0.1, left@0.2, right@0.2, left@0.3, right@0.3,
        obs_dx, obs_dy, obs_match,
        bullet_dx, bullet_dy, bullet_present,
        warn_dx, warn_present ]
    - x, y: player center in [0,1]; color 0=blue 1=green; difficulty/5
    - edges in [0,1], (0,0) when no segment covers the row
    - dx/dy are clipped to [-1,1]; absent entities read dx=0, dy=-1, flag 0
    """
    pl = frame.player
    px = _clamp(pl.x / WIDTH, 0.0, 1.0)
    py = _clamp(pl.y / HEIGHT, 0.0, 1.0)
    feats = [px, py,
             1.0 if pl.color is Tint.GREEN else 0.0,
             frame.difficulty_level / float(MAX_DIFFICULTY)]

    for dy in LOOKAHEAD_ROWS:
        feats.extend(_path_edges_at(frame.segments, py - dy, px))

    obstacle_pts = [(o.x + o.width / 2, o.y + o.height / 2) for o in frame.obstacles]
    i = _nearest(obstacle_pts, px, py)
    if i is None:
        feats.extend([0.0, -1.0, 0.0])
    else:
        ox, oy = obstacle_pts[i]
        match = 1.0 if frame.obstacles[i].color is pl.color else 0.0
        feats.extend([_clamp(ox - px, -1.0, 1.0), _clamp(oy - py, -1.0, 1.0), match])

    live = [p.center for p in frame.projectiles if not p.passed_player]
    j = _nearest(live, px, py)
    if j is None:
        feats.extend([0.0, -1.0, 0.0])
    else:
        bx, by = live[j]
        feats.extend([_clamp(bx - px, -1.0, 1.0), _clamp(by - py, -1.0, 1.0), 1.0])

    if frame.warnings:
        wx = min((w.x for w in frame.warnings), key=lambda x: abs(x - px))
        feats.extend([_clamp(wx - px, -1.0, 1.0), 1.0])
    else:
        feats.extend([0.0, 0.0])

    return np.asarray(feats, dtype=np.float32)


def observation_bounds() -> Tuple[np.ndarray, np.ndarray]:
    n_rows = len(LOOKAHEAD_ROWS)
    low = np.array([0.0, 0.0, 0.0, 0.0] + [0.0, 0.0] * n_rows
                   + [-1.0, -1.0, 0.0] * 2 + [-1.0, 0.0], dtype=np.float32)
    high = np.array([1.0, 1.0, 1.0, 1.0] + [1.0, 1.0] * n_rows
                    + [1.0, 1.0, 1.0] * 2 + [1.0, 1.0], dtype=np.float32)
    return low, high

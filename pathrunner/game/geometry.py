# pathrunner/game/geometry.py
"""Overlap tests between the round player and the rectangular path/entities.

All coordinates are normalized to the game surface. A "rect" is anything with
``x``, ``y``, ``width`` and ``height`` attributes (segments, obstacles...),
with ``x, y`` the top-left corner.
"""
from __future__ import annotations
import math
from typing import Tuple

Point = Tuple[float, float]


def clamp(v: float, lo: float, hi: float) -> float:
    return lo if v < lo else (hi if v > hi else v)


def _closest_point(center: Point, rect) -> Point:
    cx, cy = center
    return (clamp(cx, rect.x, rect.x + rect.width),
            clamp(cy, rect.y, rect.y + rect.height))


def circle_rect_distance_sq(center: Point, rect) -> float:
    """Squared distance from the circle center to the closest point of rect (0 inside)."""
    px, py = _closest_point(center, rect)
    dx = center[0] - px
    dy = center[1] - py
    return dx * dx + dy * dy


def circle_rect_collide(center: Point, radius: float, rect) -> bool:
    """Touching counts: distance <= radius."""
    return circle_rect_distance_sq(center, rect) <= radius * radius


def circle_rect_overlap_fraction(center: Point, radius: float, rect) -> float:
    """
    Fuzzy containment of a circle in a rect, in [0, 1]:
    - 0.0 if the closest point of rect is farther than radius,
    - 1.0 if the center lies inside rect (edges included),
    - else 1 - distance / radius.
    """
    d2 = circle_rect_distance_sq(center, rect)
    if d2 > radius * radius:
        return 0.0
    if d2 == 0.0:
        return 1.0
    if radius <= 0.0:
        return 0.0
    return max(0.0, 1.0 - math.sqrt(d2) / radius)


def circle_circle_collide(c1: Point, r1: float, c2: Point, r2: float) -> bool:
    dx = c1[0] - c2[0]
    dy = c1[1] - c2[1]
    rr = r1 + r2
    return dx * dx + dy * dy <= rr * rr


def horizontal_overlap(a_x: float, a_w: float, b_x: float, b_w: float) -> float:
    """Length of the shared x interval of [a_x, a_x+a_w] and [b_x, b_x+b_w]; negative if apart."""
    return min(a_x + a_w, b_x + b_w) - max(a_x, b_x)

from __future__ import annotations

import math
from typing import List

from pursuit.types import Vec2, VelocityCommand

# Heading error that saturates the turn command.
TURN_SATURATION_ANGLE = math.radians(30.0)


def _dot(a: Vec2, b: Vec2) -> float:
    return a[0] * b[0] + a[1] * b[1]


def _clamp(v: float, lo: float, hi: float) -> float:
    return hi if v > hi else lo if v < lo else v


def wrap_pi(a: float) -> float:
    """Wrap an angle to [-pi, pi)."""
    return (a + math.pi) % (2.0 * math.pi) - math.pi


def distance(a: Vec2, b: Vec2) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def bearing(frm: Vec2, to: Vec2) -> float:
    return math.atan2(to[1] - frm[1], to[0] - frm[0])


def line_circle_intersection(
    center: Vec2, radius: float, p1: Vec2, p2: Vec2
) -> List[Vec2]:
    """
    Intersections of a circle with the segment p1->p2 (endpoints included).
    Points on the infinite line but outside the segment are dropped, so a robot
    sitting on the first endpoint only sees the forward intersection.
    """
    if radius < 0.0:
        return []
    d = (p2[0] - p1[0], p2[1] - p1[1])
    f = (p1[0] - center[0], p1[1] - center[1])
    a = _dot(d, d)
    if a < 1e-12:
        # degenerate segment
        return []
    b = 2.0 * _dot(f, d)
    c = _dot(f, f) - radius * radius
    disc = b * b - 4.0 * a * c
    if disc < 0.0:
        return []
    root = math.sqrt(disc)
    ts = [(-b - root) / (2.0 * a)]
    if root > 0.0:
        ts.append((-b + root) / (2.0 * a))
    return [(p1[0] + t * d[0], p1[1] + t * d[1]) for t in ts if 0.0 <= t <= 1.0]


def is_in_front(line_start: Vec2, line_end: Vec2, point: Vec2, other: Vec2) -> bool:
    """True if `point` lies further along line_start->line_end than `other`."""
    d = (line_end[0] - line_start[0], line_end[1] - line_start[1])
    s_point = _dot((point[0] - line_start[0], point[1] - line_start[1]), d)
    s_other = _dot((other[0] - line_start[0], other[1] - line_start[1]), d)
    return s_point > s_other


def position_equals_with_buffer(a: Vec2, b: Vec2, buffer: float) -> bool:
    return distance(a, b) <= buffer


def rotation_equals_with_buffer(a: float, b: float, buffer: float) -> bool:
    return abs(wrap_pi(a - b)) <= buffer


def move_to_position(
    cx: float,
    cy: float,
    ca: float,
    tx: float,
    ty: float,
    ta: float,
    turn_only: bool = False,
) -> VelocityCommand:
    """
    Raw robot-centric command driving pose (cx, cy, ca) toward (tx, ty) while
    turning toward heading ta.

    Translation is a unit-L1 direction in the robot frame (|lateral| +
    |longitudinal| == 1 unless already on target). Rotation is proportional to
    the wrapped heading error, saturating at TURN_SATURATION_ANGLE. In turn-only
    mode the robot rotates in place.
    """
    cmd = VelocityCommand()
    if not turn_only:
        dist = math.hypot(tx - cx, ty - cy)
        if dist > 1e-9:
            # angle of the target measured from the robot's right-hand axis
            rel = wrap_pi(math.atan2(ty - cy, tx - cx) - (ca - math.pi / 2.0))
            rel_x = math.cos(rel) * dist
            rel_y = math.sin(rel) * dist
            norm = abs(rel_x) + abs(rel_y)
            cmd.lateral = rel_x / norm
            cmd.longitudinal = rel_y / norm
    cmd.angular = _clamp(wrap_pi(ta - ca) / TURN_SATURATION_ANGLE, -1.0, 1.0)
    return cmd

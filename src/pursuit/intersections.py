from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence

from pursuit.geometry import bearing, is_in_front, line_circle_intersection, wrap_pi
from pursuit.types import Pose2, Vec2
from pursuit.waypoints import Waypoint

# Margin that keeps the shrunk look-ahead circle strictly inside a point-turn waypoint.
SHRINK_EPSILON = 0.01


@dataclass(frozen=True)
class TaggedIntersection:
    point: Vec2
    waypoint: Waypoint  # far endpoint of the segment
    index: int  # index of `waypoint` in the path


def find_intersections(waypoints: Sequence[Waypoint], x: float, y: float) -> List[TaggedIntersection]:
    """
    Intersect the look-ahead circle around (x, y) with every segment. Segment i
    runs from waypoint i-1 to waypoint i and uses waypoint i's follow radius.

    For point-turn style waypoints the test is repeated with the radius shrunk
    to just under the robot's distance to the waypoint, so the final approach
    is found even when the nominal circle already reaches past it. A robot
    within SHRINK_EPSILON of such a waypoint gets the waypoint itself.
    """
    center = (x, y)
    found: List[TaggedIntersection] = []
    for i in range(1, len(waypoints)):
        start, end = waypoints[i - 1], waypoints[i]
        radius = end.follow_radius
        for p in line_circle_intersection(center, radius, start.position, end.position):
            found.append(TaggedIntersection(p, end, i))
        if end.is_point_turn:
            shrunk = math.hypot(x - end.x, y - end.y) - SHRINK_EPSILON
            if shrunk <= 0.0:
                # robot sits on the waypoint
                found.append(TaggedIntersection(end.position, end, i))
            elif shrunk < radius:
                for p in line_circle_intersection(center, shrunk, start.position, end.position):
                    found.append(TaggedIntersection(p, end, i))
    return found


def _prefer_later(
    candidate: TaggedIntersection, best: TaggedIntersection, waypoints: Sequence[Waypoint]
) -> bool:
    if candidate.index != best.index:
        return candidate.index > best.index
    seg_start = waypoints[candidate.index - 1].position
    return is_in_front(seg_start, candidate.waypoint.position, candidate.point, best.point)


def _reduce_furthest(
    pool: Sequence[TaggedIntersection], waypoints: Sequence[Waypoint]
) -> TaggedIntersection:
    best = pool[0]
    for candidate in pool[1:]:
        if _prefer_later(candidate, best, waypoints):
            best = candidate
    return best


def _pending_point_turns(intersections: Sequence[TaggedIntersection]) -> List[TaggedIntersection]:
    return [i for i in intersections if i.waypoint.is_point_turn and not i.waypoint.traversed]


def select_waypoint_ordering(
    intersections: Sequence[TaggedIntersection], waypoints: Sequence[Waypoint], pose: Pose2
) -> TaggedIntersection:
    """
    Furthest-along-the-path selection. Untraversed point-turn candidates win
    outright over everything else; within the active pool a larger segment
    index wins, and on the same segment the point further along it wins.
    """
    pending = _pending_point_turns(intersections)
    return _reduce_furthest(pending or intersections, waypoints)


def select_heading_controlled(
    intersections: Sequence[TaggedIntersection], waypoints: Sequence[Waypoint], pose: Pose2
) -> TaggedIntersection:
    """
    Same point-turn priority as select_waypoint_ordering; otherwise the
    candidate the robot is already facing most directly.
    """
    pending = _pending_point_turns(intersections)
    if pending:
        return _reduce_furthest(pending, waypoints)
    x, y, heading = pose
    return min(intersections, key=lambda i: abs(wrap_pi(bearing((x, y), i.point) - heading)))

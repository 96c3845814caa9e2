"""
Per-waypoint-type motion synthesis.

Everything here is a pure function of the path and the robot pose; the
engine in pursuit.path owns every state change (traversal flags, action
queue, finish) based on what these functions report.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from pursuit.geometry import (
    bearing,
    distance,
    move_to_position,
    position_equals_with_buffer,
    rotation_equals_with_buffer,
)
from pursuit.types import Vec2, VelocityCommand
from pursuit.waypoints import (
    POINT_TURN_TYPES,
    GeneralWaypoint,
    PointTurnWaypoint,
    Waypoint,
    WaypointType,
)

# Types that carry an optional preferred angle.
_STEERED_TYPES = POINT_TURN_TYPES | {WaypointType.GENERAL}


@dataclass
class Approach:
    command: VelocityCommand
    distance: float  # robot -> waypoint
    turning: bool  # inside the position buffer, rotating in place
    reached: bool  # both buffers satisfied this tick


def general_command(
    waypoint: GeneralWaypoint, point: Vec2, x: float, y: float, heading: float
) -> VelocityCommand:
    """Curve toward the selected intersection at the waypoint's speeds."""
    if waypoint.preferred_angle is not None:
        ta = waypoint.preferred_angle
    else:
        ta = bearing((x, y), point)
    cmd = move_to_position(x, y, heading, point[0], point[1], ta)
    cmd.scale(waypoint.movement_speed, waypoint.turn_speed)
    return cmd


def _preferred_angle(waypoint: Waypoint) -> Optional[float]:
    if waypoint.type in _STEERED_TYPES:
        return waypoint.preferred_angle
    return None


def turn_target_heading(
    waypoints: Sequence[Waypoint], index: int, x: float, y: float, heading: float
) -> float:
    """
    Heading to settle on at waypoint `index` before moving on: the next
    waypoint's preferred angle, else the bearing to it. The last waypoint has
    no successor and uses its own preferred angle, else keeps the current
    heading.
    """
    if index + 1 < len(waypoints):
        nxt = waypoints[index + 1]
        preferred = _preferred_angle(nxt)
        return preferred if preferred is not None else bearing((x, y), nxt.position)
    own = _preferred_angle(waypoints[index])
    return own if own is not None else heading


def approach_command(
    waypoint: PointTurnWaypoint, turn_target: float, x: float, y: float, heading: float
) -> Approach:
    """Drive onto the exact waypoint position, then turn in place to `turn_target`."""
    tx, ty = waypoint.position
    dist = distance((x, y), (tx, ty))
    if not waypoint.traversed and position_equals_with_buffer(
        (x, y), (tx, ty), waypoint.position_buffer
    ):
        reached = rotation_equals_with_buffer(heading, turn_target, waypoint.rotation_buffer)
        cmd = move_to_position(x, y, heading, tx, ty, turn_target, turn_only=True)
        return Approach(cmd, dist, turning=True, reached=reached)

    if waypoint.preferred_angle is not None:
        ta = waypoint.preferred_angle
    else:
        ta = bearing((x, y), (tx, ty))
    cmd = move_to_position(x, y, heading, tx, ty, ta)
    return Approach(cmd, dist, turning=False, reached=False)

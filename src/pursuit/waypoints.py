from __future__ import annotations

from enum import Enum
from typing import Callable, Optional

from pursuit.types import Timeout, Vec2

InterruptAction = Callable[[], None]


class WaypointType(Enum):
    START = "start"
    GENERAL = "general"
    POINT_TURN = "point_turn"
    INTERRUPT = "interrupt"
    END = "end"


# Types that stop on the waypoint and perform a point turn before moving on.
POINT_TURN_TYPES = frozenset({WaypointType.POINT_TURN, WaypointType.INTERRUPT, WaypointType.END})


def normalize_speed(raw: float) -> float:
    return 1.0 if raw > 1.0 else 0.0 if raw < 0.0 else float(raw)


def _non_negative(name: str, value: float) -> float:
    if value < 0.0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return float(value)


class Waypoint:
    """
    Common waypoint record: pose, follow radius, timeout and type tag. The
    base class is untagged; paths only accept the typed subclasses.
    """

    type: Optional[WaypointType] = None

    def __init__(self, x: float, y: float, heading: float = 0.0) -> None:
        self.x = float(x)
        self.y = float(y)
        self.heading = float(heading)
        self.timeout: Timeout = None

    @property
    def position(self) -> Vec2:
        return (self.x, self.y)

    @property
    def follow_radius(self) -> float:
        return 0.0

    @property
    def is_point_turn(self) -> bool:
        return self.type in POINT_TURN_TYPES

    @property
    def traversed(self) -> bool:
        return False

    def set_timeout(self, timeout: Timeout) -> None:
        self.timeout = None if timeout is None else float(timeout)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(x={self.x:g}, y={self.y:g}, heading={self.heading:g})"


class StartWaypoint(Waypoint):
    """Marks the origin of a path. Carries only a pose."""

    type = WaypointType.START


class GeneralWaypoint(Waypoint):
    """
    Conventional pure-pursuit waypoint: the robot curves through it.

    movement_speed and turn_speed are clamped to [0, 1]. When a preferred angle
    is set the robot faces it instead of the computed bearing.
    """

    type = WaypointType.GENERAL

    def __init__(
        self,
        x: float,
        y: float,
        heading: float,
        movement_speed: float,
        turn_speed: float,
        follow_radius: float,
    ) -> None:
        super().__init__(x, y, heading)
        self._movement_speed = normalize_speed(movement_speed)
        self._turn_speed = normalize_speed(turn_speed)
        self._follow_radius = _non_negative("follow_radius", follow_radius)
        self._preferred_angle: Optional[float] = None

    @property
    def movement_speed(self) -> float:
        return self._movement_speed

    @movement_speed.setter
    def movement_speed(self, value: float) -> None:
        self._movement_speed = normalize_speed(value)

    @property
    def turn_speed(self) -> float:
        return self._turn_speed

    @turn_speed.setter
    def turn_speed(self, value: float) -> None:
        self._turn_speed = normalize_speed(value)

    @property
    def follow_radius(self) -> float:
        return self._follow_radius

    @follow_radius.setter
    def follow_radius(self, value: float) -> None:
        self._follow_radius = _non_negative("follow_radius", value)

    @property
    def preferred_angle(self) -> Optional[float]:
        return self._preferred_angle

    def using_preferred_angle(self) -> bool:
        return self._preferred_angle is not None

    def set_preferred_angle(self, angle: float) -> None:
        self._preferred_angle = float(angle)

    def disable_preferred_angle(self) -> None:
        self._preferred_angle = None


class PointTurnWaypoint(GeneralWaypoint):
    """
    The robot decelerates onto this waypoint, turns in place toward the next
    one, then continues. `traversed` flips to True once the robot is within
    both buffers on the same tick and is never reset.
    """

    type = WaypointType.POINT_TURN

    def __init__(
        self,
        x: float,
        y: float,
        heading: float,
        movement_speed: float,
        turn_speed: float,
        follow_radius: float,
        position_buffer: float,
        rotation_buffer: float,
    ) -> None:
        super().__init__(x, y, heading, movement_speed, turn_speed, follow_radius)
        self.position_buffer = _non_negative("position_buffer", position_buffer)
        self.rotation_buffer = _non_negative("rotation_buffer", rotation_buffer)
        self._traversed = False

    @property
    def traversed(self) -> bool:
        return self._traversed

    def mark_traversed(self) -> None:
        self._traversed = True


class InterruptWaypoint(PointTurnWaypoint):
    """Point-turn waypoint that runs `action` once the robot has settled on it."""

    type = WaypointType.INTERRUPT

    def __init__(
        self,
        x: float,
        y: float,
        heading: float,
        movement_speed: float,
        turn_speed: float,
        follow_radius: float,
        position_buffer: float,
        rotation_buffer: float,
        action: Optional[InterruptAction],
    ) -> None:
        super().__init__(
            x, y, heading, movement_speed, turn_speed, follow_radius, position_buffer, rotation_buffer
        )
        self.action = action


class EndWaypoint(InterruptWaypoint):
    """Last waypoint of every path; traversing it finishes the path."""

    type = WaypointType.END

    def __init__(
        self,
        x: float,
        y: float,
        heading: float,
        movement_speed: float,
        turn_speed: float,
        follow_radius: float,
        position_buffer: float,
        rotation_buffer: float,
        action: Optional[InterruptAction] = None,
    ) -> None:
        super().__init__(
            x,
            y,
            heading,
            movement_speed,
            turn_speed,
            follow_radius,
            position_buffer,
            rotation_buffer,
            action,
        )

    @property
    def finished(self) -> bool:
        return self.traversed

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Protocol, Tuple

if TYPE_CHECKING:
    from pursuit.waypoints import Waypoint

# Frames & units: field frame x/y in path units, headings in radians (CCW positive),
# times in seconds as returned by the injected clock.

Vec2 = Tuple[float, float]
Pose2 = Tuple[float, float, float]  # x, y, heading


class PathType(Enum):
    HEADING_CONTROLLED = "heading"
    WAYPOINT_ORDERING_CONTROLLED = "waypoint_ordering"


class FollowOutcome(Enum):
    FINISHED = "finished"
    PATH_TIMEOUT = "path_timeout"
    WAYPOINT_TIMEOUT = "waypoint_timeout"


@dataclass
class VelocityCommand:
    """Robot-centric drive command, each component nominally in [-1, 1]."""

    lateral: float = 0.0  # + to the robot's right
    longitudinal: float = 0.0  # + forward
    angular: float = 0.0  # + counter-clockwise

    def scale(self, movement: float, turn: float) -> None:
        self.lateral *= movement
        self.longitudinal *= movement
        self.angular *= turn

    def is_zero(self) -> bool:
        return self.lateral == 0.0 and self.longitudinal == 0.0 and self.angular == 0.0

    def as_tuple(self) -> tuple[float, float, float]:
        return self.lateral, self.longitudinal, self.angular


@dataclass(frozen=True)
class WaypointTimeout:
    """Returned by Path.loop instead of a command when a waypoint overstays its timeout."""

    index: int
    waypoint: "Waypoint"
    elapsed: float
    timeout: float


class PoseSource(Protocol):
    def current_pose(self) -> Pose2: ...


class DriveActuator(Protocol):
    def drive(self, lateral: float, longitudinal: float, angular: float) -> None: ...

    def stop(self) -> None: ...


Timeout = Optional[float]  # seconds, None = disabled

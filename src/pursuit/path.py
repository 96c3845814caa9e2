"""
Pure-pursuit path: an ordered set of waypoints plus everything needed to
traverse it.

Two ways to drive a path:

    path = Path(StartWaypoint(0, 0), GeneralWaypoint(5, 0, 0, 1, 1, 1), EndWaypoint(...))
    path.init()
    while not path.is_finished():
        result = path.loop(x, y, heading)      # VelocityCommand or WaypointTimeout

or bind a drive actuator and a pose source, enable auto mode and call
follow_path_automatically(), which blocks until finished or timed out.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Iterator, List, Optional, Union

from pursuit.actions import TriggeredAction
from pursuit.deceleration import DecelerationStrategy, default_deceleration
from pursuit.errors import InvalidPathConfiguration, MissingConfiguration, NotInitialized
from pursuit.geometry import move_to_position
from pursuit.intersections import (
    TaggedIntersection,
    find_intersections,
    select_heading_controlled,
    select_waypoint_ordering,
)
from pursuit.motion import approach_command, general_command, turn_target_heading
from pursuit.types import (
    DriveActuator,
    FollowOutcome,
    PathType,
    PoseSource,
    Timeout,
    Vec2,
    VelocityCommand,
    WaypointTimeout,
)
from pursuit.waypoints import (
    InterruptWaypoint,
    Waypoint,
    WaypointType,
    normalize_speed,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
LoopResult = Union[VelocityCommand, WaypointTimeout]

_SELECTORS: Dict[PathType, Callable] = {
    PathType.HEADING_CONTROLLED: select_heading_controlled,
    PathType.WAYPOINT_ORDERING_CONTROLLED: select_waypoint_ordering,
}


@dataclass
class PathConfig:
    path_type: PathType = PathType.WAYPOINT_ORDERING_CONTROLLED
    path_timeout: Timeout = None  # seconds, only used by follow_path_automatically
    retrace_enabled: bool = True
    retrace_movement_speed: float = 1.0
    retrace_turn_speed: float = 1.0
    auto_mode: bool = False

    def __post_init__(self) -> None:
        self.retrace_movement_speed = normalize_speed(self.retrace_movement_speed)
        self.retrace_turn_speed = normalize_speed(self.retrace_turn_speed)


def check_legality(waypoints: List[Waypoint]) -> None:
    """Raise InvalidPathConfiguration naming the first legality rule broken."""
    if len(waypoints) < 2:
        raise InvalidPathConfiguration("A path must have at least two waypoints.")
    for i, wp in enumerate(waypoints):
        if wp.type is None:
            raise InvalidPathConfiguration(f"Waypoint {i} ({wp!r}) has no waypoint type.")
    if waypoints[0].type is not WaypointType.START:
        raise InvalidPathConfiguration("A path must start with a StartWaypoint.")
    if waypoints[-1].type is not WaypointType.END:
        raise InvalidPathConfiguration("A path must end with an EndWaypoint.")
    for i, wp in enumerate(waypoints[1:-1], start=1):
        if wp.type in (WaypointType.START, WaypointType.END):
            raise InvalidPathConfiguration(
                f"Waypoint {i} is a {wp.type.value} waypoint; start and end waypoints "
                "may only be first and last."
            )


class Path:
    def __init__(
        self,
        *waypoints: Waypoint,
        cfg: PathConfig | None = None,
        deceleration: DecelerationStrategy = default_deceleration,
        clock: Clock = time.monotonic,
    ) -> None:
        self._waypoints: List[Waypoint] = list(waypoints)
        self.cfg = cfg or PathConfig()
        self._deceleration = deceleration
        self._clock = clock

        self._triggered_actions: List[TriggeredAction] = []
        self._interrupt_queue: Deque[InterruptWaypoint] = deque()

        self._drive: Optional[DriveActuator] = None
        self._pose_source: Optional[PoseSource] = None

        self._initialized = False
        self.reset()

    # ---- container ---------------------------------------------------------

    def __len__(self) -> int:
        return len(self._waypoints)

    def __getitem__(self, index: int) -> Waypoint:
        return self._waypoints[index]

    def __iter__(self) -> Iterator[Waypoint]:
        return iter(self._waypoints)

    def append(self, waypoint: Waypoint) -> None:
        self._waypoints.append(waypoint)

    # ---- lifecycle -----------------------------------------------------------

    def init(self) -> None:
        """
        Validate the path and mark it ready. Legal paths have at least two
        waypoints, begin with a start waypoint, end with an end waypoint and
        contain no other start/end waypoints. In auto mode a drive actuator and
        a pose source must be bound as well.
        """
        check_legality(self._waypoints)
        if self.cfg.auto_mode:
            if self._drive is None:
                raise MissingConfiguration("Path initiation failed. Drive actuator is not set.")
            if self._pose_source is None:
                raise MissingConfiguration("Path initiation failed. Pose source is not set.")
        self._initialized = True
        logger.info(
            "path initialized: %d waypoints, %s", len(self._waypoints), self.cfg.path_type.value
        )

    def is_legal_path(self) -> bool:
        try:
            check_legality(self._waypoints)
        except InvalidPathConfiguration:
            return False
        return True

    @property
    def initialized(self) -> bool:
        return self._initialized

    def reset(self) -> None:
        """Clear run state and queued interrupt actions. Traversal flags are kept."""
        self._last_waypoint: Optional[Waypoint] = None
        self._last_waypoint_index = 0
        self._last_waypoint_stamp = 0.0
        self._timed_out = False
        self._retracing = False
        self._last_known_intersection: Optional[Vec2] = None
        self._last_distance: Optional[float] = None
        self._last_decel_stamp: Optional[float] = None
        self._interrupt_queue.clear()

    def reset_timeouts(self) -> None:
        self._timed_out = False
        self._last_waypoint_stamp = self._clock()

    # ---- status ----------------------------------------------------------------

    def is_finished(self) -> bool:
        return bool(self._waypoints) and self._waypoints[-1].type is WaypointType.END and (
            self._waypoints[-1].traversed
        )

    def timed_out(self) -> bool:
        return self._timed_out

    @property
    def is_retracing(self) -> bool:
        return self._retracing

    @property
    def current_index(self) -> int:
        """Index of the waypoint matched on the last successful step (0 before any)."""
        return self._last_waypoint_index

    @property
    def last_known_intersection(self) -> Optional[Vec2]:
        return self._last_known_intersection

    # ---- configuration -----------------------------------------------------------

    def set_path_type(self, path_type: PathType) -> None:
        self.cfg.path_type = path_type

    def set_path_timeout(self, timeout: Timeout) -> None:
        self.cfg.path_timeout = timeout

    def set_waypoint_timeouts(self, *timeouts: Timeout) -> None:
        """Timeout i applies to waypoint i; extra values are ignored."""
        for waypoint, timeout in zip(self._waypoints, timeouts):
            waypoint.set_timeout(timeout)

    def set_uniform_waypoint_timeout(self, timeout: Timeout) -> None:
        for waypoint in self._waypoints:
            waypoint.set_timeout(timeout)

    def enable_retrace(self) -> None:
        self.cfg.retrace_enabled = True

    def disable_retrace(self) -> None:
        self.cfg.retrace_enabled = False

    def set_retrace_settings(self, movement_speed: float, turn_speed: float) -> None:
        self.cfg.retrace_movement_speed = normalize_speed(movement_speed)
        self.cfg.retrace_turn_speed = normalize_speed(turn_speed)

    def set_deceleration(self, strategy: DecelerationStrategy) -> None:
        if strategy is None:
            raise TypeError("The deceleration strategy cannot be None")
        self._deceleration = strategy

    def add_triggered_actions(self, *actions: TriggeredAction) -> None:
        self._triggered_actions.extend(actions)

    def remove_triggered_action(self, action: TriggeredAction) -> bool:
        try:
            self._triggered_actions.remove(action)
        except ValueError:
            return False
        return True

    def clear_triggered_actions(self) -> None:
        self._triggered_actions.clear()

    def set_drive(self, drive: DriveActuator) -> None:
        self._drive = drive

    def set_pose_source(self, pose_source: PoseSource) -> None:
        self._pose_source = pose_source

    def enable_auto_mode(self) -> None:
        self.cfg.auto_mode = True

    def disable_auto_mode(self) -> None:
        self.cfg.auto_mode = False

    # ---- engine ------------------------------------------------------------------

    def loop(self, x: float, y: float, heading: float) -> LoopResult:
        """
        One control step for the robot at (x, y, heading).

        Returns the robot-centric command to apply, or a WaypointTimeout when
        the currently matched waypoint has overstayed its timeout.
        """
        if not self._initialized:
            raise NotInitialized("You must call init() before calling loop()")
        self._tick_triggered_actions()
        self._run_queued_interrupt_actions()

        intersections = find_intersections(self._waypoints, x, y)
        if not intersections:
            return self._lost_path(x, y, heading)
        if self._retracing:
            logger.info("path reacquired at (%.3f, %.3f)", x, y)
            self._retracing = False

        best = _SELECTORS[self.cfg.path_type](intersections, self._waypoints, (x, y, heading))
        if self.cfg.retrace_enabled:
            self._last_known_intersection = best.point

        now = self._clock()
        if best.waypoint is not self._last_waypoint:
            logger.debug("now following waypoint %d %r", best.index, best.waypoint)
            self._last_waypoint = best.waypoint
            self._last_waypoint_index = best.index
            self._last_waypoint_stamp = now
            self._last_distance = None
            self._last_decel_stamp = None

        timeout = best.waypoint.timeout
        if timeout is not None:
            elapsed = now - self._last_waypoint_stamp
            if elapsed > timeout:
                self._timed_out = True
                logger.warning(
                    "waypoint %d timed out after %.3fs (limit %.3fs)", best.index, elapsed, timeout
                )
                return WaypointTimeout(best.index, best.waypoint, elapsed, timeout)

        return self._synthesize(best, x, y, heading, now)

    def _synthesize(
        self, best: TaggedIntersection, x: float, y: float, heading: float, now: float
    ) -> VelocityCommand:
        wp = best.waypoint
        kind = wp.type
        if kind is WaypointType.GENERAL:
            return general_command(wp, best.point, x, y, heading)
        if kind not in (WaypointType.POINT_TURN, WaypointType.INTERRUPT, WaypointType.END):
            raise InvalidPathConfiguration(f"cannot follow waypoint {wp!r}")

        target = turn_target_heading(self._waypoints, best.index, x, y, heading)
        approach = approach_command(wp, target, x, y, heading)
        if approach.reached:
            wp.mark_traversed()
            logger.debug("waypoint %d traversed", best.index)
            if kind is WaypointType.END:
                logger.info("path finished at (%.3f, %.3f)", x, y)
                # end actions run on the finishing tick
                if wp.action is not None:
                    wp.action()
            elif kind is WaypointType.INTERRUPT and wp.action is not None:
                self._interrupt_queue.append(wp)
            if kind is not WaypointType.POINT_TURN:
                # interrupt and end waypoints hold position
                return VelocityCommand()

        self._decelerate(approach.command, approach.distance, wp, now)
        return approach.command

    def _decelerate(self, cmd: VelocityCommand, dist: float, wp: Waypoint, now: float) -> None:
        last = self._last_distance if self._last_distance is not None else dist
        elapsed = now - self._last_decel_stamp if self._last_decel_stamp is not None else 0.0
        self._deceleration(cmd, dist, last, elapsed, wp.movement_speed, wp.turn_speed)
        self._last_distance = dist
        self._last_decel_stamp = now

    def _lost_path(self, x: float, y: float, heading: float) -> VelocityCommand:
        if not self.cfg.retrace_enabled:
            return VelocityCommand()
        if self._last_known_intersection is None:
            self._last_known_intersection = self._waypoints[0].position
        if not self._retracing:
            logger.info(
                "path lost at (%.3f, %.3f); retracing to (%.3f, %.3f)",
                x,
                y,
                *self._last_known_intersection,
            )
            self._retracing = True
        return self._retrace(x, y, heading)

    def _retrace(self, x: float, y: float, heading: float) -> VelocityCommand:
        lx, ly = self._last_known_intersection
        cmd = move_to_position(x, y, heading, lx, ly, heading)
        cmd.scale(self.cfg.retrace_movement_speed, self.cfg.retrace_turn_speed)
        return cmd

    def _tick_triggered_actions(self) -> None:
        for action in self._triggered_actions:
            action.tick()

    def _run_queued_interrupt_actions(self) -> None:
        while self._interrupt_queue:
            waypoint = self._interrupt_queue.popleft()
            logger.debug("running interrupt action for %r", waypoint)
            waypoint.action()

    # ---- automatic mode ------------------------------------------------------------

    def follow_path_automatically(self) -> FollowOutcome:
        """
        Poll the pose source, run loop() and forward commands to the drive
        until the path is finished or a timeout hits. The drive is stopped on
        every exit.
        """
        if not self._initialized:
            raise NotInitialized("You must call init() before calling follow_path_automatically()")
        if not self.cfg.auto_mode:
            raise MissingConfiguration("Automatic mode is not enabled.")
        if self._drive is None or self._pose_source is None:
            raise MissingConfiguration("Automatic mode needs a drive actuator and a pose source.")

        start = self._clock()
        outcome = FollowOutcome.FINISHED
        try:
            while not self.is_finished():
                timeout = self.cfg.path_timeout
                if timeout is not None and self._clock() - start > timeout:
                    self._timed_out = True
                    logger.warning("path timed out after %.3fs", timeout)
                    outcome = FollowOutcome.PATH_TIMEOUT
                    break
                x, y, heading = self._pose_source.current_pose()
                result = self.loop(x, y, heading)
                if isinstance(result, WaypointTimeout):
                    outcome = FollowOutcome.WAYPOINT_TIMEOUT
                    break
                self._drive.drive(result.lateral, result.longitudinal, result.angular)
        finally:
            self._drive.stop()
        return outcome

"""
YAML path files.

    path:
      type: waypoint_ordering        # or heading
      timeout_s: 60.0
      retrace: {enabled: true, movement_speed: 0.7, turn_speed: 0.7}
    waypoints:
      - {type: start, x: 0, y: 0}
      - {type: general, x: 5, y: 0, movement_speed: 1, turn_speed: 1, follow_radius: 1}
      - {type: interrupt, x: 5, y: 5, ..., position_buffer: 0.2, rotation_buffer: 0.1, action: grab}
      - {type: end, ...}

Interrupt and end actions are referenced by name and looked up in the
`actions` mapping handed to the loader.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, Mapping, Optional

import yaml

from pursuit.errors import InvalidPathConfiguration
from pursuit.path import Clock, Path, PathConfig
from pursuit.types import PathType
from pursuit.waypoints import (
    EndWaypoint,
    GeneralWaypoint,
    InterruptAction,
    InterruptWaypoint,
    PointTurnWaypoint,
    StartWaypoint,
    Waypoint,
    WaypointType,
)

_PATH_TYPES = {p.value: p for p in PathType}


def load_yaml(path: str) -> dict:
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _num(d: Mapping[str, Any], key: str, default: Optional[float] = None) -> float:
    if key not in d:
        if default is None:
            raise InvalidPathConfiguration(f"waypoint {dict(d)} is missing '{key}'")
        return default
    try:
        return float(d[key])
    except (TypeError, ValueError) as e:
        raise InvalidPathConfiguration(f"'{key}' must be a number, got {d[key]!r}") from e


def path_config_from_dict(d: Mapping[str, Any]) -> PathConfig:
    kind = str(d.get("type", PathType.WAYPOINT_ORDERING_CONTROLLED.value))
    if kind not in _PATH_TYPES:
        raise InvalidPathConfiguration(
            f"unknown path type {kind!r}; expected one of {sorted(_PATH_TYPES)}"
        )
    retrace = d.get("retrace") or {}
    timeout = d.get("timeout_s")
    return PathConfig(
        path_type=_PATH_TYPES[kind],
        path_timeout=None if timeout is None else float(timeout),
        retrace_enabled=bool(retrace.get("enabled", True)),
        retrace_movement_speed=float(retrace.get("movement_speed", 1.0)),
        retrace_turn_speed=float(retrace.get("turn_speed", 1.0)),
        auto_mode=bool(d.get("auto_mode", False)),
    )


def _action(d: Mapping[str, Any], actions: Mapping[str, InterruptAction]) -> Optional[InterruptAction]:
    name = d.get("action")
    if name is None:
        return None
    if name not in actions:
        raise InvalidPathConfiguration(f"unknown action {name!r}; known: {sorted(actions)}")
    return actions[name]


def waypoint_from_dict(
    d: Mapping[str, Any], actions: Mapping[str, InterruptAction] | None = None
) -> Waypoint:
    actions = actions or {}
    try:
        kind = WaypointType(str(d.get("type", "")).lower())
    except ValueError as e:
        raise InvalidPathConfiguration(f"unknown waypoint type {d.get('type')!r}") from e

    x, y = _num(d, "x"), _num(d, "y")
    heading = _num(d, "heading", 0.0)
    if kind is WaypointType.START:
        wp: Waypoint = StartWaypoint(x, y, heading)
    else:
        motion = (
            x,
            y,
            heading,
            _num(d, "movement_speed", 1.0),
            _num(d, "turn_speed", 1.0),
            _num(d, "follow_radius"),
        )
        buffers = ()
        if kind is not WaypointType.GENERAL:
            buffers = (_num(d, "position_buffer"), _num(d, "rotation_buffer"))
        action = _action(d, actions)
        if kind is WaypointType.INTERRUPT and action is None:
            raise InvalidPathConfiguration("interrupt waypoints need an 'action'")
        try:
            if kind is WaypointType.GENERAL:
                wp = GeneralWaypoint(*motion)
            elif kind is WaypointType.POINT_TURN:
                wp = PointTurnWaypoint(*motion, *buffers)
            elif kind is WaypointType.INTERRUPT:
                wp = InterruptWaypoint(*motion, *buffers, action)
            else:
                wp = EndWaypoint(*motion, *buffers, action)
        except ValueError as e:
            # negative radius or buffer
            raise InvalidPathConfiguration(str(e)) from e
        if d.get("preferred_angle") is not None:
            wp.set_preferred_angle(_num(d, "preferred_angle"))

    if d.get("timeout_s") is not None:
        wp.set_timeout(_num(d, "timeout_s"))
    return wp


def path_from_dict(
    d: Mapping[str, Any],
    actions: Mapping[str, InterruptAction] | None = None,
    clock: Clock = time.monotonic,
) -> Path:
    cfg = path_config_from_dict(d.get("path") or {})
    entries = d.get("waypoints") or []
    if not isinstance(entries, list):
        raise InvalidPathConfiguration("'waypoints' must be a list")
    waypoints = [waypoint_from_dict(e, actions) for e in entries]
    return Path(*waypoints, cfg=cfg, clock=clock)


def load_path(
    path: str,
    actions: Dict[str, Callable[[], None]] | None = None,
    clock: Clock = time.monotonic,
) -> Path:
    """Build an uninitialized Path from a YAML file."""
    return path_from_dict(load_yaml(path), actions=actions, clock=clock)

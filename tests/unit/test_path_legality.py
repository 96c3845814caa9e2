import pytest

from pursuit.errors import InvalidPathConfiguration, MissingConfiguration, NotInitialized
from pursuit.path import Path, PathConfig
from pursuit.waypoints import EndWaypoint, GeneralWaypoint, StartWaypoint, Waypoint


def _start():
    return StartWaypoint(0, 0)


def _general(x=5.0):
    return GeneralWaypoint(x, 0, 0, 1, 1, 1)


def _end(x=10.0):
    return EndWaypoint(x, 0, 0, 1, 1, 1, 0.2, 0.1)


@pytest.mark.parametrize(
    "waypoints",
    [
        [],
        [_start()],
        [_general(), _end()],
        [_start(), _general()],
        [_start(), _start(), _end()],
        [_start(), _end(5.0), _end()],
    ],
)
def test_illegal_paths_rejected(waypoints):
    path = Path(*waypoints)
    assert not path.is_legal_path()
    with pytest.raises(InvalidPathConfiguration):
        path.init()
    assert not path.initialized


def test_minimal_legal_path():
    path = Path(_start(), _end())
    assert path.is_legal_path()
    path.init()
    assert path.initialized
    assert len(path) == 2


def test_is_legal_path_does_not_initialize():
    path = Path(_start(), _general(), _end())
    assert path.is_legal_path()
    assert not path.initialized


def test_append_then_init():
    path = Path(_start(), _general())
    assert not path.is_legal_path()
    path.append(_end())
    path.init()
    assert [w.type.value for w in path] == ["start", "general", "end"]


def test_loop_before_init_raises():
    path = Path(_start(), _general(), _end())
    with pytest.raises(NotInitialized):
        path.loop(0.0, 0.0, 0.0)


def test_auto_mode_init_needs_drive_and_pose_source():
    path = Path(_start(), _general(), _end(), cfg=PathConfig(auto_mode=True))
    with pytest.raises(MissingConfiguration):
        path.init()


def test_invalid_path_configuration_is_value_error():
    # callers catching ValueError keep working
    with pytest.raises(ValueError):
        Path(_start()).init()


def test_set_deceleration_rejects_none():
    path = Path(_start(), _end())
    with pytest.raises(TypeError):
        path.set_deceleration(None)


def test_retrace_settings_clamped():
    path = Path(_start(), _end(), cfg=PathConfig(retrace_movement_speed=3.0))
    assert path.cfg.retrace_movement_speed == 1.0
    path.set_retrace_settings(-1.0, 0.25)
    assert path.cfg.retrace_movement_speed == 0.0
    assert path.cfg.retrace_turn_speed == pytest.approx(0.25)


def test_untyped_waypoint_rejected():
    assert Waypoint(0, 0).type is None
    path = Path(Waypoint(0, 0), _end())
    assert not path.is_legal_path()
    with pytest.raises(InvalidPathConfiguration):
        Path(_start(), Waypoint(5, 0), _end()).init()

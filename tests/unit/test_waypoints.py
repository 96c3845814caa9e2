import pytest

from pursuit.waypoints import (
    EndWaypoint,
    GeneralWaypoint,
    InterruptWaypoint,
    PointTurnWaypoint,
    StartWaypoint,
    WaypointType,
)


def test_speeds_are_clamped_to_unit_range():
    wp = GeneralWaypoint(0, 0, 0, 1.7, -0.3, 1.0)
    assert wp.movement_speed == 1.0
    assert wp.turn_speed == 0.0
    wp.movement_speed = 0.4
    wp.turn_speed = 2.0
    assert wp.movement_speed == pytest.approx(0.4)
    assert wp.turn_speed == 1.0


def test_negative_radius_and_buffers_rejected():
    with pytest.raises(ValueError):
        GeneralWaypoint(0, 0, 0, 1, 1, -1.0)
    with pytest.raises(ValueError):
        PointTurnWaypoint(0, 0, 0, 1, 1, 1.0, -0.1, 0.1)
    with pytest.raises(ValueError):
        PointTurnWaypoint(0, 0, 0, 1, 1, 1.0, 0.1, -0.1)
    wp = GeneralWaypoint(0, 0, 0, 1, 1, 1.0)
    with pytest.raises(ValueError):
        wp.follow_radius = -2.0


def test_preferred_angle_toggle():
    wp = GeneralWaypoint(0, 0, 0, 1, 1, 1)
    assert not wp.using_preferred_angle()
    assert wp.preferred_angle is None
    wp.set_preferred_angle(1.2)
    assert wp.using_preferred_angle()
    assert wp.preferred_angle == pytest.approx(1.2)
    wp.disable_preferred_angle()
    assert wp.preferred_angle is None


def test_type_tags_and_point_turn_family():
    start = StartWaypoint(0, 0)
    general = GeneralWaypoint(1, 0, 0, 1, 1, 1)
    pt = PointTurnWaypoint(2, 0, 0, 1, 1, 1, 0.1, 0.1)
    interrupt = InterruptWaypoint(3, 0, 0, 1, 1, 1, 0.1, 0.1, lambda: None)
    end = EndWaypoint(4, 0, 0, 1, 1, 1, 0.1, 0.1)

    assert [w.type for w in (start, general, pt, interrupt, end)] == [
        WaypointType.START,
        WaypointType.GENERAL,
        WaypointType.POINT_TURN,
        WaypointType.INTERRUPT,
        WaypointType.END,
    ]
    assert not start.is_point_turn and not general.is_point_turn
    assert pt.is_point_turn and interrupt.is_point_turn and end.is_point_turn
    # start waypoints never contribute a look-ahead circle
    assert start.follow_radius == 0.0
    assert end.action is None


def test_traversal_is_sticky():
    end = EndWaypoint(4, 0, 0, 1, 1, 1, 0.1, 0.1)
    assert not end.traversed and not end.finished
    end.mark_traversed()
    end.mark_traversed()
    assert end.traversed and end.finished


def test_timeout_setter():
    wp = StartWaypoint(0, 0)
    assert wp.timeout is None
    wp.set_timeout(2)
    assert wp.timeout == 2.0
    wp.set_timeout(None)
    assert wp.timeout is None

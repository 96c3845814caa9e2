import math

import pytest

from pursuit.intersections import (
    TaggedIntersection,
    find_intersections,
    select_heading_controlled,
    select_waypoint_ordering,
)
from pursuit.waypoints import EndWaypoint, GeneralWaypoint, PointTurnWaypoint, StartWaypoint


def _straight():
    return [
        StartWaypoint(0, 0),
        GeneralWaypoint(5, 0, 0, 1, 1, 1),
        EndWaypoint(10, 0, 0, 1, 1, 1, 0.2, 0.1),
    ]


def test_intersections_tagged_with_far_waypoint():
    wps = _straight()
    found = find_intersections(wps, 0.0, 0.0)
    assert len(found) == 1
    assert found[0].index == 1
    assert found[0].waypoint is wps[1]
    assert found[0].point == pytest.approx((1.0, 0.0))


def test_shrunk_circle_adds_final_approach_points():
    wps = _straight()
    found = find_intersections(wps, 9.5, 0.0)
    xs = sorted(i.point[0] for i in found)
    # nominal circle behind the robot, shrunk circle on both sides of it
    assert xs == pytest.approx([8.5, 9.01, 9.99])
    assert all(i.index == 2 for i in found)


def test_no_intersections_far_from_path():
    assert find_intersections(_straight(), 0.0, 20.0) == []


def test_ordering_prefers_larger_index_then_further_along():
    wps = [
        StartWaypoint(0, 0),
        GeneralWaypoint(5, 0, 0, 1, 1, 1),
        GeneralWaypoint(5, 5, 0, 1, 1, 1),
        EndWaypoint(5, 10, 0, 1, 1, 1, 0.2, 0.1),
    ]
    a = TaggedIntersection((4.0, 0.0), wps[1], 1)
    b = TaggedIntersection((5.0, 1.0), wps[2], 2)
    c = TaggedIntersection((5.0, 2.0), wps[2], 2)
    pose = (4.5, 0.5, 0.0)
    assert select_waypoint_ordering([a, b], wps, pose) is b
    assert select_waypoint_ordering([b, a], wps, pose) is b
    assert select_waypoint_ordering([a, c, b], wps, pose) is c


def test_pending_point_turn_beats_later_segments():
    pt = PointTurnWaypoint(5, 0, 0, 1, 1, 1, 0.2, 0.1)
    wps = [
        StartWaypoint(0, 0),
        pt,
        GeneralWaypoint(5, 5, 0, 1, 1, 1),
        EndWaypoint(5, 10, 0, 1, 1, 1, 0.2, 0.1),
    ]
    on_pt = TaggedIntersection((4.99, 0.0), pt, 1)
    later = TaggedIntersection((5.0, 1.0), wps[2], 2)
    pose = (4.9, 0.0, 0.0)
    assert select_waypoint_ordering([on_pt, later], wps, pose) is on_pt
    assert select_heading_controlled([later, on_pt], wps, pose) is on_pt

    # once traversed the point turn competes as an ordinary candidate
    pt.mark_traversed()
    assert select_waypoint_ordering([on_pt, later], wps, pose) is later


def test_heading_controlled_picks_most_aligned_candidate():
    wps = [
        StartWaypoint(0, 0),
        GeneralWaypoint(1, 0, 0, 1, 1, 1),
        GeneralWaypoint(0, 1, 0, 1, 1, 1),
        EndWaypoint(0, 5, 0, 1, 1, 1, 0.2, 0.1),
    ]
    east = TaggedIntersection((1.0, 0.0), wps[1], 1)
    north = TaggedIntersection((0.0, 1.0), wps[2], 2)
    assert select_heading_controlled([east, north], wps, (0.0, 0.0, math.pi / 2)) is north
    # larger index loses when the robot faces the other candidate
    assert select_heading_controlled([east, north], wps, (0.0, 0.0, 0.1)) is east
    # bearing pi and heading just above -pi are 0.05 rad apart
    west = TaggedIntersection((-1.0, 0.0), wps[2], 2)
    assert select_heading_controlled([east, west], wps, (0.0, 0.0, -math.pi + 0.05)) is west


def test_robot_on_point_turn_waypoint_gets_the_waypoint():
    wps = [
        StartWaypoint(0, 0),
        GeneralWaypoint(8, 0, 0, 1, 1, 1),
        EndWaypoint(10, 0, 0, 1, 1, 3, 0.2, 0.1),
    ]
    found = find_intersections(wps, 10.0, 0.0)
    assert len(found) == 1
    assert found[0].point == (10.0, 0.0)
    assert found[0].waypoint is wps[2]
    assert found[0].index == 2

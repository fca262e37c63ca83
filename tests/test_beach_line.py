"""Tests for the beach line and event queue."""

import pytest

from py_fortune.core.beach_line import (
    Arc, BeachLine, EventQueue, HalfEdge, SiteEvent, VertexEvent,
)
from py_fortune.core.errors import InternalInvariantError
from py_fortune.core.geometry import Point, normalize


class TestEventQueue:
    """Test event ordering."""

    def test_orders_by_sweep_position(self):
        queue = EventQueue()
        queue.push(SiteEvent(Point(5, 30), 0))
        queue.push(SiteEvent(Point(1, 10), 1))
        queue.push(VertexEvent(20.0, Point(3, 15), arc_id=7, generation=1))

        assert [queue.pop().sweep_pos for _ in range(3)] == [10, 20.0, 30]
        assert not queue

    def test_equal_sweep_position_left_to_right(self):
        queue = EventQueue()
        queue.push(SiteEvent(Point(610, 79), 1))
        queue.push(SiteEvent(Point(232, 79), 0))

        assert queue.pop().index == 0
        assert queue.pop().index == 1

    def test_full_ties_are_fifo(self):
        queue = EventQueue()
        first = VertexEvent(5.0, Point(1, 1), arc_id=1, generation=1)
        second = VertexEvent(5.0, Point(1, 1), arc_id=2, generation=1)
        queue.push(first)
        queue.push(second)

        assert len(queue) == 2
        assert queue.pop() is first
        assert queue.pop() is second


def _split_line():
    """Beach line after a second site at (50, 60) split the arc of (40, 10)."""
    beach_line = BeachLine()
    upper = Point(40.0, 10.0)
    lower = Point(50.0, 60.0)
    origin = Point(50.0, 34.0)
    focus_dir = normalize(lower.x - upper.x, lower.y - upper.y)
    edge_dir = Point(focus_dir.y, -focus_dir.x)

    for pos, item in enumerate((
        Arc(upper, 0),
        HalfEdge(origin, Point(-edge_dir.x, -edge_dir.y), 1, 0),
        Arc(lower, 1),
        HalfEdge(origin, edge_dir, 1, 0),
        Arc(upper, 0),
    )):
        beach_line.insert(pos, item)
    return beach_line


class TestBeachLine:
    """Test beach line bookkeeping."""

    def test_ids_are_stable(self):
        beach_line = _split_line()
        middle = beach_line.arc_at(2)

        beach_line.insert(0, Arc(Point(0, 0), 9))

        assert beach_line.index_of(middle.id) == 3
        assert beach_line.arc(middle.id) is middle

    def test_replace_removes_arcs(self):
        beach_line = _split_line()
        middle = beach_line.arc_at(2)

        beach_line.replace(1, 3, HalfEdge(Point(0, 0), Point(0, 1), 0, 0))

        assert len(beach_line) == 3
        assert beach_line.arc(middle.id) is None
        assert beach_line.index_of(middle.id) is None
        assert isinstance(beach_line[1], HalfEdge)

    def test_position_accessors(self):
        beach_line = _split_line()

        assert beach_line.edge_at(-1) is None
        assert beach_line.edge_at(5) is None
        assert isinstance(beach_line.edge_at(1), HalfEdge)
        with pytest.raises(InternalInvariantError):
            beach_line.edge_at(2)
        with pytest.raises(InternalInvariantError):
            beach_line.arc_at(1)

    def test_half_edges(self):
        assert len(list(_split_line().half_edges())) == 2

    def test_clear(self):
        beach_line = _split_line()
        arc_id = beach_line.arc_at(0).id
        beach_line.clear()

        assert len(beach_line) == 0
        assert beach_line.arc(arc_id) is None


class TestFindArcAbove:
    """Test locating the arc above a new site."""

    def test_single_arc(self):
        beach_line = BeachLine()
        beach_line.insert(0, Arc(Point(40.0, 10.0), 0))
        assert beach_line.find_arc_above(500.0, 100.0) == 0

    def test_split_line(self):
        beach_line = _split_line()

        assert beach_line.find_arc_above(50.0, 100.0) == 2
        assert beach_line.find_arc_above(-1000.0, 100.0) == 0
        assert beach_line.find_arc_above(1000.0, 100.0) == 4

    def test_empty(self):
        with pytest.raises(InternalInvariantError):
            BeachLine().find_arc_above(0.0, 0.0)

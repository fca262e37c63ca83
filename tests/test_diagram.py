"""Tests for diagram assembly."""

import pytest

from py_fortune.config import Settings
from py_fortune.core import FortuneGenerator, InternalInvariantError
from py_fortune.core.diagram import Edge, Vertex, assemble_diagram, walk_edge_loop
from py_fortune.core.fortune import CompletedEdge
from py_fortune.core.geometry import Point, Rect

from diagram_checks import BOX, EIGHT_SITES, SAME_Y_SITES, assert_valid_diagram

SQUARE = Rect(0.0, 0.0, 10.0, 10.0)


def _square_loop():
    corners = [Vertex(p) for p in SQUARE.corners()]
    return [Edge(corners[i], corners[(i + 1) % 4]) for i in range(4)]


class TestWalkEdgeLoop:
    """Test ordering a site's edges into a loop."""

    def test_orders_shuffled_edges(self):
        edges = _square_loop()
        shuffled = [edges[0], edges[2], edges[3], edges[1]]

        ordered, vertices = walk_edge_loop(shuffled)

        assert ordered == [edges[0], edges[1], edges[2], edges[3]]
        assert [v.position for v in vertices] == list(SQUARE.corners())

    def test_empty(self):
        assert walk_edge_loop([]) == ([], [])

    def test_open_loop(self):
        with pytest.raises(InternalInvariantError, match="open"):
            walk_edge_loop(_square_loop()[:3])

    def test_two_loops(self):
        a, b, c, d = (Vertex(Point(x, 0)) for x in range(4))
        first = [Edge(a, b), Edge(b, a)]
        second = [Edge(c, d), Edge(d, c)]
        with pytest.raises(InternalInvariantError, match="more than one loop"):
            walk_edge_loop(first + second)


class TestAssembleDiagram:
    """Test building the graph from completed edges."""

    def test_no_edges_is_the_rectangle(self):
        diagram = assemble_diagram([], [Point(5.0, 5.0)], SQUARE)

        assert len(diagram.vertices) == 4
        assert len(diagram.edges) == 4
        assert all(edge.site_a is diagram.sites[0] for edge in diagram.edges)
        assert all(edge.site_b is None for edge in diagram.edges)

    def test_endpoints_are_shared(self):
        completed = [
            CompletedEdge(Point(5.0, 0.0), Point(5.0, 5.0), 0, 1),
            CompletedEdge(Point(5.0, 5.0), Point(5.0, 10.0), 0, 1),
        ]
        diagram = assemble_diagram(completed, [Point(2.0, 5.0), Point(8.0, 5.0)], SQUARE)

        middle = [v for v in diagram.vertices if v.position == Point(5.0, 5.0)]
        assert len(middle) == 1
        assert len(middle[0].edges) == 2
        assert len(diagram.vertices) == 7
        assert len(diagram.edges) == 8
        assert_valid_diagram(diagram)

    def test_merge_collinear(self):
        completed = [
            CompletedEdge(Point(5.0, 0.0), Point(5.0, 5.0), 0, 1),
            CompletedEdge(Point(5.0, 5.0), Point(5.0, 10.0), 0, 1),
        ]
        diagram = assemble_diagram(completed, [Point(2.0, 5.0), Point(8.0, 5.0)], SQUARE,
                                   merge_collinear_edges=True)

        assert len(diagram.vertices) == 6
        assert len(diagram.edges) == 7
        assert Point(5.0, 5.0) not in {v.position for v in diagram.vertices}

    def test_boundary_edges_attributed_to_nearest_site(self):
        completed = [CompletedEdge(Point(5.0, 0.0), Point(5.0, 10.0), 0, 1)]
        sites = [Point(2.0, 5.0), Point(8.0, 5.0)]
        diagram = assemble_diagram(completed, sites, SQUARE)

        for edge in diagram.edges:
            if edge.site_b is not None:
                continue
            midpoint = edge.midpoint
            expected = 0 if midpoint.x < 5.0 else 1
            assert edge.site_a.index == expected

        for site in diagram.sites:
            assert len(site.edges) == 4

    def test_duplicate_and_degenerate_edges_skipped(self):
        completed = [
            CompletedEdge(Point(5.0, 0.0), Point(5.0, 10.0), 0, 1),
            CompletedEdge(Point(5.0, 10.0), Point(5.0, 0.0), 0, 1),
            CompletedEdge(Point(3.0, 3.0), Point(3.0, 3.0), 0, 1),
        ]
        diagram = assemble_diagram(completed, [Point(2.0, 5.0), Point(8.0, 5.0)], SQUARE)

        assert len(diagram.vertices) == 6
        assert len(diagram.edges) == 7

    def test_unordered_site_edges(self):
        diagram = assemble_diagram([], [Point(5.0, 5.0)], SQUARE, order_site_edges=False)
        assert len(diagram.sites[0].edges) == 4


class TestCollinearMerge:
    """Test eliding the vertices left where a new site split an arc."""

    @pytest.mark.parametrize("sites, vertices, edges", [
        (EIGHT_SITES, 18, 25),
        (SAME_Y_SITES, 20, 28),
    ], ids=["eight", "same_y"])
    def test_counts(self, sites, vertices, edges):
        generator = FortuneGenerator(config=Settings(merge_collinear_edges=True))
        diagram = generator.generate_diagram(sites, BOX)

        assert len(diagram.vertices) == vertices
        assert len(diagram.edges) == edges
        assert_valid_diagram(diagram)

    def test_vertices_have_degree_three_or_lie_on_boundary(self):
        generator = FortuneGenerator(config=Settings(merge_collinear_edges=True))
        diagram = generator.generate_diagram(EIGHT_SITES, BOX)
        rect = diagram.rect

        for vertex in diagram.vertices:
            x, y = vertex.position
            on_boundary = x in (rect.min_x, rect.max_x) or y in (rect.min_y, rect.max_y)
            assert on_boundary or len(vertex.edges) == 3


class TestDelaunay:
    """Test the Delaunay dual."""

    def test_pairs_are_unique_and_sorted(self):
        diagram = FortuneGenerator().generate_diagram(EIGHT_SITES, BOX)
        pairs = diagram.delaunay_edges()

        assert pairs == sorted(set(pairs))
        assert all(a < b for a, b in pairs)

    def test_matches_scipy_triangulation(self):
        """Every dual pair is a Delaunay edge; clipping may only remove pairs."""
        from scipy.spatial import Delaunay

        diagram = FortuneGenerator().generate_diagram(EIGHT_SITES, BOX)
        triangulation = Delaunay(diagram.site_positions)
        expected = {
            tuple(sorted((int(a), int(b))))
            for simplex in triangulation.simplices
            for a, b in ((simplex[0], simplex[1]), (simplex[1], simplex[2]), (simplex[0], simplex[2]))
        }

        pairs = set(diagram.delaunay_edges())
        assert pairs <= expected
        assert len(pairs) >= len(EIGHT_SITES) - 1

"""
Voronoi diagram graph and the assembler that builds it from sweep output.

The sweep produces loose, rectangle-clamped segments. The assembler
deduplicates their endpoints into shared vertices, stitches the vertices on
the rectangle boundary together, attributes every edge to the sites it
separates and orders each site's edges into a closed loop.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Set, Tuple

import numpy as np
import structlog
from scipy.spatial import cKDTree

from .errors import InternalInvariantError
from .geometry import Point, Rect, approx_equals, normalize

if TYPE_CHECKING:
    from .fortune import CompletedEdge

logger = structlog.get_logger()


@dataclass(eq=False)
class Vertex:
    """A diagram vertex; one object per distinct position."""
    position: Point
    edges: List["Edge"] = field(default_factory=list, repr=False)


@dataclass(eq=False)
class Site:
    """An input site and the edges bounding its cell."""
    index: int
    position: Point
    edges: List["Edge"] = field(default_factory=list, repr=False)


@dataclass(eq=False)
class Edge:
    """
    A diagram edge.

    corner_a/corner_b are the Voronoi vertices it connects; site_a/site_b are
    the sites it separates (an edge of the Delaunay dual). Edges along the
    rectangle boundary only have site_a.
    """
    corner_a: Vertex
    corner_b: Vertex
    site_a: Optional[Site] = None
    site_b: Optional[Site] = None

    def other(self, vertex: Vertex) -> Vertex:
        return self.corner_b if vertex is self.corner_a else self.corner_a

    @property
    def midpoint(self) -> Point:
        a, b = self.corner_a.position, self.corner_b.position
        return Point((a.x + b.x) * 0.5, (a.y + b.y) * 0.5)

    @property
    def length(self) -> float:
        a, b = self.corner_a.position, self.corner_b.position
        return float(np.hypot(b.x - a.x, b.y - a.y))

    def separates(self, site: Site) -> bool:
        return site is self.site_a or site is self.site_b


@dataclass
class VoronoiDiagram:
    """A Voronoi diagram clipped to a rectangle."""
    sites: List[Site]
    vertices: List[Vertex]
    edges: List[Edge]
    rect: Rect

    @property
    def site_positions(self) -> np.ndarray:
        """Site coordinates as an (n, 2) array, in index order."""
        return np.array([site.position for site in self.sites], dtype=float).reshape(-1, 2)

    def delaunay_edges(self) -> List[Tuple[int, int]]:
        """Sorted, unique site index pairs of the Delaunay dual."""
        pairs = {
            tuple(sorted((edge.site_a.index, edge.site_b.index)))
            for edge in self.edges
            if edge.site_a is not None and edge.site_b is not None
        }
        return sorted(pairs)

    def site_polygon(self, site: Site) -> List[Point]:
        """Positions of the site's cell corners in loop order."""
        _, vertices = walk_edge_loop(site.edges)
        return [vertex.position for vertex in vertices]


def walk_edge_loop(edges: Sequence[Edge]) -> Tuple[List[Edge], List[Vertex]]:
    """
    Order edges into a single closed loop by walking shared vertices.

    Returns:
        The edges in loop order and the vertices visited, starting at the
        first edge's corner_a

    Raises:
        InternalInvariantError: if the edges do not form exactly one loop
    """
    if not edges:
        return [], []

    remaining = list(edges[1:])
    ordered = [edges[0]]
    start = edges[0].corner_a
    vertices = [start]
    current = edges[0].corner_b

    while current is not start:
        vertices.append(current)
        for i, edge in enumerate(remaining):
            if edge.corner_a is current or edge.corner_b is current:
                break
        else:
            raise InternalInvariantError(
                f"Edge loop is open at {current.position} after {len(ordered)} of {len(edges)} edges"
            )
        edge = remaining.pop(i)
        ordered.append(edge)
        current = edge.other(current)

    if remaining:
        raise InternalInvariantError(
            f"Edges form more than one loop: {len(remaining)} of {len(edges)} left over"
        )

    return ordered, vertices


def _edge_key(a: Vertex, b: Vertex) -> Tuple[int, int]:
    return (id(a), id(b)) if id(a) < id(b) else (id(b), id(a))


class _GraphBuilder:
    """Mutable state used while assembling one diagram."""

    def __init__(self, sites: List[Site], rect: Rect):
        self.sites = sites
        self.rect = rect
        self.vertices: Dict[Point, Vertex] = {}
        self.edges: List[Edge] = []
        self._keys: Set[Tuple[int, int]] = set()
        self._tree: Optional[cKDTree] = None

        for corner in rect.corners():
            self.vertex(corner)

    def vertex(self, position: Point) -> Vertex:
        vertex = self.vertices.get(position)
        if vertex is None:
            vertex = Vertex(position)
            self.vertices[position] = vertex
        return vertex

    def connect(self, a: Vertex, b: Vertex, site_a: Optional[Site],
                site_b: Optional[Site]) -> Optional[Edge]:
        key = _edge_key(a, b)
        if a is b or key in self._keys:
            return None
        self._keys.add(key)

        edge = Edge(a, b, site_a, site_b)
        self.edges.append(edge)
        a.edges.append(edge)
        b.edges.append(edge)
        return edge

    def disconnect(self, edge: Edge) -> None:
        self._keys.discard(_edge_key(edge.corner_a, edge.corner_b))
        self.edges.remove(edge)
        edge.corner_a.edges.remove(edge)
        edge.corner_b.edges.remove(edge)

    def merge_collinear(self, tolerance: float) -> int:
        """Elide degree-2 vertices whose two edges continue one straight line."""
        corners = set(self.rect.corners())
        merged = 0
        for position, vertex in list(self.vertices.items()):
            if position in corners or len(vertex.edges) != 2:
                continue
            first, second = vertex.edges
            if {first.site_a, first.site_b} != {second.site_a, second.site_b}:
                continue

            far_a, far_b = first.other(vertex), second.other(vertex)
            dir_a = normalize(far_a.position.x - position.x, far_a.position.y - position.y)
            dir_b = normalize(far_b.position.x - position.x, far_b.position.y - position.y)
            dot = dir_a.x * dir_b.x + dir_a.y * dir_b.y
            if not approx_equals(dot, -1.0, tolerance):
                continue

            self.disconnect(first)
            self.disconnect(second)
            del self.vertices[position]
            self.connect(far_a, far_b, first.site_a, first.site_b)
            merged += 1
        return merged

    def nearest_site(self, point: Point, candidates: Set[Site]) -> Optional[Site]:
        if candidates:
            return min(candidates, key=lambda s: (np.hypot(s.position.x - point.x,
                                                           s.position.y - point.y), s.index))
        if not self.sites:
            return None
        if self._tree is None:
            self._tree = cKDTree(np.array([s.position for s in self.sites], dtype=float))
        _, index = self._tree.query([point.x, point.y])
        return self.sites[int(index)]

    def stitch_boundary(self) -> int:
        """Chain the vertices along each rectangle side, in order along the side."""
        rect = self.rect
        sides = (
            (lambda p: p.y == rect.min_y, 0),
            (lambda p: p.x == rect.min_x, 1),
            (lambda p: p.x == rect.max_x, 1),
            (lambda p: p.y == rect.max_y, 0),
        )

        stitched = 0
        for on_side, axis in sides:
            chain = sorted((v for p, v in self.vertices.items() if on_side(p)),
                           key=lambda v: v.position[axis])
            for a, b in zip(chain, chain[1:]):
                candidates = {
                    site
                    for edge in a.edges + b.edges
                    for site in (edge.site_a, edge.site_b)
                    if site is not None
                }
                midpoint = Point((a.position.x + b.position.x) * 0.5,
                                 (a.position.y + b.position.y) * 0.5)
                owner = self.nearest_site(midpoint, candidates)
                if self.connect(a, b, owner, None) is not None:
                    stitched += 1
        return stitched


def assemble_diagram(completed_edges: Sequence["CompletedEdge"], sites: Sequence[Point],
                     rect: Rect, merge_collinear_edges: bool = False,
                     order_site_edges: bool = True,
                     parallel_tolerance: float = 1e-6) -> VoronoiDiagram:
    """
    Build the final vertex/edge graph from the sweep's completed edges.

    Args:
        completed_edges: Clamped segments tagged with the site indices they separate
        sites: Input site positions, by index
        rect: Bounding rectangle
        merge_collinear_edges: Elide degree-2 vertices joining collinear edges
        order_site_edges: Reorder every site's edges into a closed loop
        parallel_tolerance: Tolerance on |dot| == 1 when merging

    Returns:
        The assembled diagram
    """
    site_objects = [Site(i, position) for i, position in enumerate(sites)]
    builder = _GraphBuilder(site_objects, rect)

    for completed in completed_edges:
        if completed.start == completed.end:
            continue
        builder.connect(builder.vertex(completed.start), builder.vertex(completed.end),
                        site_objects[completed.site_a], site_objects[completed.site_b])

    merged = builder.merge_collinear(parallel_tolerance) if merge_collinear_edges else 0
    stitched = builder.stitch_boundary()

    for edge in builder.edges:
        for site in (edge.site_a, edge.site_b):
            if site is not None:
                site.edges.append(edge)

    if order_site_edges:
        for site in site_objects:
            site.edges, _ = walk_edge_loop(site.edges)

    logger.info("Diagram assembled", vertices=len(builder.vertices), edges=len(builder.edges),
                boundary_edges=stitched, merged_vertices=merged)

    return VoronoiDiagram(
        sites=site_objects,
        vertices=list(builder.vertices.values()),
        edges=builder.edges,
        rect=rect,
    )

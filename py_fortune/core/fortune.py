"""
Voronoi diagram generation using Fortune's sweep-line algorithm.

A horizontal sweep line moves through the sites in increasing y. Site events
split an arc of the beach line; vertex (circle) events remove an arc whose
neighbours have squeezed it to nothing, completing two edges at a new
diagram vertex. Edges still open when the queue drains are extended to the
bounding rectangle, and the collected segments are handed to the assembler.

References:
    https://jacquesheunis.com/post/fortunes-algorithm/
    https://pvigier.github.io/2018/11/18/fortune-algorithm-details.html
"""

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
import structlog

from ..config import Settings, settings as default_settings
from .beach_line import Arc, BeachLine, EventQueue, HalfEdge, SiteEvent, VertexEvent
from .diagram import VoronoiDiagram, assemble_diagram
from .errors import InternalInvariantError, InvalidSitesError
from .geometry import (
    Point, Rect, approx_equals, clamp_segment, extend_half_edge,
    intersect_half_edges, intersect_ray_vertical_line, normalize, parabola_y,
)

logger = structlog.get_logger()

RectLike = Union[Rect, Sequence[float]]


@dataclass(frozen=True)
class CompletedEdge:
    """A finished, rectangle-clamped segment separating two sites."""
    start: Point
    end: Point
    site_a: int
    site_b: int

    @property
    def is_degenerate(self) -> bool:
        return self.start == self.end


def as_rect(rect: RectLike) -> Rect:
    """Validate and convert (min_x, min_y, max_x, max_y) into a Rect."""
    try:
        values = [float(v) for v in rect]
    except (TypeError, ValueError) as e:
        raise InvalidSitesError(f"Rectangle must be four numbers, got {rect!r}") from e
    if len(values) != 4:
        raise InvalidSitesError(f"Rectangle must be four numbers, got {rect!r}")

    result = Rect(*values)
    if not all(math.isfinite(v) for v in result):
        raise InvalidSitesError(f"Rectangle has non-finite bounds: {result}")
    if result.min_x >= result.max_x or result.min_y >= result.max_y:
        raise InvalidSitesError(f"Rectangle has no area: {result}")
    return result


def as_sites(sites: Iterable[Sequence[float]], rect: Rect) -> List[Point]:
    """
    Validate the input sites.

    Raises:
        InvalidSitesError: for empty input, malformed coordinates, sites
            outside the rectangle or coincident sites
    """
    if isinstance(sites, np.ndarray):
        arr = np.asarray(sites, dtype=float)
    else:
        arr = np.asarray([tuple(s) for s in sites], dtype=float)

    if arr.size == 0:
        raise InvalidSitesError("Points contained no items")
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise InvalidSitesError(f"Sites must be (x, y) pairs, got array of shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise InvalidSitesError("Sites contain non-finite coordinates")

    inside = ((arr[:, 0] >= rect.min_x) & (arr[:, 0] <= rect.max_x) &
              (arr[:, 1] >= rect.min_y) & (arr[:, 1] <= rect.max_y))
    if not np.all(inside):
        bad = int(np.argmin(inside))
        raise InvalidSitesError(f"Site {bad} at {tuple(arr[bad])} lies outside {rect}")

    if len(np.unique(arr, axis=0)) != len(arr):
        raise InvalidSitesError("Sites contain duplicate positions")

    return [Point(x, y) for x, y in arr.tolist()]


def merge_adjacent_edges(a: CompletedEdge, b: CompletedEdge,
                         tolerance: float = 1e-6) -> Optional[CompletedEdge]:
    """
    Merge two edges that are parallel and share an endpoint.

    Returns:
        The edge spanning both, or None if they cannot be merged
    """
    if b.start not in (a.start, a.end) and b.end not in (a.start, a.end):
        return None

    a_dir = normalize(a.end.x - a.start.x, a.end.y - a.start.y)
    b_dir = normalize(b.end.x - b.start.x, b.end.y - b.start.y)
    dot = a_dir.x * b_dir.x + a_dir.y * b_dir.y

    if not approx_equals(dot, 1.0, tolerance) and not approx_equals(dot, -1.0, tolerance):
        return None

    # Replace the shared endpoint of a with b's far endpoint
    if a.start == b.start:
        return CompletedEdge(b.end, a.end, a.site_a, a.site_b)
    if a.start == b.end:
        return CompletedEdge(b.start, a.end, a.site_a, a.site_b)
    if a.end == b.start:
        return CompletedEdge(a.start, b.end, a.site_a, a.site_b)
    return CompletedEdge(a.start, b.start, a.site_a, a.site_b)


def _bounding_edges_meet(left: HalfEdge, right: HalfEdge) -> Optional[Point]:
    """Where the two edges bounding an arc meet, or None if they never do."""
    if left.extends_upward and right.extends_upward:
        return None
    if left.extends_upward or right.extends_upward:
        line, ray = (left, right) if left.extends_upward else (right, left)
        return intersect_ray_vertical_line(line.origin.x, ray.origin, ray.direction)
    return intersect_half_edges(left.origin, left.direction, right.origin, right.direction)


def _far_end(edge: HalfEdge, vertex: Point) -> Point:
    """The end of a finished edge opposite the vertex that completes it."""
    if edge.extends_upward:
        # Reaches up past the top of the rectangle, where clamping cuts it
        return Point(edge.origin.x, min(edge.origin.y, vertex.y))
    return edge.origin


class FortuneGenerator:
    """
    Generates Voronoi diagrams (and their Delaunay duals) with Fortune's algorithm.

    Each call to :meth:`generate_diagram` owns its beach line, event queue
    and output graph, so one instance can be reused freely.
    """

    def __init__(self, debug_draw: Optional[bool] = None, config: Optional[Settings] = None):
        """
        Args:
            debug_draw: Render the sweep state with matplotlib; defaults to
                the configured ``debug_draw`` setting
            config: Settings to use instead of the module-level singleton
        """
        self.config = config or default_settings
        self.debug_draw = self.config.debug_draw if debug_draw is None else debug_draw

    def generate_diagram(self, sites: Iterable[Sequence[float]], rect: RectLike) -> VoronoiDiagram:
        """
        Generate the Voronoi diagram of the sites clipped to the rectangle.

        Args:
            sites: (x, y) pairs or an (n, 2) array
            rect: (min_x, min_y, max_x, max_y)

        Returns:
            The assembled diagram

        Raises:
            InvalidSitesError: if the input is unusable
            InternalInvariantError: if the sweep reaches an impossible state
        """
        rect = as_rect(rect)
        points = as_sites(sites, rect)

        logger.info("Generating Voronoi diagram", sites=len(points), rect=tuple(rect))

        events = EventQueue()
        for index, point in enumerate(points):
            events.push(SiteEvent(point, index))

        beach_line = BeachLine()
        completed_edges: List[CompletedEdge] = []

        # The first site becomes the lone arc
        first = events.pop()
        beach_line.insert(0, Arc(first.position, first.index))

        processed = skipped = 0
        while events:
            event = events.pop()

            if isinstance(event, SiteEvent):
                new_events = self._handle_site_event(beach_line, event, rect)
            else:
                if not self._is_live(beach_line, event):
                    skipped += 1
                    continue
                new_events = self._handle_vertex_event(beach_line, event, completed_edges, rect)

            for new_event in new_events:
                if new_event is not None:
                    events.push(new_event)
            processed += 1

            if self.debug_draw and self.config.debug_draw_events:
                self._draw(f"event_{processed:04d}.png", rect, event.sweep_pos, points,
                           beach_line, completed_edges)

        self._flush_beach_line(beach_line, completed_edges, rect)

        logger.info("Sweep complete", events=processed, stale_events=skipped,
                    completed_edges=len(completed_edges))

        if self.debug_draw:
            self._draw("diagram.png", rect, rect.max_y, points, beach_line, completed_edges)
        beach_line.clear()

        return assemble_diagram(
            completed_edges, points, rect,
            merge_collinear_edges=self.config.merge_collinear_edges,
            order_site_edges=self.config.order_site_edges,
            parallel_tolerance=self.config.parallel_tolerance,
        )

    @staticmethod
    def _is_live(beach_line: BeachLine, event: VertexEvent) -> bool:
        """A vertex event is live while its arc exists and has not been rescheduled."""
        arc = beach_line.arc(event.arc_id)
        return arc is not None and arc.generation == event.generation

    def _handle_site_event(self, beach_line: BeachLine, event: SiteEvent,
                           rect: Rect) -> Tuple[Optional[VertexEvent], Optional[VertexEvent]]:
        """Insert a new arc under the arc above the site, splitting it if it is a real parabola."""
        site = event.position
        above_pos = beach_line.find_arc_above(site.x, site.y, self.config.sweep_line_epsilon,
                                              self.config.discriminant_epsilon)
        arc_above = beach_line.arc_at(above_pos)
        insert_pos = above_pos

        intersection_y = parabola_y(site.x, arc_above.focus, site.y)
        if intersection_y is not None:
            new_arc = Arc(site, event.index)
            right_arc = Arc(arc_above.focus, arc_above.site_index)

            # Rotate the direction between the foci to get the dividing edge's direction
            edge_start = Point(site.x, intersection_y)
            focus_dir = normalize(site.x - arc_above.focus.x, site.y - arc_above.focus.y)
            edge_dir = Point(focus_dir.y, -focus_dir.x)

            # arc_above becomes the left piece: left, edge, new, edge, right
            for item in (
                HalfEdge(edge_start, Point(-edge_dir.x, -edge_dir.y), event.index, arc_above.site_index),
                new_arc,
                HalfEdge(edge_start, edge_dir, event.index, arc_above.site_index),
                right_arc,
            ):
                insert_pos += 1
                beach_line.insert(insert_pos, item)
        else:
            # Every site so far shares this y, so there are no parabolas yet:
            # divide the two vertical arcs with a line that has no upper end
            edge_start = Point(site.x * 0.5 + arc_above.focus.x * 0.5, rect.min_y)
            new_edge = HalfEdge(edge_start, Point(0.0, 1.0), event.index, arc_above.site_index,
                                extends_upward=True)

            insert_pos += 1
            beach_line.insert(insert_pos, new_edge)
            insert_pos += 1
            beach_line.insert(insert_pos, Arc(site, event.index))

        # Neighbours changed, so any pending event of the split arc is stale
        return (self._create_vertex_event(beach_line, above_pos),
                self._create_vertex_event(beach_line, insert_pos))

    def _handle_vertex_event(self, beach_line: BeachLine, event: VertexEvent,
                             completed_edges: List[CompletedEdge],
                             rect: Rect) -> Tuple[Optional[VertexEvent], Optional[VertexEvent]]:
        """Remove a squeezed arc, finishing its two bounding edges at the event's vertex."""
        i = beach_line.index_of(event.arc_id)
        if i is None:
            return None, None

        left_edge = beach_line.edge_at(i - 1)
        right_edge = beach_line.edge_at(i + 1)
        if left_edge is None or right_edge is None:
            raise InternalInvariantError(f"Arc {event.arc_id} at position {i} is missing a bounding edge")
        left_arc = beach_line.arc_at(i - 2)
        right_arc = beach_line.arc_at(i + 2)

        vertex = event.intersection
        for start, end, edge in ((_far_end(left_edge, vertex), vertex, left_edge),
                                 (vertex, _far_end(right_edge, vertex), right_edge)):
            clamped = clamp_segment(start, end, rect)
            if clamped is None or clamped[0] == clamped[1]:
                continue
            completed_edges.append(CompletedEdge(clamped[0], clamped[1], edge.site_a, edge.site_b))

        arc_dir = normalize(left_arc.focus.x - right_arc.focus.x, left_arc.focus.y - right_arc.focus.y)
        new_direction = Point(arc_dir.y, -arc_dir.x)

        # (left edge, arc, right edge) collapses into one edge between the now adjacent arcs
        beach_line.replace(i - 1, 3, HalfEdge(event.intersection, new_direction,
                                              left_arc.site_index, right_arc.site_index))

        return (self._create_vertex_event(beach_line, i - 2),
                self._create_vertex_event(beach_line, i))

    def _create_vertex_event(self, beach_line: BeachLine, arc_pos: int) -> Optional[VertexEvent]:
        """
        Schedule the event at which the arc at arc_pos is squeezed out, if any.

        Always bumps the arc's generation, invalidating any event scheduled
        for it earlier.
        """
        arc = beach_line.arc_at(arc_pos)
        arc.generation += 1

        left_edge = beach_line.edge_at(arc_pos - 1)
        right_edge = beach_line.edge_at(arc_pos + 1)
        if left_edge is None or right_edge is None:
            return None

        intersection = _bounding_edges_meet(left_edge, right_edge)
        if intersection is None:
            return None

        radius = math.hypot(arc.focus.x - intersection.x, arc.focus.y - intersection.y)
        return VertexEvent(intersection.y + radius, intersection, arc.id, arc.generation)

    def _flush_beach_line(self, beach_line: BeachLine, completed_edges: List[CompletedEdge],
                          rect: Rect) -> None:
        """Extend every half-edge still open to the rectangle boundary."""
        for edge in beach_line.half_edges():
            extended = extend_half_edge(edge.origin, edge.direction, rect)
            if extended is None or extended[0] == extended[1]:
                continue
            completed = CompletedEdge(extended[0], extended[1], edge.site_a, edge.site_b)

            # The two halves of a split grow apart along one line; join them
            if completed_edges:
                merged = merge_adjacent_edges(completed_edges[-1], completed,
                                              self.config.parallel_tolerance)
                if merged is not None:
                    completed_edges[-1] = merged
                    continue

            completed_edges.append(completed)

    def _draw(self, filename: str, rect: Rect, sweep_pos: float, sites: List[Point],
              beach_line: BeachLine, completed_edges: List[CompletedEdge]) -> None:
        from .debug_draw import draw_beach_line

        path = Path(self.config.debug_output_dir) / filename
        draw_beach_line(path, rect, sweep_pos, sites, beach_line, completed_edges,
                        discriminant_epsilon=self.config.discriminant_epsilon)


def generate_diagram(sites: Iterable[Sequence[float]], rect: RectLike,
                     config: Optional[Settings] = None,
                     debug_draw: Optional[bool] = None) -> VoronoiDiagram:
    """Generate a Voronoi diagram with a throwaway :class:`FortuneGenerator`."""
    return FortuneGenerator(debug_draw=debug_draw, config=config).generate_diagram(sites, rect)

"""
Beach line and event queue for Fortune's algorithm.

The beach line is an ordered sequence alternating arcs and half-edges
(arc, edge, arc, ..., arc). Items get a stable integer id when created, since
their position in the sequence shifts on every insert and removal. Vertex
events refer to arcs by id and carry the arc's generation at scheduling time;
an event is live only while its arc exists and still has that generation.
"""

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple, Union

from .errors import InternalInvariantError
from .geometry import Point, approx_equals, intersect_arc_half_edge


@dataclass
class Arc:
    """Portion of the beach line belonging to one site's parabola."""
    focus: Point
    site_index: int
    id: int = -1
    generation: int = 0


@dataclass
class HalfEdge:
    """
    A ray between two arcs that grows into a diagram edge.

    A vertical edge between sites sharing the first sweep position has no
    upper end: it is the whole line x = origin.x above the sweep line, and
    extends_upward is set.
    """
    origin: Point
    direction: Point
    site_a: int
    site_b: int
    id: int = -1
    extends_upward: bool = False


BeachLineItem = Union[Arc, HalfEdge]


@dataclass(frozen=True)
class SiteEvent:
    """A new site reached by the sweep line."""
    position: Point
    index: int

    @property
    def sweep_pos(self) -> float:
        return self.position.y

    @property
    def x(self) -> float:
        return self.position.x


@dataclass(frozen=True)
class VertexEvent:
    """An arc squeezed to zero width (a circle event)."""
    sweep_pos: float
    intersection: Point
    arc_id: int
    generation: int

    @property
    def x(self) -> float:
        return self.intersection.x


Event = Union[SiteEvent, VertexEvent]


class EventQueue:
    """
    Min-priority queue of events keyed by sweep position.

    Ties on the sweep position are broken by x, then by insertion order,
    so the processing order is deterministic.
    """

    def __init__(self):
        self._heap: List[Tuple[float, float, int, Event]] = []
        self._counter = itertools.count()

    def push(self, event: Event) -> None:
        heapq.heappush(self._heap, (event.sweep_pos, event.x, next(self._counter), event))

    def pop(self) -> Event:
        return heapq.heappop(self._heap)[-1]

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)


@dataclass
class BeachLine:
    """Arena of live beach-line items plus their current left-to-right order."""
    items: List[BeachLineItem] = field(default_factory=list)
    _arcs: Dict[int, Arc] = field(default_factory=dict)
    _ids: Iterator[int] = field(default_factory=itertools.count)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, pos: int) -> BeachLineItem:
        return self.items[pos]

    def __iter__(self):
        return iter(self.items)

    def _register(self, item: BeachLineItem) -> BeachLineItem:
        item.id = next(self._ids)
        if isinstance(item, Arc):
            self._arcs[item.id] = item
        return item

    def insert(self, pos: int, item: BeachLineItem) -> None:
        self.items.insert(pos, self._register(item))

    def replace(self, start: int, count: int, item: BeachLineItem) -> None:
        """Replace items[start:start + count] with a single new item."""
        for old in self.items[start:start + count]:
            if isinstance(old, Arc):
                del self._arcs[old.id]
        self.items[start:start + count] = [self._register(item)]

    def arc(self, arc_id: int) -> Optional[Arc]:
        return self._arcs.get(arc_id)

    def index_of(self, arc_id: int) -> Optional[int]:
        """Current position of a live arc, or None once it has been removed."""
        if arc_id not in self._arcs:
            return None
        for pos, item in enumerate(self.items):
            if item.id == arc_id:
                return pos
        raise InternalInvariantError(f"Arc {arc_id} is registered but not in the beach line")

    def arc_at(self, pos: int) -> Arc:
        item = self.items[pos] if 0 <= pos < len(self.items) else None
        if not isinstance(item, Arc):
            raise InternalInvariantError(f"Expected an arc at beach line position {pos}")
        return item

    def edge_at(self, pos: int) -> Optional[HalfEdge]:
        """The half-edge at pos, or None when pos is outside the beach line."""
        if not 0 <= pos < len(self.items):
            return None
        item = self.items[pos]
        if not isinstance(item, HalfEdge):
            raise InternalInvariantError(f"Expected a half-edge at beach line position {pos}")
        return item

    def half_edges(self) -> Iterator[HalfEdge]:
        return (item for item in self.items if isinstance(item, HalfEdge))

    def clear(self) -> None:
        self.items.clear()
        self._arcs.clear()

    def _arc_bound(self, arc: Arc, edge: HalfEdge, sweep_pos: float,
                   sweep_line_epsilon: float, discriminant_epsilon: float) -> float:
        # Arcs whose focus sits on the sweep line are effectively vertical rays
        if approx_equals(arc.focus.y, sweep_pos, sweep_line_epsilon):
            return arc.focus.x
        intersection = intersect_arc_half_edge(arc.focus, edge.origin, edge.direction,
                                               sweep_pos, discriminant_epsilon)
        if intersection is None:
            raise InternalInvariantError(
                f"Arc of site {arc.site_index} does not meet its bounding edge "
                f"at sweep={sweep_pos} (probably precision error)"
            )
        return intersection.x

    def find_arc_above(self, x: float, sweep_pos: float, sweep_line_epsilon: float = 1e-3,
                       discriminant_epsilon: float = 1e-3) -> int:
        """
        Find the position of the arc directly above x at the given sweep position.

        Walks the beach line computing each arc's x-range from its
        neighbouring half-edges.
        """
        if not self.items:
            raise InternalInvariantError("Beach line should never be empty")

        last = len(self.items) - 1
        for pos, item in enumerate(self.items):
            if not isinstance(item, Arc):
                continue
            if pos == last:
                return pos

            arc_min = float("-inf")
            if pos > 0:
                arc_min = self._arc_bound(item, self.edge_at(pos - 1), sweep_pos,
                                          sweep_line_epsilon, discriminant_epsilon)

            arc_max = self._arc_bound(item, self.edge_at(pos + 1), sweep_pos,
                                      sweep_line_epsilon, discriminant_epsilon)

            if arc_min <= x <= arc_max:
                return pos

        raise InternalInvariantError(
            f"Couldn't find arc in beach line above x={x}, beach line length={len(self.items)}"
        )

"""
Geometry kernel for the sweep-line Voronoi generator.

Everything here is stateless: parabola evaluation, arc/half-edge and
half-edge/half-edge intersection, clamping lines and rays to the bounding
rectangle, and polygon centroids. Coordinates use a y-down convention: the
sweep line moves towards increasing y.
"""

import math
from typing import NamedTuple, Optional, Sequence, Tuple

import numpy as np


class Point(NamedTuple):
    """A 2-D point (also used for directions)."""
    x: float
    y: float


class Rect(NamedTuple):
    """Axis-aligned bounding rectangle as (min_x, min_y, max_x, max_y)."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def corners(self) -> Tuple[Point, Point, Point, Point]:
        """Corners in winding order starting at (min_x, min_y)."""
        return (
            Point(self.min_x, self.min_y),
            Point(self.max_x, self.min_y),
            Point(self.max_x, self.max_y),
            Point(self.min_x, self.max_y),
        )

    def contains(self, point: Point, tolerance: float = 0.0) -> bool:
        return (self.min_x - tolerance <= point.x <= self.max_x + tolerance and
                self.min_y - tolerance <= point.y <= self.max_y + tolerance)

    def snap(self, point: Point) -> Point:
        """Pull a point that is out of range by rounding error back onto the rectangle."""
        return Point(min(max(point.x, self.min_x), self.max_x),
                     min(max(point.y, self.min_y), self.max_y))


def approx_equals(a: float, b: float, epsilon: float = 1e-6) -> bool:
    """Floating point comparison with a fixed epsilon."""
    return abs(a - b) < epsilon


def normalize(x: float, y: float) -> Point:
    length = math.hypot(x, y)
    return Point(x / length, y / length)


def _tolerance(rect: Rect) -> float:
    return 1e-9 * max(rect.width, rect.height, 1.0)


def _distance(a: Point, b: Point) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)


def parabola_y(x: float, focus: Point, directrix_y: float) -> Optional[float]:
    """
    Evaluate the parabola with the given focus and horizontal directrix.

    y = (x - fx)^2 / (2 (fy - dy)) + (fy + dy) / 2

    Args:
        x: X position to query
        focus: Focus of the parabola
        directrix_y: Y of the directrix (the sweep line)

    Returns:
        The parabola's y at x, or None when the focus lies on the directrix
        (the parabola degenerates into a vertical ray)
    """
    if directrix_y == focus.y:
        return None

    a = 1.0 / (2.0 * (focus.y - directrix_y))
    b = x - focus.x
    c = (focus.y + directrix_y) / 2.0
    return a * b * b + c


def intersect_arc_half_edge(focus: Point, origin: Point, direction: Point,
                            directrix: float,
                            discriminant_epsilon: float = 1e-3) -> Optional[Point]:
    """
    Intersect a beach-line arc with a half-edge ray.

    Args:
        focus: Focus of the arc's parabola
        origin: Ray origin
        direction: Ray direction
        directrix: Current sweep line position
        discriminant_epsilon: Negative discriminants closer to zero than
            this are treated as zero

    Returns:
        The intersection point, or None when the ray misses the arc
    """
    # Vertical edge
    if direction.x == 0.0:
        # The arc is a vertical ray too: they meet only if they are the same line
        if focus.y == directrix:
            return focus if origin.x == focus.x else None

        return Point(origin.x, parabola_y(origin.x, focus, directrix))

    # y = mx + k
    m = direction.y / direction.x
    k = origin.y - m * origin.x

    # Degenerate arc: a vertical ray straight up from the focus
    if focus.y == directrix:
        offset = focus.x - origin.x
        if offset * direction.x >= 0.0:
            return Point(focus.x, m * focus.x + k)
        return None

    # Solve mx + k = ax^2 + bx + c
    known_y = 0.5 * focus.y + 0.5 * directrix
    a = 1.0 / (2.0 * (focus.y - directrix))
    b = -m - 2.0 * a * focus.x
    c = a * focus.x * focus.x + known_y - k

    discriminant = b * b - 4.0 * a * c
    if discriminant < 0.0:
        if discriminant <= -discriminant_epsilon:
            return None
        discriminant = 0.0

    sqrt_disc = math.sqrt(discriminant)
    x1 = (-b + sqrt_disc) / (2.0 * a)
    x2 = (-b - sqrt_disc) / (2.0 * a)

    x1_dot = (x1 - origin.x) * direction.x
    x2_dot = (x2 - origin.x) * direction.x

    # Prefer the root ahead of the ray; the nearer one if both are ahead
    if x1_dot >= 0.0 and x2_dot < 0.0:
        x = x1
    elif x1_dot < 0.0 and x2_dot >= 0.0:
        x = x2
    elif x1_dot >= 0.0 and x2_dot >= 0.0:
        x = x1 if x1_dot < x2_dot else x2
    else:
        x = x2 if x1_dot < x2_dot else x1

    return Point(x, parabola_y(x, focus, directrix))


def intersect_half_edges(a_origin: Point, a_direction: Point,
                         b_origin: Point, b_direction: Point) -> Optional[Point]:
    """
    Intersect two rays using the determinant method.

    Rays that are parallel, that would have to travel backwards, or that
    meet exactly at their shared origin do not intersect.
    """
    dx = b_origin.x - a_origin.x
    dy = b_origin.y - a_origin.y
    det = b_direction.x * a_direction.y - b_direction.y * a_direction.x
    if det == 0.0:
        return None

    u = (dy * b_direction.x - dx * b_direction.y) / det
    v = (dy * a_direction.x - dx * a_direction.y) / det

    if u < 0.0 or v < 0.0 or (u == 0.0 and v == 0.0):
        return None

    return Point(a_origin.x + a_direction.x * u, a_origin.y + a_direction.y * u)


def intersect_ray_vertical_line(x: float, origin: Point, direction: Point) -> Optional[Point]:
    """Where a ray crosses the vertical line at x, or None if it never does."""
    if direction.x == 0.0:
        return None
    t = (x - origin.x) / direction.x
    if t < 0.0:
        return None
    return Point(x, origin.y + direction.y * t)


def _snap_to(value: float, lo: float, hi: float, tolerance: float) -> float:
    if abs(value - lo) <= tolerance:
        return lo
    if abs(value - hi) <= tolerance:
        return hi
    return value


def clamp_point_on_line(rect: Rect, point: Point, m: Optional[float],
                        c: Optional[float], tolerance: float = 0.0) -> Point:
    """
    Clamp a point lying on the line y = mx + c to the rectangle.

    X is clamped first (recomputing y), then Y (recomputing x), so the
    point slides along the line. A vertical line is passed as m=None and
    only has its y clamped. Recomputed coordinates within tolerance of a
    boundary are snapped onto it. A horizontal line outside the rectangle
    is left where it is.
    """
    x, y = point

    if m is None:
        return Point(x, min(max(y, rect.min_y), rect.max_y))

    if x < rect.min_x:
        x = rect.min_x
        y = _snap_to(m * rect.min_x + c, rect.min_y, rect.max_y, tolerance)
    elif x > rect.max_x:
        x = rect.max_x
        y = _snap_to(m * rect.max_x + c, rect.min_y, rect.max_y, tolerance)

    if m == 0.0:
        return Point(x, y)

    if y < rect.min_y:
        x = _snap_to((rect.min_y - c) / m, rect.min_x, rect.max_x, tolerance)
        y = rect.min_y
    elif y > rect.max_y:
        x = _snap_to((rect.max_y - c) / m, rect.min_x, rect.max_x, tolerance)
        y = rect.max_y

    return Point(x, y)


def _line_through(point: Point, dx: float, dy: float) -> Tuple[Optional[float], Optional[float]]:
    """Slope and intercept of the line through point with direction (dx, dy)."""
    if dx == 0.0:
        return None, None
    m = dy / dx
    return m, point.y - m * point.x


def clamp_segment(start: Point, end: Point, rect: Rect) -> Optional[Tuple[Point, Point]]:
    """
    Clamp both ends of a segment onto the rectangle along the segment's line.

    Returns:
        The clamped (start, end) pair, or None when no part of the segment
        lies inside the rectangle: its line misses it, both ends are beyond
        the same side, or clamping leaves less than the rectangle tolerance
        of it (a segment touching the boundary at one point)
    """
    dx = end.x - start.x
    dy = end.y - start.y
    if dx == 0.0 and dy == 0.0:
        return start, end

    if ((start.x < rect.min_x and end.x < rect.min_x) or
            (start.x > rect.max_x and end.x > rect.max_x) or
            (start.y < rect.min_y and end.y < rect.min_y) or
            (start.y > rect.max_y and end.y > rect.max_y)):
        return None

    m, c = _line_through(start, dx, dy)
    tolerance = _tolerance(rect)
    clamped_start = clamp_point_on_line(rect, start, m, c, tolerance)
    clamped_end = clamp_point_on_line(rect, end, m, c, tolerance)

    if not (rect.contains(clamped_start, tolerance) and rect.contains(clamped_end, tolerance)):
        return None

    clamped_start, clamped_end = rect.snap(clamped_start), rect.snap(clamped_end)
    # Ends clamped through separate line evaluations can differ by rounding only
    moved = clamped_start != start or clamped_end != end
    if moved and _distance(clamped_start, clamped_end) <= tolerance:
        return None

    return clamped_start, clamped_end


def extend_half_edge(origin: Point, direction: Point,
                     rect: Rect) -> Optional[Tuple[Point, Point]]:
    """
    Grow a half-edge ray until it reaches the rectangle boundary.

    The origin is clamped into the rectangle first. The end point is where
    the ray leaves through the X boundary it travels towards, or through the
    Y boundary when that X crossing is out of range.

    Returns:
        (start, end), or None when the ray never passes through the rectangle
        or only touches its boundary
    """
    tolerance = _tolerance(rect)

    if direction.x == 0.0:
        if not rect.min_x - tolerance <= origin.x <= rect.max_x + tolerance:
            return None
        x = min(max(origin.x, rect.min_x), rect.max_x)
        start = Point(x, min(max(origin.y, rect.min_y), rect.max_y))
        end = Point(x, rect.max_y if direction.y > 0.0 else rect.min_y)
        if (start.y - origin.y) * direction.y < 0.0:
            # Origin lies beyond the boundary the ray is heading for
            return None
        if start == end:
            return None
        return start, end

    m, c = _line_through(origin, direction.x, direction.y)
    start = clamp_point_on_line(rect, origin, m, c, tolerance)
    if not rect.contains(start, tolerance):
        return None
    # Clamping must not move the origin backwards along the ray
    if (start.x - origin.x) * direction.x + (start.y - origin.y) * direction.y < -tolerance:
        return None
    start = rect.snap(start)

    extent_x = rect.max_x if direction.x > 0.0 else rect.min_x
    target_y = _snap_to(m * extent_x + c, rect.min_y, rect.max_y, tolerance)

    if rect.min_y <= target_y <= rect.max_y:
        end = Point(extent_x, target_y)
    else:
        end_y = rect.max_y if direction.y > 0.0 else rect.min_y
        end = Point(_snap_to((end_y - c) / m, rect.min_x, rect.max_x, tolerance), end_y)

    end = rect.snap(end)
    # A ray starting on the side it leaves through has nothing inside
    if _distance(start, end) <= tolerance:
        return None
    return start, end


def segments_intersect(a: Point, b: Point, c: Point, d: Point,
                       epsilon: float = 1e-9) -> bool:
    """
    Whether segments ab and cd cross at a point other than a shared endpoint.

    Touching at a shared endpoint does not count; collinear overlap does.
    """
    shared = {a, b} & {c, d}

    def orient(p: Point, q: Point, r: Point) -> float:
        return (q.x - p.x) * (r.y - p.y) - (q.y - p.y) * (r.x - p.x)

    d1 = orient(c, d, a)
    d2 = orient(c, d, b)
    d3 = orient(a, b, c)
    d4 = orient(a, b, d)

    magnitude = max(abs(v) for p in (a, b, c, d) for v in p)
    magnitude = max(magnitude, 1.0)
    tol = epsilon * magnitude * magnitude

    if abs(d1) <= tol and abs(d2) <= tol:
        # Collinear: only overlap of positive length counts
        axis = 0 if abs(b.x - a.x) >= abs(b.y - a.y) else 1
        lo1, hi1 = sorted((a[axis], b[axis]))
        lo2, hi2 = sorted((c[axis], d[axis]))
        return min(hi1, hi2) - max(lo1, lo2) > epsilon * magnitude

    if shared:
        return False

    return ((d1 > tol and d2 < -tol) or (d1 < -tol and d2 > tol)) and \
           ((d3 > tol and d4 < -tol) or (d3 < -tol and d4 > tol))


def polygon_area(vertices: Sequence[Sequence[float]]) -> float:
    """Absolute area of a simple polygon (shoelace formula)."""
    pts = np.asarray(vertices, dtype=float)
    if len(pts) < 3:
        return 0.0
    x, y = pts[:, 0], pts[:, 1]
    return float(abs(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y)) * 0.5)


def polygon_centroid(vertices: Sequence[Sequence[float]]) -> np.ndarray:
    """Compute the centroid of a polygon.

    Args:
        vertices: Ordered [x, y] vertex coordinates

    Returns:
        [x, y] centroid coordinates
    """
    pts = np.asarray(vertices, dtype=float)
    if len(pts) < 3:
        return np.mean(pts, axis=0)

    x, y = pts[:, 0], pts[:, 1]
    x_next, y_next = np.roll(x, -1), np.roll(y, -1)
    cross = x * y_next - x_next * y
    area = cross.sum()

    if abs(area) < 1e-10:
        return np.mean(pts, axis=0)

    area *= 0.5
    cx = ((x + x_next) * cross).sum() / (6.0 * area)
    cy = ((y + y_next) * cross).sum() / (6.0 * area)

    return np.array([cx, cy])

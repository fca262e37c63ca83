"""
Debug rendering of the sweep state.

Paints the sites, their parabolas, the current beach line and the edges
completed so far onto an image. Only used when a generator is created with
``debug_draw=True``; it has no effect on the generated diagram.
"""

from pathlib import Path
from typing import Sequence, Union

import numpy as np
import structlog
from matplotlib.figure import Figure

from .beach_line import Arc, BeachLine, HalfEdge
from .geometry import Point, Rect, intersect_arc_half_edge

logger = structlog.get_logger()


def _parabola_ys(xs: np.ndarray, focus: Point, sweep_pos: float) -> np.ndarray:
    return (xs - focus.x) ** 2 / (2.0 * (focus.y - sweep_pos)) + (focus.y + sweep_pos) / 2.0


def draw_beach_line(path: Union[str, Path], rect: Rect, sweep_pos: float,
                    sites: Sequence[Point], beach_line: BeachLine,
                    completed_edges: Sequence, discriminant_epsilon: float = 1e-3,
                    samples: int = 512) -> Path:
    """
    Render the current sweep state to an image file.

    Args:
        path: Output image path (format from the suffix)
        rect: Bounding rectangle
        sweep_pos: Current sweep line position
        sites: All input sites
        beach_line: Current beach line
        completed_edges: Edges completed so far
        discriminant_epsilon: Tolerance used when locating arc ends
        samples: Horizontal samples per parabola

    Returns:
        The written path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fig = Figure(figsize=(8, 8 * rect.height / rect.width))
    ax = fig.add_subplot(1, 1, 1)
    xs = np.linspace(rect.min_x, rect.max_x, samples)

    # Full parabolas of every site already passed by the sweep
    for site in sites:
        if site.y < sweep_pos:
            ax.plot(xs, _parabola_ys(xs, site, sweep_pos), color="lightgrey", linewidth=0.5)

    for edge in completed_edges:
        ax.plot([edge.start.x, edge.end.x], [edge.start.y, edge.end.y], color="blue", linewidth=1.5)

    # Beach line: each arc between its neighbouring edges
    arc_start = rect.min_x
    for pos, item in enumerate(beach_line):
        if isinstance(item, Arc):
            if item.focus.y == sweep_pos:
                ax.plot([item.focus.x, item.focus.x], [item.focus.y, rect.min_y],
                        color="purple", linewidth=1.0)
                continue

            arc_end = rect.max_x
            if pos + 1 < len(beach_line):
                edge = beach_line[pos + 1]
                hit = intersect_arc_half_edge(item.focus, edge.origin, edge.direction,
                                              sweep_pos, discriminant_epsilon)
                if hit is not None:
                    arc_end = min(max(hit.x, rect.min_x), rect.max_x)

            if arc_end > arc_start:
                arc_xs = np.linspace(arc_start, arc_end, max(2, samples // 8))
                ax.plot(arc_xs, _parabola_ys(arc_xs, item.focus, sweep_pos),
                        color="purple", linewidth=1.0)
            arc_start = max(arc_start, arc_end)

        elif isinstance(item, HalfEdge):
            arc = beach_line[pos - 1] if item.direction.x < 0.0 else beach_line[pos + 1]
            hit = intersect_arc_half_edge(arc.focus, item.origin, item.direction,
                                          sweep_pos, discriminant_epsilon)
            if hit is not None:
                ax.plot([item.origin.x, hit.x], [item.origin.y, hit.y],
                        color="orange", linewidth=1.5)

    ax.axhline(sweep_pos, color="black", linewidth=0.5)
    ax.scatter([s.x for s in sites], [s.y for s in sites], color="red", s=6, zorder=3)

    ax.set_xlim(rect.min_x, rect.max_x)
    # y grows downwards, like an image
    ax.set_ylim(rect.max_y, rect.min_y)
    ax.set_aspect("equal")
    ax.set_xticks([])
    ax.set_yticks([])

    fig.savefig(path, dpi=100, bbox_inches="tight")
    logger.info("Debug view written", path=str(path), sweep=sweep_pos)
    return path

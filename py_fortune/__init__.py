"""
Sweep-line Voronoi diagrams with Lloyd relaxation.
"""

from .core import (
    FortuneGenerator, VoronoiDiagram, Rect, Point,
    InvalidSitesError, InternalInvariantError,
    generate_diagram, relax, lloyd_relaxation,
)

__version__ = "0.1.0"

__all__ = ['FortuneGenerator', 'VoronoiDiagram', 'Rect', 'Point',
           'InvalidSitesError', 'InternalInvariantError',
           'generate_diagram', 'relax', 'lloyd_relaxation']

"""
Core diagram generation functionality.
"""

from .errors import VoronoiError, InvalidSitesError, InternalInvariantError
from .geometry import Point, Rect
from .diagram import VoronoiDiagram, Vertex, Edge, Site
from .fortune import FortuneGenerator, CompletedEdge, generate_diagram
from .relax import relax, lloyd_relaxation, cell_areas

__all__ = ['VoronoiError', 'InvalidSitesError', 'InternalInvariantError',
           'Point', 'Rect', 'VoronoiDiagram', 'Vertex', 'Edge', 'Site',
           'FortuneGenerator', 'CompletedEdge', 'generate_diagram',
           'relax', 'lloyd_relaxation', 'cell_areas']

"""
Utility helpers: logging setup and seeded site generation.
"""

from .log import configure_logging
from .random import random_sites, jittered_sites

__all__ = ['configure_logging', 'random_sites', 'jittered_sites']

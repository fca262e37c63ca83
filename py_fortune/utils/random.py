"""
Seeded site generation.

Both generators take an explicit seed and build their own numpy Generator,
so the same seed always yields the same sites and no global random state is
touched.
"""

from typing import Optional, Sequence, Union

import numpy as np

from ..core.fortune import as_rect
from ..core.geometry import Rect

SeedLike = Optional[Union[int, str]]


def _rng(seed: SeedLike) -> np.random.Generator:
    if isinstance(seed, str):
        # String seeds map to stable integers (hash() is salted per process)
        seed = int.from_bytes(seed.encode("utf-8"), "little") % (2 ** 63)
    return np.random.default_rng(seed)


def random_sites(count: int, rect: Union[Rect, Sequence[float]], seed: SeedLike = None) -> np.ndarray:
    """
    Uniformly distributed sites inside the rectangle.

    Args:
        count: Number of sites
        rect: (min_x, min_y, max_x, max_y)
        seed: Integer or string seed for reproducibility

    Returns:
        (count, 2) array of [x, y] coordinates
    """
    rect = as_rect(rect)
    rng = _rng(seed)
    xs = rng.uniform(rect.min_x, rect.max_x, count)
    ys = rng.uniform(rect.min_y, rect.max_y, count)
    return np.column_stack([xs, ys])


def jittered_sites(rect: Union[Rect, Sequence[float]], spacing: float,
                   seed: SeedLike = None) -> np.ndarray:
    """
    Generate a jittered square grid of sites.

    Creates a regular grid with randomized positions to prevent artificial
    patterns while keeping sites evenly spread.

    Args:
        rect: (min_x, min_y, max_x, max_y)
        spacing: Distance between grid points
        seed: Integer or string seed for reproducibility

    Returns:
        Array of [x, y] point coordinates
    """
    rect = as_rect(rect)
    rng = _rng(seed)

    radius = spacing / 2  # square radius
    jittering = radius * 0.9  # max deviation

    xs = np.arange(rect.min_x + radius, rect.max_x, spacing)
    ys = np.arange(rect.min_y + radius, rect.max_y, spacing)
    grid_x, grid_y = np.meshgrid(xs, ys)
    points = np.column_stack([grid_x.ravel(), grid_y.ravel()])

    points += rng.uniform(-jittering, jittering, points.shape)
    points[:, 0] = np.clip(points[:, 0], rect.min_x, rect.max_x)
    points[:, 1] = np.clip(points[:, 1], rect.min_y, rect.max_y)

    return points

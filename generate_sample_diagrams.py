#!/usr/bin/env python3
"""
Generate sample Voronoi diagrams with Lloyd relaxation.

Renders the same random site set after 0, 1, ... relaxation iterations,
side by side, with the Delaunay dual overlaid.

Usage:
    python generate_sample_diagrams.py [seed] [count] [iterations]

If no seed is provided, defaults to "default_seed"
"""

import sys
from pathlib import Path
sys.path.append(str(Path(__file__).parent))

import matplotlib.pyplot as plt
import numpy as np

from py_fortune.config import settings
from py_fortune.core import FortuneGenerator, Rect, cell_areas, relax
from py_fortune.utils import configure_logging, random_sites


def plot_diagram(ax, diagram, title):
    """Draw edges, Delaunay dual and sites of a diagram onto an axis."""
    for edge in diagram.edges:
        a, b = edge.corner_a.position, edge.corner_b.position
        ax.plot([a.x, b.x], [a.y, b.y], color="orange", linewidth=1.0)

    positions = diagram.site_positions
    for i, j in diagram.delaunay_edges():
        ax.plot(positions[[i, j], 0], positions[[i, j], 1], color="lightgrey", linewidth=0.5)

    ax.scatter(positions[:, 0], positions[:, 1], color="red", s=4, zorder=3)

    rect = diagram.rect
    ax.set_xlim(rect.min_x, rect.max_x)
    ax.set_ylim(rect.max_y, rect.min_y)
    ax.set_aspect("equal")
    ax.set_xticks([])
    ax.set_yticks([])
    ax.set_title(title, fontsize=10)


def create_relaxation_strip(seed="default_seed", count=100, iterations=3,
                            width=1024, height=1024):
    """Generate a diagram and its relaxations and save them as one image."""
    print(f"\nGenerating {count} sites, {iterations} relaxation iterations...")
    print(f"  Dimensions: {width}x{height}")
    print(f"  Seed: {seed}")

    rect = Rect(0.0, 0.0, float(width), float(height))
    generator = FortuneGenerator()

    diagram = generator.generate_diagram(random_sites(count, rect, seed), rect)
    diagrams = [diagram]
    for _ in range(iterations):
        diagram = relax(diagram, rect, generator=generator)
        diagrams.append(diagram)

    fig, axes = plt.subplots(1, len(diagrams), figsize=(5 * len(diagrams), 5))
    axes = np.atleast_1d(axes)

    for i, (ax, d) in enumerate(zip(axes, diagrams)):
        areas = cell_areas(d)
        title = f"Iteration {i}: {len(d.vertices)} vertices, {len(d.edges)} edges\n"
        title += f"cell area std {areas.std():.0f}"
        print(f"  {title.replace(chr(10), ' | ')}")
        plot_diagram(ax, d, title)

    output_file = f"voronoi_{seed}_{count}.png"
    plt.savefig(output_file, dpi=150, bbox_inches="tight", pad_inches=0.1)
    print(f"  Saved to: {output_file}")

    plt.close()

    return diagrams[-1]


def main():
    """Generate a sample relaxation strip."""
    configure_logging(settings.log_level, settings.log_format)

    seed = sys.argv[1] if len(sys.argv) > 1 else "default_seed"
    count = int(sys.argv[2]) if len(sys.argv) > 2 else 100
    iterations = int(sys.argv[3]) if len(sys.argv) > 3 else 3

    create_relaxation_strip(seed=seed, count=count, iterations=iterations)


if __name__ == "__main__":
    main()

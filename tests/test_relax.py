"""Tests for Lloyd relaxation."""

import numpy as np
import pytest

from py_fortune.config import Settings
from py_fortune.core import (
    FortuneGenerator, InvalidSitesError, cell_areas, generate_diagram, lloyd_relaxation, relax,
)
from py_fortune.core.relax import relaxed_position
from py_fortune.utils import random_sites

from diagram_checks import BOX, EIGHT_SITES, assert_valid_diagram


class TestCellAreas:
    """Test cell area computation."""

    def test_areas_cover_rectangle(self):
        diagram = generate_diagram(EIGHT_SITES, BOX)
        areas = cell_areas(diagram)

        assert areas.shape == (len(EIGHT_SITES),)
        assert np.all(areas > 0)
        assert areas.sum() == pytest.approx(1024.0 * 1024.0, rel=1e-9)

    def test_single_site(self):
        areas = cell_areas(generate_diagram([(3, 4)], (0, 0, 10, 20)))
        np.testing.assert_allclose(areas, [200.0])


class TestRelaxedPosition:
    """Test per-site relaxation targets."""

    def test_centroid_of_single_cell(self):
        diagram = generate_diagram([(1, 1)], (0, 0, 10, 20))
        np.testing.assert_allclose(relaxed_position(diagram.sites[0]), [5.0, 10.0])

    def test_midpoint_of_single_cell(self):
        diagram = generate_diagram([(1, 1)], (0, 0, 10, 20))
        np.testing.assert_allclose(relaxed_position(diagram.sites[0], "midpoint"), [5.0, 10.0])

    def test_unknown_mode(self):
        diagram = generate_diagram([(1, 1)], (0, 0, 10, 20))
        with pytest.raises(InvalidSitesError, match="Unknown relax mode"):
            relaxed_position(diagram.sites[0], "spiral")


class TestRelax:
    """Test single relaxation steps."""

    def test_preserves_site_count(self):
        diagram = generate_diagram(EIGHT_SITES, BOX)
        relaxed = relax(diagram)

        assert len(relaxed.sites) == len(diagram.sites)
        assert relaxed.rect == diagram.rect
        assert_valid_diagram(relaxed)

    def test_input_untouched(self):
        diagram = generate_diagram(EIGHT_SITES, BOX)
        before = diagram.site_positions.copy()
        edge_count = len(diagram.edges)

        relax(diagram)

        np.testing.assert_array_equal(diagram.site_positions, before)
        assert len(diagram.edges) == edge_count

    def test_sites_move_to_centroids(self):
        diagram = generate_diagram(EIGHT_SITES, BOX)
        relaxed = relax(diagram)

        for old, new in zip(diagram.sites, relaxed.sites):
            np.testing.assert_allclose(new.position, relaxed_position(old))

    def test_single_site_moves_to_center(self):
        relaxed = relax(generate_diagram([(100, 900)], BOX))
        np.testing.assert_allclose(relaxed.sites[0].position, [512.0, 512.0])

    def test_midpoint_mode(self):
        relaxed = relax(generate_diagram(EIGHT_SITES, BOX), mode="midpoint")
        assert len(relaxed.sites) == len(EIGHT_SITES)

    def test_mode_from_config(self):
        generator = FortuneGenerator(config=Settings(relax_mode="spiral"))
        with pytest.raises(InvalidSitesError):
            relax(generate_diagram(EIGHT_SITES, BOX), generator=generator)


class TestLloydRelaxation:
    """Test repeated relaxation."""

    def test_zero_iterations(self):
        diagram = lloyd_relaxation(EIGHT_SITES, BOX, iterations=0)
        assert len(diagram.edges) == len(generate_diagram(EIGHT_SITES, BOX).edges)

    def test_area_variance_decreases(self):
        sites = random_sites(60, BOX, seed=42)
        initial = np.std(cell_areas(generate_diagram(sites, BOX)))

        relaxed = lloyd_relaxation(sites, BOX, iterations=4)

        assert len(relaxed.sites) == 60
        assert np.std(cell_areas(relaxed)) < initial
        assert_valid_diagram(relaxed)

"""Tests for site generation and logging setup."""

import logging

import numpy as np
import pytest
import structlog

from py_fortune.config import Settings
from py_fortune.core import InvalidSitesError
from py_fortune.utils import configure_logging, jittered_sites, random_sites


class TestRandomSites:
    """Test uniform random sites."""

    def test_shape_and_bounds(self):
        sites = random_sites(100, (10, 20, 110, 70), seed=1)

        assert sites.shape == (100, 2)
        assert np.all((sites[:, 0] >= 10) & (sites[:, 0] <= 110))
        assert np.all((sites[:, 1] >= 20) & (sites[:, 1] <= 70))

    @pytest.mark.parametrize("seed", [7, "test_seed"])
    def test_reproducible(self, seed):
        np.testing.assert_array_equal(random_sites(20, (0, 0, 1, 1), seed),
                                      random_sites(20, (0, 0, 1, 1), seed))

    def test_different_seeds(self):
        assert not np.array_equal(random_sites(20, (0, 0, 1, 1), "seed1"),
                                  random_sites(20, (0, 0, 1, 1), "seed2"))

    def test_bad_rect(self):
        with pytest.raises(InvalidSitesError):
            random_sites(5, (0, 0, -1, 1), seed=1)


class TestJitteredSites:
    """Test jittered grid sites."""

    def test_grid_size(self):
        """A 100x100 rectangle with spacing 10 holds a 10x10 grid."""
        sites = jittered_sites((0, 0, 100, 100), 10, "test_seed")
        assert len(sites) == 100

    def test_point_bounds(self):
        sites = jittered_sites((0, 0, 100, 60), 10, "test_seed")

        assert np.all((sites[:, 0] >= 0) & (sites[:, 0] <= 100))
        assert np.all((sites[:, 1] >= 0) & (sites[:, 1] <= 60))

    def test_jitter_stays_within_cell(self):
        sites = jittered_sites((0, 0, 100, 100), 10, "test_seed")
        grid = np.stack(np.meshgrid(np.arange(5, 100, 10), np.arange(5, 100, 10)), axis=-1).reshape(-1, 2)

        assert np.all(np.abs(sites - grid) <= 4.5)

    def test_jittering_consistency(self):
        np.testing.assert_array_equal(jittered_sites((0, 0, 50, 50), 5, "test_seed"),
                                      jittered_sites((0, 0, 50, 50), 5, "test_seed"))


class TestLogging:
    """Test logging configuration."""

    @pytest.mark.parametrize("fmt", ["json", "plain"])
    def test_configure_logging(self, fmt):
        try:
            configure_logging("DEBUG", fmt)
            structlog.get_logger("py_fortune.test").info("Configured", fmt=fmt)

            assert structlog.is_configured()
            assert logging.getLogger().handlers
        finally:
            structlog.reset_defaults()

    def test_settings_from_environment(self, monkeypatch):
        monkeypatch.setenv("FORTUNE_MERGE_COLLINEAR_EDGES", "true")
        monkeypatch.setenv("FORTUNE_LOG_FORMAT", "plain")

        config = Settings()

        assert config.merge_collinear_edges is True
        assert config.log_format == "plain"
        assert config.sweep_line_epsilon == 1e-3

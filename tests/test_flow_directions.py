"""Tests for core.flow_directions."""

import math

import numpy as np

from side_mdinf_tool.core.flow_directions import (
    DCOL,
    DIST,
    DROW,
    NO_DIRECTION,
    opposite_direction,
    steepest_direction,
    steepest_direction_grid,
)


class TestDirectionTables:
    """Tests for the direction index tables."""

    def test_north_first_then_anticlockwise_on_screen(self):
        offsets = list(zip(DROW, DCOL))
        assert offsets == [(-1, 0), (-1, -1), (0, -1), (1, -1),
                           (1, 0), (1, 1), (0, 1), (-1, 1)]

    def test_distances(self):
        for d in range(8):
            expected = math.sqrt(2.0) if d % 2 else 1.0
            assert DIST[d] == expected
            assert DIST[d] == math.hypot(DROW[d], DCOL[d])

    def test_opposite_direction_negates_offset(self):
        for d in range(8):
            o = opposite_direction(d)
            assert DROW[o] == -DROW[d]
            assert DCOL[o] == -DCOL[d]


class TestSteepestDirection:
    """Tests for single-cell steepest descent."""

    def test_picks_steepest_drop_per_distance(self):
        dem = np.array([
            [9, 8, 7],
            [6, 5, 4],
            [3, 2, 0],
        ], dtype=np.float64)
        # SE drops 5 / sqrt(2) = 3.54, S drops 3
        assert steepest_direction(dem, 1, 1) == 5

    def test_slope_is_drop_over_distance(self):
        dem = np.array([
            [9, 9, 9],
            [9, 5, 9],
            [2, 3, 9],
        ], dtype=np.float64)
        # SW drops 3 / sqrt(2) = 2.12, S drops 2
        assert steepest_direction(dem, 1, 1) == 3
        dem[2, 1] = 1.5
        assert steepest_direction(dem, 1, 1) == 4

    def test_tie_keeps_first_in_scan_order(self):
        dem = np.array([
            [9, 4, 9],
            [9, 5, 9],
            [9, 4, 9],
        ], dtype=np.float64)
        assert steepest_direction(dem, 1, 1) == 0

    def test_pit_has_no_direction(self):
        dem = np.array([
            [5, 5, 5],
            [5, 1, 5],
            [5, 5, 5],
        ], dtype=np.float64)
        assert steepest_direction(dem, 1, 1) == NO_DIRECTION

    def test_flat_has_no_direction(self):
        dem = np.zeros((3, 3))
        assert steepest_direction(dem, 1, 1) == NO_DIRECTION

    def test_nodata_cell_has_no_direction(self):
        dem = np.array([
            [5, 5, 5],
            [5, np.nan, 5],
            [5, 5, 0],
        ], dtype=np.float64)
        assert steepest_direction(dem, 1, 1) == NO_DIRECTION

    def test_nodata_neighbour_ignored(self):
        dem = np.array([
            [5, 5, 5],
            [5, 4, 5],
            [5, np.nan, 3],
        ], dtype=np.float64)
        assert steepest_direction(dem, 1, 1) == 5

    def test_outside_grid_is_not_a_descent(self):
        dem = np.array([[1, 2], [3, 4]], dtype=np.float64)
        assert steepest_direction(dem, 0, 0) == NO_DIRECTION
        assert steepest_direction(dem, 1, 1) == 1


class TestSteepestDirectionGrid:
    """Tests for the whole-grid direction raster."""

    def test_never_points_uphill(self):
        rng = np.random.default_rng(42)
        dem = rng.uniform(0, 100, size=(12, 15))
        dem[3, 4] = np.nan
        flow_dir = steepest_direction_grid(dem)

        assert flow_dir.shape == dem.shape
        assert flow_dir[3, 4] == NO_DIRECTION
        for r in range(dem.shape[0]):
            for c in range(dem.shape[1]):
                d = flow_dir[r, c]
                if d == NO_DIRECTION:
                    continue
                nr, nc = r + DROW[d], c + DCOL[d]
                assert not np.isnan(dem[nr, nc])
                assert dem[nr, nc] < dem[r, c]

    def test_matches_single_cell_lookup(self, straight_channel):
        dem, _ = straight_channel
        flow_dir = steepest_direction_grid(dem)
        for r in range(5):
            for c in range(5):
                assert flow_dir[r, c] == steepest_direction(dem, r, c)
        # Channel drains south, bottom of the channel is an outlet
        assert list(flow_dir[:4, 2]) == [4, 4, 4, 4]
        assert flow_dir[4, 2] == NO_DIRECTION

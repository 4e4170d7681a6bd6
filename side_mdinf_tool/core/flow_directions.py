# -*- coding: utf-8 -*-
"""
Direction tables and steepest-descent (D8) lookups
Shared by the MDInf partitioner, the side classifier and the SIDE driver
"""

import math

import numpy as np
from numba import jit, prange

# Direction index: N, NW, W, SW, S, SE, E, NE (angle = index * pi / 4)
DROW = np.array([-1, -1, 0, 1, 1, 1, 0, -1], dtype=np.int64)
DCOL = np.array([0, -1, -1, -1, 0, 1, 1, 1], dtype=np.int64)
DIST = np.array([1.0, math.sqrt(2.0), 1.0, math.sqrt(2.0),
                 1.0, math.sqrt(2.0), 1.0, math.sqrt(2.0)])

NO_DIRECTION = -1


@jit(nopython=True, cache=True)
def opposite_direction(direction):
    """Return the direction pointing back along ``direction``."""
    return (direction + 4) % 8


@jit(nopython=True, cache=True)
def value_at(grid, row, col):
    """Grid value, or NaN outside the grid."""
    if row < 0 or col < 0 or row >= grid.shape[0] or col >= grid.shape[1]:
        return np.nan
    return grid[row, col]


@jit(nopython=True, cache=True)
def is_stream_at(streams, row, col):
    """Stream mask value, False outside the grid."""
    if row < 0 or col < 0 or row >= streams.shape[0] or col >= streams.shape[1]:
        return False
    return streams[row, col]


@jit(nopython=True, cache=True)
def steepest_direction_at(dem, row, col):
    """Steepest-descent neighbour of a cell (Numba optimized).

    Only valid neighbours strictly lower than the cell are candidates.
    Ties keep the first direction in scan order.

    Returns:
        int: Direction index, or NO_DIRECTION for no-data cells and pits
    """
    z = value_at(dem, row, col)
    if np.isnan(z):
        return NO_DIRECTION

    max_slope = -np.inf
    direction = NO_DIRECTION
    for d in range(8):
        z_to = value_at(dem, row + DROW[d], col + DCOL[d])
        if np.isnan(z_to) or z_to >= z:
            continue
        slope = (z - z_to) / DIST[d]
        if slope > max_slope:
            max_slope = slope
            direction = d

    return direction


@jit(nopython=True, parallel=True, cache=True)
def _steepest_direction_grid_numba(dem):
    rows, cols = dem.shape
    flow_dir = np.full((rows, cols), NO_DIRECTION, dtype=np.int32)
    for r in prange(rows):
        for c in range(cols):
            flow_dir[r, c] = steepest_direction_at(dem, r, c)
    return flow_dir


def steepest_direction(dem, row, col):
    """Steepest-descent direction of a single cell.

    Args:
        dem (np.ndarray): DEM array (NaN = NoData)
        row (int): Cell row
        col (int): Cell column

    Returns:
        int: Direction index in [0, 8), or NO_DIRECTION
    """
    return int(steepest_direction_at(np.asarray(dem, dtype=np.float64), row, col))


def steepest_direction_grid(dem):
    """Steepest-descent direction for every cell (NO_DIRECTION where none)."""
    return _steepest_direction_grid_numba(np.asarray(dem, dtype=np.float64))

# -*- coding: utf-8 -*-
"""
MDInf triangular facet flow partitioning (Seibert & McGlynn, 2007)

Each cell's 8-neighbour ring is split into 8 triangular facets. Facet i is
bounded by the neighbours in directions i and i + 1 and spans the azimuths
[i * pi / 4, (i + 1) * pi / 4]. Downslope facets share the cell's flow in
proportion to slope ** exponent, and each facet's share is split between its
two bounding neighbours by where its azimuth falls inside the facet.
"""

import math

import numpy as np
from numba import jit

from .flow_directions import DROW, DCOL, DIST, value_at

# Exponents at or above this value route everything down the steepest facet
SINGLE_DIRECTION_EXPONENT = 10.0


@jit(nopython=True, cache=True)
def _facet_angle(i):
    return i * math.pi / 4


@jit(nopython=True, cache=True)
def facet_partition_at(dem, row, col, cellsize, exponent):
    """Fraction of a cell's flow sent to each of its 8 neighbours (Numba optimized).

    Returns:
        np.ndarray: 8 non-negative fractions summing to 1, or all zeros for
        no-data cells and cells without a downslope facet
    """
    portion = np.zeros(8)
    z = value_at(dem, row, col)
    if np.isnan(z):
        return portion

    r_facet = np.zeros(8)
    s_facet = np.full(8, np.nan)

    # Downslope azimuth and slope of every facet
    for i in range(8):
        ii = (i + 1) % 8
        p1 = value_at(dem, row + DROW[i], col + DCOL[i])
        p2 = value_at(dem, row + DROW[ii], col + DCOL[ii])

        if not np.isnan(p1) and not np.isnan(p2):
            z1 = p1 - z
            z2 = p2 - z

            # Normal to the facet
            nx = (DROW[i] * z2 - DROW[ii] * z1) * cellsize
            ny = (DCOL[ii] * z1 - DCOL[i] * z2) * cellsize
            nz = (DCOL[i] * DROW[ii] - DCOL[ii] * DROW[i]) * cellsize * cellsize

            if nx == 0:
                if ny >= 0:
                    hr = 0.0
                else:
                    hr = math.pi
            elif nx >= 0:
                hr = math.pi / 2 - math.atan(ny / nx)
            else:
                hr = 3 * math.pi / 2 - math.atan(ny / nx)

            if nx == 0 and ny == 0:
                # Flat facet
                hs = 0.0
            else:
                norm = math.sqrt(nx * nx + ny * ny + nz * nz)
                hs = -math.tan(math.acos(nz / norm))

            # Azimuth outside the facet: follow the lower of its two edges
            if hr < _facet_angle(i) or hr > _facet_angle(i + 1):
                if p1 < p2:
                    hr = _facet_angle(i)
                    hs = (z - p1) / (DIST[i] * cellsize)
                else:
                    hr = _facet_angle(ii)
                    hs = (z - p2) / (DIST[ii] * cellsize)

            r_facet[i] = hr
            s_facet[i] = hs

        elif not np.isnan(p1) and p1 < z:
            # Only the first edge is on the grid
            r_facet[i] = _facet_angle(i)
            s_facet[i] = (z - p1) / (DIST[ii] * cellsize)

    # Facets water is flowing to
    valley = np.zeros(8)
    valley_sum = 0.0
    valley_max = 0.0
    i_max = 0
    for i in range(8):
        ii = (i + 1) % 8
        if s_facet[i] > 0:
            if r_facet[i] > _facet_angle(i) and r_facet[i] < _facet_angle(i + 1):
                valley[i] = s_facet[i]
            elif not np.isnan(s_facet[ii]) and r_facet[i] == r_facet[ii]:
                valley[i] = s_facet[i]
            elif np.isnan(s_facet[ii]) and r_facet[i] == _facet_angle(i + 1):
                valley[i] = s_facet[i]
            elif np.isnan(s_facet[(i + 7) % 8]) and r_facet[i] == _facet_angle(i):
                valley[i] = s_facet[i]

        if valley[i] > 0:
            valley_sum += valley[i] ** exponent
        if valley_max < valley[i]:
            i_max = i
            valley_max = valley[i]

    if valley_sum <= 0:
        return portion

    if exponent < SINGLE_DIRECTION_EXPONENT:
        for i in range(8):
            if valley[i] > 0:
                valley[i] = valley[i] ** exponent / valley_sum
    else:
        for i in range(8):
            valley[i] = 1.0 if i == i_max else 0.0

    # Azimuth 0 on the last facet is its far edge
    if r_facet[7] == 0:
        r_facet[7] = 2 * math.pi

    for i in range(8):
        if valley[i] > 0:
            ii = (i + 1) % 8
            portion[i] += valley[i] * (_facet_angle(i + 1) - r_facet[i]) / (math.pi / 4)
            portion[ii] += valley[i] * (r_facet[i] - _facet_angle(i)) / (math.pi / 4)

    return portion


def facet_partition(dem, row, col, cellsize=1.0, flow_exponent=1.1):
    """MDInf flow proportions from one cell to its neighbours.

    Args:
        dem (np.ndarray): DEM array (NaN = NoData)
        row (int): Source cell row
        col (int): Source cell column
        cellsize (float): Grid resolution
        flow_exponent (float): MDInf dispersion exponent; values >= 10
            send all flow down the steepest facet

    Returns:
        np.ndarray: Fraction of the cell's flow for each direction index
    """
    if flow_exponent <= 0:
        raise ValueError(f"MDInf exponent must be positive, got {flow_exponent}")
    return facet_partition_at(
        np.asarray(dem, dtype=np.float64), row, col, float(cellsize), float(flow_exponent)
    )

# -*- coding: utf-8 -*-
"""
SIDE flow accumulation using MDInf routing
Splits the upslope contributions of every stream cell into a left and a right
bank part (Grabs et al., 2010; Seibert & McGlynn, 2007)
"""

from collections import namedtuple

import numpy as np
from numba import jit, prange
from scipy import ndimage

from .flow_directions import (
    DROW, DCOL, NO_DIRECTION, is_stream_at, opposite_direction,
    steepest_direction_at, steepest_direction_grid, value_at
)
from .mdinf import facet_partition_at
from .side_classifier import SIDE_LEFT, SIDE_RIGHT, classify_side_at, stream_mask

OUTPUT_UNIT_CELLS = 'cells'
OUTPUT_UNIT_SCA = 'sca'
OUTPUT_UNIT_TCA = 'tca'

OUTPUT_UNITS = (OUTPUT_UNIT_CELLS, OUTPUT_UNIT_SCA, OUTPUT_UNIT_TCA)

OUTPUT_UNIT_LABELS = {
    OUTPUT_UNIT_CELLS: 'Number of upslope grid cells',
    OUTPUT_UNIT_SCA: 'Specific catchment area (SCA)',
    OUTPUT_UNIT_TCA: 'Total catchment area',
}

SideResult = namedtuple('SideResult', ['total', 'left', 'right'])


def unit_constants(output_unit, cellsize):
    """Seed value of a stream cell and threshold multiplier for an output unit.

    Returns:
        tuple: (initial_value, threshold_multiplier)
    """
    if output_unit == OUTPUT_UNIT_SCA:
        return cellsize, cellsize
    if output_unit == OUTPUT_UNIT_TCA:
        return cellsize * cellsize, cellsize * cellsize
    if output_unit == OUTPUT_UNIT_CELLS:
        return 1.0, 1.0
    raise ValueError(f"Unknown output unit: {output_unit}")


@jit(nopython=True, parallel=True, cache=True)
def _side_accumulation_rows_numba(dem, flow_acc, streams, cellsize, exponent,
                                  initial_value, threshold, total, left, right,
                                  row_start, row_end):
    """Route neighbour contributions into stream cells of rows [row_start, row_end).

    Every increment targets the stream cell of the current iteration, so rows
    can run in parallel without sharing output cells.
    """
    cols = dem.shape[1]
    seed = initial_value - threshold

    for r in prange(row_start, row_end):
        for c in range(cols):
            if not streams[r, c] or np.isnan(dem[r, c]):
                continue

            total[r, c] = seed
            left[r, c] = seed / 2
            right[r, c] = seed / 2

            for d in range(8):
                nr = r + DROW[d]
                nc = c + DCOL[d]
                towards = opposite_direction(d)
                if np.isnan(value_at(dem, nr, nc)):
                    continue

                if is_stream_at(streams, nr, nc):
                    # Channelized neighbour only passes on the threshold increment
                    if steepest_direction_at(dem, nr, nc) == towards:
                        total[r, c] += threshold
                        left[r, c] += threshold / 2
                        right[r, c] += threshold / 2
                    continue

                acc = value_at(flow_acc, nr, nc)
                if np.isnan(acc):
                    continue

                portion = facet_partition_at(dem, nr, nc, cellsize, exponent)
                if portion[towards] <= 0:
                    continue

                amount = acc * portion[towards]
                side = classify_side_at(dem, streams, r, c, towards)
                total[r, c] += amount
                if side == SIDE_RIGHT:
                    right[r, c] += amount
                elif side == SIDE_LEFT:
                    left[r, c] += amount
                else:
                    right[r, c] += amount / 2
                    left[r, c] += amount / 2


class SideAccumulator:
    """Side separated contributing areas of a stream network."""

    def __init__(self, dem_array, flow_acc_array, streams_array, cellsize):
        """Initialize SIDE accumulator.

        Args:
            dem_array (np.ndarray): DEM array (NaN = NoData)
            flow_acc_array (np.ndarray): Upslope flow accumulation, already
                in the chosen output unit (NaN = NoData)
            streams_array (np.ndarray): Stream raster (cells > 0 are streams)
            cellsize (float): Grid resolution (X cell size)
        """
        dem_array = np.asarray(dem_array)
        flow_acc_array = np.asarray(flow_acc_array)
        streams_array = np.asarray(streams_array)

        if dem_array.ndim != 2:
            raise ValueError(f"DEM must be a 2D array, got shape {dem_array.shape}")
        for label, grid in (('Flow accumulation', flow_acc_array), ('Streams', streams_array)):
            if grid.shape != dem_array.shape:
                raise ValueError(
                    f"{label} raster shape {grid.shape} does not match DEM shape {dem_array.shape}"
                )
        if not cellsize > 0:
            raise ValueError(f"Cell size must be positive, got {cellsize}")

        self.dem = dem_array.astype(np.float64)
        self.flow_acc = flow_acc_array.astype(np.float64)
        self.streams = stream_mask(streams_array)
        self.cellsize = float(cellsize)
        self.rows, self.cols = dem_array.shape

    def initialize_outputs(self):
        """Zero grids for the three outputs, NaN where the DEM is NoData."""
        base = np.where(np.isnan(self.dem), np.nan, 0.0)
        return SideResult(base.copy(), base.copy(), base.copy())

    def stream_summary(self):
        """Number of stream cells, 8-connected stream segments and outlets.

        An outlet is a stream cell whose steepest descent does not lead to
        another stream cell (pit, grid edge or flow leaving the network).
        """
        _, n_segments = ndimage.label(self.streams, structure=np.ones((3, 3), dtype=int))

        flow_dir = steepest_direction_grid(self.dem)
        rows, cols = np.nonzero(self.streams)
        directions = flow_dir[rows, cols]
        target_rows = rows + DROW[directions]
        target_cols = cols + DCOL[directions]
        inside = ((directions != NO_DIRECTION)
                  & (target_rows >= 0) & (target_rows < self.rows)
                  & (target_cols >= 0) & (target_cols < self.cols))
        drains_to_stream = np.zeros(rows.shape, dtype=bool)
        drains_to_stream[inside] = self.streams[target_rows[inside], target_cols[inside]]

        return {
            'stream_cells': int(rows.size),
            'segments': int(n_segments),
            'outlets': int(np.count_nonzero(~drains_to_stream)),
        }

    def run(self, flow_exponent=1.1, output_unit=OUTPUT_UNIT_CELLS, threshold=0.0,
            feedback=None, block_rows=64):
        """Compute total, left and right contributing flow of every stream cell.

        Args:
            flow_exponent (float): MDInf exponent (>= 10 routes to a single facet)
            output_unit (str): 'cells', 'sca' or 'tca'
            threshold (float): Channel initiation threshold in grid cells
            feedback: Optional QgsProcessingFeedback-like object for progress,
                messages and cancellation
            block_rows (int): Rows processed between cancellation checks

        Returns:
            SideResult: total, left and right grids, or None if cancelled
        """
        if flow_exponent <= 0:
            raise ValueError(f"MDInf exponent must be positive, got {flow_exponent}")
        if block_rows < 1:
            raise ValueError(f"block_rows must be at least 1, got {block_rows}")

        initial_value, multiplier = unit_constants(output_unit, self.cellsize)
        scaled_threshold = threshold * multiplier

        if feedback is not None:
            feedback.pushInfo('Loop 1 of 2: initializing outputs...')
        result = self.initialize_outputs()

        if feedback is not None:
            summary = self.stream_summary()
            feedback.pushInfo(
                f"Loop 2 of 2: routing into {summary['stream_cells']:,} stream cells "
                f"({summary['segments']:,} segments, {summary['outlets']:,} outlets, "
                f"{OUTPUT_UNIT_LABELS[output_unit]})"
            )

        for row_start in range(0, self.rows, block_rows):
            if feedback is not None and feedback.isCanceled():
                feedback.pushInfo('Operation cancelled.')
                return None

            row_end = min(row_start + block_rows, self.rows)
            _side_accumulation_rows_numba(
                self.dem, self.flow_acc, self.streams,
                self.cellsize, float(flow_exponent),
                float(initial_value), float(scaled_threshold),
                result.total, result.left, result.right,
                row_start, row_end
            )

            if feedback is not None:
                feedback.setProgress(int(100 * row_end / self.rows))

        return result

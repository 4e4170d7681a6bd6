# -*- coding: utf-8 -*-
"""
Left/right bank classification of flow entering a stream cell (Grabs et al., 2010)

Facing downstream, a flow line enters the channel from the left or the right
bank. The side is taken from the z-component of the cross product between the
flow line and the local streamflow direction, checked against every upstream
tributary of the receiving cell. Flow lines lying between two tributaries at a
junction, at channel heads or opposing the channel are left undetermined.
"""

import enum
import math

import numpy as np
from numba import jit

from .flow_directions import DROW, DCOL, NO_DIRECTION, is_stream_at, steepest_direction_at

ANTIPARALLEL_TOLERANCE = 1e-5

SIDE_UNKNOWN = 0
SIDE_RIGHT = 1
SIDE_LEFT = 2


class Side(enum.IntEnum):
    """Bank a contribution enters the channel from."""
    UNKNOWN = SIDE_UNKNOWN
    RIGHT = SIDE_RIGHT
    LEFT = SIDE_LEFT


@jit(nopython=True, cache=True)
def classify_side_at(dem, streams, row, col, incoming):
    """Side of the flow line entering stream cell (row, col) along ``incoming``.

    Args:
        dem (np.ndarray): DEM array (NaN = NoData)
        streams (np.ndarray): Boolean stream mask
        row (int): Receiving stream cell row
        col (int): Receiving stream cell column
        incoming (int): Direction index of the flow line (pointing at the cell)

    Returns:
        int: SIDE_UNKNOWN, SIDE_RIGHT or SIDE_LEFT
    """
    stream1_dir = steepest_direction_at(dem, row, col)
    if stream1_dir == NO_DIRECTION:
        return SIDE_UNKNOWN

    flow_x = float(DCOL[incoming])
    flow_y = float(DROW[incoming])
    stream1_x = float(DCOL[stream1_dir])
    stream1_y = float(DROW[stream1_dir])

    left = True
    right = True

    sp = flow_x * stream1_x + flow_y * stream1_y
    sp = sp / math.sqrt(flow_x * flow_x + flow_y * flow_y) / math.sqrt(
        stream1_x * stream1_x + stream1_y * stream1_y)

    # A flow line opposing the channel (outlet inside the DEM) stays undetermined
    if abs(sp + 1.0) >= ANTIPARALLEL_TOLERANCE:
        n_tributaries = 0
        zcp_a = flow_x * stream1_y - flow_y * stream1_x

        for d in range(8):
            r2 = row + DROW[d]
            c2 = col + DCOL[d]
            if not is_stream_at(streams, r2, c2):
                continue

            stream2_dir = steepest_direction_at(dem, r2, c2)
            if stream2_dir == NO_DIRECTION:
                continue
            if r2 + DROW[stream2_dir] != row or c2 + DCOL[stream2_dir] != col:
                continue

            # Upstream tributary
            n_tributaries += 1
            stream2_x = float(DCOL[stream2_dir])
            stream2_y = float(DROW[stream2_dir])
            zcp_b = flow_x * stream2_y - flow_y * stream2_x

            prev_right = right
            if zcp_a * zcp_b > 0:
                right = zcp_b > 0
            else:
                # Sharp bend, or flow line parallel to the channel
                zcp_c = stream1_x * stream2_y - stream1_y * stream2_x
                right = zcp_c > 0
            left = not right

            if n_tributaries > 1 and right != prev_right:
                # Junction: the flow line lies between two tributaries
                left = True
                right = True
                break

    if right and left:
        return SIDE_UNKNOWN
    if right:
        return SIDE_RIGHT
    if left:
        return SIDE_LEFT
    return SIDE_UNKNOWN


def classify_side(dem, streams, row, col, incoming_direction):
    """Classify a contribution arriving at a stream cell.

    Args:
        dem (np.ndarray): DEM array (NaN = NoData)
        streams (np.ndarray): Stream raster (cells > 0 are streams)
        row (int): Receiving stream cell row
        col (int): Receiving stream cell column
        incoming_direction (int): Direction index from the contributing
            neighbour towards the receiving cell

    Returns:
        Side: LEFT, RIGHT or UNKNOWN
    """
    if not 0 <= incoming_direction < 8:
        raise ValueError(f"Direction index must be in [0, 8), got {incoming_direction}")
    return Side(classify_side_at(
        np.asarray(dem, dtype=np.float64),
        stream_mask(streams),
        row, col, int(incoming_direction)
    ))


def stream_mask(streams):
    """Boolean stream mask from a stream raster (NaN and values <= 0 are off)."""
    streams = np.asarray(streams)
    if streams.dtype == np.bool_:
        return streams
    mask = np.zeros(streams.shape, dtype=np.bool_)
    valid = ~np.isnan(streams.astype(np.float64))
    mask[valid] = streams[valid] > 0
    return mask

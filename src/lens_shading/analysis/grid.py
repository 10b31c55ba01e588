from __future__ import annotations

import numpy as np

from lens_shading.config import DEFAULT_CELL_SIZE, normalize_cell_size


GRID_PITCH = 32


def grid_shape(plane_width: int, plane_height: int) -> tuple[int, int]:
    """(grid_width, grid_height) of the 32 pixel lens shading grid."""

    return (plane_width + GRID_PITCH - 1) // GRID_PITCH, (plane_height + GRID_PITCH - 1) // GRID_PITCH


def _window(index: int, cell_size: int, limit: int) -> tuple[int, int]:
    start = index * GRID_PITCH + GRID_PITCH // 2 - cell_size // 2
    if start >= limit:
        start = limit - 1
    stop = min(start + cell_size, limit)
    return start, stop


def aggregate(plane: np.ndarray, cell_size: int = DEFAULT_CELL_SIZE) -> tuple[np.ndarray, int]:
    """Sample a ``cell_size`` square at the centre of every grid cell.

    Windows clipped by the plane edge are scaled up to a full window's worth of
    pixels. Returns the block values, with zeros raised to 1, and the largest
    block value seen before that adjustment.
    """

    size = normalize_cell_size(cell_size)
    full_count = size * size
    height, width = plane.shape
    grid_w, grid_h = grid_shape(width, height)

    values = np.asarray(plane, dtype=np.int64)
    blocks = np.empty((grid_h, grid_w), dtype=np.int64)
    max_value = 0

    for y in range(grid_h):
        y_start, y_stop = _window(y, size, height)
        for x in range(grid_w):
            x_start, x_stop = _window(x, size, width)
            window = values[y_start:y_stop, x_start:x_stop]
            block = int(window.sum())
            count = window.size
            if count < full_count:
                block = block * full_count // count
            blocks[y, x] = block if block else 1
            if block > max_value:
                max_value = block

    return blocks, max_value

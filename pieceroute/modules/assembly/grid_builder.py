# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Grid Builder
Lays a complete border route onto a rows × cols grid.

The walk starts at (0, 0) heading east and turns clockwise
(east → south → west → north) after every corner except the start.
Rotations are expressed in the start corner's frame.
"""

from __future__ import annotations

from typing import Optional

from pieceroute.modules.routing.route import Route
from pieceroute.utils.geometry_utils import expected_edge_sides
from pieceroute.utils.logger import get_logger

log = get_logger(__name__)

# (d_row, d_col) per heading: east, south, west, north
_HEADINGS: list[tuple[int, int]] = [(0, 1), (1, 0), (0, -1), (-1, 0)]

Grid = list[list[Optional[int]]]


def empty_grid(rows: int, cols: int) -> Grid:
    return [[None] * cols for _ in range(rows)]


def route_to_grid(route: Route) -> tuple[Grid, Grid]:
    """
    Returns:
        (grid, rotations), both rows × cols with None in interior cells.

    Raises:
        ValueError: route is incomplete, walks off its own grid, or puts
            a corner piece on a non-corner cell (or the reverse).
    """
    if not route.is_complete or route.width is None or route.height is None:
        raise ValueError("route_to_grid needs a complete route")

    rows, cols = route.height, route.width
    grid = empty_grid(rows, cols)
    rotations = empty_grid(rows, cols)

    row, col, heading = 0, 0, 0
    for i, placement in enumerate(route.placements()):
        if i > 0:
            d_row, d_col = _HEADINGS[heading]
            row, col = row + d_row, col + d_col
        if not (0 <= row < rows and 0 <= col < cols) or grid[row][col] is not None:
            raise ValueError(f"Route leaves its {rows}x{cols} grid at ({row}, {col})")
        if expected_edge_sides(row, col, rows, cols) != (2 if placement.corner else 1):
            raise ValueError(
                f"Piece {placement.piece_id} does not fit border cell ({row}, {col})"
            )

        grid[row][col] = placement.piece_id
        rotations[row][col] = placement.start_frame_rotation

        if placement.corner and i > 0:
            heading = (heading + 1) % 4

    log.debug("border_laid", rows=rows, cols=cols, border_pieces=route.length)
    return grid, rotations

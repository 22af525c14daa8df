# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Interior Filler
Greedy neighbour voting for the cells inside the solved border.

For each empty cell with at least one placed neighbour, every rotation
of every unplaced interior piece is scored by the mean recorded match
score against the touching neighbour sides (missing_match_penalty where
no match was recorded). The lowest mean wins. Cells with no placed
neighbour yet are retried on the next pass; a pass that places nothing
ends the fill.
"""

from __future__ import annotations

from typing import Optional

from pieceroute.config import Settings, get_settings
from pieceroute.core.errors import NoMatchFoundError
from pieceroute.models.piece import CardinalDirection, PieceArena
from pieceroute.modules.assembly.grid_builder import Grid
from pieceroute.utils.geometry_utils import ROTATION_VARIANTS, opposite
from pieceroute.utils.logger import get_logger

log = get_logger(__name__)

_NEIGHBOUR_OFFSETS: dict[CardinalDirection, tuple[int, int]] = {
    CardinalDirection.NORTH: (-1, 0),
    CardinalDirection.EAST: (0, 1),
    CardinalDirection.SOUTH: (1, 0),
    CardinalDirection.WEST: (0, -1),
}


def placed_neighbours(
    grid: Grid, row: int, col: int
) -> list[tuple[CardinalDirection, int, int]]:
    """(direction from the cell, neighbour row, neighbour col) of filled neighbours."""
    rows, cols = len(grid), len(grid[0]) if grid else 0
    found = []
    for direction, (d_row, d_col) in _NEIGHBOUR_OFFSETS.items():
        r, c = row + d_row, col + d_col
        if 0 <= r < rows and 0 <= c < cols and grid[r][c] is not None:
            found.append((direction, r, c))
    return found


def fit_score(
    arena: PieceArena,
    piece_id: int,
    rotation: int,
    neighbours: list[tuple[CardinalDirection, int, int]],
    grid: Grid,
    rotations: Grid,
    penalty: float,
) -> float:
    """Mean join score of a piece at `rotation` against its placed neighbours."""
    piece = arena.piece(piece_id)
    total = 0.0
    for direction, r, c in neighbours:
        mine = piece.side_facing(direction, rotation)
        theirs = arena.piece(grid[r][c]).side_facing(opposite(direction), rotations[r][c])
        score = None
        if mine is not None and theirs is not None:
            score = mine.match_score(theirs.side_id)
        total += score if score is not None else penalty
    return total / len(neighbours)


def best_fit(
    cell: tuple[int, int],
    candidates: list[int],
    arena: PieceArena,
    grid: Grid,
    rotations: Grid,
    settings: Settings,
) -> tuple[int, int, float]:
    """
    Returns:
        (piece_id, rotation, mean score) of the best candidate.

    Raises:
        NoMatchFoundError: no candidate, or best mean ≥ acceptance_ceiling.
    """
    neighbours = placed_neighbours(grid, *cell)
    best: Optional[tuple[int, int, float]] = None
    for piece_id in candidates:
        for rotation in ROTATION_VARIANTS:
            score = fit_score(
                arena, piece_id, rotation, neighbours, grid, rotations,
                settings.missing_match_penalty,
            )
            if best is None or score < best[2]:
                best = (piece_id, rotation, score)

    if best is None:
        raise NoMatchFoundError(cell)
    if best[2] >= settings.acceptance_ceiling:
        raise NoMatchFoundError(cell, best_score=best[2])
    return best


def fill_interior(
    grid: Grid,
    rotations: Grid,
    arena: PieceArena,
    settings: Optional[Settings] = None,
) -> list[tuple[int, int]]:
    """
    Fill empty cells in place.

    Returns:
        Cells left empty, row-major.
    """
    settings = settings or get_settings()
    placed = {pid for row in grid for pid in row if pid is not None}
    candidates = [p.piece_id for p in arena.interiors if p.piece_id not in placed]

    pending = [
        (r, c)
        for r, row in enumerate(grid)
        for c, pid in enumerate(row)
        if pid is None
    ]
    failed: list[tuple[int, int]] = []

    while pending:
        deferred: list[tuple[int, int]] = []
        progress = False
        for cell in pending:
            if not placed_neighbours(grid, *cell):
                deferred.append(cell)
                continue
            try:
                piece_id, rotation, score = best_fit(
                    cell, candidates, arena, grid, rotations, settings
                )
            except NoMatchFoundError as exc:
                log.warning("interior_cell_unfilled", cell=list(exc.cell), best_score=exc.best_score)
                failed.append(cell)
                continue

            grid[cell[0]][cell[1]] = piece_id
            rotations[cell[0]][cell[1]] = rotation
            candidates.remove(piece_id)
            progress = True
            log.debug("interior_cell_filled", cell=list(cell), piece_id=piece_id, score=score)

        if not progress:
            failed.extend(deferred)
            break
        pending = deferred

    log.info(
        "interior_fill_complete",
        unfilled_cells=len(failed),
        unplaced_pieces=len(candidates),
    )
    return sorted(failed)

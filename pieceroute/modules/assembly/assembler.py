# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Grid Assembler
Turns matched pieces into a LayoutResult: border route from the first
usable corner, grid layout, then interior fill.
"""

from __future__ import annotations

import threading
from typing import Optional, Union

from pieceroute.config import Settings, get_settings
from pieceroute.core.errors import NoCornerFoundError, SolverExhaustedError
from pieceroute.models.layout import LayoutResult
from pieceroute.models.piece import Piece, PieceArena
from pieceroute.modules.assembly.grid_builder import route_to_grid
from pieceroute.modules.assembly.interior_filler import fill_interior
from pieceroute.modules.routing.route_solver import get_best_route
from pieceroute.utils.logger import get_logger

log = get_logger(__name__)


def assemble_layout(
    pieces: Union[list[Piece], PieceArena],
    settings: Optional[Settings] = None,
    cancel: Optional[threading.Event] = None,
) -> LayoutResult:
    """
    Solve the border, lay it out, fill the interior.

    Raises:
        NoCornerFoundError:   no usable piece has two adjacent EDGE sides
        SolverExhaustedError: the route search found no complete border
    """
    settings = settings or get_settings()
    arena = pieces if isinstance(pieces, PieceArena) else PieceArena(pieces)

    corners = arena.corners
    if not corners:
        raise NoCornerFoundError("No usable corner piece to start the border from")
    start = corners[0]

    route = get_best_route(arena, start.piece_id, settings, cancel=cancel)
    if route.is_sentinel:
        raise SolverExhaustedError(
            f"No complete border route from corner {start.piece_id}",
            best_score=route.score,
        )

    grid, rotations = route_to_grid(route)
    unfilled = fill_interior(grid, rotations, arena, settings)

    layout = LayoutResult(
        rows=route.height,
        cols=route.width,
        grid=grid,
        rotations=rotations,
        score=route.score,
        border_piece_ids=route.piece_ids(),
        unfilled_cells=unfilled,
        unusable_piece_ids=arena.unusable_ids,
    )
    log.info(
        "layout_assembled",
        rows=layout.rows,
        cols=layout.cols,
        score=layout.score,
        placed=layout.placed_count,
        unfilled_cells=len(unfilled),
    )
    return layout

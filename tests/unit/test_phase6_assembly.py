# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Phase 6 tests: border layout, interior fill and the assembler.
"""

import math

import numpy as np
import pytest


# ─── Helpers ─────────────────────────────────────────────────────────────────

def _grid_piece(pid, row, col, rows, cols, turn=0):
    from pieceroute.models.piece import CardinalDirection as D, Piece, Side, SideType, make_side_id
    from pieceroute.utils.geometry_utils import DIRECTION_ORDER, rotate_direction

    true_types = {
        D.NORTH: SideType.EDGE if row == 0 else SideType.BLANK,
        D.EAST: SideType.EDGE if col == cols - 1 else SideType.TAB,
        D.SOUTH: SideType.EDGE if row == rows - 1 else SideType.TAB,
        D.WEST: SideType.EDGE if col == 0 else SideType.BLANK,
    }
    sides = [
        Side(
            side_id=make_side_id(pid, index),
            piece_id=pid,
            index=index,
            type=true_types[direction],
            direction=rotate_direction(direction, turn),
            points=np.zeros((2, 2)),
        )
        for index, direction in enumerate(DIRECTION_ORDER)
    ]
    return Piece(piece_id=pid, contour=np.zeros((4, 2)), centroid=(0.0, 0.0), sides=sides)


def _true_side_id(pid, direction):
    from pieceroute.models.piece import make_side_id
    from pieceroute.utils.geometry_utils import DIRECTION_ORDER

    return make_side_id(pid, DIRECTION_ORDER.index(direction))


def _grid_puzzle(rows, cols, score=0.0, turns=None, unlinked=()):
    """
    Row-major pieces with every true neighbour pair matched at `score`.
    Pieces listed in `unlinked` get no matches at all.
    """
    from pieceroute.models.piece import CardinalDirection as D, SideMatch

    turns = turns or {}
    table = {}

    def link(a, b):
        if a // 4 in unlinked or b // 4 in unlinked:
            return
        table.setdefault(a, []).append(SideMatch(target_side_id=b, target_piece_id=b // 4, score=score))
        table.setdefault(b, []).append(SideMatch(target_side_id=a, target_piece_id=a // 4, score=score))

    for r in range(rows):
        for c in range(cols):
            pid = r * cols + c
            if c + 1 < cols:
                link(_true_side_id(pid, D.EAST), _true_side_id(pid + 1, D.WEST))
            if r + 1 < rows:
                link(_true_side_id(pid, D.SOUTH), _true_side_id(pid + cols, D.NORTH))

    pieces = []
    for r in range(rows):
        for c in range(cols):
            pid = r * cols + c
            piece = _grid_piece(pid, r, c, rows, cols, turns.get(pid, 0))
            sides = [
                s.model_copy(update={"matches": tuple(table.get(s.side_id, ()))})
                for s in piece.sides
            ]
            pieces.append(piece.model_copy(update={"sides": sides}))
    return pieces


def _settings(**overrides):
    from pieceroute.config import Settings

    return Settings(_env_file=None, **overrides)


def _truth(rows, cols):
    return [[r * cols + c for c in range(cols)] for r in range(rows)]


# ─── Grid builder ────────────────────────────────────────────────────────────

def test_route_to_grid_lays_border_clockwise():
    from pieceroute.models.piece import PieceArena
    from pieceroute.modules.assembly import route_to_grid
    from pieceroute.modules.routing import get_best_route

    arena = PieceArena(_grid_puzzle(3, 4))
    grid, rotations = route_to_grid(get_best_route(arena, 0, _settings()))

    assert grid == [
        [0, 1, 2, 3],
        [4, None, None, 7],
        [8, 9, 10, 11],
    ]
    assert rotations[1][1] is None
    assert rotations[0] == [0, 0, 0, 0]


def test_route_to_grid_rejects_incomplete_route():
    from pieceroute.modules.assembly import route_to_grid
    from pieceroute.modules.routing import Placement, Route

    partial = Route.start(Placement(0, 0, turn=0, corner=True), frozenset({0, 1}))
    with pytest.raises(ValueError):
        route_to_grid(partial)


def test_route_to_grid_rejects_corner_off_corner_cell():
    from dataclasses import replace

    from pieceroute.modules.assembly import route_to_grid
    from pieceroute.modules.routing import Placement, Route

    route = Route.start(Placement(0, 0, turn=0, corner=True), frozenset(range(4)))
    route = route.extend(Placement(1, 0, turn=0, corner=True), 0.0)
    route = route.extend(Placement(3, 0, turn=1, corner=False), 0.0)
    route = route.extend(Placement(2, 0, turn=1, corner=True), 0.0)
    route = replace(route, turns=3, width=2, height=2, closing_width=2)

    with pytest.raises(ValueError, match="does not fit"):
        route_to_grid(route)


def test_empty_grid_rows_are_independent():
    from pieceroute.modules.assembly import empty_grid

    grid = empty_grid(2, 3)
    grid[0][0] = 7
    assert grid == [[7, None, None], [None, None, None]]


# ─── Interior fill ───────────────────────────────────────────────────────────

def test_placed_neighbours():
    from pieceroute.models.piece import CardinalDirection as D
    from pieceroute.modules.assembly import placed_neighbours

    grid = [[0, 1, 2], [3, None, 5], [6, None, 8]]
    found = placed_neighbours(grid, 1, 1)
    assert {d for d, _, _ in found} == {D.NORTH, D.EAST, D.WEST}
    assert (D.SOUTH, 2, 1) not in found


def test_fill_interior_places_and_rotates():
    from pieceroute.models.piece import PieceArena
    from pieceroute.modules.assembly import fill_interior, route_to_grid
    from pieceroute.modules.routing import get_best_route

    turns = {pid: (pid * 270) % 360 for pid in range(16)}
    arena = PieceArena(_grid_puzzle(4, 4, score=0.5, turns=turns))
    grid, rotations = route_to_grid(get_best_route(arena, 0, _settings()))

    unfilled = fill_interior(grid, rotations, arena, _settings())

    assert unfilled == []
    assert grid == _truth(4, 4)
    for r in range(4):
        for c in range(4):
            assert rotations[r][c] == (-turns[grid[r][c]]) % 360


def test_fill_interior_leaves_unmatched_cell_empty():
    from pieceroute.models.piece import PieceArena
    from pieceroute.modules.assembly import fill_interior, route_to_grid
    from pieceroute.modules.routing import get_best_route

    arena = PieceArena(_grid_puzzle(3, 3, score=0.5, unlinked={4}))
    grid, rotations = route_to_grid(get_best_route(arena, 0, _settings()))

    unfilled = fill_interior(grid, rotations, arena, _settings())
    assert unfilled == [(1, 1)]
    assert grid[1][1] is None


def test_best_fit_without_candidates_raises():
    from pieceroute.core.errors import NoMatchFoundError
    from pieceroute.models.piece import PieceArena
    from pieceroute.modules.assembly import best_fit

    arena = PieceArena(_grid_puzzle(3, 3))
    grid = _truth(3, 3)
    grid[1][1] = None
    rotations = [[0] * 3 for _ in range(3)]

    with pytest.raises(NoMatchFoundError) as info:
        best_fit((1, 1), [], arena, grid, rotations, _settings())
    assert info.value.cell == (1, 1)
    assert math.isinf(info.value.best_score)


def test_fit_score_uses_penalty_for_missing_matches():
    from pieceroute.models.piece import PieceArena
    from pieceroute.modules.assembly import fit_score, placed_neighbours

    arena = PieceArena(_grid_puzzle(3, 3, score=1.0))
    grid = _truth(3, 3)
    grid[1][1] = None
    rotations = [[0] * 3 for _ in range(3)]
    neighbours = placed_neighbours(grid, 1, 1)

    assert fit_score(arena, 4, 0, neighbours, grid, rotations, 15.0) == pytest.approx(1.0)
    # Upside down, no side lines up with a recorded match
    assert fit_score(arena, 4, 180, neighbours, grid, rotations, 15.0) == pytest.approx(15.0)


# ─── Assembler ───────────────────────────────────────────────────────────────

def test_assemble_layout_3x3():
    from pieceroute.modules.assembly import assemble_layout

    layout = assemble_layout(_grid_puzzle(3, 3), _settings())

    assert layout.solved
    assert (layout.rows, layout.cols) == (3, 3)
    assert layout.grid == _truth(3, 3)
    assert layout.rotations == [[0] * 3 for _ in range(3)]
    assert layout.score == 0.0
    assert layout.border_piece_ids == [0, 1, 2, 5, 8, 7, 6, 3]
    assert layout.unfilled_cells == []
    assert layout.unusable_piece_ids == []


def test_assemble_layout_reports_unusable_pieces():
    from pieceroute.models.piece import Piece
    from pieceroute.modules.assembly import assemble_layout

    pieces = _grid_puzzle(2, 3) + [
        Piece(piece_id=42, contour=np.zeros((3, 2)), usable=False)
    ]
    layout = assemble_layout(pieces, _settings())

    assert layout.grid == _truth(2, 3)
    assert layout.unusable_piece_ids == [42]


def test_assemble_without_corner_raises():
    from pieceroute.core.errors import NoCornerFoundError
    from pieceroute.modules.assembly import assemble_layout

    interiors = [_grid_piece(pid, 1, 1, 3, 3) for pid in range(3)]
    with pytest.raises(NoCornerFoundError):
        assemble_layout(interiors, _settings())


def test_assemble_without_route_raises():
    from pieceroute.core.errors import SolverExhaustedError
    from pieceroute.modules.assembly import assemble_layout

    unlinked = _grid_puzzle(2, 2, unlinked={0, 1, 2, 3})
    with pytest.raises(SolverExhaustedError) as info:
        assemble_layout(unlinked, _settings())
    assert math.isinf(info.value.best_score)


def test_assemble_skips_piece_with_opposite_edges():
    from pieceroute.models.piece import CardinalDirection as D, Piece, Side, SideType, make_side_id
    from pieceroute.modules.assembly import assemble_layout
    from pieceroute.utils.geometry_utils import DIRECTION_ORDER

    types = {D.NORTH: SideType.EDGE, D.EAST: SideType.TAB, D.SOUTH: SideType.EDGE, D.WEST: SideType.BLANK}
    strip = Piece(
        piece_id=50,
        contour=np.zeros((4, 2)),
        centroid=(0.0, 0.0),
        sides=[
            Side(side_id=make_side_id(50, i), piece_id=50, index=i, type=types[d], direction=d,
                 points=np.zeros((2, 2)))
            for i, d in enumerate(DIRECTION_ORDER)
        ],
    )
    # Listed first so it would be the start corner if it counted as one
    layout = assemble_layout([strip] + _grid_puzzle(3, 3), _settings())

    assert layout.solved
    assert layout.grid == _truth(3, 3)
    assert layout.position_of(50) is None

# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Route Solver
Best-first search for the cheapest closed border around the puzzle.

The start corner is turned so its EDGE sides face NORTH and WEST and
the walk leaves through its EAST side. Each queue entry is a route plus
the index of the match to try next from the route's frontier; entries
are ordered by prospective score (lowest first), FIFO among exact ties.

Grid dimensions are inferred while walking:
  1st corner  width  = path length
  2nd corner  height = path length + 1 − width, and the border pieces
              must exactly ring a height × width grid
  3rd corner  closing width = path length − width − height + 2,
              must equal width
  4th corner  impossible, the start corner closes the loop
The third side may hold at most width − 2 non-corner pieces, and until
both dimensions are known the path may not outgrow the pieces left.

A route is complete when no border piece remains after three turns; the
join from its last piece back to the start corner is then added. The
search stops on queue exhaustion, on a good-enough complete route, or
when the expansion / time budget or the cancel event trips.
"""

from __future__ import annotations

import heapq
import itertools
import threading
import time
from dataclasses import replace
from typing import Optional

from pieceroute.config import Settings, get_settings
from pieceroute.models.piece import (
    CardinalDirection,
    Piece,
    PieceArena,
    PieceType,
    Side,
)
from pieceroute.modules.routing.route import Placement, Route
from pieceroute.utils.geometry_utils import (
    ROTATION_VARIANTS,
    border_cell_count,
    rotation_between,
)
from pieceroute.utils.logger import get_logger

log = get_logger(__name__)


def orient_start_corner(piece: Piece) -> int:
    """
    Rotation that turns a corner piece's EDGE sides to NORTH and WEST.

    Raises:
        ValueError: the piece has no adjacent EDGE pair.
    """
    for rotation in ROTATION_VARIANTS:
        north = piece.side_facing(CardinalDirection.NORTH, rotation)
        west = piece.side_facing(CardinalDirection.WEST, rotation)
        if north is not None and west is not None and north.is_edge and west.is_edge:
            return rotation
    raise ValueError(f"Piece {piece.piece_id} has no adjacent EDGE sides")


def outward_side(arena: PieceArena, placement: Placement, turns: int) -> Optional[Side]:
    """Side of a placed piece facing EAST in the frame after `turns` corners."""
    piece = arena.piece(placement.piece_id)
    return piece.side_facing(CardinalDirection.EAST, placement.frame_rotation(turns))


def _turn_corner(route: Route, border_count: int) -> Optional[Route]:
    """Apply a corner turn and its dimension checks; None when pruned."""
    turns = route.turns + 1
    remaining = len(route.remaining)

    if turns == 1:
        width = route.length
        if width > remaining:
            return None
        return replace(route, turns=turns, width=width)

    if turns == 2:
        height = route.length + 1 - route.width
        if height < 2 or border_cell_count(height, route.width) != border_count:
            return None
        return replace(route, turns=turns, height=height)

    if turns == 3:
        closing_width = route.length - route.width - route.height + 2
        if closing_width != route.width:
            return None
        return replace(route, turns=turns, closing_width=closing_width)

    return None


def _budget_exhausted(
    expansions: int,
    started: float,
    settings: Settings,
    cancel: Optional[threading.Event],
) -> Optional[str]:
    if cancel is not None and cancel.is_set():
        return "cancelled"
    if settings.max_expansions is not None and expansions >= settings.max_expansions:
        return "max_expansions"
    if settings.time_budget_s is not None and time.monotonic() - started >= settings.time_budget_s:
        return "time_budget"
    return None


def get_best_route(
    arena: PieceArena,
    start_piece_id: int,
    settings: Optional[Settings] = None,
    cancel: Optional[threading.Event] = None,
) -> Route:
    """
    Search for the lowest-scoring complete border route from a corner.

    Args:
        arena:          Classified, sampled and matched pieces
        start_piece_id: A CORNER piece; it ends up top-left
        settings:       Solver budget and scoring constants
        cancel:         Optional event checked at every dequeue

    Returns:
        The best complete Route found, or Route.sentinel() (score
        math.inf) when none completed.
    """
    settings = settings or get_settings()
    start = arena.piece(start_piece_id)
    if start.piece_type != PieceType.CORNER:
        raise ValueError(f"Start piece {start_piece_id} is not a corner")

    start_rotation = orient_start_corner(start)
    border_ids = arena.border_ids
    border_count = len(border_ids)
    early_accept_score = settings.early_accept_average * border_count
    closing_side = start.side_facing(CardinalDirection.SOUTH, start_rotation)

    root = Route.start(
        Placement(start_piece_id, start_rotation, turn=0, corner=True),
        border_ids,
    )

    heap: list[tuple[float, int, Route]] = []
    sequence = itertools.count()

    def push_children(route: Route, side: Side) -> None:
        for index, match in enumerate(side.matches):
            if match.target_piece_id in route.remaining:
                heapq.heappush(
                    heap,
                    (route.score + match.score, next(sequence), route.with_match_index(index)),
                )

    first_side = start.side_facing(CardinalDirection.EAST, start_rotation)
    if first_side is None or not first_side.matches:
        log.warning("route_search_no_start_match", start_piece_id=start_piece_id)
        return Route.sentinel()
    push_children(root, first_side)

    log.info(
        "route_search_start",
        start_piece_id=start_piece_id,
        start_rotation=start_rotation,
        border_pieces=border_count,
        initial_routes=len(heap),
    )

    best = Route.sentinel()
    expansions = 0
    started = time.monotonic()
    stop_reason = "queue_exhausted"

    while heap:
        reason = _budget_exhausted(expansions, started, settings, cancel)
        if reason is not None:
            stop_reason = reason
            break

        priority, _, route = heapq.heappop(heap)
        expansions += 1

        # Every queued entry scores at least this much
        if priority >= best.score:
            stop_reason = "bounded"
            break

        side = outward_side(arena, route.frontier, route.turns)
        if side is None or route.match_index >= len(side.matches):
            continue
        match = side.matches[route.match_index]
        if match.target_piece_id not in route.remaining:
            continue

        target = arena.piece(match.target_piece_id)
        target_side = arena.side(match.target_side_id)
        is_corner = target.piece_type == PieceType.CORNER
        placement = Placement(
            piece_id=target.piece_id,
            rotation=rotation_between(target_side.direction, CardinalDirection.WEST),
            turn=route.turns,
            corner=is_corner,
        )
        child = route.extend(placement, match.score)

        if is_corner:
            child = _turn_corner(child, border_count)
            if child is None:
                continue
        elif child.turns == 2:
            if child.length - child.width - child.height + 1 > child.width - 2:
                continue

        if not child.remaining:
            if not child.is_complete:
                continue
            last_side = outward_side(arena, child.frontier, child.turns)
            join = (
                last_side.match_score(closing_side.side_id)
                if last_side is not None and closing_side is not None
                else None
            )
            total = child.score + (join if join is not None else settings.missing_match_penalty)
            if total < best.score:
                best = child.with_score(total)
                log.debug(
                    "route_improved",
                    score=total,
                    width=best.width,
                    height=best.height,
                    expansions=expansions,
                )
            if best.score <= early_accept_score:
                stop_reason = "early_accept"
                break
            continue

        if child.height is None and child.length > len(child.remaining):
            continue

        next_side = outward_side(arena, child.frontier, child.turns)
        if next_side is None or not next_side.matches:
            continue
        push_children(child, next_side)

    log.info(
        "route_search_complete",
        stop_reason=stop_reason,
        expansions=expansions,
        queued=len(heap),
        best_score=best.score,
        width=best.width,
        height=best.height,
    )
    return best

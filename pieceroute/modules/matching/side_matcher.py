# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Side Matcher
Scores every compatible side pair between two pieces.

Candidate filter (all must hold):
  - both pieces usable, not the same piece
  - a corner never pairs with an interior piece
  - both sides non-EDGE, one TAB and one BLANK, both sampled
  - with B turned so its side faces A's side, the sides perpendicular
    to the join agree in EDGE-ness on both pieces

Score (lower is better):
  matchShapes(I1) / shape_match_scale
  + |Δ span| / length_match_scale
  + Σ ΔE76(A.sample[i], B.sample[2−i]) / color_match_scale

Pairs scoring at or above acceptance_ceiling are dropped.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from itertools import combinations
from typing import Optional

import cv2
import numpy as np

from pieceroute.config import Settings, get_settings
from pieceroute.models.piece import Piece, PieceType, Side
from pieceroute.modules.matching.match_index import build_match_index, match_stats
from pieceroute.utils.color_utils import delta_e76
from pieceroute.utils.geometry_utils import (
    opposite,
    perpendicular,
    rotation_between,
)
from pieceroute.utils.logger import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class SideScore:
    """One accepted side pair, recorded on both sides."""
    side_a: int
    piece_a: int
    side_b: int
    piece_b: int
    score: float


def shape_distance(a: Side, b: Side) -> float:
    """Hu-moment distance between two normalised side arcs."""
    pts_a = np.asarray(a.normalized_points, dtype=np.float32).reshape(-1, 1, 2)
    pts_b = np.asarray(b.normalized_points, dtype=np.float32).reshape(-1, 1, 2)
    return float(cv2.matchShapes(pts_a, pts_b, cv2.CONTOURS_MATCH_I1, 0.0))


def color_distance(a: Side, b: Side) -> float:
    """
    Sum of ΔE76 over the three samples, A's i-th against B's (2−i)-th:
    clockwise order on each piece runs in opposite directions along a
    shared cut.
    """
    return sum(
        delta_e76(a.color_samples[i].lab, b.color_samples[2 - i].lab)
        for i in range(3)
    )


def score_sides(a: Side, b: Side, settings: Settings) -> float:
    return (
        shape_distance(a, b) / settings.shape_match_scale
        + abs(a.span_length - b.span_length) / settings.length_match_scale
        + color_distance(a, b) / settings.color_match_scale
    )


def pieces_may_pair(a: Piece, b: Piece) -> bool:
    """Structural filter applied before any side is scored."""
    if a.piece_id == b.piece_id or not a.usable or not b.usable:
        return False
    types = {a.piece_type, b.piece_type}
    if PieceType.UNKNOWN in types:
        return False
    if PieceType.CORNER in types and PieceType.INTERIOR in types:
        return False
    return True


def sides_compatible(a: Piece, side_a: Side, b: Piece, side_b: Side) -> bool:
    if side_a.is_edge or side_b.is_edge or side_a.type == side_b.type:
        return False
    if not side_a.is_sampled or not side_b.is_sampled:
        return False

    # Turn B so side_b faces side_a, then compare the flanking sides
    turn = rotation_between(side_b.direction, opposite(side_a.direction))
    for direction in perpendicular(side_a.direction):
        flank_a = a.side(direction)
        flank_b = b.side_facing(direction, turn)
        if flank_a is None or flank_b is None:
            return False
        if flank_a.is_edge != flank_b.is_edge:
            return False
    return True


def match_pair(a: Piece, b: Piece, settings: Optional[Settings] = None) -> list[SideScore]:
    """
    Score every compatible side pair between pieces `a` and `b`.
    Read-only on both pieces, safe to call from worker threads.
    """
    settings = settings or get_settings()
    if not pieces_may_pair(a, b):
        return []

    accepted: list[SideScore] = []
    for side_a in a.sides:
        for side_b in b.sides:
            if not sides_compatible(a, side_a, b, side_b):
                continue
            score = score_sides(side_a, side_b, settings)
            if score >= settings.acceptance_ceiling:
                continue
            accepted.append(SideScore(
                side_a=side_a.side_id,
                piece_a=a.piece_id,
                side_b=side_b.side_id,
                piece_b=b.piece_id,
                score=score,
            ))
    return accepted


def match_all(pieces: list[Piece], settings: Optional[Settings] = None) -> list[Piece]:
    """
    Score all piece pairs and attach the frozen, ascending match lists
    to every side. Scoring may fan out over `matcher_workers` threads;
    match records are merged on the calling thread.
    """
    settings = settings or get_settings()
    candidates = [p for p in pieces if p.usable and p.is_classified]
    pairs = list(combinations(candidates, 2))

    log.info(
        "matching_start",
        pieces=len(candidates),
        piece_pairs=len(pairs),
        workers=settings.matcher_workers,
    )

    scores: list[SideScore] = []
    if settings.matcher_workers > 1 and len(pairs) > 1:
        with ThreadPoolExecutor(max_workers=settings.matcher_workers) as pool:
            for result in pool.map(lambda pair: match_pair(pair[0], pair[1], settings), pairs):
                scores.extend(result)
    else:
        for a, b in pairs:
            scores.extend(match_pair(a, b, settings))

    matched = build_match_index(pieces, scores)
    log.info("matching_complete", **match_stats(matched, accepted_pairs=len(scores)))
    return matched

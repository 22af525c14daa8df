# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Match Index
Freezes accepted side pairs into per-side tuples sorted by ascending
score. Each pair is recorded on both sides with the same score, and a
side lists any target side at most once (best score kept).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pieceroute.models.piece import Piece, SideMatch

if TYPE_CHECKING:
    from pieceroute.modules.matching.side_matcher import SideScore


def build_match_index(pieces: list[Piece], scores: list["SideScore"]) -> list[Piece]:
    """Return copies of `pieces` whose sides carry their frozen match lists."""
    # side_id → {target_side_id: (score, target_piece_id)}
    table: dict[int, dict[int, tuple[float, int]]] = {}

    def record(side: int, target: int, target_piece: int, score: float) -> None:
        entries = table.setdefault(side, {})
        current = entries.get(target)
        if current is None or score < current[0]:
            entries[target] = (score, target_piece)

    for s in scores:
        record(s.side_a, s.side_b, s.piece_b, s.score)
        record(s.side_b, s.side_a, s.piece_a, s.score)

    result: list[Piece] = []
    for piece in pieces:
        sides = []
        for side in piece.sides:
            entries = table.get(side.side_id, {})
            matches = tuple(
                SideMatch(target_side_id=target, target_piece_id=tp, score=score)
                for target, (score, tp) in sorted(
                    entries.items(), key=lambda kv: (kv[1][0], kv[0])
                )
            )
            sides.append(side.model_copy(update={"matches": matches}))
        result.append(piece.model_copy(update={"sides": sides}))
    return result


def match_stats(pieces: list[Piece], accepted_pairs: int = 0) -> dict:
    """Summary numbers logged after the matching pass."""
    open_sides = [s for p in pieces if p.usable for s in p.sides if not s.is_edge]
    unmatched = [s.side_id for s in open_sides if not s.matches]
    best = [s.matches[0].score for s in open_sides if s.matches]
    return {
        "accepted_pairs": accepted_pairs,
        "open_sides": len(open_sides),
        "sides_without_match": len(unmatched),
        "mean_best_score": round(sum(best) / len(best), 4) if best else None,
    }

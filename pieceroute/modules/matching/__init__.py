# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Side Matching Module
Public API for pairwise side scoring and the frozen match index.
"""

from pieceroute.modules.matching.match_index import build_match_index, match_stats
from pieceroute.modules.matching.side_matcher import (
    SideScore,
    color_distance,
    match_all,
    match_pair,
    pieces_may_pair,
    score_sides,
    shape_distance,
    sides_compatible,
)

__all__ = [
    # Scoring
    "SideScore",
    "shape_distance",
    "color_distance",
    "score_sides",
    # Filters
    "pieces_may_pair",
    "sides_compatible",
    # Orchestration
    "match_pair",
    "match_all",
    # Index
    "build_match_index",
    "match_stats",
]

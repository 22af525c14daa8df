# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Jigsaw layout solver.

    from pieceroute import solve_puzzle
    layout = solve_puzzle(pieces)
"""

from pieceroute.config import Settings, get_settings
from pieceroute.core.pipeline import solve_puzzle
from pieceroute.models.layout import LayoutResult, format_layout
from pieceroute.models.piece import Piece

__all__ = [
    "Settings",
    "get_settings",
    "Piece",
    "LayoutResult",
    "format_layout",
    "solve_puzzle",
]

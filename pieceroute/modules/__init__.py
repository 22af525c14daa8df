# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Preprocessing Module
Public API for the preprocessing stage.
"""

from pieceroute.modules.preprocessing.upright import (
    upright_angle,
    upright_piece,
    upright_pieces,
)

__all__ = [
    "upright_angle",
    "upright_piece",
    "upright_pieces",
]

# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Side Sampling Module
Public API for shape normalisation and colour sampling.
"""

from pieceroute.modules.sampling.side_sampler import (
    clockwise_corners,
    normalize_side_points,
    sample_color,
    sample_piece,
    sample_pieces,
    sample_side,
    sampling_points,
)

__all__ = [
    "normalize_side_points",
    "clockwise_corners",
    "sampling_points",
    "sample_color",
    "sample_side",
    "sample_piece",
    "sample_pieces",
]

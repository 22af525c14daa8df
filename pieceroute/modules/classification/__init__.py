# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Side Classification Module
Public API for corner detection and side labelling.
"""

from pieceroute.modules.classification.corner_detector import (
    find_peaks,
    radius_sharpness,
    select_corners,
    to_polar,
)
from pieceroute.modules.classification.side_classifier import (
    classify_piece,
    classify_pieces,
    determine_side_nature,
    split_sides,
)

__all__ = [
    # Corner detection
    "to_polar",
    "radius_sharpness",
    "find_peaks",
    "select_corners",
    # Side labelling
    "split_sides",
    "determine_side_nature",
    "classify_piece",
    "classify_pieces",
]

# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Grid Assembly Module
Public API for border layout and interior fill.
"""

from pieceroute.modules.assembly.assembler import assemble_layout
from pieceroute.modules.assembly.grid_builder import empty_grid, route_to_grid
from pieceroute.modules.assembly.interior_filler import (
    best_fit,
    fill_interior,
    fit_score,
    placed_neighbours,
)

__all__ = [
    # Border
    "empty_grid",
    "route_to_grid",
    # Interior
    "placed_neighbours",
    "fit_score",
    "best_fit",
    "fill_interior",
    # Orchestrator
    "assemble_layout",
]

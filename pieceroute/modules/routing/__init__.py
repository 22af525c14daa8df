# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Route Solver Module
Public API for the border route search.
"""

from pieceroute.modules.routing.route import Placement, Route
from pieceroute.modules.routing.route_solver import (
    get_best_route,
    orient_start_corner,
    outward_side,
)

__all__ = [
    "Placement",
    "Route",
    "orient_start_corner",
    "outward_side",
    "get_best_route",
]

# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Error Taxonomy

  GeometryInsufficientError  per-piece, non-fatal: piece marked unusable
  NoCornerFoundError         fatal for the solve, propagated to the caller
  SolverExhaustedError       search finished without a complete border route
  NoMatchFoundError          per-cell during interior fill, cell left empty

Numeric degeneracies (zero-length sides, empty colour patches) are NOT
raised; they surface as None / empty tuples.
"""

from __future__ import annotations

import math


class PieceRouteError(Exception):
    """Base class for every error raised by the solver core."""


class PipelineError(PieceRouteError, RuntimeError):
    """Raised when a pipeline stage cannot produce a usable result."""


class GeometryInsufficientError(PieceRouteError, ValueError):
    """Raised when a piece contour does not yield four usable corners."""

    def __init__(self, piece_id: int, reason: str, corners_found: int = 0):
        self.piece_id = piece_id
        self.reason = reason
        self.corners_found = corners_found
        super().__init__(f"Piece {piece_id}: {reason} (corners found: {corners_found})")


class NoCornerFoundError(PipelineError):
    """Raised when no usable piece classifies as a two-EDGE corner."""


class SolverExhaustedError(PipelineError):
    """Raised when the route search ends without a complete border layout."""

    def __init__(self, message: str, best_score: float = math.inf):
        self.best_score = best_score
        super().__init__(message)


class NoMatchFoundError(PieceRouteError, LookupError):
    """Raised when no remaining piece fits an empty interior cell."""

    def __init__(self, cell: tuple[int, int], best_score: float = math.inf):
        self.cell = cell
        self.best_score = best_score
        super().__init__(
            f"No piece fits cell {cell} (best average score: {best_score})"
        )

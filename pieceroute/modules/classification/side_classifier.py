# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Side Classifier
Splits a piece contour into four sides at its corners and labels each
side with a cardinal direction and a shape type (EDGE / TAB / BLANK).

Side nature (per arc, relative to the midline through its two corners):
  - both extremes within edge_threshold_px of the midline → EDGE
  - larger excursion points away from the centroid → TAB
  - otherwise → BLANK

A piece whose corners or directions cannot be resolved, or whose two
EDGE sides face opposite ways, raises GeometryInsufficientError;
classify_pieces() downgrades that to a warning and marks the piece
unusable.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from pieceroute.config import Settings, get_settings
from pieceroute.core.errors import GeometryInsufficientError
from pieceroute.models.piece import (
    CardinalDirection,
    Piece,
    PieceType,
    Side,
    SideType,
    make_side_id,
)
from pieceroute.modules.classification.corner_detector import (
    find_peaks,
    select_corners,
)
from pieceroute.utils.geometry_utils import (
    DIRECTION_ORDER,
    as_points,
    contour_centroid,
    extreme_points,
    opposite,
)
from pieceroute.utils.logger import get_logger

log = get_logger(__name__)


def split_sides(points: np.ndarray, corner_indexes: list[int]) -> list[np.ndarray]:
    """
    Cut a closed contour into arcs between consecutive corners.
    Each arc includes both of its corners; the last arc wraps around
    the contour start.
    """
    pts = as_points(points)
    corners = sorted(corner_indexes)
    arcs: list[np.ndarray] = []
    for i, start in enumerate(corners):
        end = corners[(i + 1) % len(corners)]
        if end > start:
            arcs.append(pts[start:end + 1].copy())
        else:
            arcs.append(np.concatenate([pts[start:], pts[:end + 1]]))
    return arcs


def determine_side_nature(
    points: np.ndarray,
    centroid: tuple[float, float],
    edge_threshold_px: float = 15.0,
) -> tuple[CardinalDirection, SideType]:
    """
    Direction and type of one corner-to-corner arc.

    Horizontal arcs (spread mostly along x) are NORTH or SOUTH depending
    on whether their corner midline lies above or below the centroid;
    vertical arcs are EAST or WEST.
    """
    pts = as_points(points)
    axis, high, low = extreme_points(pts)
    first, last = pts[0], pts[-1]

    if axis == 0:
        midline = (first[1] + last[1]) / 2.0
        direction = (
            CardinalDirection.NORTH if midline < centroid[1] else CardinalDirection.SOUTH
        )
    else:
        midline = (first[0] + last[0]) / 2.0
        direction = (
            CardinalDirection.EAST if midline > centroid[0] else CardinalDirection.WEST
        )

    dev_high = high - midline
    dev_low = midline - low
    if dev_high <= edge_threshold_px and dev_low <= edge_threshold_px:
        return direction, SideType.EDGE

    # Outward means larger coordinate for SOUTH/EAST, smaller for NORTH/WEST
    outward_is_high = direction in (CardinalDirection.SOUTH, CardinalDirection.EAST)
    if (dev_high > dev_low) == outward_is_high:
        return direction, SideType.TAB
    return direction, SideType.BLANK


def classify_piece(piece: Piece, settings: Optional[Settings] = None) -> Piece:
    """
    Classify the four sides of one piece.

    Returns:
        A copy of the piece with centroid and four sides set
        (sides ordered NORTH, EAST, SOUTH, WEST; index = that order).

    Raises:
        GeometryInsufficientError: degenerate contour, fewer than four
            corners, sides that do not cover each direction once, or
            exactly two EDGE sides on opposite directions.
    """
    settings = settings or get_settings()
    pts = as_points(piece.contour)

    centroid = contour_centroid(pts)
    if centroid is None:
        raise GeometryInsufficientError(piece.piece_id, "degenerate contour")

    peaks = find_peaks(
        pts,
        centroid,
        peak_window=settings.peak_window,
        min_separation_deg=settings.min_peak_separation_deg,
        sharpness_radius_px=settings.sharpness_radius_px,
    )
    corners = select_corners(pts, centroid, peaks)
    if len(corners) < 4:
        raise GeometryInsufficientError(
            piece.piece_id, "fewer than four corners", corners_found=len(corners)
        )

    labelled: dict[CardinalDirection, tuple[SideType, np.ndarray]] = {}
    for arc in split_sides(pts, corners):
        direction, side_type = determine_side_nature(
            arc, centroid, settings.edge_threshold_px
        )
        if direction in labelled:
            raise GeometryInsufficientError(
                piece.piece_id,
                f"two sides classified {direction.value}",
                corners_found=len(corners),
            )
        labelled[direction] = (side_type, arc)

    edges = {d for d, (kind, _) in labelled.items() if kind == SideType.EDGE}
    if len(edges) == 2 and any(opposite(d) in edges for d in edges):
        raise GeometryInsufficientError(
            piece.piece_id,
            "two EDGE sides on opposite directions",
            corners_found=len(corners),
        )

    sides = []
    for index, direction in enumerate(DIRECTION_ORDER):
        side_type, arc = labelled[direction]
        sides.append(Side(
            side_id=make_side_id(piece.piece_id, index),
            piece_id=piece.piece_id,
            index=index,
            type=side_type,
            direction=direction,
            points=arc,
        ))

    return piece.model_copy(update={
        "centroid": centroid,
        "sides": sides,
        "usable": True,
        "rotation_deg": 0,
    })


def classify_pieces(
    pieces: list[Piece],
    settings: Optional[Settings] = None,
) -> list[Piece]:
    """
    Classify every piece. Pieces that cannot be classified are kept,
    marked unusable, and excluded from matching and solving.
    """
    settings = settings or get_settings()
    results: list[Piece] = []

    for piece in pieces:
        try:
            results.append(classify_piece(piece, settings))
        except GeometryInsufficientError as exc:
            log.warning(
                "piece_unusable",
                piece_id=piece.piece_id,
                reason=exc.reason,
                corners_found=exc.corners_found,
            )
            results.append(piece.model_copy(update={"usable": False, "sides": []}))

    counts = {t.value: 0 for t in PieceType}
    for p in results:
        counts[p.piece_type.value] += 1

    log.info(
        "classification_complete",
        total=len(results),
        corners=counts[PieceType.CORNER.value],
        borders=counts[PieceType.BORDER.value],
        interiors=counts[PieceType.INTERIOR.value],
        unusable=counts[PieceType.UNKNOWN.value],
    )
    return results

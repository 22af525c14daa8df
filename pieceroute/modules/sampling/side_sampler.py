# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Side Sampler
Prepares every TAB/BLANK side for matching:

  1. Shape: rotate the side's points so a TAB faces NORTH and a BLANK
     faces SOUTH, then translate the arc centre onto canonical_center.
     The horizontal extent of that arc is the span length.
  2. Colour: three sampling points in clockwise order
       corner one → deepest point → corner two
     moved off the cut line into the piece body; each gets a
     sample_size_px square patch reduced to its dominant colour.

Clockwise corner order per direction:
  NORTH west→east, EAST north→south, SOUTH east→west, WEST south→north
so that two sides joined face to face see each other's samples in
reverse order.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from pieceroute.config import Settings, get_settings
from pieceroute.models.piece import (
    CardinalDirection,
    ColorSample,
    Piece,
    Side,
    SideType,
)
from pieceroute.utils.color_utils import dominant_color, rgb_to_lab
from pieceroute.utils.geometry_utils import (
    DIRECTION_VECTORS,
    as_points,
    point_line_distance,
    rotate_points_to_direction,
    translate_to,
)
from pieceroute.utils.image_utils import crop_patch, ensure_bgr
from pieceroute.utils.logger import get_logger

log = get_logger(__name__)


def normalize_side_points(
    side: Side,
    canonical_center: tuple[float, float],
) -> tuple[np.ndarray, float]:
    """
    Orientation-free copy of a side's arc and its span length.

    Returns:
        (normalized_points, span_length)
    """
    target = (
        CardinalDirection.NORTH if side.type == SideType.TAB else CardinalDirection.SOUTH
    )
    rotated = rotate_points_to_direction(side.points, side.direction, target)
    normalized = translate_to(rotated, canonical_center)
    span = float(abs(normalized[-1, 0] - normalized[0, 0])) if len(normalized) else 0.0
    return normalized, span


def clockwise_corners(side: Side) -> tuple[np.ndarray, np.ndarray]:
    """The side's two end corners ordered clockwise around the piece."""
    pts = as_points(side.points)
    a, b = pts[0], pts[-1]
    if side.direction == CardinalDirection.NORTH:
        ordered = (a, b) if a[0] <= b[0] else (b, a)
    elif side.direction == CardinalDirection.EAST:
        ordered = (a, b) if a[1] <= b[1] else (b, a)
    elif side.direction == CardinalDirection.SOUTH:
        ordered = (a, b) if a[0] >= b[0] else (b, a)
    else:
        ordered = (a, b) if a[1] >= b[1] else (b, a)
    return ordered[0].copy(), ordered[1].copy()


def sampling_points(
    side: Side,
    offset_px: float,
    along_offset_px: float,
) -> list[np.ndarray]:
    """
    The three sampling points (corner one, deepest, corner two).
    Corners move `offset_px` inward and `along_offset_px` toward the
    middle of the side; the deepest point moves `offset_px` inward.
    """
    pts = as_points(side.points)
    corner_one, corner_two = clockwise_corners(side)

    outward = np.array(DIRECTION_VECTORS[side.direction], dtype=np.float64)
    inward = -outward

    baseline = corner_two - corner_one
    length = float(np.hypot(baseline[0], baseline[1]))
    along = baseline / length if length > 1e-9 else np.zeros(2)

    depths = point_line_distance(pts, corner_one, corner_two)
    deepest = pts[int(np.argmax(depths))]

    return [
        corner_one + inward * offset_px + along * along_offset_px,
        deepest + inward * offset_px,
        corner_two + inward * offset_px - along * along_offset_px,
    ]


def sample_color(
    image: np.ndarray,
    center: np.ndarray,
    settings: Settings,
) -> Optional[ColorSample]:
    """Dominant colour of the square patch centred on `center`; None off-image."""
    size = settings.sample_size_px
    half = settings.sample_half_size
    patch = crop_patch(image, (center[0] - half, center[1] - half), size)
    if patch is None or patch.shape[0] != size or patch.shape[1] != size:
        return None

    rgb = dominant_color(patch, max_iter=settings.kmeans_max_iter)
    if rgb is None:
        return None
    return ColorSample(
        location=(float(center[0]), float(center[1])),
        rgb=rgb,
        lab=rgb_to_lab(rgb),
    )


def sample_side(
    side: Side,
    image: Optional[np.ndarray],
    settings: Optional[Settings] = None,
) -> Side:
    """
    Shape-normalise and colour-sample one side. EDGE sides are returned
    unchanged. A side whose patches do not all fit inside the image keeps
    its normalised shape but gets no colour samples.
    """
    settings = settings or get_settings()
    if side.type == SideType.EDGE:
        return side

    normalized, span = normalize_side_points(side, settings.canonical_center)

    samples: tuple[ColorSample, ...] = ()
    if image is not None:
        collected = [
            sample_color(image, point, settings)
            for point in sampling_points(
                side, settings.sample_offset_px, settings.corner_along_offset_px
            )
        ]
        if all(s is not None for s in collected):
            samples = tuple(collected)

    return side.model_copy(update={
        "normalized_points": normalized,
        "span_length": span,
        "color_samples": samples,
    })


def sample_piece(piece: Piece, settings: Optional[Settings] = None) -> Piece:
    settings = settings or get_settings()
    if not piece.usable or not piece.is_classified:
        return piece

    image = ensure_bgr(piece.image) if piece.image is not None else None
    sides = [sample_side(s, image, settings) for s in piece.sides]

    skipped = [s.side_id for s in sides if not s.is_edge and not s.is_sampled]
    if skipped:
        log.debug("sides_without_color", piece_id=piece.piece_id, side_ids=skipped)

    return piece.model_copy(update={"sides": sides})


def sample_pieces(
    pieces: list[Piece],
    settings: Optional[Settings] = None,
) -> list[Piece]:
    """Run sample_piece over every piece and log how many sides are matchable."""
    settings = settings or get_settings()
    sampled = [sample_piece(p, settings) for p in pieces]

    matchable = sum(1 for p in sampled for s in p.sides if s.is_sampled)
    unsampled = sum(
        1 for p in sampled for s in p.sides if not s.is_edge and not s.is_sampled
    )
    log.info(
        "sampling_complete",
        pieces=len(sampled),
        matchable_sides=matchable,
        sides_without_color=unsampled,
    )
    return sampled

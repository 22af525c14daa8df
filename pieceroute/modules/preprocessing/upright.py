# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Upright Correction
Optional pre-pass that turns each piece so its square body is
axis-aligned before classification.

The contour is simplified with approxPolyDP (epsilon a small fraction
of the perimeter) so tabs and blanks collapse toward the body outline,
then the minimum-area rectangle of that outline gives the tilt. Image
and contour are rotated together; the canvas grows to fit and its new
border replicates edge pixels.
"""

from __future__ import annotations

import math
from typing import Optional

import cv2
import numpy as np

from pieceroute.config import Settings, get_settings
from pieceroute.models.piece import Piece
from pieceroute.utils.geometry_utils import as_points, contour_centroid
from pieceroute.utils.image_utils import rotate_image, transform_points
from pieceroute.utils.logger import get_logger

log = get_logger(__name__)


def upright_angle(contour, epsilon_fraction: float = 0.009) -> float:
    """
    Tilt of the piece body in degrees, folded into [-45, 45).
    Passing the result to cv2.getRotationMatrix2D levels the body.
    """
    pts = as_points(contour).astype(np.float32).reshape(-1, 1, 2)
    if len(pts) < 3:
        return 0.0
    epsilon = epsilon_fraction * cv2.arcLength(pts, True)
    outline = cv2.approxPolyDP(pts, epsilon, True)
    box = cv2.boxPoints(cv2.minAreaRect(outline))
    dx, dy = box[1] - box[0]
    theta = math.degrees(math.atan2(float(dy), float(dx)))
    return ((theta + 45.0) % 90.0) - 45.0


def upright_piece(piece: Piece, settings: Optional[Settings] = None) -> Piece:
    settings = settings or get_settings()
    angle = upright_angle(piece.contour, settings.upright_epsilon_fraction)
    if abs(angle) < 1e-6:
        return piece

    if piece.image is not None:
        image, matrix = rotate_image(piece.image, angle)
    else:
        image = None
        center = contour_centroid(piece.contour) or (0.0, 0.0)
        matrix = cv2.getRotationMatrix2D(center, angle, 1.0)

    contour = transform_points(piece.contour, matrix)
    log.debug("piece_uprighted", piece_id=piece.piece_id, angle=angle)
    return piece.model_copy(update={"image": image, "contour": contour})


def upright_pieces(pieces: list[Piece], settings: Optional[Settings] = None) -> list[Piece]:
    settings = settings or get_settings()
    return [upright_piece(p, settings) for p in pieces]

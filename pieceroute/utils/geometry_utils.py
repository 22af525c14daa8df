# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Geometry Utilities
Point-set helpers shared by the classifier, sampler, matcher and solver:
centroid, rotation, cardinal-direction arithmetic and extreme points.

Coordinate convention (image space): x grows east, y grows south.
A positive rotation is clockwise on screen, so +90° maps
NORTH → EAST → SOUTH → WEST → NORTH.
"""

from __future__ import annotations

import math
from typing import Optional

import cv2
import numpy as np

from pieceroute.models.piece import CardinalDirection


# ─── Cardinal directions ─────────────────────────────────────────────────────

DIRECTION_ORDER: list[CardinalDirection] = [
    CardinalDirection.NORTH,
    CardinalDirection.EAST,
    CardinalDirection.SOUTH,
    CardinalDirection.WEST,
]

ROTATION_VARIANTS: list[int] = [0, 90, 180, 270]

# Unit outward normal per direction, in image coordinates
DIRECTION_VECTORS: dict[CardinalDirection, tuple[int, int]] = {
    CardinalDirection.NORTH: (0, -1),
    CardinalDirection.EAST: (1, 0),
    CardinalDirection.SOUTH: (0, 1),
    CardinalDirection.WEST: (-1, 0),
}


def normalize_rotation(degrees: int) -> int:
    """Clamp a multiple of 90 into [0, 360). Raises ValueError otherwise."""
    if degrees % 90 != 0:
        raise ValueError(f"Rotation must be a multiple of 90 degrees, got {degrees}")
    return degrees % 360


def rotate_direction(direction: CardinalDirection, degrees: int) -> CardinalDirection:
    """Direction a side faces after the piece is rotated by `degrees`."""
    steps = normalize_rotation(degrees) // 90
    idx = DIRECTION_ORDER.index(direction)
    return DIRECTION_ORDER[(idx + steps) % 4]


def rotation_between(current: CardinalDirection, target: CardinalDirection) -> int:
    """Clockwise rotation (0/90/180/270) that turns `current` into `target`."""
    diff = DIRECTION_ORDER.index(target) - DIRECTION_ORDER.index(current)
    return (diff % 4) * 90


def opposite(direction: CardinalDirection) -> CardinalDirection:
    return rotate_direction(direction, 180)


def perpendicular(direction: CardinalDirection) -> tuple[CardinalDirection, CardinalDirection]:
    """The two directions adjacent to `direction` (clockwise first)."""
    return rotate_direction(direction, 90), rotate_direction(direction, 270)


# ─── Point sets ──────────────────────────────────────────────────────────────

def as_points(points) -> np.ndarray:
    """Coerce an OpenCV contour (N,1,2) or point list into an (N,2) float64 array."""
    arr = np.asarray(points, dtype=np.float64)
    if arr.size == 0:
        return arr.reshape(0, 2)
    return arr.reshape(-1, 2)


def contour_centroid(points) -> Optional[tuple[float, float]]:
    """
    Area centroid of a closed contour from image moments.
    Returns None when the contour is degenerate (fewer than 3 points
    or zero enclosed area).
    """
    pts = as_points(points)
    if len(pts) < 3:
        return None
    moments = cv2.moments(pts.astype(np.float32))
    if abs(moments["m00"]) < 1e-9:
        return None
    return moments["m10"] / moments["m00"], moments["m01"] / moments["m00"]


def mean_point(points) -> Optional[tuple[float, float]]:
    """Arithmetic centre of an open point arc. None if empty."""
    pts = as_points(points)
    if len(pts) == 0:
        return None
    c = pts.mean(axis=0)
    return float(c[0]), float(c[1])


def rotate_points(points, degrees: float, center: tuple[float, float]) -> np.ndarray:
    """
    Rotate points clockwise (image space) by `degrees` around `center`.
    Multiples of 90 use exact integer sin/cos so right-angle rotations
    round-trip without drift.
    """
    pts = as_points(points)
    if len(pts) == 0:
        return pts.copy()
    if float(degrees) % 90 == 0:
        steps = int(degrees // 90) % 4
        cos_a, sin_a = [(1, 0), (0, 1), (-1, 0), (0, -1)][steps]
    else:
        rad = math.radians(degrees)
        cos_a, sin_a = math.cos(rad), math.sin(rad)

    cx, cy = center
    dx = pts[:, 0] - cx
    dy = pts[:, 1] - cy
    # Clockwise on screen with y pointing down
    x = cx + dx * cos_a - dy * sin_a
    y = cy + dx * sin_a + dy * cos_a
    return np.stack([x, y], axis=1)


def rotate_points_to_direction(
    points,
    current: CardinalDirection,
    target: CardinalDirection,
    center: Optional[tuple[float, float]] = None,
) -> np.ndarray:
    """Rotate an arc so a side facing `current` faces `target` (around its own centre by default)."""
    pts = as_points(points)
    if center is None:
        center = mean_point(pts) or (0.0, 0.0)
    return rotate_points(pts, rotation_between(current, target), center)


def translate_to(points, target: tuple[float, float]) -> np.ndarray:
    """Translate an arc so its arithmetic centre lands on `target`."""
    pts = as_points(points)
    centre = mean_point(pts)
    if centre is None:
        return pts.copy()
    return pts + np.array([target[0] - centre[0], target[1] - centre[1]])


def extreme_points(points) -> tuple[int, float, float]:
    """
    Axis of maximum spread and the extremes across it.

    Returns:
        (axis, high, low)
        axis 0 = horizontal arc (spread mostly in x) → high/low are y values
        axis 1 = vertical arc   (spread mostly in y) → high/low are x values
    """
    pts = as_points(points)
    x_span = float(np.ptp(pts[:, 0])) if len(pts) else 0.0
    y_span = float(np.ptp(pts[:, 1])) if len(pts) else 0.0
    if x_span > y_span:
        return 0, float(pts[:, 1].max()), float(pts[:, 1].min())
    if len(pts) == 0:
        return 1, 0.0, 0.0
    return 1, float(pts[:, 0].max()), float(pts[:, 0].min())


def point_line_distance(points, a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Perpendicular distance of each point to the infinite line a→b."""
    pts = as_points(points)
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    ab = b - a
    length = float(np.hypot(ab[0], ab[1]))
    if length < 1e-9:
        return np.hypot(pts[:, 0] - a[0], pts[:, 1] - a[1])
    cross = ab[0] * (pts[:, 1] - a[1]) - ab[1] * (pts[:, 0] - a[0])
    return np.abs(cross) / length


# ─── Grid Coordinate Helpers ─────────────────────────────────────────────────

def is_corner_pos(row: int, col: int, grid_rows: int, grid_cols: int) -> bool:
    return (row in (0, grid_rows - 1)) and (col in (0, grid_cols - 1))


def is_border_pos(row: int, col: int, grid_rows: int, grid_cols: int) -> bool:
    return row in (0, grid_rows - 1) or col in (0, grid_cols - 1)


def expected_edge_sides(
    row: int, col: int, grid_rows: int, grid_cols: int
) -> int:
    """
    Number of EDGE sides a piece at (row, col) should have.
    corner → 2, border → 1, interior → 0.
    """
    if is_corner_pos(row, col, grid_rows, grid_cols):
        return 2
    if is_border_pos(row, col, grid_rows, grid_cols):
        return 1
    return 0


def border_cell_count(grid_rows: int, grid_cols: int) -> int:
    """Cells on the perimeter of a rows × cols grid (both ≥ 2)."""
    return 2 * grid_rows + 2 * grid_cols - 4

# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Corner Detector
Locates the four body corners of a piece from its boundary contour.

Algorithm:
  1. Express every contour point in polar form around the centroid.
  2. A point is a peak candidate when its radius is the maximum of a
     circular sliding window of `peak_window` contour points.
  3. Candidates closer than `min_peak_separation_deg` in polar angle
     compete: the sharper one (larger median −r'' over the points within
     `sharpness_radius_px`) survives.
  4. One corner per diagonal quadrant: the surviving peak whose
     subtended angle |atan2(|dy|, |dx|)| is nearest to 45°.

Tab tips are radius peaks too, but they sit near 0/90/180/270° and so
lose the quadrant selection to the real corners.
"""

from __future__ import annotations

import numpy as np

from pieceroute.utils.geometry_utils import as_points


def to_polar(
    points: np.ndarray,
    centroid: tuple[float, float],
) -> tuple[np.ndarray, np.ndarray]:
    """
    Polar coordinates of each point around `centroid`.

    Returns:
        (angles_deg in [0, 360), radii). Angles grow clockwise on screen
        because image y points down.
    """
    pts = as_points(points)
    dx = pts[:, 0] - centroid[0]
    dy = pts[:, 1] - centroid[1]
    angles = np.degrees(np.arctan2(dy, dx)) % 360.0
    radii = np.hypot(dx, dy)
    return angles, radii


def _angular_gap(a: float, b: float) -> float:
    diff = abs(a - b) % 360.0
    return min(diff, 360.0 - diff)


def radius_sharpness(radii: np.ndarray) -> np.ndarray:
    """Per-point sharpness: negated circular second difference of the radius."""
    r = np.asarray(radii, dtype=np.float64)
    return -(np.roll(r, 1) - 2.0 * r + np.roll(r, -1))


def find_peaks(
    points: np.ndarray,
    centroid: tuple[float, float],
    peak_window: int = 20,
    min_separation_deg: float = 30.0,
    sharpness_radius_px: float = 10.0,
) -> list[int]:
    """
    Indexes of radius peaks after angular non-maximum suppression.

    Returns:
        Contour indexes of surviving peaks, ascending.
    """
    pts = as_points(points)
    n = len(pts)
    if n < 3:
        return []

    angles, radii = to_polar(pts, centroid)

    window = max(1, min(peak_window, n - 1))
    half = max(1, window // 2)
    padded = np.concatenate([radii[-half:], radii, radii[:half]])
    windows = np.lib.stride_tricks.sliding_window_view(padded, 2 * half + 1)
    candidates = np.flatnonzero(radii >= windows.max(axis=1))
    if len(candidates) == 0:
        return []

    point_sharpness = radius_sharpness(radii)

    def peak_sharpness(idx: int) -> float:
        near = np.hypot(pts[:, 0] - pts[idx, 0], pts[:, 1] - pts[idx, 1])
        return float(np.median(point_sharpness[near <= sharpness_radius_px]))

    # Sharpest first; radius then index break ties deterministically
    ranked = sorted(
        candidates.tolist(),
        key=lambda i: (-peak_sharpness(i), -radii[i], i),
    )

    kept: list[int] = []
    for idx in ranked:
        if all(
            _angular_gap(angles[idx], angles[k]) >= min_separation_deg
            for k in kept
        ):
            kept.append(idx)

    return sorted(kept)


def select_corners(
    points: np.ndarray,
    centroid: tuple[float, float],
    peak_indexes: list[int],
) -> list[int]:
    """
    Pick at most one peak per diagonal quadrant, the one nearest to a
    45° diagonal. Fewer than four results means the piece has no
    confident corner set.

    Returns:
        Selected contour indexes, ascending (contour order).
    """
    pts = as_points(points)
    best: dict[tuple[bool, bool], tuple[float, float, int]] = {}

    for idx in peak_indexes:
        dx = pts[idx, 0] - centroid[0]
        dy = pts[idx, 1] - centroid[1]
        quadrant = (dx >= 0, dy >= 0)
        off_diagonal = abs(float(np.degrees(np.arctan2(abs(dy), abs(dx)))) - 45.0)
        key = (off_diagonal, -float(np.hypot(dx, dy)), idx)
        if quadrant not in best or key < best[quadrant]:
            best[quadrant] = key

    return sorted(entry[2] for entry in best.values())

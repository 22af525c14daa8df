# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Color Model
RGB → CIE L*a*b* conversion, CIE76 ΔE distance and dominant-colour
estimation used by the side sampler and side matcher.

Lab values follow OpenCV's float convention (D65 white point):
  L ∈ [0, 100], a, b ≈ [-127, 127]
ΔE76 is the Euclidean distance in that space; ~2.3 is a just-noticeable
difference, identical colours give exactly 0.
"""

from __future__ import annotations

from typing import Optional

import cv2
import numpy as np


def rgb_to_lab(rgb: tuple[float, float, float]) -> tuple[float, float, float]:
    """Convert one 0–255 RGB triple to L*a*b*."""
    pixel = np.array([[rgb]], dtype=np.float32) / 255.0
    lab = cv2.cvtColor(pixel, cv2.COLOR_RGB2Lab)[0, 0]
    return float(lab[0]), float(lab[1]), float(lab[2])


def bgr_to_lab(bgr: tuple[float, float, float]) -> tuple[float, float, float]:
    return rgb_to_lab((bgr[2], bgr[1], bgr[0]))


def delta_e76(
    lab_a: tuple[float, float, float],
    lab_b: tuple[float, float, float],
) -> float:
    """CIE76 colour difference between two L*a*b* values."""
    return float(np.linalg.norm(np.asarray(lab_a, dtype=np.float64) - np.asarray(lab_b, dtype=np.float64)))


def dominant_color(
    patch: np.ndarray,
    max_iter: int = 100,
) -> Optional[tuple[float, float, float]]:
    """
    Estimate the dominant colour of a BGR patch with k-means (k=1).

    With a single cluster the centre is the mean colour in RGB space,
    but going through cv2.kmeans keeps the estimator swappable for k>1
    when textured pieces need it.

    Returns:
        (r, g, b) in 0–255, or None for an empty patch.
    """
    if patch is None or patch.size == 0:
        return None

    pixels = patch.reshape(-1, patch.shape[-1] if patch.ndim == 3 else 1)
    if pixels.shape[1] == 1:
        pixels = np.repeat(pixels, 3, axis=1)
    pixels = pixels[:, :3].astype(np.float32) / 255.0

    criteria = (cv2.TERM_CRITERIA_MAX_ITER, max_iter, 1.0)
    _, labels, centers = cv2.kmeans(
        pixels, 1, None, criteria, 1, cv2.KMEANS_PP_CENTERS
    )
    label = int(labels[0, 0])
    b, g, r = (np.clip(centers[label], 0.0, 1.0) * 255.0).tolist()
    return float(r), float(g), float(b)

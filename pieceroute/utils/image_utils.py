# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Image Utilities
Patch cropping and rotation helpers for piece crops.
All internal processing uses BGR numpy arrays (OpenCV convention).
"""

from __future__ import annotations

from typing import Optional

import cv2
import numpy as np


def ensure_bgr(img: np.ndarray) -> np.ndarray:
    """Return a 3-channel BGR view of a gray, BGR or BGRA image."""
    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
    if img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2BGR)
    return img


def crop_patch(
    img: np.ndarray,
    top_left: tuple[float, float],
    size: int,
) -> Optional[np.ndarray]:
    """
    Crop a size × size patch whose top-left corner is `top_left` (x, y).
    The patch is clipped to the image; None if nothing of it is inside.
    """
    if img is None:
        return None
    h, w = img.shape[:2]
    x0 = int(round(top_left[0]))
    y0 = int(round(top_left[1]))
    x1, y1 = x0 + size, y0 + size

    x0, y0 = max(0, x0), max(0, y0)
    x1, y1 = min(w, x1), min(h, y1)
    if x1 <= x0 or y1 <= y0:
        return None
    return img[y0:y1, x0:x1]


def rotate_image(
    img: np.ndarray,
    angle_deg: float,
    center: Optional[tuple[float, float]] = None,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Rotate image by angle_deg (counter-clockwise on screen, OpenCV sign)
    around `center` (image centre by default). Expands the canvas to fit
    and replicates the border so no artificial colour enters samples.

    Returns:
        (rotated_image, affine_matrix). The 2×3 matrix maps original
        pixel coordinates into the rotated canvas.
    """
    h, w = img.shape[:2]
    cx, cy = center if center is not None else (w / 2.0, h / 2.0)
    M = cv2.getRotationMatrix2D((cx, cy), angle_deg, 1.0)

    cos_a = abs(M[0, 0])
    sin_a = abs(M[0, 1])
    new_w = int(np.ceil(h * sin_a + w * cos_a))
    new_h = int(np.ceil(h * cos_a + w * sin_a))

    M[0, 2] += (new_w / 2.0) - cx
    M[1, 2] += (new_h / 2.0) - cy

    rotated = cv2.warpAffine(
        img, M, (new_w, new_h),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_REPLICATE,
    )
    return rotated, M


def transform_points(points: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Apply a 2×3 affine matrix to an (N, 2) point array."""
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    return pts @ matrix[:, :2].T + matrix[:, 2]

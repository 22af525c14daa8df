# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Synthetic Puzzle Generator
Cuts a smooth colour-gradient picture into a rows × cols jigsaw for
calibration runs and tests.

Every interior cut carries one knob whose size, position and bump
direction are drawn at random; the two pieces sharing the cut get the
same curve, so one sees a TAB where the other sees a BLANK. Border cuts
are straight. Each piece is cropped with a margin, masked against a
green backdrop and turned by a random multiple of 90°.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

import cv2
import numpy as np

from pieceroute.models.piece import Piece

BACKDROP_BGR = (0, 255, 0)

# cv2.rotate codes for 90 / 180 / 270 degrees clockwise
_ROTATE_CODES = {
    90: cv2.ROTATE_90_CLOCKWISE,
    180: cv2.ROTATE_180,
    270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}


@dataclass
class SyntheticPuzzle:
    rows: int
    cols: int
    pieces: list[Piece]
    # solution[r][c] = piece_id that belongs at (r, c)
    solution: list[list[int]]
    # Clockwise rotation applied to each piece after cutting
    rotations: dict[int, int] = field(default_factory=dict)
    picture: Optional[np.ndarray] = None

    def position_of(self, piece_id: int) -> tuple[int, int]:
        for r, row in enumerate(self.solution):
            for c, pid in enumerate(row):
                if pid == piece_id:
                    return r, c
        raise KeyError(piece_id)


def gradient_picture(height: int, width: int) -> np.ndarray:
    """BGR picture whose colour changes steadily in both directions."""
    yy, xx = np.mgrid[0:height, 0:width].astype(np.float32)
    b = 255.0 * xx / max(width - 1, 1)
    g = 255.0 * yy / max(height - 1, 1)
    r = 127.5 + 127.5 * np.sin(2.0 * np.pi * (xx + 2.0 * yy) / (1.5 * (width + height)))
    return np.clip(np.dstack([b, g, r]), 0, 255).astype(np.uint8)


def _cut_curve(
    start: np.ndarray,
    end: np.ndarray,
    normal: np.ndarray,
    bump: int,
    radius: float,
    offset: float,
) -> np.ndarray:
    """
    Points from start to end along one cut. bump ±1 adds a round knob
    along ±normal: a circle of `radius` whose centre sits 0.6·radius off
    the cut line, so the knob reaches 1.6·radius deep.
    """
    if bump == 0:
        return np.array([start, end], dtype=np.float64)

    along = (end - start) / np.linalg.norm(end - start)
    centre = start + along * (np.linalg.norm(end - start) / 2.0 + offset)
    centre = centre + normal * bump * 0.6 * radius

    # Circle meets the cut line where sin(alpha) = -0.6
    entry = math.pi + math.asin(0.6)
    leave = -math.asin(0.6)
    points = [start]
    for alpha in np.linspace(entry, leave, 72):
        points.append(
            centre
            + along * radius * math.cos(alpha)
            + normal * bump * radius * math.sin(alpha)
        )
    points.append(end)
    return np.array(points, dtype=np.float64)


def generate_puzzle(
    rows: int = 3,
    cols: int = 3,
    piece_px: int = 120,
    seed: int = 0,
    rotate: bool = True,
    picture: Optional[np.ndarray] = None,
) -> SyntheticPuzzle:
    """
    Build a synthetic jigsaw.

    Args:
        rows, cols: Grid size (both ≥ 2)
        piece_px:   Side length of a piece body in pixels
        seed:       RNG seed; same seed, same puzzle
        rotate:     Turn each piece by a random multiple of 90°
        picture:    Optional BGR picture (rows·piece_px × cols·piece_px);
                    a gradient is generated when omitted
    """
    if rows < 2 or cols < 2:
        raise ValueError("A puzzle needs at least 2 rows and 2 columns")

    rng = np.random.default_rng(seed)
    height, width = rows * piece_px, cols * piece_px
    if picture is None:
        picture = gradient_picture(height, width)

    margin = int(round(piece_px * 0.4))
    padded = cv2.copyMakeBorder(
        picture, margin, margin, margin, margin, cv2.BORDER_REPLICATE
    )

    def knob() -> tuple[int, float, float]:
        return (
            int(rng.choice([-1, 1])),
            float(rng.uniform(0.13, 0.16) * piece_px),
            float(rng.uniform(-0.05, 0.05) * piece_px),
        )

    # Horizontal cut (i, j): y = i·s, x from j·s to (j+1)·s, normal +y
    h_cuts: dict[tuple[int, int], np.ndarray] = {}
    for i in range(rows + 1):
        for j in range(cols):
            bump, radius, offset = knob() if 0 < i < rows else (0, 0.0, 0.0)
            h_cuts[(i, j)] = _cut_curve(
                np.array([j * piece_px, i * piece_px], dtype=np.float64),
                np.array([(j + 1) * piece_px, i * piece_px], dtype=np.float64),
                np.array([0.0, 1.0]),
                bump, radius, offset,
            )

    # Vertical cut (i, j): x = j·s, y from i·s to (i+1)·s, normal +x
    v_cuts: dict[tuple[int, int], np.ndarray] = {}
    for i in range(rows):
        for j in range(cols + 1):
            bump, radius, offset = knob() if 0 < j < cols else (0, 0.0, 0.0)
            v_cuts[(i, j)] = _cut_curve(
                np.array([j * piece_px, i * piece_px], dtype=np.float64),
                np.array([j * piece_px, (i + 1) * piece_px], dtype=np.float64),
                np.array([1.0, 0.0]),
                bump, radius, offset,
            )

    ids = rng.permutation(rows * cols)
    window = piece_px + 2 * margin
    pieces: list[Piece] = []
    solution = [[0] * cols for _ in range(rows)]
    rotations: dict[int, int] = {}

    for r in range(rows):
        for c in range(cols):
            piece_id = int(ids[r * cols + c])
            solution[r][c] = piece_id

            # Clockwise outline: top W→E, right N→S, bottom E→W, left S→N
            outline = np.concatenate([
                h_cuts[(r, c)],
                v_cuts[(r, c + 1)],
                h_cuts[(r + 1, c)][::-1],
                v_cuts[(r, c)][::-1],
            ])
            origin = np.array([c * piece_px - margin, r * piece_px - margin])
            local = np.round(outline - origin).astype(np.int32)

            mask = np.zeros((window, window), dtype=np.uint8)
            cv2.fillPoly(mask, [local.reshape(-1, 1, 2)], 255)

            y0, x0 = r * piece_px, c * piece_px
            crop = padded[y0:y0 + window, x0:x0 + window].copy()

            rotation = int(rng.choice([0, 90, 180, 270])) if rotate else 0
            if rotation:
                mask = cv2.rotate(mask, _ROTATE_CODES[rotation])
                crop = cv2.rotate(crop, _ROTATE_CODES[rotation])

            crop[mask == 0] = BACKDROP_BGR
            contours, _ = cv2.findContours(mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_NONE)
            contour = max(contours, key=cv2.contourArea)

            rotations[piece_id] = rotation
            pieces.append(Piece(piece_id=piece_id, contour=contour, image=crop))

    pieces.sort(key=lambda p: p.piece_id)
    return SyntheticPuzzle(
        rows=rows,
        cols=cols,
        pieces=pieces,
        solution=solution,
        rotations=rotations,
        picture=picture,
    )

# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Layout Result Model
The solved arrangement returned to the caller.
"""

from __future__ import annotations

import math
from typing import Optional

from pydantic import BaseModel, Field


class LayoutResult(BaseModel):
    """
    Final grid of piece ids.

    grid[r][c] is the piece_id placed at row r, column c (None = empty).
    rotations[r][c] is the clockwise rotation (degrees) applied to that
    piece's base orientation. Lower score = more confident; math.inf
    means no complete border layout was found.
    """
    rows: int = 0
    cols: int = 0
    grid: list[list[Optional[int]]] = Field(default_factory=list)
    rotations: list[list[Optional[int]]] = Field(default_factory=list)
    score: float = math.inf

    border_piece_ids: list[int] = Field(
        default_factory=list, description="Border route order, clockwise from top-left"
    )
    unfilled_cells: list[tuple[int, int]] = Field(default_factory=list)
    unusable_piece_ids: list[int] = Field(default_factory=list)

    @property
    def solved(self) -> bool:
        return math.isfinite(self.score) and self.rows > 0

    @property
    def placed_count(self) -> int:
        return sum(1 for row in self.grid for pid in row if pid is not None)

    def position_of(self, piece_id: int) -> Optional[tuple[int, int]]:
        for r, row in enumerate(self.grid):
            for c, pid in enumerate(row):
                if pid == piece_id:
                    return r, c
        return None

    @classmethod
    def failed(cls, unusable_piece_ids: Optional[list[int]] = None) -> LayoutResult:
        return cls(score=math.inf, unusable_piece_ids=unusable_piece_ids or [])


def format_layout(layout: LayoutResult, empty: str = ".") -> str:
    """
    Render the grid of piece ids as aligned text, one row per line.

        0  4  5  1
        7  9  8  6
        3 11 10  2
    """
    if not layout.grid:
        return "(no layout)"
    width = max(
        (len(str(pid)) for row in layout.grid for pid in row if pid is not None),
        default=1,
    )
    width = max(width, len(empty))
    lines = []
    for row in layout.grid:
        cells = [
            (str(pid) if pid is not None else empty).rjust(width)
            for pid in row
        ]
        lines.append(" ".join(cells))
    return "\n".join(lines)

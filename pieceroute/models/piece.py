# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Piece Data Models
Pydantic models representing a puzzle piece through each stage
of the solver: raw contour → classified sides → sampled colours → matches.

Piece and Side reference each other by id only: a Side carries the
piece_id of its owner and a stable side_id (piece_id * 4 + index), so
oriented copies of a piece keep pointing at the same match records.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field


class CardinalDirection(str, Enum):
    NORTH = "north"
    EAST = "east"
    SOUTH = "south"
    WEST = "west"


class SideType(str, Enum):
    EDGE = "edge"
    TAB = "tab"
    BLANK = "blank"


class PieceType(str, Enum):
    CORNER = "corner"
    BORDER = "border"
    INTERIOR = "interior"
    UNKNOWN = "unknown"


def make_side_id(piece_id: int, index: int) -> int:
    return piece_id * 4 + index


class ColorSample(BaseModel):
    """Dominant colour of one sampling patch along a side."""
    # Centre of the sampling patch in the piece image's pixel space
    location: tuple[float, float]
    rgb: tuple[float, float, float]
    lab: tuple[float, float, float]


class SideMatch(BaseModel):
    """One ranked entry in a side's match list. Lower score = better fit."""
    model_config = ConfigDict(frozen=True)

    target_side_id: int
    target_piece_id: int
    score: float


class Side(BaseModel):
    """
    One of the four sides of a classified piece.
    `points` run corner to corner along the boundary (N×2 float array).
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    side_id: int
    piece_id: int
    index: int = Field(..., ge=0, le=3, description="Position in the base orientation")
    type: SideType
    direction: CardinalDirection
    points: Any = Field(..., description="np.ndarray (N, 2) float64")

    # ── Populated by the side sampler ──
    normalized_points: Any = Field(
        None, description="np.ndarray (N, 2), TAB→NORTH / BLANK→SOUTH, centred"
    )
    span_length: float = 0.0
    color_samples: tuple[ColorSample, ...] = Field(
        default_factory=tuple,
        description="(corner one, deepest point, corner two) in clockwise order",
    )

    # ── Populated by the side matcher (ascending score, unique targets) ──
    matches: tuple[SideMatch, ...] = Field(default_factory=tuple)

    @property
    def is_edge(self) -> bool:
        return self.type == SideType.EDGE

    @property
    def is_sampled(self) -> bool:
        return self.normalized_points is not None and len(self.color_samples) == 3

    def match_score(self, target_side_id: int) -> Optional[float]:
        """Recorded score against another side, or None if never matched."""
        for match in self.matches:
            if match.target_side_id == target_side_id:
                return match.score
        return None


class Piece(BaseModel):
    """
    A single puzzle piece as supplied by the vision front-end
    (contour + cropped colour image). The classification, sampling and
    matching passes each return enriched copies.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    piece_id: int = Field(..., description="Unique integer ID")
    # OpenCV contour, (N, 1, 2) or (N, 2), in the image's pixel space
    contour: Any = Field(..., description="np.ndarray closed boundary contour")
    # BGR numpy array (H×W×3); shared, never copied, by oriented copies
    image: Any = Field(None, description="np.ndarray BGR crop of the piece")

    centroid: Optional[tuple[float, float]] = None
    rotation_deg: int = Field(0, description="Cumulative rotation of this oriented copy")
    sides: list[Side] = Field(default_factory=list)
    usable: bool = Field(True, description="False when classification failed")

    @property
    def is_classified(self) -> bool:
        return len(self.sides) == 4

    @property
    def edge_count(self) -> int:
        return sum(1 for s in self.sides if s.is_edge)

    @property
    def has_opposite_edges(self) -> bool:
        """True when two EDGE sides face away from each other (N/S or E/W)."""
        from pieceroute.utils.geometry_utils import opposite

        edges = {s.direction for s in self.sides if s.is_edge}
        return any(opposite(d) in edges for d in edges)

    @property
    def piece_type(self) -> PieceType:
        if not self.usable or not self.is_classified or self.has_opposite_edges:
            return PieceType.UNKNOWN
        return {
            2: PieceType.CORNER,
            1: PieceType.BORDER,
            0: PieceType.INTERIOR,
        }.get(self.edge_count, PieceType.UNKNOWN)

    def side(self, direction: CardinalDirection) -> Optional[Side]:
        for s in self.sides:
            if s.direction == direction:
                return s
        return None

    def side_by_id(self, side_id: int) -> Optional[Side]:
        for s in self.sides:
            if s.side_id == side_id:
                return s
        return None

    def side_facing(self, direction: CardinalDirection, degrees: int = 0) -> Optional[Side]:
        """Side that would face `direction` once this piece is rotated by `degrees`."""
        from pieceroute.utils.geometry_utils import rotate_direction

        return self.side(rotate_direction(direction, -degrees))

    def rotated(self, degrees: int) -> Piece:
        """
        Return a new Piece rotated clockwise by a multiple of 90 degrees
        around its centroid. Contour and side points are rotated and side
        directions remapped; the image and colour samples stay in the
        shared image's pixel space. Match records are carried over.
        """
        from pieceroute.utils.geometry_utils import (
            normalize_rotation,
            rotate_direction,
            rotate_points,
        )

        degrees = normalize_rotation(degrees)
        if degrees == 0:
            return self.model_copy(update={"sides": list(self.sides)})

        center = self.centroid or (0.0, 0.0)
        new_sides = [
            s.model_copy(update={
                "direction": rotate_direction(s.direction, degrees),
                "points": rotate_points(s.points, degrees, center),
            })
            for s in self.sides
        ]
        contour = np.asarray(self.contour)
        rotated_contour = rotate_points(contour, degrees, center).reshape(contour.shape)
        return self.model_copy(update={
            "contour": rotated_contour,
            "sides": new_sides,
            "rotation_deg": (self.rotation_deg + degrees) % 360,
        })

    def oriented(self, side_id: int, target: CardinalDirection) -> Piece:
        """Copy of this piece rotated so that side `side_id` faces `target`."""
        from pieceroute.utils.geometry_utils import rotation_between

        side = self.side_by_id(side_id)
        if side is None:
            raise KeyError(f"Piece {self.piece_id} has no side {side_id}")
        return self.rotated(rotation_between(side.direction, target))


class PieceArena:
    """
    Flat store of classified pieces for one solve.
    Pieces are looked up by piece_id and sides by side_id; nothing holds
    a direct object reference to another piece.
    """

    def __init__(self, pieces: list[Piece]):
        self._pieces: dict[int, Piece] = {}
        for piece in pieces:
            if piece.piece_id in self._pieces:
                raise ValueError(f"Duplicate piece_id {piece.piece_id}")
            self._pieces[piece.piece_id] = piece

    def __len__(self) -> int:
        return len(self._pieces)

    def __iter__(self):
        return iter(self._pieces.values())

    def __contains__(self, piece_id: int) -> bool:
        return piece_id in self._pieces

    def piece(self, piece_id: int) -> Piece:
        return self._pieces[piece_id]

    def side(self, side_id: int) -> Side:
        side = self._pieces[side_id // 4].side_by_id(side_id)
        if side is None:
            raise KeyError(f"Unknown side_id {side_id}")
        return side

    def of_type(self, piece_type: PieceType) -> list[Piece]:
        return [p for p in self._pieces.values() if p.piece_type == piece_type]

    @property
    def corners(self) -> list[Piece]:
        return self.of_type(PieceType.CORNER)

    @property
    def interiors(self) -> list[Piece]:
        return self.of_type(PieceType.INTERIOR)

    @property
    def border_ids(self) -> frozenset[int]:
        """Ids of every corner and border piece."""
        return frozenset(
            p.piece_id for p in self._pieces.values()
            if p.piece_type in (PieceType.CORNER, PieceType.BORDER)
        )

    @property
    def unusable_ids(self) -> list[int]:
        return sorted(p.piece_id for p in self._pieces.values() if not p.usable)

# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Route
A partial border layout: the chain of placed pieces walked clockwise
from the start corner, plus the search state needed to extend it.

Routes are immutable and share structure. Extending a route allocates
one link node; the placement chain of the parent is never copied, and
the remaining-piece set is a frozenset.

Frames: while walking a side, the current outward side is always EAST.
Every corner turns the frame 90° counter-clockwise, so a placement made
with rotation r after k turns sits at (r + 90·k) % 360 in the start
corner's frame.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Iterator, Optional


@dataclass(frozen=True)
class Placement:
    piece_id: int
    # Clockwise rotation of the base piece, in the frame active when placed
    rotation: int
    # Corners turned before this piece was placed
    turn: int
    corner: bool = False

    def frame_rotation(self, turns: int) -> int:
        """Rotation of this piece in the frame after `turns` corners."""
        return (self.rotation + 270 * (turns - self.turn)) % 360

    @property
    def start_frame_rotation(self) -> int:
        return self.frame_rotation(0)


@dataclass(frozen=True)
class _Link:
    placement: Placement
    prev: Optional[_Link]


@dataclass(frozen=True)
class Route:
    tail: Optional[_Link]
    length: int
    remaining: frozenset[int]
    score: float
    # Which entry of the frontier's outward match list to try next
    match_index: int = 0
    width: Optional[int] = None
    height: Optional[int] = None
    closing_width: Optional[int] = None
    turns: int = 0

    @classmethod
    def start(cls, placement: Placement, remaining: frozenset[int]) -> Route:
        return cls(
            tail=_Link(placement, None),
            length=1,
            remaining=frozenset(remaining) - {placement.piece_id},
            score=0.0,
        )

    @classmethod
    def sentinel(cls) -> Route:
        """The 'no complete layout' result: empty chain, infinite score."""
        return cls(tail=None, length=0, remaining=frozenset(), score=math.inf)

    @property
    def is_sentinel(self) -> bool:
        return math.isinf(self.score)

    @property
    def frontier(self) -> Optional[Placement]:
        return self.tail.placement if self.tail is not None else None

    @property
    def is_complete(self) -> bool:
        return not self.remaining and self.turns == 3 and self.tail is not None

    def extend(self, placement: Placement, join_score: float) -> Route:
        return replace(
            self,
            tail=_Link(placement, self.tail),
            length=self.length + 1,
            remaining=self.remaining - {placement.piece_id},
            score=self.score + join_score,
            match_index=0,
        )

    def with_match_index(self, index: int) -> Route:
        return replace(self, match_index=index)

    def with_score(self, score: float) -> Route:
        return replace(self, score=score)

    def _walk_back(self) -> Iterator[Placement]:
        link = self.tail
        while link is not None:
            yield link.placement
            link = link.prev

    def placements(self) -> list[Placement]:
        """Placements in walking order, start corner first."""
        chain = list(self._walk_back())
        chain.reverse()
        return chain

    def piece_ids(self) -> list[int]:
        return [p.piece_id for p in self.placements()]

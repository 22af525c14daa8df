# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Phase 3 tests: shape normalisation and colour sampling of sides.
"""

import numpy as np
import pytest


# ─── Helpers ─────────────────────────────────────────────────────────────────

def _side(direction, side_type, points, piece_id=0, index=0):
    from pieceroute.models.piece import Side, make_side_id

    return Side(
        side_id=make_side_id(piece_id, index),
        piece_id=piece_id,
        index=index,
        type=side_type,
        direction=direction,
        points=np.asarray(points, dtype=np.float64),
    )


def _bumped(start, end, bump, n=41):
    """Arc from start to end whose middle point is pushed `bump` px along +x or +y."""
    start = np.asarray(start, dtype=np.float64)
    end = np.asarray(end, dtype=np.float64)
    t = np.linspace(0.0, 1.0, n)
    pts = start + np.outer(t, end - start)
    horizontal = abs(end[0] - start[0]) > abs(end[1] - start[1])
    normal = np.array([0.0, 1.0]) if horizontal else np.array([1.0, 0.0])
    return pts + np.outer(bump * (1.0 - np.abs(2.0 * t - 1.0)), normal)


def _settings(**overrides):
    from pieceroute.config import Settings

    return Settings(_env_file=None, **overrides)


# ─── Shape normalisation ─────────────────────────────────────────────────────

def test_normalize_east_tab_faces_north():
    from pieceroute.models.piece import CardinalDirection, SideType
    from pieceroute.modules.sampling import normalize_side_points

    side = _side(
        CardinalDirection.EAST, SideType.TAB, _bumped((100, 0), (100, 100), 30)
    )
    normalized, span = normalize_side_points(side, (150.0, 150.0))

    assert np.allclose(normalized.mean(axis=0), [150.0, 150.0])
    assert span == pytest.approx(100.0)
    # The knob tip is the northmost point
    assert int(np.argmin(normalized[:, 1])) == 20


def test_normalize_blank_faces_south():
    from pieceroute.models.piece import CardinalDirection, SideType
    from pieceroute.modules.sampling import normalize_side_points

    # WEST blank: the notch points east, into the piece
    side = _side(
        CardinalDirection.WEST, SideType.BLANK, _bumped((0, 100), (0, 0), 30)
    )
    normalized, span = normalize_side_points(side, (150.0, 150.0))

    assert span == pytest.approx(100.0)
    # The notch points north, into the body above a south side
    assert int(np.argmin(normalized[:, 1])) == 20


def test_normalized_tab_and_blank_overlay():
    """A tab and the blank cut from the same curve normalise to the same outline."""
    from pieceroute.models.piece import CardinalDirection, SideType
    from pieceroute.modules.sampling import normalize_side_points

    cut = _bumped((100, 0), (100, 100), 30)
    tab = _side(CardinalDirection.EAST, SideType.TAB, cut)
    blank = _side(CardinalDirection.WEST, SideType.BLANK, cut[::-1].copy())

    tab_pts, _ = normalize_side_points(tab, (150.0, 150.0))
    blank_pts, _ = normalize_side_points(blank, (150.0, 150.0))
    assert np.allclose(np.sort(tab_pts[:, 1]), np.sort(blank_pts[:, 1]))


# ─── Sampling points ─────────────────────────────────────────────────────────

@pytest.mark.parametrize("direction,points,first", [
    ("north", [(100, 0), (0, 0)], (0, 0)),
    ("east", [(100, 100), (100, 0)], (100, 0)),
    ("south", [(0, 100), (100, 100)], (100, 100)),
    ("west", [(0, 0), (0, 100)], (0, 100)),
])
def test_clockwise_corners(direction, points, first):
    from pieceroute.models.piece import CardinalDirection, SideType
    from pieceroute.modules.sampling import clockwise_corners

    side = _side(CardinalDirection(direction), SideType.TAB, points)
    one, _ = clockwise_corners(side)
    assert tuple(one) == first


def test_sampling_points_north_tab():
    from pieceroute.models.piece import CardinalDirection, SideType
    from pieceroute.modules.sampling import sampling_points

    side = _side(CardinalDirection.NORTH, SideType.TAB, _bumped((0, 0), (100, 0), -30))
    corner_one, deepest, corner_two = sampling_points(side, 10.0, 20.0)

    assert np.allclose(corner_one, [20.0, 10.0])
    assert np.allclose(deepest, [50.0, -20.0])
    assert np.allclose(corner_two, [80.0, 10.0])


# ─── Colour sampling ─────────────────────────────────────────────────────────

def test_sample_side_uniform_image():
    from pieceroute.models.piece import CardinalDirection, SideType
    from pieceroute.modules.matching import color_distance
    from pieceroute.modules.sampling import sample_side
    from pieceroute.utils.color_utils import delta_e76

    image = np.full((200, 200, 3), (40, 120, 200), dtype=np.uint8)
    side = _side(CardinalDirection.EAST, SideType.TAB, _bumped((100, 20), (100, 120), 30))
    sampled = sample_side(side, image, _settings())

    assert sampled.is_sampled
    assert len(sampled.color_samples) == 3
    assert sampled.color_samples[0].rgb == pytest.approx((200.0, 120.0, 40.0), abs=0.5)
    assert color_distance(sampled, sampled) == pytest.approx(0.0, abs=1e-9)
    for sample in sampled.color_samples:
        assert delta_e76(sample.lab, sample.lab) == 0.0

    # Corner one of an EAST side is its north end; samples sit inside the piece
    assert sampled.color_samples[0].location[1] < sampled.color_samples[2].location[1]
    assert all(s.location[0] < 130.0 for s in sampled.color_samples)


def test_sample_side_off_image_keeps_shape_only():
    from pieceroute.models.piece import CardinalDirection, SideType
    from pieceroute.modules.sampling import sample_side

    tiny = np.zeros((5, 5, 3), dtype=np.uint8)
    side = _side(CardinalDirection.EAST, SideType.TAB, _bumped((100, 20), (100, 120), 30))
    sampled = sample_side(side, tiny, _settings())

    assert sampled.normalized_points is not None
    assert sampled.span_length == pytest.approx(100.0)
    assert sampled.color_samples == ()
    assert not sampled.is_sampled


def test_sample_side_edge_unchanged():
    from pieceroute.models.piece import CardinalDirection, SideType
    from pieceroute.modules.sampling import sample_side

    side = _side(CardinalDirection.NORTH, SideType.EDGE, [(0, 0), (100, 0)])
    image = np.zeros((200, 200, 3), dtype=np.uint8)
    assert sample_side(side, image, _settings()) is side


def test_sample_color_rejects_partial_patch():
    from pieceroute.modules.sampling import sample_color

    image = np.full((50, 50, 3), 128, dtype=np.uint8)
    settings = _settings()
    assert sample_color(image, np.array([25.0, 25.0]), settings) is not None
    assert sample_color(image, np.array([2.0, 25.0]), settings) is None


def test_sample_piece_skips_unusable():
    from pieceroute.models.piece import Piece
    from pieceroute.modules.sampling import sample_piece

    piece = Piece(piece_id=0, contour=np.zeros((3, 2)), usable=False)
    assert sample_piece(piece, _settings()) is piece


def test_sample_synthetic_pieces():
    from pieceroute.models.piece import SideType
    from pieceroute.modules.classification import classify_pieces
    from pieceroute.modules.sampling import sample_pieces
    from pieceroute.utils.synthetic import generate_puzzle

    settings = _settings()
    puzzle = generate_puzzle(rows=3, cols=3, piece_px=120, seed=2)
    classified = classify_pieces(puzzle.pieces, settings)
    sampled = sample_pieces(classified, settings)

    for before, after in zip(classified, sampled):
        for old, new in zip(before.sides, after.sides):
            if old.type == SideType.EDGE:
                assert new is old
            else:
                assert new.is_sampled, f"side {new.side_id} has no colour"
                assert new.span_length == pytest.approx(120.0, abs=6.0)

# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Pipeline Orchestrator
Wires all stages in dependency order and owns the run-level logging
context and error policy.

Execution order:
  0. Upright correction (optional, settings.upright_pieces)
  1. Side classification
  2. Side sampling
  3. Side matching
  4. Assembly (border route search + interior fill)

Error policy:
  - unclassifiable pieces are marked unusable inside stage 1
  - SolverExhaustedError → failed LayoutResult (score math.inf)
  - NoCornerFoundError and anything unexpected are logged and re-raised
"""

from __future__ import annotations

import threading
import traceback
import uuid
from typing import Optional

import structlog

from pieceroute.config import Settings, get_settings
from pieceroute.core.errors import SolverExhaustedError
from pieceroute.models.layout import LayoutResult
from pieceroute.models.piece import Piece
from pieceroute.utils.logger import get_logger

log = get_logger(__name__)


def solve_puzzle(
    pieces: list[Piece],
    settings: Optional[Settings] = None,
    cancel: Optional[threading.Event] = None,
    solve_id: Optional[str] = None,
) -> LayoutResult:
    """
    Solve a puzzle from raw pieces (contour + image per piece).

    Args:
        pieces:   Pieces as produced by the vision front-end
        settings: Calibration constants (defaults to get_settings())
        cancel:   Optional event; setting it stops the route search early
        solve_id: Label bound to every log entry of this run

    Returns:
        LayoutResult. A result with score math.inf means no complete
        border layout was found.

    Raises:
        NoCornerFoundError: no usable corner piece.
    """
    settings = settings or get_settings()
    solve_id = solve_id or uuid.uuid4().hex[:12]
    structlog.contextvars.bind_contextvars(solve_id=solve_id)

    try:
        return _run(pieces, settings, cancel)
    except Exception as exc:
        log.error(
            "pipeline_fatal_error",
            error=f"{type(exc).__name__}: {exc}",
            traceback=traceback.format_exc(),
        )
        raise
    finally:
        structlog.contextvars.clear_contextvars()


def _run(
    pieces: list[Piece],
    settings: Settings,
    cancel: Optional[threading.Event],
) -> LayoutResult:
    log.info("solve_start", pieces=len(pieces))

    # ── Stage 0: Upright correction ──────────────────────────────────────────
    if settings.upright_pieces:
        log.info("stage_start", stage="upright")
        pieces = _upright(pieces, settings)
        log.info("stage_complete", stage="upright")

    # ── Stage 1: Classification ──────────────────────────────────────────────
    log.info("stage_start", stage="classification")
    pieces = _classify(pieces, settings)
    log.info(
        "stage_complete",
        stage="classification",
        unusable=sum(1 for p in pieces if not p.usable),
    )

    # ── Stage 2: Sampling ────────────────────────────────────────────────────
    log.info("stage_start", stage="sampling")
    pieces = _sample(pieces, settings)
    log.info("stage_complete", stage="sampling")

    # ── Stage 3: Matching ────────────────────────────────────────────────────
    log.info("stage_start", stage="matching")
    pieces = _match(pieces, settings)
    log.info("stage_complete", stage="matching")

    # ── Stage 4: Assembly ────────────────────────────────────────────────────
    log.info("stage_start", stage="assembly")
    try:
        layout = _assemble(pieces, settings, cancel)
    except SolverExhaustedError as exc:
        log.warning("solve_failed", reason=str(exc), best_score=exc.best_score)
        layout = LayoutResult.failed(
            unusable_piece_ids=sorted(p.piece_id for p in pieces if not p.usable)
        )
    log.info(
        "stage_complete",
        stage="assembly",
        rows=layout.rows,
        cols=layout.cols,
        score=layout.score,
    )

    log.info("solve_complete", score=layout.score, unfilled=len(layout.unfilled_cells))
    return layout


# ─── Stage Runners ───────────────────────────────────────────────────────────

def _upright(pieces: list[Piece], settings: Settings) -> list[Piece]:
    from pieceroute.modules import upright_pieces
    return upright_pieces(pieces, settings)


def _classify(pieces: list[Piece], settings: Settings) -> list[Piece]:
    from pieceroute.modules.classification import classify_pieces
    return classify_pieces(pieces, settings)


def _sample(pieces: list[Piece], settings: Settings) -> list[Piece]:
    from pieceroute.modules.sampling import sample_pieces
    return sample_pieces(pieces, settings)


def _match(pieces: list[Piece], settings: Settings) -> list[Piece]:
    from pieceroute.modules.matching import match_all
    return match_all(pieces, settings)


def _assemble(
    pieces: list[Piece],
    settings: Settings,
    cancel: Optional[threading.Event],
) -> LayoutResult:
    from pieceroute.modules.assembly import assemble_layout
    return assemble_layout(pieces, settings, cancel=cancel)

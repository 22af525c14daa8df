# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Solver Configuration
All calibration constants are loaded from environment variables
(PIECEROUTE_ prefix) with defaults tuned on a ~300px-per-piece capture.
Override via .env or environment, or pass a Settings instance explicitly.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PIECEROUTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ─── Side Classifier ─────────────────────────────────────────────────────
    # Sliding window (contour points) used to accept a radius maximum as a peak
    peak_window: int = 20
    # Two peaks closer than this (polar angle) compete; the sharper one wins
    min_peak_separation_deg: float = 30.0
    # Points within this radius of a peak contribute to its sharpness median
    sharpness_radius_px: float = 10.0
    # Max deviation from the corner midline for a side to be a flat EDGE
    edge_threshold_px: float = 15.0

    # ─── Side Sampler ────────────────────────────────────────────────────────
    sample_size_px: int = 10
    # Distance moved off the physical boundary before sampling colour
    sample_offset_px: float = 10.0
    canonical_center: tuple[float, float] = (150.0, 150.0)
    kmeans_max_iter: int = 100

    # ─── Side Matcher ────────────────────────────────────────────────────────
    shape_match_scale: float = 10.0
    length_match_scale: float = 10.0
    color_match_scale: float = 40.0
    # Pairs scoring at or above this are never recorded
    acceptance_ceiling: float = 15.0
    # >1 scores piece pairs on a thread pool
    matcher_workers: int = 1

    # ─── Route Solver ────────────────────────────────────────────────────────
    # Accept a complete route at once when its mean join score is this low
    early_accept_average: float = 2.5
    # Score used for a join with no recorded match (closing join, interior fill)
    missing_match_penalty: float = 15.0
    max_expansions: Optional[int] = 2_000_000
    time_budget_s: Optional[float] = None

    # ─── Preprocessing ───────────────────────────────────────────────────────
    upright_pieces: bool = False
    # approxPolyDP epsilon as a fraction of the contour perimeter
    upright_epsilon_fraction: float = 0.009

    # ─── Logging ─────────────────────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = True

    # ─── Derived helpers ─────────────────────────────────────────────────────
    @property
    def sample_half_size(self) -> int:
        return self.sample_size_px // 2

    @property
    def corner_along_offset_px(self) -> float:
        """Corner samples move twice as far along the side as they do inward."""
        return self.sample_offset_px * 2.0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached singleton Settings instance."""
    return Settings()

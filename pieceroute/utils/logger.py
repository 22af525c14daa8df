# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
PieceRoute — Structured Logging
JSON-formatted logs via structlog. Every log entry carries a stage label
and, inside solve_puzzle(), the solve_id of the run.
"""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

from pieceroute.config import Settings, get_settings


def _add_app_info(
    logger: Any, method: str, event_dict: EventDict
) -> EventDict:
    """Inject application name into every log entry."""
    event_dict["app"] = "pieceroute"
    return event_dict


def _round_floats(
    logger: Any, method: str, event_dict: EventDict
) -> EventDict:
    """Keep scores readable: numpy/python floats rounded to 4 places."""
    for key, value in event_dict.items():
        if isinstance(value, float):
            event_dict[key] = round(value, 4)
    return event_dict


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure structlog for JSON output by default and human-readable
    console output at DEBUG level or when log_json is off.
    Call once per process at startup (scripts/solve_synthetic.py does).
    """
    settings = settings or get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _add_app_info,
        _round_floats,
    ]

    if settings.log_level == "DEBUG" or not settings.log_json:
        processors: list[Processor] = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
        ]
    else:
        processors = shared_processors + [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stdout),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )


def get_logger(name: str = "pieceroute") -> structlog.BoundLogger:
    """
    Return a structlog bound logger.

    Usage:
        log = get_logger(__name__)
        log.info("stage_complete", stage="matching", accepted_pairs=42)

    To bind a solve_id for a full run:
        structlog.contextvars.bind_contextvars(solve_id=solve_id)
        log.info("solve_start")
        structlog.contextvars.clear_contextvars()
    """
    return structlog.get_logger(name)

"""Factories and utilities for structured session logs."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Callable

from .clock import Clock
from .config import ExperimentConfig
from .events import SessionLog


def default_log_factory(config: ExperimentConfig, clock: Clock) -> SessionLog:
    """Instantiate a session log with metadata populated from the config."""

    session_id = config.session_id or f"{config.stimuli.identifier}-{uuid.uuid4().hex[:12]}"
    return SessionLog(
        session_id=session_id,
        stimulus_set=config.stimuli.identifier,
        seed=config.seed,
        start_time=clock.start_time,
        started_at=datetime.now(timezone.utc),
    )


def mark_completed(log: SessionLog) -> None:
    """Set the completion timestamp if not already done."""

    if log.completed_at is None:
        log.completed_at = datetime.now(timezone.utc)


LogFactory = Callable[[ExperimentConfig, Clock], SessionLog]

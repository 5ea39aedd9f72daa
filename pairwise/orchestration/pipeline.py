"""High-level orchestration utilities."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from random import Random
from typing import Optional

from pairwise.core.config import ExperimentConfig, Side, View
from pairwise.core.logging import LogFactory, default_log_factory
from pairwise.core.scheduler import AsyncioScheduler, ManualScheduler, Scheduler
from pairwise.orchestration.session import ExperimentSession
from pairwise.presentation.base import PresentationArea, RecordingPresenter
from pairwise.submission.base import Submitter

logger = logging.getLogger(__name__)

# Normalized horizontal centre of each stimulus on the stage.
_SIDE_X = {Side.LEFT: 0.25, Side.RIGHT: 0.75}


@dataclass
class SimulatedSubject:
    """Scripted participant that reads, presses start and picks a side per trial.

    `preference` names a category chosen with probability `preference_strength`;
    otherwise sides are picked uniformly.
    """

    seed: Optional[int] = None
    reading_ms: int = 2000
    min_rt_ms: int = 300
    max_rt_ms: int = 1500
    preference: Optional[str] = None
    preference_strength: float = 0.8
    key_presses: bool = True
    _rng: Random = field(init=False, repr=False)
    _session: Optional[ExperimentSession] = field(default=None, init=False, repr=False)
    _presenter: Optional[RecordingPresenter] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.min_rt_ms < 0 or self.max_rt_ms < self.min_rt_ms:
            raise ValueError("Reaction time bounds must satisfy 0 <= min_rt_ms <= max_rt_ms.")
        self._rng = Random(self.seed)

    def attach(self, session: ExperimentSession, presenter: RecordingPresenter) -> None:
        self._session = session
        self._presenter = presenter
        presenter.listeners.append(self._on_presenter_call)

    def _on_presenter_call(self, kind: str, presenter: RecordingPresenter) -> None:
        session = self._session
        assert session is not None
        if kind == "render" and presenter.current_view == View.INSTRUCTIONS.value:
            session.scheduler.call_later(self.reading_ms, self._press_start)
        elif kind == "reveal":
            rt = self._rng.randint(self.min_rt_ms, self.max_rt_ms)
            session.scheduler.call_later(rt, self._respond)

    def _press_start(self) -> None:
        session = self._session
        assert session is not None
        area = session.area
        session.pointer_moved(area.left_offset + 0.5 * area.width, 0.8 * area.height)
        session.begin()

    def _respond(self) -> None:
        session, presenter = self._session, self._presenter
        assert session is not None and presenter is not None
        rendered = presenter.current_trial
        if rendered is None:
            return
        side = self._choose(rendered.layout.left, rendered.layout.right)
        area = session.area
        page_x = area.left_offset + _SIDE_X[side] * area.width
        page_y = 0.5 * area.height + self._rng.uniform(-0.05, 0.05) * area.height
        session.pointer_moved(page_x, page_y)
        session.clicked()
        if self.key_presses and self._rng.random() < 0.1:
            session.key_released(self._rng.choice((32, 80, 81)))
        presenter.click(side)

    def _choose(self, left: str, right: str) -> Side:
        if self.preference in (left, right) and self._rng.random() < self.preference_strength:
            return Side.LEFT if left == self.preference else Side.RIGHT
        return self._rng.choice((Side.LEFT, Side.RIGHT))


@dataclass
class SessionPipeline:
    """Convenience wrapper for building sessions and running them headlessly."""

    config: ExperimentConfig
    submitter: Submitter
    area: PresentationArea = field(default_factory=lambda: PresentationArea(width=800.0, height=600.0))
    log_factory: LogFactory = default_log_factory

    def build_session(self, scheduler: Scheduler, presenter: RecordingPresenter) -> ExperimentSession:
        """Construct an ExperimentSession wired to the given scheduler and presenter."""

        return ExperimentSession(
            config=self.config,
            presenter=presenter,
            submitter=self.submitter,
            scheduler=scheduler,
            area=self.area,
            log_factory=self.log_factory,
        )

    def run(self, subject: SimulatedSubject, *, limit_ms: float = 3_600_000) -> ExperimentSession:
        """Run one session to submission in virtual time."""

        scheduler = ManualScheduler()
        presenter = RecordingPresenter()
        session = self.build_session(scheduler, presenter)
        subject.attach(session, presenter)
        session.open()
        try:
            scheduler.run_until(lambda: session.done, limit_ms=limit_ms)
        finally:
            session.close()
        return session

    def run_realtime(self, subject: SimulatedSubject, *, timeout_s: Optional[float] = None) -> ExperimentSession:
        """Run one session on an asyncio loop with real delays."""

        scheduler = AsyncioScheduler()
        presenter = RecordingPresenter()
        session = self.build_session(scheduler, presenter)
        subject.attach(session, presenter)
        try:
            session.open()
            scheduler.run_until_complete(lambda: session.done, timeout_s=timeout_s)
        finally:
            session.close()
            scheduler.close()
        return session

"""Session context owning the clock, logs, telemetry and sequencer."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from random import Random
from typing import Any, Dict, Optional

from pairwise.core.clock import Clock
from pairwise.core.config import ExperimentConfig, SequencerState, SessionStatus, View
from pairwise.core.events import SessionLog
from pairwise.core.logging import LogFactory, default_log_factory, mark_completed
from pairwise.core.scheduler import Scheduler
from pairwise.core.telemetry import TelemetryLogger
from pairwise.datasets.stimuli import instruction_values, render_instructions
from pairwise.orchestration.randomization import Randomizer
from pairwise.orchestration.sequencer import TrialSequencer
from pairwise.presentation.base import PresentationArea, Presenter
from pairwise.submission.base import Submitter

logger = logging.getLogger(__name__)


@dataclass
class ExperimentSession:
    """One subject's run: explicit open/begin/close instead of ambient globals.

    Building the session randomizes the trial order once. `open()` shows the
    instructions and starts telemetry, `begin()` is the start-button press,
    and host input is forwarded through `pointer_moved`, `clicked` and
    `key_released`.
    """

    config: ExperimentConfig
    presenter: Presenter
    submitter: Submitter
    scheduler: Scheduler
    area: PresentationArea = field(default_factory=lambda: PresentationArea(width=1.0, height=1.0))
    log_factory: LogFactory = default_log_factory
    rng: Optional[Random] = None
    clock: Clock = field(init=False)
    randomizer: Randomizer = field(init=False)
    log: SessionLog = field(init=False)
    telemetry: TelemetryLogger = field(init=False)
    sequencer: TrialSequencer = field(init=False)
    _opened: bool = field(default=False, init=False, repr=False)
    _begun: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        timing = self.config.timing
        self.clock = Clock(time_source=self.scheduler.now)
        self.randomizer = Randomizer(self.config.stimuli, seed=self.config.seed, rng=self.rng)
        self.log = self.log_factory(self.config, self.clock)
        self.log.seed = self.randomizer.seed
        queue = self.randomizer.build_trial_order()
        self.log.trial_order = [
            {trial.category_a: trial.stimulus_a, trial.category_b: trial.stimulus_b} for trial in queue
        ]
        self.telemetry = TelemetryLogger(
            self.clock,
            self.scheduler,
            self.area,
            self.log.events,
            interval_ms=timing.sample_interval_ms,
        )
        self.sequencer = TrialSequencer(
            queue,
            clock=self.clock,
            scheduler=self.scheduler,
            presenter=self.presenter,
            randomizer=self.randomizer,
            submitter=self.submitter,
            payload_factory=self.payload,
            results=self.log.results,
            telemetry=self.telemetry,
            timing=timing,
            hooks={"finished": lambda: mark_completed(self.log)},
        )

    @property
    def status(self) -> SessionStatus:
        if self.sequencer.submitted:
            return SessionStatus.SUBMITTED
        if self.sequencer.submission_error is not None:
            return SessionStatus.SUBMISSION_FAILED
        if self.sequencer.state is SequencerState.FINISHED:
            return SessionStatus.FINISHED
        if self._begun:
            return SessionStatus.RUNNING
        if self._opened:
            return SessionStatus.OPEN
        return SessionStatus.CREATED

    @property
    def done(self) -> bool:
        """True once the submitter has been called, successfully or not."""

        return self.status in (SessionStatus.SUBMITTED, SessionStatus.SUBMISSION_FAILED)

    def open(self) -> None:
        """Show the instructions and start telemetry."""

        if self._opened:
            return
        stimuli = self.config.stimuli
        text = render_instructions(stimuli.instructions, instruction_values(stimuli))
        self.presenter.render(View.INSTRUCTIONS.value, text=text)
        self.telemetry.start()
        self._opened = True
        logger.info("Session %s open with %d trials", self.log.session_id, self.sequencer.remaining)

    def begin(self, page_x: Any = None, page_y: Any = None) -> None:
        """Start-button press: logged as a click, then the first trial is shown."""

        if self._begun:
            return
        self.open()
        self._begun = True
        self.telemetry.clicked(page_x, page_y)
        self.sequencer.start()

    def pointer_moved(self, page_x: Any, page_y: Any) -> None:
        self.telemetry.pointer_moved(page_x, page_y)

    def clicked(self, page_x: Any = None, page_y: Any = None) -> None:
        self.telemetry.clicked(page_x, page_y)

    def key_released(self, key_code: Any) -> None:
        self.telemetry.key_released(key_code)

    def close(self) -> None:
        """Teardown: stop telemetry and any scheduled trial step."""

        self.telemetry.stop()
        self.sequencer.cancel()

    def payload(self) -> Dict[str, Any]:
        return self.log.payload()

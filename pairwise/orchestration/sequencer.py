"""Trial state machine: present, settle, await a response, record, advance."""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional

from pairwise.core.clock import Clock
from pairwise.core.config import Layout, SequencerState, Side, Timing, TrialSpec, View
from pairwise.core.events import ResponseRecord, ResultLog
from pairwise.core.scheduler import Handle, Scheduler
from pairwise.core.telemetry import TelemetryLogger
from pairwise.orchestration.randomization import Randomizer, TrialQueue
from pairwise.presentation.base import Presenter
from pairwise.submission.base import SubmissionError, Submitter

logger = logging.getLogger(__name__)

PayloadFactory = Callable[[], Mapping[str, Any]]

_IN_TRIAL = (SequencerState.PRESENTING, SequencerState.AWAITING_RESPONSE)


class TrialSequencer:
    """Consumes the trial queue one trial at a time.

    Each trial runs render → settle → accept one response → record → blank
    and then advances. Selections are only accepted once the settle delay
    has fired; anything earlier, later, or malformed is ignored. When the
    queue is empty the sequencer stops telemetry, shows the finished view
    and hands the payload to the submitter after `timing.submit_delay_ms`.
    """

    def __init__(
        self,
        queue: TrialQueue,
        *,
        clock: Clock,
        scheduler: Scheduler,
        presenter: Presenter,
        randomizer: Randomizer,
        submitter: Submitter,
        payload_factory: PayloadFactory,
        results: Optional[ResultLog] = None,
        telemetry: Optional[TelemetryLogger] = None,
        timing: Optional[Timing] = None,
        hooks: Optional[Dict[str, Callable[[], None]]] = None,
    ):
        self.queue = queue
        self.clock = clock
        self.scheduler = scheduler
        self.presenter = presenter
        self.randomizer = randomizer
        self.submitter = submitter
        self.payload_factory = payload_factory
        self.results = results if results is not None else ResultLog()
        self.telemetry = telemetry
        self.timing = timing or Timing()
        self.hooks = hooks or {}
        self.state = SequencerState.IDLE
        self.initial_count = len(queue)
        self.submitted = False
        self.submission_error: Optional[SubmissionError] = None
        self._trial: Optional[TrialSpec] = None
        self._layout: Optional[Layout] = None
        self._trial_index = -1
        self._presentation_time: Optional[int] = None
        self._pending: Optional[Handle] = None

    @property
    def current_trial(self) -> Optional[TrialSpec]:
        return self._trial if self.state in _IN_TRIAL else None

    @property
    def remaining(self) -> int:
        return len(self.queue)

    @property
    def finished(self) -> bool:
        return self.state is SequencerState.FINISHED

    def start(self) -> None:
        """Present the first trial; only meaningful from the idle state."""

        if self.state is not SequencerState.IDLE:
            logger.debug("start() ignored in state %s", self.state.value)
            return
        logger.info("Starting sequence of %d trials", len(self.queue))
        self.advance()

    def advance(self) -> None:
        """Present the next trial, or finalize when the queue is exhausted."""

        if self.state is SequencerState.FINISHED:
            return
        if self.state in _IN_TRIAL:
            logger.debug("advance() ignored while trial %d is in progress", self._trial_index)
            return
        self._cancel_pending()
        if not self.queue:
            self._finish()
            return
        trial = self.queue.popleft()
        self._trial = trial
        self._trial_index += 1
        self._presentation_time = None
        self.state = SequencerState.PRESENTING
        self.presenter.render(View.STAGE.value)
        self._layout = self.randomizer.choose_layout()
        self.presenter.render_trial(self._layout, trial, self.select)
        self._pending = self.scheduler.call_later(self.timing.settle_ms, self._settled)

    def select(self, side: Any) -> None:
        """Handle a selection event from the presentation layer."""

        if self.state is not SequencerState.AWAITING_RESPONSE:
            logger.debug("Selection %r ignored in state %s", side, self.state.value)
            return
        try:
            chosen = Side(side)
        except ValueError:
            logger.debug("Ignoring malformed selection %r", side)
            return
        assert self._trial is not None and self._layout is not None and self._presentation_time is not None
        response_time = self.clock.elapsed()
        animal = self._layout.category_at(chosen)
        self.results.append(
            ResponseRecord(
                animal=animal,
                image_file=self._trial.stimulus_for(animal),
                position=chosen,
                presentation_time=self._presentation_time,
                response_time=response_time,
                trial_index=self._trial_index,
                layout=self._layout,
            )
        )
        self.presenter.clear()
        self.state = SequencerState.RECORDING
        self._pending = self.scheduler.call_later(self.timing.blank_ms, self._blank_elapsed)

    def cancel(self) -> None:
        """Drop any scheduled step; a pending submission is kept."""

        if self.state is not SequencerState.FINISHED:
            self._cancel_pending()

    def _settled(self) -> None:
        self._pending = None
        if self.state is not SequencerState.PRESENTING:
            return
        self.presenter.reveal()
        self._presentation_time = self.clock.elapsed()
        self.state = SequencerState.AWAITING_RESPONSE

    def _blank_elapsed(self) -> None:
        self._pending = None
        self.advance()

    def _finish(self) -> None:
        self.state = SequencerState.FINISHED
        self._trial = None
        if self.telemetry is not None:
            self.telemetry.stop()
        logger.info("Sequence finished with %d of %d trials recorded", len(self.results), self.initial_count)
        hook = self.hooks.get("finished")
        if hook is not None:
            hook()
        self.presenter.render(View.FINISHED.value)
        self._pending = self.scheduler.call_later(self.timing.submit_delay_ms, self._submit)

    def _submit(self) -> None:
        self._pending = None
        payload = self.payload_factory()
        try:
            self.submitter.submit(payload)
        except SubmissionError as exc:
            self.submission_error = exc
            logger.exception("Submission failed; the payload was not delivered")
            return
        self.submitted = True
        logger.info("Submitted %d trials and %d events", len(payload["trials"]), len(payload["events"]))

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

"""Shared helpers for unit tests."""
from __future__ import annotations

from collections import deque
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pairwise.core.clock import Clock
from pairwise.core.config import ExperimentConfig, Layout, PresentationArea, Side, StimulusSet, Timing, TrialSpec
from pairwise.core.scheduler import ManualScheduler
from pairwise.orchestration.randomization import Randomizer
from pairwise.orchestration.sequencer import TrialSequencer
from pairwise.orchestration.session import ExperimentSession
from pairwise.presentation.base import RecordingPresenter


class RecordingSubmitter:
    """Collects payloads; raises `error` instead when one is given."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.payloads: List[Dict[str, Any]] = []
        self.error = error

    def submit(self, payload: Mapping[str, Any]) -> None:
        if self.error is not None:
            raise self.error
        self.payloads.append(dict(payload))


class FixedLayoutRandomizer(Randomizer):
    """Randomizer whose layouts are scripted, one per trial."""

    def __init__(self, stimuli: StimulusSet, layouts: Iterable[Layout]):
        super().__init__(stimuli, seed=0)
        self._scripted = list(layouts)

    def choose_layout(self) -> Layout:
        return self._scripted.pop(0)


def make_stimuli(count: int = 3) -> StimulusSet:
    return StimulusSet(
        identifier="test_set",
        categories=("kitten", "puppy"),
        count=count,
        instructions="Choose the {{ category_a }} or the {{ category_b }}, {{ n_trials }} times.",
    )


def make_trial(a_index: int, b_index: int) -> TrialSpec:
    return TrialSpec(
        category_a="kitten",
        stimulus_a=f"kitten{a_index}.jpg",
        category_b="puppy",
        stimulus_b=f"puppy{b_index}.jpg",
    )


def make_sequencer(
    trials: Iterable[TrialSpec],
    *,
    layouts: Optional[Iterable[Layout]] = None,
    submitter: Optional[RecordingSubmitter] = None,
    presenter: Optional[RecordingPresenter] = None,
    timing: Optional[Timing] = None,
) -> Tuple[TrialSequencer, ManualScheduler, RecordingPresenter, RecordingSubmitter]:
    queue = deque(trials)
    stimuli = make_stimuli(max(len(queue), 1))
    scheduler = ManualScheduler()
    presenter = presenter or RecordingPresenter()
    submitter = submitter or RecordingSubmitter()
    randomizer = (
        FixedLayoutRandomizer(stimuli, layouts) if layouts is not None else Randomizer(stimuli, seed=1)
    )
    sequencer = TrialSequencer(
        queue,
        clock=Clock(time_source=scheduler.now),
        scheduler=scheduler,
        presenter=presenter,
        randomizer=randomizer,
        submitter=submitter,
        payload_factory=lambda: {"trials": sequencer.results.as_payload(), "events": [], "startTime": 0},
        timing=timing,
    )
    return sequencer, scheduler, presenter, submitter


def make_session(
    count: int = 3,
    *,
    seed: Optional[int] = 7,
    submitter: Optional[RecordingSubmitter] = None,
    area: Optional[PresentationArea] = None,
) -> Tuple[ExperimentSession, ManualScheduler, RecordingPresenter, RecordingSubmitter]:
    scheduler = ManualScheduler()
    presenter = RecordingPresenter()
    submitter = submitter or RecordingSubmitter()
    config = ExperimentConfig(stimuli=make_stimuli(count), seed=seed, session_id="test-session")
    session = ExperimentSession(
        config=config,
        presenter=presenter,
        submitter=submitter,
        scheduler=scheduler,
        area=area or PresentationArea(width=800.0, height=600.0),
    )
    return session, scheduler, presenter, submitter


def run_trial(scheduler: ManualScheduler, presenter: RecordingPresenter, side: Side, *, rt_ms: int = 200, timing: Timing = Timing()) -> None:
    """Let the settle delay pass, respond after `rt_ms`, then wait out the blank."""

    scheduler.advance(timing.settle_ms)
    scheduler.advance(rt_ms)
    assert presenter.click(side)
    scheduler.advance(timing.blank_ms)

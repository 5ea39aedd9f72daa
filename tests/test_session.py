"""Tests for the session context object."""
from __future__ import annotations

from random import Random

from pairwise.core.config import ExperimentConfig, SessionStatus, Side, Timing
from pairwise.core.events import EventType
from pairwise.core.io import read_payload
from pairwise.core.scheduler import ManualScheduler
from pairwise.core.schema import validate_payload
from pairwise.orchestration.session import ExperimentSession
from pairwise.presentation.base import RecordingPresenter
from pairwise.submission.backends import JsonFileSubmitter
from pairwise.submission.base import SubmissionError
from tests.helpers import RecordingSubmitter, make_session, make_stimuli, run_trial

TIMING = Timing()


def test_open_shows_filled_instructions_and_starts_telemetry() -> None:
    session, scheduler, presenter, _ = make_session()

    session.open()
    session.open()
    scheduler.advance(100)

    assert presenter.calls("render") == ["instructions"]
    text = presenter.view_context["instructions"]["text"]
    assert "{{" not in text
    assert "kitten" in text and "puppy" in text and "3" in text
    assert len(session.log.events.of_type(EventType.POSITION)) == 2
    assert session.status is SessionStatus.OPEN


def test_begin_logs_start_click_and_presents_first_trial() -> None:
    session, scheduler, presenter, _ = make_session()
    session.open()
    scheduler.advance(20)

    session.begin(400, 300)
    session.begin(400, 300)

    clicks = session.log.events.of_type(EventType.CLICK)
    assert len(clicks) == 1
    assert (clicks[0].x, clicks[0].y, clicks[0].time) == (0.5, 0.5, 20)
    assert presenter.current_view == "stage"
    assert session.sequencer.remaining == 2
    assert session.status is SessionStatus.RUNNING


def test_begin_without_open_opens_first() -> None:
    session, _, presenter, _ = make_session()

    session.begin()

    assert presenter.calls("render")[:2] == ["instructions", "stage"]
    assert session.telemetry.active


def test_full_session_submits_payload_once() -> None:
    session, scheduler, presenter, submitter = make_session(count=3)
    session.open()
    session.begin()
    session.key_released(81)

    for side in (Side.LEFT, Side.LEFT, Side.RIGHT):
        run_trial(scheduler, presenter, side)
    assert session.status is SessionStatus.FINISHED
    assert not session.telemetry.active
    events_at_finish = len(session.log.events)

    scheduler.advance(TIMING.submit_delay_ms)

    assert session.status is SessionStatus.SUBMITTED
    assert session.done
    assert len(submitter.payloads) == 1
    payload = submitter.payloads[0]
    validate_payload(payload)
    assert len(payload["trials"]) == 3
    assert len(payload["events"]) == events_at_finish
    assert payload["startTime"] == session.clock.start_time
    assert payload["meta"]["sessionId"] == "test-session"
    assert payload["meta"]["completedAt"] is not None
    assert [t["trialIndex"] for t in payload["trials"]] == [0, 1, 2]


def test_trial_order_is_recorded_in_metadata() -> None:
    session, _, _, _ = make_session(count=4)

    order = session.log.trial_order

    assert len(order) == 4
    assert [entry["puppy"] for entry in order] == [f"puppy{i}.jpg" for i in range(4)]
    assert list(session.sequencer.queue) and len(session.sequencer.queue) == 4


def test_same_seed_gives_same_trial_order() -> None:
    first, _, _, _ = make_session(count=5, seed=99)
    second, _, _, _ = make_session(count=5, seed=99)

    assert first.log.trial_order == second.log.trial_order


def test_failed_submission_sets_status() -> None:
    submitter = RecordingSubmitter(error=SubmissionError("offline"))
    session, scheduler, presenter, _ = make_session(count=1, submitter=submitter)
    session.begin()
    run_trial(scheduler, presenter, Side.LEFT)
    scheduler.advance(TIMING.submit_delay_ms)

    assert session.status is SessionStatus.SUBMISSION_FAILED
    assert session.done


def test_surrogate_key_code_does_not_break_file_submission(tmp_path) -> None:
    out = tmp_path / "session.json"
    session, scheduler, presenter, _ = make_session(count=1, submitter=JsonFileSubmitter(out))
    session.begin()
    session.key_released(0xD800)
    run_trial(scheduler, presenter, Side.LEFT)
    scheduler.advance(TIMING.submit_delay_ms)

    assert session.status is SessionStatus.SUBMITTED
    payload = read_payload(out)
    assert [e for e in payload["events"] if e["type"] == "keyup"] == []


def test_injected_rng_is_not_reported_as_seeded() -> None:
    config = ExperimentConfig(stimuli=make_stimuli(3), seed=7)
    session = ExperimentSession(
        config=config,
        presenter=RecordingPresenter(),
        submitter=RecordingSubmitter(),
        scheduler=ManualScheduler(),
        rng=Random(1),
    )

    assert session.log.seed is None
    assert session.payload()["meta"]["seed"] is None


def test_close_stops_telemetry_and_pending_steps() -> None:
    session, scheduler, presenter, _ = make_session()
    session.begin()

    session.close()
    scheduler.advance(5000)

    assert not session.telemetry.active
    assert presenter.calls("reveal") == []
    assert scheduler.pending() == 0


def test_input_is_forwarded_to_telemetry() -> None:
    session, scheduler, _, _ = make_session()
    session.open()

    session.pointer_moved(200, 150)
    session.clicked()
    session.key_released(32)
    scheduler.advance(50)

    kinds = [event.type for event in session.log.events]
    assert kinds == [EventType.CLICK, EventType.KEY_UP, EventType.POSITION]
    assert (session.log.events[2].x, session.log.events[2].y) == (0.25, 0.25)

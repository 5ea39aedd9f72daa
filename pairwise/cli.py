"""Small CLI helpers and an end-to-end simulated-session validator for CI.

This exposes a programmatic function `e2e_validate_simulated()` that runs a
complete session with a scripted subject in virtual time and asserts that
the submitted payload passes the schema and carries the expected trials and
telemetry. A tiny console entrypoint `e2e_simulated_main` is provided for CI
or local smoke runs.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping

from pairwise.core.config import ExperimentConfig, Timing
from pairwise.core.schema import validate_payload
from pairwise.datasets.stimuli import default_stimulus_set
from pairwise.orchestration.pipeline import SessionPipeline, SimulatedSubject


class MemorySubmitter:
    """Placeholder submitter that keeps payloads in memory for offline testing."""

    def __init__(self) -> None:
        self.payloads: List[Dict[str, Any]] = []

    def submit(self, payload: Mapping[str, Any]) -> None:
        self.payloads.append(dict(payload))


def _validate_payload(payload: Dict[str, Any], n_trials: int, timing: Timing) -> None:
    """Sanity-check a submitted payload beyond its JSON Schema."""
    validate_payload(payload)
    trials = payload["trials"]
    assert len(trials) == n_trials, f"Expected {n_trials} trials, got {len(trials)}"
    assert sorted(t["trialIndex"] for t in trials) == list(range(n_trials))
    for trial in trials:
        assert trial["rt"] == trial["clickTime"] - trial["trialStartTime"]
        assert trial["rt"] >= 0
        assert trial["animal"] == trial["layout"][trial["position"]]
    samples = [e for e in payload["events"] if e["type"] == "position"]
    assert samples, "Expected position samples in the telemetry stream."
    times = [e["time"] for e in payload["events"]]
    assert times == sorted(times), "Telemetry events must be in time order."
    gaps = {b["time"] - a["time"] for a, b in zip(samples, samples[1:])}
    assert gaps <= {timing.sample_interval_ms}, f"Irregular sampling gaps: {sorted(gaps)}"
    assert isinstance(payload["startTime"], int)


def e2e_validate_simulated(seed: int = 42, n_trials: int = 3) -> Dict[str, Any]:
    """Run one simulated session and validate the submitted payload.

    Returns the payload if successful. Raises AssertionError on validation
    failures.
    """
    stimuli = default_stimulus_set()
    stimuli.count = n_trials
    config = ExperimentConfig(stimuli=stimuli, seed=seed)
    submitter = MemorySubmitter()
    pipeline = SessionPipeline(config=config, submitter=submitter)
    session = pipeline.run(SimulatedSubject(seed=seed))
    assert len(submitter.payloads) == 1, f"Expected one submission, got {len(submitter.payloads)}"
    payload = submitter.payloads[0]
    _validate_payload(payload, n_trials, config.timing)
    assert payload["meta"]["sessionId"] == session.log.session_id
    return payload


def e2e_simulated_main() -> int:
    """Console entrypoint: run validator and print a short summary.

    Exit code 0 indicates success; non-zero on failure.
    """
    try:
        payload = e2e_validate_simulated()
        print(
            f"E2E simulated validation succeeded: {len(payload['trials'])} trials, "
            f"{len(payload['events'])} events"
        )
        return 0
    except AssertionError as e:
        print(f"E2E simulated validation failed: {e}")
        return 2
    except Exception as e:  # pragma: no cover - unexpected error
        print(f"Unexpected error during E2E simulated validation: {e}")
        return 3


if __name__ == "__main__":
    raise SystemExit(e2e_simulated_main())

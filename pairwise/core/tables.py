"""Flatten submission payloads into tidy tables."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Tuple

import pandas as pd

TRIAL_COLUMNS = [
    "session_id",
    "trial_index",
    "animal",
    "image_file",
    "position",
    "layout_left",
    "layout_right",
    "trial_start_time",
    "click_time",
    "rt",
]
EVENT_COLUMNS = ["session_id", "type", "time", "x", "y", "key_code", "key"]


def _session_id(payload: Mapping[str, Any]) -> Any:
    meta = payload.get("meta") or {}
    return meta.get("sessionId")


def results_frame(payload: Mapping[str, Any]) -> pd.DataFrame:
    """One row per completed trial."""

    session_id = _session_id(payload)
    rows: List[Dict[str, Any]] = []
    for trial in payload.get("trials", []):
        layout = trial.get("layout") or {}
        rows.append(
            {
                "session_id": session_id,
                "trial_index": trial.get("trialIndex"),
                "animal": trial["animal"],
                "image_file": trial["imageFile"],
                "position": trial["position"],
                "layout_left": layout.get("left"),
                "layout_right": layout.get("right"),
                "trial_start_time": trial["trialStartTime"],
                "click_time": trial["clickTime"],
                "rt": trial["rt"],
            }
        )
    return pd.DataFrame(rows, columns=TRIAL_COLUMNS)


def events_frame(payload: Mapping[str, Any]) -> pd.DataFrame:
    """One row per telemetry event; columns not used by a type are left empty."""

    session_id = _session_id(payload)
    rows = [
        {
            "session_id": session_id,
            "type": event["type"],
            "time": event["time"],
            "x": event.get("x"),
            "y": event.get("y"),
            "key_code": event.get("keyCode"),
            "key": event.get("key"),
        }
        for event in payload.get("events", [])
    ]
    return pd.DataFrame(rows, columns=EVENT_COLUMNS)


def combined_frames(payloads: Iterable[Mapping[str, Any]]) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Trial and event tables for several sessions, stacked."""

    payloads = list(payloads)
    if not payloads:
        return pd.DataFrame(columns=TRIAL_COLUMNS), pd.DataFrame(columns=EVENT_COLUMNS)
    trials = pd.concat([results_frame(p) for p in payloads], ignore_index=True)
    events = pd.concat([events_frame(p) for p in payloads], ignore_index=True)
    return trials, events


def write_frames(trials: pd.DataFrame, events: pd.DataFrame, out_dir: Path) -> Tuple[Path, Path]:
    """Write trials.csv and events.csv into `out_dir`; return both paths."""

    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    trials_path = out_dir / "trials.csv"
    events_path = out_dir / "events.csv"
    trials.to_csv(trials_path, index=False)
    events.to_csv(events_path, index=False)
    return trials_path, events_path


def write_tables(payload: Mapping[str, Any], out_dir: Path) -> Tuple[Path, Path]:
    """Write trials.csv and events.csv for a payload; return both paths."""

    return write_frames(results_frame(payload), events_frame(payload), out_dir)

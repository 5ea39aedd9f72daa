"""CLI entry point for running one simulated subject session."""
from __future__ import annotations

import argparse
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pairwise.core.config import ExperimentConfig, PresentationArea, SessionStatus, Timing
from pairwise.core.tables import write_tables
from pairwise.datasets.stimuli import default_stimulus_set, load_stimulus_set
from pairwise.orchestration.pipeline import SessionPipeline, SimulatedSubject
from pairwise.submission.backends import SANDBOX_SUBMIT_URL, ExternalSubmitter, JsonFileSubmitter
from pairwise.submission.base import Submitter

load_dotenv()  # Load environment variables from .env file


class SubmitTarget(str, Enum):
    FILE = "file"
    EXTERNAL = "external"


class SessionSettings(BaseSettings):
    """Configuration for simulated session runs with environment variable support."""

    model_config = SettingsConfigDict(env_prefix="PAIRWISE_")

    config: Optional[Path] = Field(None, description="Path to YAML config file")
    stimuli: Optional[Path] = Field(None, description="Path to a stimulus-set YAML file")
    seed: Optional[int] = Field(None, description="Randomization seed (unseeded when omitted)")
    trials: Optional[int] = Field(None, description="Override the number of trials")
    submit: SubmitTarget = Field(SubmitTarget.FILE, description="Where the payload goes")
    out: Path = Field(Path("session.json"), description="Payload path for file submission")
    assignment_id: Optional[str] = Field(None, description="Assignment id for external submission")
    submit_url: str = Field(SANDBOX_SUBMIT_URL, description="External submit endpoint")
    tables: Optional[Path] = Field(None, description="Optional directory for trials/events CSV export")
    realtime: bool = Field(False, description="Run with real delays on an asyncio loop")
    preference: Optional[str] = Field(None, description="Category the simulated subject prefers")
    width: float = Field(800.0, description="Presentation area width in pixels")
    height: float = Field(600.0, description="Presentation area height in pixels")
    margin_left: float = Field(0.0, description="Presentation area left margin in pixels")
    padding_left: float = Field(0.0, description="Presentation area left padding in pixels")
    log_level: str = Field("INFO", description="Logging level")


def parse_args(argv: Optional[list] = None) -> Dict[str, Any]:
    """Parse command line arguments into a dictionary."""
    parser = argparse.ArgumentParser(description="Run one simulated pairwise preference session.")
    parser.add_argument("--config", type=Path, help="Path to YAML config file")
    parser.add_argument("--stimuli", type=Path, help="Path to a stimulus-set YAML file")
    parser.add_argument("--seed", type=int, help="Randomization seed")
    parser.add_argument("--trials", type=int, help="Override the number of trials")
    parser.add_argument("--submit", choices=[t.value for t in SubmitTarget], help="Submission target")
    parser.add_argument("--out", type=Path, help="Payload path for file submission")
    parser.add_argument("--assignment-id", help="Assignment id for external submission")
    parser.add_argument("--submit-url", help="External submit endpoint")
    parser.add_argument("--tables", type=Path, help="Directory for trials.csv/events.csv export")
    parser.add_argument("--realtime", action="store_true", default=None, help="Use real delays")
    parser.add_argument("--preference", help="Category the simulated subject prefers")
    parser.add_argument("--log-level", help="Logging level")
    args = parser.parse_args(argv)
    # Convert to dict and remove None values
    return {k: v for k, v in vars(args).items() if v is not None}


def build_config(args: SessionSettings) -> ExperimentConfig:
    """Assemble the experiment config from settings and an optional YAML file."""

    cfg: Dict[str, Any] = {}
    if args.config:
        cfg = yaml.safe_load(args.config.read_text(encoding="utf-8")) or {}
    stimuli_path = args.stimuli or cfg.get("stimuli")
    stimuli = load_stimulus_set(Path(stimuli_path)) if stimuli_path else default_stimulus_set()
    trials = args.trials if args.trials is not None else cfg.get("trials")
    if trials is not None:
        if int(trials) < 1:
            raise SystemExit("trials must be >= 1")
        stimuli.count = int(trials)
    timing_cfg = cfg.get("timing", {}) or {}
    timing = Timing(**{key: int(value) for key, value in timing_cfg.items()})
    seed = args.seed if args.seed is not None else cfg.get("seed")
    return ExperimentConfig(
        stimuli=stimuli,
        timing=timing,
        seed=int(seed) if seed is not None else None,
        session_id=cfg.get("session_id"),
        notes=cfg.get("notes"),
    )


def build_submitter(args: SessionSettings) -> Submitter:
    if args.submit is SubmitTarget.EXTERNAL:
        if not args.assignment_id:
            raise SystemExit("External submission needs --assignment-id or PAIRWISE_ASSIGNMENT_ID")
        return ExternalSubmitter(args.assignment_id, url=args.submit_url)
    return JsonFileSubmitter(args.out)


def main(argv: Optional[list] = None) -> int:
    # Load configuration from environment variables and command line arguments
    args = SessionSettings(**parse_args(argv))
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config = build_config(args)
    area = PresentationArea(
        width=args.width,
        height=args.height,
        margin_left=args.margin_left,
        padding_left=args.padding_left,
    )
    pipeline = SessionPipeline(config=config, submitter=build_submitter(args), area=area)
    subject = SimulatedSubject(seed=config.seed, preference=args.preference)
    session = pipeline.run_realtime(subject) if args.realtime else pipeline.run(subject)
    payload = session.payload()
    print(
        f"Session {session.log.session_id} {session.status.value}: "
        f"{len(payload['trials'])} trials, {len(payload['events'])} events"
    )
    if args.tables:
        trials_path, events_path = write_tables(payload, args.tables)
        print(f"Wrote {trials_path} and {events_path}")
    return 0 if session.status is SessionStatus.SUBMITTED else 1


if __name__ == "__main__":
    raise SystemExit(main())

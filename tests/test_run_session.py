"""Tests for the session runner script and the table export script."""
from __future__ import annotations

import sys
from pathlib import Path

import pandas as pd
import pytest

from pairwise.core.io import read_payload
from pairwise.core.schema import validate_payload
from pairwise.datasets.stimuli import STIMULI_ROOT

sys.path.insert(0, str(Path(__file__).parent.parent / "scripts"))
import export_tables  # noqa: E402
from run_session import SessionSettings, SubmitTarget, build_config, build_submitter, main, parse_args  # noqa: E402


def test_parse_args_drops_unset_options():
    args = parse_args(["--seed", "4", "--submit", "external"])

    assert args == {"seed": 4, "submit": "external"}


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("PAIRWISE_SEED", "5")
    monkeypatch.setenv("PAIRWISE_TRIALS", "2")

    settings = SessionSettings(**parse_args([]))

    assert settings.seed == 5
    assert settings.trials == 2
    assert settings.submit is SubmitTarget.FILE


def test_build_config_merges_yaml_and_overrides(tmp_path):
    cfg = tmp_path / "session.yaml"
    cfg.write_text(
        f"""stimuli: {STIMULI_ROOT / "kittens_puppies.yaml"}
trials: 4
seed: 9
session_id: cfg-run
timing:
  settle_ms: 100
""",
        encoding="utf-8",
    )

    config = build_config(SessionSettings(config=cfg, seed=11))

    assert config.stimuli.identifier == "kittens_puppies"
    assert config.n_trials == 4
    assert config.seed == 11
    assert config.session_id == "cfg-run"
    assert config.timing.settle_ms == 100
    assert config.timing.blank_ms == 500


def test_build_config_rejects_zero_trials():
    with pytest.raises(SystemExit):
        build_config(SessionSettings(trials=0))


def test_external_submission_needs_assignment_id():
    with pytest.raises(SystemExit):
        build_submitter(SessionSettings(submit=SubmitTarget.EXTERNAL))


def test_main_writes_payload_and_tables(tmp_path, capsys):
    out = tmp_path / "session.json"
    tables = tmp_path / "tables"

    code = main(["--out", str(out), "--trials", "2", "--seed", "3", "--tables", str(tables)])

    assert code == 0
    payload = read_payload(out)
    validate_payload(payload)
    assert len(payload["trials"]) == 2
    trials = pd.read_csv(tables / "trials.csv")
    assert trials["trial_index"].tolist() == [0, 1]
    assert (tables / "events.csv").exists()
    assert "submitted" in capsys.readouterr().out


def test_export_tables_concatenates_sessions(tmp_path, monkeypatch):
    first = tmp_path / "a.json"
    second = tmp_path / "b.json"
    assert main(["--out", str(first), "--trials", "2", "--seed", "1"]) == 0
    assert main(["--out", str(second), "--trials", "3", "--seed", "2"]) == 0
    out_dir = tmp_path / "export"

    monkeypatch.setattr(sys, "argv", ["export_tables.py", str(first), str(second), "--out", str(out_dir)])
    export_tables.main()

    trials = pd.read_csv(out_dir / "trials.csv")
    assert len(trials) == 5
    assert trials["session_id"].nunique() == 2

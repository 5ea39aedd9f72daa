"""Concrete submitters: a local JSON file and an external form endpoint.

The external submitter follows the crowdsourcing "externalSubmit"
convention: the payload is JSON-encoded into a single form field next to
the assignment id and POSTed once. Nothing is retried.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

import requests

from pairwise.core.io import dumps_payload, write_payload

from .base import SubmissionError

logger = logging.getLogger(__name__)

SANDBOX_SUBMIT_URL = "https://workersandbox.mturk.com/mturk/externalSubmit"
PRODUCTION_SUBMIT_URL = "https://www.mturk.com/mturk/externalSubmit"
PREVIEW_ASSIGNMENT_ID = "ASSIGNMENT_ID_NOT_AVAILABLE"


class JsonFileSubmitter:
    """Write the payload to a JSON file (used for lab runs and dry runs)."""

    def __init__(self, path: Path, *, validate: Optional[bool] = None):
        self.path = Path(path)
        self._validate = validate

    def submit(self, payload: Mapping[str, Any]) -> None:
        try:
            write_payload(payload, self.path, validate=self._validate)
        except (OSError, UnicodeError) as exc:
            raise SubmissionError(f"Could not write payload to {self.path}: {exc}") from exc
        logger.info("Payload written to %s", self.path)


class ExternalSubmitter:
    """POST the payload to a crowdsourcing platform's external-submit endpoint."""

    def __init__(
        self,
        assignment_id: str,
        *,
        url: str = SANDBOX_SUBMIT_URL,
        timeout_seconds: float = 30.0,
        session: Optional[requests.Session] = None,
        validate: Optional[bool] = None,
    ):
        self.assignment_id = assignment_id
        self.url = url
        self.timeout_seconds = timeout_seconds
        self._session = session or requests.Session()
        self._validate = validate

    def submit(self, payload: Mapping[str, Any]) -> None:
        if not self.assignment_id or self.assignment_id == PREVIEW_ASSIGNMENT_ID:
            raise SubmissionError("No assignment id; the task is being previewed, not worked.")
        form = {
            "assignmentId": self.assignment_id,
            "data": dumps_payload(payload, validate=self._validate),
        }
        try:
            resp = self._session.post(self.url, data=form, timeout=self.timeout_seconds)
        except requests.RequestException as exc:
            raise SubmissionError(f"Submission to {self.url} failed: {exc}") from exc
        if not 200 <= resp.status_code < 300:
            raise SubmissionError(f"Submission to {self.url} returned HTTP {resp.status_code}")
        logger.info("Payload submitted for assignment %s", self.assignment_id)

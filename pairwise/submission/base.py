"""Submission collaborator abstractions."""
from __future__ import annotations

from typing import Any, Mapping, Protocol


class SubmissionError(RuntimeError):
    """Raised when a payload could not be handed to the external service."""


class Submitter(Protocol):
    """Fire-and-forget sink for a finished session's payload."""

    def submit(self, payload: Mapping[str, Any]) -> None:  # pragma: no cover - interface
        ...

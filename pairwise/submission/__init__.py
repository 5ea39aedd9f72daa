from .backends import ExternalSubmitter, JsonFileSubmitter
from .base import SubmissionError, Submitter

__all__ = [
    "ExternalSubmitter",
    "JsonFileSubmitter",
    "SubmissionError",
    "Submitter",
]

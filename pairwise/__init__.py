"""Top-level package exports for the pairwise preference-experiment scaffold."""

from .core.config import ExperimentConfig, StimulusSet, Timing
from .orchestration.pipeline import SessionPipeline, SimulatedSubject
from .orchestration.session import ExperimentSession

__all__ = [
    "ExperimentConfig",
    "ExperimentSession",
    "SessionPipeline",
    "SimulatedSubject",
    "StimulusSet",
    "Timing",
]

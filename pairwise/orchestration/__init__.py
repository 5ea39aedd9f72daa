from .pipeline import SessionPipeline, SimulatedSubject
from .randomization import Randomizer, TrialQueue, possible_layouts, trial_permutation
from .sequencer import TrialSequencer
from .session import ExperimentSession

__all__ = [
    "ExperimentSession",
    "Randomizer",
    "SessionPipeline",
    "SimulatedSubject",
    "TrialQueue",
    "TrialSequencer",
    "possible_layouts",
    "trial_permutation",
]

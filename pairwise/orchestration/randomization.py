"""Randomization utilities for trial order and stimulus layout."""
from __future__ import annotations

from collections import deque
from random import Random
from typing import Deque, List, Optional, Tuple

from pairwise.core.config import Layout, StimulusSet, TrialSpec

TrialQueue = Deque[TrialSpec]


def trial_permutation(n: int, rng: Random) -> List[Tuple[int, int]]:
    """Return (a_index, b_index) pairs: A shuffled, B in identity order."""

    if n < 1:
        raise ValueError("At least one trial is required.")
    permutation = list(range(n))
    rng.shuffle(permutation)
    return [(permutation[i], i) for i in range(n)]


def possible_layouts(stimuli: StimulusSet) -> Tuple[Layout, Layout]:
    """Return the two fixed left/right assignments for a stimulus set."""

    return (
        Layout(left=stimuli.category_a, right=stimuli.category_b),
        Layout(left=stimuli.category_b, right=stimuli.category_a),
    )


class Randomizer:
    """Builds the trial queue and draws per-trial layouts.

    Pass `seed` (or a ready `rng`) for reproducible sessions; the default is
    an unseeded generator. An injected `rng` wins over `seed`, and `seed` is
    then reported as None since it did not drive the draws.
    """

    def __init__(self, stimuli: StimulusSet, *, seed: Optional[int] = None, rng: Optional[Random] = None):
        self.stimuli = stimuli
        self.seed = seed if rng is None else None
        self._rng = rng if rng is not None else Random(seed)
        self._layouts = possible_layouts(stimuli)

    def build_trial_order(self, n: Optional[int] = None) -> TrialQueue:
        """Return a fresh queue pairing every A stimulus with exactly one B stimulus."""

        count = self.stimuli.count if n is None else n
        stimuli = self.stimuli
        queue: TrialQueue = deque()
        for a_index, b_index in trial_permutation(count, self._rng):
            queue.append(
                TrialSpec(
                    category_a=stimuli.category_a,
                    stimulus_a=stimuli.image_name(stimuli.category_a, a_index),
                    category_b=stimuli.category_b,
                    stimulus_b=stimuli.image_name(stimuli.category_b, b_index),
                )
            )
        return queue

    def choose_layout(self) -> Layout:
        """Pick one of the two layouts uniformly at random."""

        return self._rng.choice(self._layouts)

from .stimuli import (
    STIMULI_ROOT,
    default_stimulus_set,
    instruction_values,
    load_stimulus_set,
    load_stimulus_sets,
    render_instructions,
)

__all__ = [
    "STIMULI_ROOT",
    "default_stimulus_set",
    "instruction_values",
    "load_stimulus_set",
    "load_stimulus_sets",
    "render_instructions",
]

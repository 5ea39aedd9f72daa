"""Configuration primitives for preference-experiment sessions."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple


class Side(str, Enum):
    """Screen position a stimulus can occupy."""

    LEFT = "left"
    RIGHT = "right"


class SequencerState(str, Enum):
    """States imposed by the trial state machine."""

    IDLE = "idle"
    PRESENTING = "presenting"
    AWAITING_RESPONSE = "awaiting_response"
    RECORDING = "recording"
    FINISHED = "finished"


class SessionStatus(str, Enum):
    """Coarse lifecycle of a session, as seen from the outside."""

    CREATED = "created"
    OPEN = "open"
    RUNNING = "running"
    FINISHED = "finished"
    SUBMITTED = "submitted"
    SUBMISSION_FAILED = "submission_failed"


class View(str, Enum):
    """Named views the presentation layer must be able to show."""

    INSTRUCTIONS = "instructions"
    STAGE = "stage"
    FINISHED = "finished"


@dataclass(slots=True)
class Timing:
    """Fixed delays (milliseconds) used by the sequencer and telemetry."""

    settle_ms: int = 500
    blank_ms: int = 500
    submit_delay_ms: int = 1500
    sample_interval_ms: int = 50

    def __post_init__(self) -> None:
        for name in ("settle_ms", "blank_ms", "submit_delay_ms"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")
        if self.sample_interval_ms <= 0:
            raise ValueError("sample_interval_ms must be > 0")


@dataclass(frozen=True, slots=True)
class Layout:
    """Assignment of the two stimulus categories to screen sides."""

    left: str
    right: str

    def category_at(self, side: Side) -> str:
        return self.left if side is Side.LEFT else self.right

    def as_dict(self) -> dict:
        return {"left": self.left, "right": self.right}


@dataclass(frozen=True, slots=True)
class TrialSpec:
    """One pairing of a category-A stimulus with a category-B stimulus."""

    category_a: str
    stimulus_a: str
    category_b: str
    stimulus_b: str

    def stimulus_for(self, category: str) -> str:
        """Return the stimulus file shown for a category."""

        if category == self.category_a:
            return self.stimulus_a
        if category == self.category_b:
            return self.stimulus_b
        raise KeyError(f"Category '{category}' is not part of this trial.")


@dataclass(slots=True)
class StimulusSet:
    """Two stimulus categories with `count` numbered images each."""

    identifier: str
    categories: Tuple[str, str]
    count: int
    image_pattern: str = "{category}{index}.jpg"
    image_root: Path = Path("images")
    instructions: str = ""

    def __post_init__(self) -> None:
        self.categories = tuple(self.categories)  # type: ignore[assignment]
        if len(self.categories) != 2:
            raise ValueError("A stimulus set needs exactly two categories.")
        if self.categories[0] == self.categories[1]:
            raise ValueError("Stimulus categories must differ.")
        if self.count < 1:
            raise ValueError("A stimulus set needs at least one image per category.")
        self.image_root = Path(self.image_root)

    @property
    def category_a(self) -> str:
        return self.categories[0]

    @property
    def category_b(self) -> str:
        return self.categories[1]

    def image_name(self, category: str, index: int) -> str:
        """Return the image file name for a category/index pair."""

        return self.image_pattern.format(category=category, index=index)


@dataclass(slots=True)
class ExperimentConfig:
    """Complete configuration bundle for a single subject session."""

    stimuli: StimulusSet
    timing: Timing = field(default_factory=Timing)
    seed: Optional[int] = None
    session_id: Optional[str] = None
    notes: Optional[str] = None

    @property
    def n_trials(self) -> int:
        return self.stimuli.count


@dataclass(frozen=True, slots=True)
class PresentationArea:
    """Geometry of the area pointer coordinates are normalized against."""

    width: float
    height: float
    margin_left: float = 0.0
    padding_left: float = 0.0

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Presentation area width and height must be positive.")

    @property
    def left_offset(self) -> float:
        return self.margin_left + self.padding_left

    def normalize(self, page_x: float, page_y: float) -> Tuple[float, float]:
        """Map page coordinates into the area's local unit space."""

        return (page_x - self.left_offset) / self.width, page_y / self.height

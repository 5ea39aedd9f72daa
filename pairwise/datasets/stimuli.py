"""Stimulus sets and instruction templates used for experimentation."""
from __future__ import annotations

import re
from pathlib import Path
from typing import Any, List, Mapping

import yaml

from pairwise.core.config import StimulusSet

STIMULI_ROOT = Path(__file__).resolve().parent / "sets"

_SLOT_RE = re.compile(r"\{\{\s*(\w+)\s*\}\}")


def default_stimulus_set() -> StimulusSet:
    """Return the baseline kitten/puppy preference set."""

    return StimulusSet(
        identifier="kittens_puppies",
        categories=("kitten", "puppy"),
        count=3,
        image_pattern="{category}{index}.jpg",
        image_root=Path("images"),
        instructions=(
            "You will see a {{ category_a }} and a {{ category_b }} side by side. "
            "Click the picture you like better. There are {{ n_trials }} pairs in total."
        ),
    )


def instruction_values(stimuli: StimulusSet) -> Mapping[str, Any]:
    """Slot values every instruction template may use."""

    return {
        "category_a": stimuli.category_a,
        "category_b": stimuli.category_b,
        "n_trials": stimuli.count,
    }


def render_instructions(template: str, values: Mapping[str, Any]) -> str:
    """Fill `{{ name }}` slots; an unresolved slot raises KeyError."""

    def _fill(match: re.Match) -> str:
        name = match.group(1)
        if name not in values:
            raise KeyError(f"No value for instruction slot '{name}'")
        return str(values[name])

    return _SLOT_RE.sub(_fill, template)


def load_stimulus_set(path: Path) -> StimulusSet:
    """Load and validate one stimulus-set YAML file."""

    path = Path(path)
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    _validate_stimulus_payload(data, path)
    image_root = Path(data.get("image_root", "images"))
    if not image_root.is_absolute():
        image_root = path.parent / image_root
    return StimulusSet(
        identifier=str(data["identifier"]),
        categories=tuple(str(c) for c in data["categories"]),  # type: ignore[arg-type]
        count=int(data["count"]),
        image_pattern=str(data["image_pattern"]),
        image_root=image_root,
        instructions=str(data.get("instructions", "")),
    )


def load_stimulus_sets(root: Path) -> List[StimulusSet]:
    """Enumerate and validate stimulus-set YAML files under a directory."""

    root = Path(root)
    if not root.exists():
        raise FileNotFoundError(f"Stimulus root does not exist: {root}")
    sets = [load_stimulus_set(path) for path in sorted(root.glob("*.yaml"))]
    if not sets:
        raise FileNotFoundError(f"No stimulus YAML files found under {root}")
    return sets


_REQUIRED_KEYS = ("identifier", "categories", "count", "image_pattern")


def _validate_stimulus_payload(data: Mapping[str, Any], path: Path) -> None:
    missing = [key for key in _REQUIRED_KEYS if key not in data]
    if missing:
        raise ValueError(f"{path}: missing required keys {missing}")
    categories = data["categories"]
    if not isinstance(categories, list) or len(categories) != 2:
        raise ValueError(f"{path}: 'categories' must be a list of exactly two names")
    count = data["count"]
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise ValueError(f"{path}: 'count' must be a positive integer")
    pattern = str(data["image_pattern"])
    if "{category}" not in pattern or "{index}" not in pattern:
        raise ValueError(f"{path}: 'image_pattern' must contain '{{category}}' and '{{index}}'")
    template = str(data.get("instructions", ""))
    unknown = sorted(set(_SLOT_RE.findall(template)) - {"category_a", "category_b", "n_trials"})
    if unknown:
        raise ValueError(f"{path}: unknown instruction slots {unknown}")

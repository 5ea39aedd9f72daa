"""Presentation-layer abstractions and a headless recording presenter."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Tuple

from pairwise.core.config import Layout, PresentationArea, Side, TrialSpec, View

SelectCallback = Callable[[Side], None]


class PresentationError(RuntimeError):
    """Base class for failures in the presentation layer."""


class RenderTargetMissing(PresentationError):
    """Raised when a view or render target does not exist; the session cannot go on."""


class Presenter(Protocol):
    """Views and per-trial elements the sequencer drives."""

    def render(self, view_id: str, **context: Any) -> None:  # pragma: no cover - interface
        ...

    def render_trial(self, layout: Layout, trial: TrialSpec, on_select: SelectCallback) -> None:  # pragma: no cover - interface
        ...

    def reveal(self) -> None:  # pragma: no cover - interface
        ...

    def clear(self) -> None:  # pragma: no cover - interface
        ...


@dataclass
class RenderedTrial:
    """What a presenter currently shows for a trial."""

    layout: Layout
    trial: TrialSpec
    on_select: SelectCallback
    visible: bool = False

    def image_at(self, side: Side) -> str:
        return self.trial.stimulus_for(self.layout.category_at(side))


@dataclass
class RecordingPresenter:
    """In-memory presenter for headless runs and tests.

    Keeps the current view and trial, and a history of every call so that
    callers can assert on what would have been shown.
    """

    views: Iterable[str] = tuple(view.value for view in View)
    current_view: Optional[str] = field(default=None, init=False)
    current_trial: Optional[RenderedTrial] = field(default=None, init=False)
    history: List[Tuple[str, Any]] = field(default_factory=list, init=False)
    view_context: Dict[str, Dict[str, Any]] = field(default_factory=dict, init=False)
    listeners: List[Callable[[str, "RecordingPresenter"], None]] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        self.views = frozenset(self.views)

    def render(self, view_id: str, **context: Any) -> None:
        view_id = getattr(view_id, "value", view_id)
        if view_id not in self.views:
            raise RenderTargetMissing(f"No view named '{view_id}' is available.")
        self.current_view = view_id
        self.view_context[view_id] = dict(context)
        self._record("render", view_id)

    def render_trial(self, layout: Layout, trial: TrialSpec, on_select: SelectCallback) -> None:
        if self.current_view != View.STAGE.value:
            raise RenderTargetMissing("Trials can only be rendered on the stage view.")
        self.current_trial = RenderedTrial(layout=layout, trial=trial, on_select=on_select)
        self._record("render_trial", (layout, trial))

    def reveal(self) -> None:
        if self.current_trial is None:
            raise RenderTargetMissing("Nothing to reveal; no trial is rendered.")
        self.current_trial.visible = True
        self._record("reveal", self.current_trial.trial)

    def clear(self) -> None:
        self.current_trial = None
        self._record("clear", None)

    def click(self, side: Side | str) -> bool:
        """Simulate a click on one stimulus; return True if a visible target was hit."""

        rendered = self.current_trial
        if rendered is None or not rendered.visible:
            return False
        rendered.on_select(side)  # type: ignore[arg-type]
        return True

    def calls(self, kind: str) -> List[Any]:
        return [payload for name, payload in self.history if name == kind]

    def _record(self, kind: str, payload: Any) -> None:
        self.history.append((kind, payload))
        for listener in list(self.listeners):
            listener(kind, self)

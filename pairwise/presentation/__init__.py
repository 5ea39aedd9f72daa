from .base import (
    PresentationArea,
    PresentationError,
    Presenter,
    RecordingPresenter,
    RenderedTrial,
    RenderTargetMissing,
)

__all__ = [
    "PresentationArea",
    "PresentationError",
    "Presenter",
    "RecordingPresenter",
    "RenderedTrial",
    "RenderTargetMissing",
]

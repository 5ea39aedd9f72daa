from .clock import Clock
from .config import (
    ExperimentConfig,
    Layout,
    PresentationArea,
    SequencerState,
    SessionStatus,
    Side,
    StimulusSet,
    Timing,
    TrialSpec,
    View,
)
from .events import (
    ClickEvent,
    EventLog,
    EventType,
    KeyUpEvent,
    PositionSample,
    ResponseRecord,
    ResultLog,
    SessionLog,
    TelemetryEvent,
)
from .logging import LogFactory, default_log_factory, mark_completed
from .scheduler import AsyncioScheduler, ManualScheduler, Scheduler
from .telemetry import TelemetryLogger

__all__ = [
    "AsyncioScheduler",
    "ClickEvent",
    "Clock",
    "EventLog",
    "EventType",
    "ExperimentConfig",
    "KeyUpEvent",
    "Layout",
    "LogFactory",
    "ManualScheduler",
    "PositionSample",
    "PresentationArea",
    "ResponseRecord",
    "ResultLog",
    "Scheduler",
    "SequencerState",
    "SessionLog",
    "SessionStatus",
    "Side",
    "StimulusSet",
    "TelemetryEvent",
    "TelemetryLogger",
    "Timing",
    "TrialSpec",
    "View",
    "default_log_factory",
    "mark_completed",
]

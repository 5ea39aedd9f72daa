"""Structured records produced during a session."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Union

from .config import Layout, Side


class EventType(str, Enum):
    CLICK = "click"
    KEY_UP = "keyup"
    POSITION = "position"


@dataclass(frozen=True, slots=True)
class ResponseRecord:
    """Atomic record for a single completed trial."""

    animal: str
    image_file: str
    position: Side
    presentation_time: int
    response_time: int
    trial_index: int
    layout: Layout

    @property
    def reaction_time(self) -> int:
        return self.response_time - self.presentation_time

    def as_payload(self) -> Dict[str, Any]:
        return {
            "animal": self.animal,
            "imageFile": self.image_file,
            "position": self.position.value,
            "trialStartTime": self.presentation_time,
            "clickTime": self.response_time,
            "rt": self.reaction_time,
            "trialIndex": self.trial_index,
            "layout": self.layout.as_dict(),
        }


@dataclass(frozen=True, slots=True)
class ClickEvent:
    x: float
    y: float
    time: int
    type: EventType = field(default=EventType.CLICK, init=False)

    def as_payload(self) -> Dict[str, Any]:
        return {"type": self.type.value, "x": self.x, "y": self.y, "time": self.time}


@dataclass(frozen=True, slots=True)
class PositionSample:
    x: float
    y: float
    time: int
    type: EventType = field(default=EventType.POSITION, init=False)

    def as_payload(self) -> Dict[str, Any]:
        return {"type": self.type.value, "x": self.x, "y": self.y, "time": self.time}


@dataclass(frozen=True, slots=True)
class KeyUpEvent:
    key_code: int
    key: str
    time: int
    type: EventType = field(default=EventType.KEY_UP, init=False)

    def as_payload(self) -> Dict[str, Any]:
        return {"type": self.type.value, "keyCode": self.key_code, "key": self.key, "time": self.time}


TelemetryEvent = Union[ClickEvent, KeyUpEvent, PositionSample]


class _AppendOnlyLog:
    """Ordered, append-only sequence of records."""

    def __init__(self) -> None:
        self._records: List[Any] = []

    def append(self, record: Any) -> None:
        self._records.append(record)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._records)

    def __getitem__(self, index: int) -> Any:
        return self._records[index]

    def as_payload(self) -> List[Dict[str, Any]]:
        return [record.as_payload() for record in self._records]


class ResultLog(_AppendOnlyLog):
    """Ordered ResponseRecords; written only by the sequencer."""

    def append(self, record: ResponseRecord) -> None:
        super().append(record)


class EventLog(_AppendOnlyLog):
    """Ordered TelemetryEvents; written only by the telemetry logger."""

    def append(self, record: TelemetryEvent) -> None:
        super().append(record)

    def of_type(self, event_type: EventType) -> List[TelemetryEvent]:
        return [event for event in self if event.type is event_type]


@dataclass
class SessionLog:
    """Container aggregating results, telemetry and session metadata."""

    session_id: str
    stimulus_set: str
    seed: Optional[int]
    start_time: int
    started_at: datetime
    completed_at: Optional[datetime] = None
    trial_order: List[Dict[str, str]] = field(default_factory=list)
    results: ResultLog = field(default_factory=ResultLog)
    events: EventLog = field(default_factory=EventLog)
    schema_version: str = "0.1"

    def payload(self) -> Dict[str, Any]:
        """Return the submission payload in its wire shape."""

        return {
            "trials": self.results.as_payload(),
            "events": self.events.as_payload(),
            "startTime": self.start_time,
            "meta": {
                "sessionId": self.session_id,
                "stimulusSet": self.stimulus_set,
                "seed": self.seed,
                "trialOrder": list(self.trial_order),
                "startedAt": self.started_at.isoformat(),
                "completedAt": self.completed_at.isoformat() if self.completed_at else None,
                "schemaVersion": self.schema_version,
            },
        }

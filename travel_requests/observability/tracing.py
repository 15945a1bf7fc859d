"""Event logging for the travel request service.

Every line on stdout is one JSON object:

    {"ts": "...", "level": "info", "event": "travel_request.created",
     "trace_id": "...", ...fields, "span": {...}}

A trace id ties together the events of one HTTP call. Timed work
(the request itself, a notification dispatch) runs inside a `Span`,
which is attached to the event logged when it finishes.
"""

from __future__ import annotations

import json
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def new_trace_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Span:
    name: str
    trace_id: str = field(default_factory=new_trace_id)
    span_id: str = field(default_factory=lambda: uuid.uuid4().hex[:16])
    attributes: dict[str, Any] = field(default_factory=dict)
    started: float = field(default_factory=time.perf_counter)
    finished: float | None = None

    def set(self, **attributes: Any) -> "Span":
        self.attributes.update(attributes)
        return self

    def end(self) -> None:
        if self.finished is None:
            self.finished = time.perf_counter()

    @property
    def duration_ms(self) -> float | None:
        if self.finished is None:
            return None
        return round((self.finished - self.started) * 1000.0, 3)

    def to_dict(self) -> dict[str, Any]:
        return {
            'name': self.name,
            'span_id': self.span_id,
            'duration_ms': self.duration_ms,
            'attributes': self.attributes,
        }

    def __enter__(self) -> "Span":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.attributes['error'] = exc_type.__name__
        self.end()


def log_event(
    event: str,
    *,
    trace_id: str | None = None,
    span: Span | None = None,
    level: str = 'info',
    **fields: Any,
) -> None:
    payload: dict[str, Any] = {
        'ts': datetime.now(timezone.utc).isoformat(),
        'level': level,
        'event': event,
        'trace_id': trace_id or (span.trace_id if span is not None else new_trace_id()),
        **fields,
    }
    if span is not None:
        payload['span'] = span.to_dict()
    # dates and enums are not JSON-native
    print(json.dumps(payload, ensure_ascii=False, default=str))

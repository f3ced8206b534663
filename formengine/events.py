"""Event system for the form engine.

This module provides the event record and emitter used for audit logging and
for notifying observers (typically the presentation layer) of engine
activity. Every edit, blur, validation pass and submission transition
produces a typed FormEvent.

Events never carry raw field values. Payloads hold validity flags, error
messages and field names only.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from dateutil.parser import isoparse

from formengine.types import EventType, FieldName, SubmissionState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormEvent:
    """A single event in the form lifecycle.

    Attributes:
        event_id: Unique event identifier (e.g., "evt_3f2a...")
        type: Event type from EventType enum
        ts: UTC timestamp when the event occurred
        state: Submission state after this event
        field: Field the event relates to, if any
        payload: Optional event-specific data (e.g., validity, transition)

    Examples:
        >>> from datetime import datetime, timezone
        >>> event = FormEvent(
        ...     event_id="evt_001",
        ...     type=EventType.FIELD_BLURRED,
        ...     ts=datetime.now(timezone.utc),
        ...     state=SubmissionState.IDLE,
        ...     field=FieldName.EMAIL,
        ... )
        >>> event.to_dict()["field"]
        'email'
    """
    event_id: str
    type: EventType
    ts: datetime
    state: SubmissionState
    field: Optional[FieldName] = None
    payload: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        """Normalize string enum values."""
        if isinstance(self.type, str) and not isinstance(self.type, EventType):
            object.__setattr__(self, "type", EventType(self.type))
        if isinstance(self.state, str) and not isinstance(self.state, SubmissionState):
            object.__setattr__(self, "state", SubmissionState(self.state))
        if isinstance(self.field, str) and not isinstance(self.field, FieldName):
            object.__setattr__(self, "field", FieldName(self.field))

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization.

        Timestamp is formatted as an ISO 8601 string.
        """
        result: Dict[str, Any] = {
            "eventId": self.event_id,
            "type": self.type.value,
            "ts": self.ts.isoformat(),
            "state": self.state.value,
        }
        if self.field is not None:
            result["field"] = self.field.value
        if self.payload is not None:
            result["payload"] = self.payload
        return result

    def to_jsonl(self) -> str:
        """Convert event to a single-line JSON string."""
        return json.dumps(self.to_dict(), separators=(',', ':'))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormEvent":
        """Create FormEvent from dictionary (camelCase keys)."""
        field_name = data.get("field")
        return cls(
            event_id=data["eventId"],
            type=EventType(data["type"]),
            ts=isoparse(data["ts"]),
            state=SubmissionState(data["state"]),
            field=FieldName(field_name) if field_name is not None else None,
            payload=data.get("payload"),
        )


EventListener = Callable[[FormEvent], None]
"""Type alias for event listener callbacks.

Listeners are called synchronously when events are emitted. A listener that
raises is logged and skipped; it cannot break the engine operation that
produced the event.
"""


class EventEmitter:
    """Observer registry that dispatches FormEvents to listeners.

    Features:
    - Type-specific subscriptions (listen to specific event types)
    - Wildcard subscriptions (listen to all events)
    - Synchronous dispatch in registration order
    - Error isolation (listener exceptions are logged, not propagated)

    Examples:
        >>> emitter = EventEmitter()
        >>> seen = []
        >>> emitter.on(EventType.FORM_RESET, seen.append)
        >>> emitter.listener_count()
        1
    """

    def __init__(self):
        self._listeners: Dict[EventType, List[EventListener]] = {}
        self._any_listeners: List[EventListener] = []

    def on(self, event_type: EventType, listener: EventListener) -> None:
        """Subscribe to a specific event type."""
        self._listeners.setdefault(event_type, []).append(listener)

    def on_any(self, listener: EventListener) -> None:
        """Subscribe to all event types."""
        self._any_listeners.append(listener)

    def off(self, event_type: EventType, listener: EventListener) -> None:
        """Unsubscribe from a specific event type. Unknown listeners are ignored."""
        if event_type in self._listeners:
            try:
                self._listeners[event_type].remove(listener)
            except ValueError:
                pass

    def off_any(self, listener: EventListener) -> None:
        """Unsubscribe a wildcard listener. Unknown listeners are ignored."""
        try:
            self._any_listeners.remove(listener)
        except ValueError:
            pass

    def emit(self, event: FormEvent) -> None:
        """Dispatch an event to type-specific listeners, then wildcard listeners."""
        for listener in list(self._listeners.get(event.type, ())):
            self._dispatch(listener, event)
        for listener in list(self._any_listeners):
            self._dispatch(listener, event)

    def _dispatch(self, listener: EventListener, event: FormEvent) -> None:
        try:
            listener(event)
        except Exception:
            logger.warning(
                "Event listener %r failed for %s", listener, event.type.value, exc_info=True
            )

    def clear(self) -> None:
        """Remove all event listeners."""
        self._listeners.clear()
        self._any_listeners.clear()

    def listener_count(self, event_type: Optional[EventType] = None) -> int:
        """Count registered listeners.

        Args:
            event_type: If provided, count listeners for this type only.
                        If None, count all listeners (including wildcard).
        """
        if event_type is not None:
            return len(self._listeners.get(event_type, []))
        return len(self._any_listeners) + sum(len(ls) for ls in self._listeners.values())


__all__ = [
    "FormEvent",
    "EventListener",
    "EventEmitter",
]

"""
Event bus for Standing Committee state changes.

Provides decoupled communication between the committee core and whatever
consumes its results (news feed, AI prompts, UI). Each simulation owns its
bus and passes it to the services that emit on it.

Usage:
    from .event_bus import EventBus, EventType

    bus = EventBus()
    bus.on(EventType.DECISION_REACHED, my_handler)

    # In a service, when state changes
    bus.emit(EventType.DECISION_REACHED, turn=12, item_id="a1b2", outcome="approved")

    # Handler receives event
    def my_handler(event: CommitteeEvent):
        log.info(f"Decision on {event.data['item_id']}")
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Committee events that can be published."""

    # Committee composition
    ELECTION_HELD = "committee.election_held"
    VACANCY_FILLED = "committee.vacancy_filled"
    COMMITTEE_INITIALIZED = "committee.initialized"

    # Agenda and meetings
    AGENDA_SUBMITTED = "agenda.submitted"
    MEETING_CONVENED = "meeting.convened"
    DECISION_REACHED = "decision.reached"

    # Relationship graph
    BETRAYAL = "relationship.betrayal"
    BENEFIT = "relationship.benefit"
    ALLIANCE_FORMED = "relationship.alliance_formed"
    ALLIANCE_BROKEN = "relationship.alliance_broken"
    RIVALRY_DECLARED = "relationship.rivalry_declared"


@dataclass
class CommitteeEvent:
    """
    Event payload for the event bus.

    Attributes:
        type: The event type (from EventType enum)
        data: Event-specific payload as dict
        turn: Game turn when the event occurred
        timestamp: When the event was emitted
    """

    type: EventType
    data: dict = field(default_factory=dict)
    turn: int = 0
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"[{self.type.value}] {self.data}"


# Type alias for event handlers
EventHandler = Callable[[CommitteeEvent], None]


class EventBus:
    """
    Synchronous event bus.

    Listeners are called immediately on emit(), in subscription order.
    A failing listener is logged and does not stop the others.
    """

    def __init__(self, history_limit: int = 100):
        self._listeners: dict[EventType, list[EventHandler]] = {}
        self._history: list[CommitteeEvent] = []
        self._history_limit = history_limit  # Keep last N events for debugging

    def on(self, event_type: EventType, handler: EventHandler) -> None:
        """Subscribe to an event type."""
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        if handler not in self._listeners[event_type]:
            self._listeners[event_type].append(handler)

    def off(self, event_type: EventType, handler: EventHandler) -> None:
        """Unsubscribe from an event type."""
        if event_type in self._listeners and handler in self._listeners[event_type]:
            self._listeners[event_type].remove(handler)

    def emit(self, event_type: EventType, turn: int = 0, **data) -> CommitteeEvent:
        """
        Emit an event to all subscribers.

        Args:
            event_type: The type of event
            turn: Game turn (optional)
            **data: Event-specific data

        Returns:
            The emitted CommitteeEvent (for chaining/testing)
        """
        event = CommitteeEvent(type=event_type, data=data, turn=turn)

        self._history.append(event)
        if len(self._history) > self._history_limit:
            self._history = self._history[-self._history_limit :]

        for handler in list(self._listeners.get(event_type, [])):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Error in handler for {event_type.value}")

        return event

    def clear(self) -> None:
        """Clear all listeners. Useful for testing."""
        self._listeners.clear()

    def get_history(self, event_type: EventType | None = None) -> list[CommitteeEvent]:
        """Recent events, optionally filtered by type."""
        if event_type is None:
            return list(self._history)
        return [e for e in self._history if e.type == event_type]

    def listener_count(self, event_type: EventType) -> int:
        return len(self._listeners.get(event_type, []))

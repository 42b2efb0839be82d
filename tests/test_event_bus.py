"""
Tests for the committee event bus.
"""

import logging

from presidium.state import CommitteeEvent, EventBus, EventType


class TestEventBus:
    """Test subscribe, emit and history."""

    def test_handler_receives_event(self):
        bus = EventBus()
        received: list[CommitteeEvent] = []
        bus.on(EventType.MEETING_CONVENED, received.append)

        event = bus.emit(EventType.MEETING_CONVENED, turn=4, meeting_id="m1")

        assert received == [event]
        assert event.turn == 4
        assert event.data == {"meeting_id": "m1"}

    def test_handlers_only_get_their_type(self):
        bus = EventBus()
        received = []
        bus.on(EventType.BETRAYAL, received.append)

        bus.emit(EventType.BENEFIT)

        assert received == []

    def test_duplicate_subscription_ignored(self):
        bus = EventBus()
        handler = lambda event: None
        bus.on(EventType.BETRAYAL, handler)
        bus.on(EventType.BETRAYAL, handler)

        assert bus.listener_count(EventType.BETRAYAL) == 1

        bus.off(EventType.BETRAYAL, handler)
        assert bus.listener_count(EventType.BETRAYAL) == 0

    def test_failing_handler_does_not_stop_others(self, caplog):
        bus = EventBus()
        received = []

        def broken(event):
            raise RuntimeError("boom")

        bus.on(EventType.DECISION_REACHED, broken)
        bus.on(EventType.DECISION_REACHED, received.append)

        with caplog.at_level(logging.ERROR):
            bus.emit(EventType.DECISION_REACHED)

        assert len(received) == 1
        assert "decision.reached" in caplog.text

    def test_history_is_bounded_and_filterable(self):
        bus = EventBus(history_limit=3)
        for _ in range(5):
            bus.emit(EventType.AGENDA_SUBMITTED)
        bus.emit(EventType.ELECTION_HELD)

        assert len(bus.get_history()) == 3
        assert len(bus.get_history(EventType.ELECTION_HELD)) == 1

    def test_str(self):
        event = EventBus().emit(EventType.RIVALRY_DECLARED, source="a")
        assert str(event) == "[relationship.rivalry_declared] {'source': 'a'}"

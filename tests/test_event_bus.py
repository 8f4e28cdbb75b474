"""Tests for the synchronous event bus."""

import logging

from tesouro.state.event_bus import (
    EventBus,
    EventType,
    GameEvent,
    get_event_bus,
    reset_event_bus,
)


class TestSubscriptions:
    """on, on_all and off."""

    def test_handler_receives_event(self, bus):
        received: list[GameEvent] = []
        bus.on(EventType.DISASTER_TRIGGERED, received.append)
        bus.emit(EventType.DISASTER_TRIGGERED, session_id="abc", turn=4, disaster_id="flood")

        assert len(received) == 1
        event = received[0]
        assert event.type == EventType.DISASTER_TRIGGERED
        assert event.data == {"disaster_id": "flood"}
        assert event.session_id == "abc"
        assert event.turn == 4

    def test_other_types_not_delivered(self, bus):
        received = []
        bus.on(EventType.CARD_PLAYED, received.append)
        bus.emit(EventType.TURN_ENDED)
        assert received == []

    def test_duplicate_subscription_ignored(self, bus):
        received = []
        bus.on(EventType.CARD_PLAYED, received.append)
        bus.on(EventType.CARD_PLAYED, received.append)
        bus.emit(EventType.CARD_PLAYED)
        assert len(received) == 1
        assert bus.listener_count(EventType.CARD_PLAYED) == 1

    def test_on_all(self, bus):
        received = []
        bus.on_all(received.append)
        bus.emit(EventType.CARD_PLAYED)
        bus.emit(EventType.GAME_RESET)
        assert [e.type for e in received] == [EventType.CARD_PLAYED, EventType.GAME_RESET]

    def test_off(self, bus):
        received = []
        bus.on(EventType.CARD_PLAYED, received.append)
        bus.off(EventType.CARD_PLAYED, received.append)
        bus.emit(EventType.CARD_PLAYED)
        assert received == []

    def test_clear(self, bus):
        bus.on(EventType.CARD_PLAYED, lambda e: None)
        bus.clear()
        assert bus.listener_count(EventType.CARD_PLAYED) == 0


class TestHandlerErrors:
    def test_failing_handler_does_not_stop_others(self, bus, caplog):
        received = []

        def broken(event):
            raise RuntimeError("boom")

        bus.on(EventType.CARD_PLAYED, broken)
        bus.on(EventType.CARD_PLAYED, received.append)
        with caplog.at_level(logging.ERROR):
            bus.emit(EventType.CARD_PLAYED)

        assert len(received) == 1
        assert "card.played" in caplog.text


class TestHistory:
    def test_filtered_history(self, bus):
        bus.emit(EventType.CARD_PLAYED)
        bus.emit(EventType.TURN_ENDED)
        assert len(bus.get_history()) == 2
        assert len(bus.get_history(EventType.TURN_ENDED)) == 1

    def test_history_limit(self):
        bus = EventBus(history_limit=3)
        for turn in range(5):
            bus.emit(EventType.TURN_ENDED, turn=turn)
        assert [e.turn for e in bus.get_history()] == [2, 3, 4]


class TestGlobalBus:
    def test_singleton_and_reset(self):
        first = get_event_bus()
        assert get_event_bus() is first
        reset_event_bus()
        assert get_event_bus() is not first

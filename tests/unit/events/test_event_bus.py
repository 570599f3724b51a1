# tests/unit/events/test_event_bus.py
"""
Unit tests for EventBus.

Subscribers are plain callables; dispatch is synchronous and isolated
from subscriber failures.
"""

from unittest.mock import Mock

import pytest

from daenet.events import EventBus, RelayEvent


@pytest.fixture
def logger():
    return Mock()


@pytest.fixture
def bus(logger):
    return EventBus(logger=logger)


# ================================================================
# REGISTRATION
# ================================================================
class TestRegistration:
    def test_wire_names(self):
        assert [e.value for e in RelayEvent] == ["stateRead", "stateSet", "pinSet", "error"]

    def test_on_returns_callback(self, bus):
        callback = Mock()

        assert bus.on(RelayEvent.PIN_SET, callback) is callback
        assert bus.subscriber_count(RelayEvent.PIN_SET) == 1

    def test_on_accepts_wire_name(self, bus):
        bus.on("stateSet", Mock())

        assert bus.subscriber_count(RelayEvent.STATE_SET) == 1

    def test_unknown_event_name(self, bus):
        with pytest.raises(ValueError, match="Unknown relay event"):
            bus.on("stateChanged", Mock())

    def test_off(self, bus):
        callback = Mock()
        bus.on(RelayEvent.STATE_READ, callback)

        assert bus.off(RelayEvent.STATE_READ, callback) is True
        assert bus.off(RelayEvent.STATE_READ, callback) is False
        assert bus.subscriber_count(RelayEvent.STATE_READ) == 0

    def test_clear(self, bus):
        for event in RelayEvent:
            bus.on(event, Mock())

        bus.clear()

        assert all(bus.subscriber_count(event) == 0 for event in RelayEvent)


# ================================================================
# DISPATCH
# ================================================================
class TestEmit:
    def test_emit_in_registration_order(self, bus):
        calls = []
        bus.on(RelayEvent.STATE_READ, lambda s: calls.append(("first", s)))
        bus.on(RelayEvent.STATE_READ, lambda s: calls.append(("second", s)))

        notified = bus.emit(RelayEvent.STATE_READ, [0] * 8)

        assert notified == 2
        assert calls == [("first", [0] * 8), ("second", [0] * 8)]

    def test_emit_only_reaches_matching_event(self, bus):
        pin_callback = Mock()
        bus.on(RelayEvent.PIN_SET, pin_callback)

        bus.emit(RelayEvent.STATE_SET, [1] * 8)

        pin_callback.assert_not_called()

    def test_no_subscribers(self, bus, logger):
        assert bus.emit(RelayEvent.STATE_READ, [0] * 8) == 0
        logger.warning.assert_not_called()

    def test_unobserved_error_logs_warning(self, bus, logger):
        assert bus.emit(RelayEvent.ERROR, RuntimeError("no response")) == 0

        message = logger.warning.call_args.args[0]
        assert "dropping" in message
        assert "no response" in message

    def test_subscriber_exception_isolated(self, bus, logger):
        after = Mock()
        bus.on(RelayEvent.PIN_SET, Mock(side_effect=RuntimeError("handler broke")))
        bus.on(RelayEvent.PIN_SET, after)

        assert bus.emit(RelayEvent.PIN_SET, {"pin": 1, "value": 1}) == 2

        after.assert_called_once_with({"pin": 1, "value": 1})
        assert "handler broke" in logger.error.call_args.args[0]

    def test_each_subscriber_gets_own_payload(self, bus):
        seen = []
        bus.on(RelayEvent.STATE_READ, lambda state: state.append("extra"))
        bus.on(RelayEvent.STATE_READ, seen.append)
        payload = [1, 0, 1, 0, 0, 0, 0, 0]

        bus.emit(RelayEvent.STATE_READ, payload)

        assert seen == [[1, 0, 1, 0, 0, 0, 0, 0]]
        assert payload == [1, 0, 1, 0, 0, 0, 0, 0]

    def test_unsubscribe_during_dispatch(self, bus):
        second = Mock()

        def first(payload):
            bus.off(RelayEvent.STATE_SET, second)

        bus.on(RelayEvent.STATE_SET, first)
        bus.on(RelayEvent.STATE_SET, second)

        bus.emit(RelayEvent.STATE_SET, [0] * 8)

        second.assert_called_once()
        assert bus.subscriber_count(RelayEvent.STATE_SET) == 1

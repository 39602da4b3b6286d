"""Unit tests for the change notification bus."""
import pytest

from services.change_bus import ChangeBus, RESERVATION_UPDATED


@pytest.mark.unit
class TestChangeBus:
    """Subscribe, publish and release."""

    def test_topic_name(self, bus):
        assert bus.topic == RESERVATION_UPDATED == "reservationUpdated"

    def test_publish_notifies_every_subscriber(self, bus):
        calls = []
        bus.subscribe(lambda: calls.append("a"))
        bus.subscribe(lambda: calls.append("b"))

        notified = bus.publish()

        assert notified == 2
        assert calls == ["a", "b"]

    def test_unsubscribe_stops_delivery(self, bus):
        calls = []
        sub = bus.subscribe(lambda: calls.append(1))

        sub.unsubscribe()
        sub.unsubscribe()
        bus.publish()

        assert calls == []
        assert not sub.active
        assert bus.subscriber_count == 0

    def test_subscription_context_releases_on_exit(self, bus):
        calls = []
        with bus.subscription(lambda: calls.append(1)):
            bus.publish()
        bus.publish()

        assert calls == [1]
        assert bus.subscriber_count == 0

    def test_failing_handler_does_not_block_others(self, bus):
        calls = []

        def broken():
            raise RuntimeError("boom")

        bus.subscribe(broken)
        bus.subscribe(lambda: calls.append(1))

        assert bus.publish() == 2
        assert calls == [1]

    def test_publish_without_subscribers(self):
        assert ChangeBus().publish() == 0

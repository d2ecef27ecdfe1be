"""Tests for SubscriptionDispatcher and Subscription."""

import threading
from queue import Empty

import pytest

from systemd_status_leds.exceptions import BusError
from systemd_status_leds.models import UnitStatus


class TestDelivery:
    """Test broadcast to subscribers."""

    @pytest.mark.unit
    def test_every_subscriber_gets_every_batch(self, dispatcher):
        first = dispatcher.subscribe()
        second = dispatcher.subscribe()
        batch = {"a.service": UnitStatus(name="a.service", active_state="active")}

        dispatcher.publish(batch)

        assert first.get(timeout=0) == batch
        assert second.get(timeout=0) == batch

    @pytest.mark.unit
    def test_empty_batch_not_delivered(self, dispatcher):
        subscription = dispatcher.subscribe()
        dispatcher.publish({})

        with pytest.raises(Empty):
            subscription.get(timeout=0)

    @pytest.mark.unit
    def test_batches_and_errors_share_one_fifo(self, dispatcher):
        subscription = dispatcher.subscribe()
        error = BusError("poll failed")
        batch = {"a.service": None}

        dispatcher.publish_error(error)
        dispatcher.publish(batch)

        assert subscription.get(timeout=0) is error
        assert subscription.get(timeout=0) == batch

    @pytest.mark.unit
    def test_unsubscribe_stops_delivery(self, dispatcher):
        subscription = dispatcher.subscribe()
        subscription.unsubscribe()
        dispatcher.publish({"a.service": None})

        assert dispatcher.subscriber_count == 0
        assert subscription.closed
        assert subscription.get(timeout=0) is None

    @pytest.mark.unit
    def test_drain(self, dispatcher):
        subscription = dispatcher.subscribe()
        dispatcher.publish({"a.service": None})
        dispatcher.publish_error(BusError("x"))

        assert subscription.drain() == 2
        with pytest.raises(Empty):
            subscription.get(timeout=0)

    @pytest.mark.integration
    def test_close_wakes_blocked_subscriber(self, dispatcher):
        subscription = dispatcher.subscribe()
        received = []

        thread = threading.Thread(target=lambda: received.append(subscription.get()), daemon=True)
        thread.start()
        dispatcher.close()
        thread.join(timeout=2.0)

        assert not thread.is_alive()
        assert received == [None]


class TestPolling:
    """Test diffing of polled unit states."""

    @pytest.mark.unit
    def test_first_sighting_is_reported(self, dispatcher, fake_bus):
        fake_bus.set_state("a.service", "active")
        subscription = dispatcher.subscribe()
        dispatcher.add("a.service")

        changes = dispatcher.poll_once()

        assert changes["a.service"].active_state == "active"
        assert subscription.get(timeout=0) == changes

    @pytest.mark.unit
    def test_unchanged_is_silent(self, dispatcher, fake_bus):
        fake_bus.set_state("a.service", "active")
        dispatcher.add("a.service")
        dispatcher.poll_once()

        assert dispatcher.poll_once() == {}

    @pytest.mark.unit
    def test_transition_is_reported(self, dispatcher, fake_bus):
        fake_bus.set_state("a.service", "active")
        fake_bus.set_state("b.service", "active")
        dispatcher.add("a.service")
        dispatcher.add("b.service")
        dispatcher.poll_once()

        fake_bus.set_state("a.service", "failed", "failed")
        changes = dispatcher.poll_once()

        assert list(changes) == ["a.service"]
        assert changes["a.service"].active_state == "failed"

    @pytest.mark.unit
    def test_sub_state_change_is_reported(self, dispatcher, fake_bus):
        fake_bus.set_state("a.service", "active", "running")
        dispatcher.add("a.service")
        dispatcher.poll_once()

        fake_bus.set_state("a.service", "active", "exited")
        assert "a.service" in dispatcher.poll_once()

    @pytest.mark.unit
    def test_vanished_unit_reported_as_none(self, dispatcher, fake_bus):
        fake_bus.set_state("a.service", "active")
        dispatcher.add("a.service")
        dispatcher.poll_once()

        fake_bus.remove_unit("a.service")

        assert dispatcher.poll_once() == {"a.service": None}
        assert dispatcher.poll_once() == {}

    @pytest.mark.unit
    def test_never_seen_missing_unit_is_silent(self, dispatcher):
        dispatcher.add("ghost.service")
        assert dispatcher.poll_once() == {}

    @pytest.mark.unit
    def test_removed_unit_is_forgotten(self, dispatcher, fake_bus):
        fake_bus.set_state("a.service", "active")
        dispatcher.add("a.service")
        dispatcher.poll_once()

        dispatcher.remove("a.service")
        assert dispatcher.poll_once() == {}

        # Re-added units report their state again
        dispatcher.add("a.service")
        assert "a.service" in dispatcher.poll_once()

    @pytest.mark.unit
    def test_query_failure_publishes_error(self, dispatcher, fake_bus):
        fake_bus.set_state("a.service", "active")
        dispatcher.add("a.service")
        subscription = dispatcher.subscribe()
        fake_bus.status_error = BusError("systemctl timed out")

        assert dispatcher.poll_once() == {}
        assert subscription.get(timeout=0) is fake_bus.status_error

    @pytest.mark.unit
    def test_unexpected_failure_wrapped(self, dispatcher, fake_bus):
        dispatcher.add("a.service")
        subscription = dispatcher.subscribe()
        fake_bus.get_unit_statuses = lambda units: 1 / 0

        dispatcher.poll_once()

        assert isinstance(subscription.get(timeout=0), BusError)

    @pytest.mark.unit
    def test_nothing_subscribed(self, dispatcher, fake_bus):
        fake_bus.status_error = BusError("should not be called")
        assert dispatcher.poll_once() == {}

    @pytest.mark.integration
    def test_poll_thread_delivers(self, dispatcher, fake_bus):
        fake_bus.set_state("a.service", "active")
        subscription = dispatcher.subscribe()
        dispatcher.add("a.service")

        dispatcher.start()
        assert dispatcher.is_running
        message = subscription.get(timeout=2.0)
        dispatcher.stop()

        assert message["a.service"].active_state == "active"
        assert not dispatcher.is_running

"""Tests for debate event fan-out."""

import pytest

from src.api.services.debate_events import PingEvent, TimerUpdateEvent
from src.api.services.publisher import Publisher, QueueSubscriber, SubscriberSendFailedError


class _RecordingSubscriber:
    def __init__(self):
        self.payloads = []

    def deliver(self, payload):
        self.payloads.append(payload)


class _BrokenSubscriber:
    def __init__(self, error):
        self.error = error
        self.calls = 0

    def deliver(self, payload):
        self.calls += 1
        raise self.error


def test_publish_reaches_every_subscriber_in_order():
    publisher = Publisher()
    first, second = _RecordingSubscriber(), _RecordingSubscriber()
    publisher.subscribe(first)
    publisher.subscribe(second)

    for remaining in (3, 2, 1):
        assert publisher.publish(TimerUpdateEvent(timer=remaining)) == 2

    assert [p["timer"] for p in first.payloads] == [3, 2, 1]
    assert first.payloads == second.payloads


def test_failing_subscriber_is_dropped_without_affecting_others():
    publisher = Publisher()
    healthy = _RecordingSubscriber()
    closed = _BrokenSubscriber(SubscriberSendFailedError("gone"))
    crashing = _BrokenSubscriber(RuntimeError("boom"))
    publisher.subscribe(closed)
    publisher.subscribe(healthy)
    publisher.subscribe(crashing)

    assert publisher.publish(PingEvent()) == 1
    assert publisher.publish(PingEvent()) == 1

    assert publisher.subscriber_count == 1
    assert closed.calls == 1
    assert crashing.calls == 1
    assert len(healthy.payloads) == 2


def test_send_to_targets_one_subscriber():
    publisher = Publisher()
    target, other = _RecordingSubscriber(), _RecordingSubscriber()
    target_id = publisher.subscribe(target)
    publisher.subscribe(other)

    assert publisher.send_to(target_id, {"type": "timer_update", "timer": 9}) is True
    assert publisher.send_to("missing", PingEvent()) is False

    assert target.payloads == [{"type": "timer_update", "timer": 9}]
    assert other.payloads == []


def test_unsubscribe_is_idempotent():
    publisher = Publisher()
    subscriber_id = publisher.subscribe(_RecordingSubscriber(), subscriber_id="viewer-1")

    publisher.unsubscribe(subscriber_id)
    publisher.unsubscribe(subscriber_id)

    assert publisher.subscriber_ids() == []


def test_invalid_event_raises_before_delivery():
    publisher = Publisher()
    subscriber = _RecordingSubscriber()
    publisher.subscribe(subscriber)

    with pytest.raises(ValueError):
        publisher.publish({"type": "fireworks"})
    assert subscriber.payloads == []


def test_queue_subscriber_overflow_closes_it():
    subscriber = QueueSubscriber(maxsize=1)
    subscriber.deliver({"type": "ping"})

    with pytest.raises(SubscriberSendFailedError):
        subscriber.deliver({"type": "ping"})
    assert subscriber.closed is True
    assert subscriber.queue.qsize() == 1


def test_slow_queue_subscriber_is_dropped_by_publisher():
    publisher = Publisher()
    slow = QueueSubscriber(maxsize=1)
    fast = _RecordingSubscriber()
    publisher.subscribe(slow)
    publisher.subscribe(fast)

    publisher.publish(PingEvent())
    publisher.publish(PingEvent())

    assert publisher.subscriber_count == 1
    assert len(fast.payloads) == 2

"""Unit tests for the subscription registry."""

from __future__ import annotations

from threading import Thread

from stickybus.contracts.models import Subscription
from stickybus.contracts.types import DeliveryMode
from stickybus.registry.subscriptions import SubscriptionRegistry


class Ping:
    pass


class Pong:
    pass


class Listener:
    def on_ping(self, event: Ping) -> None:
        pass

    def on_ping_again(self, event: Ping) -> None:
        pass


def _sub(subscriber: object, callback, mode: DeliveryMode = DeliveryMode.IMMEDIATE) -> Subscription:
    return Subscription(subscriber, callback, mode)


def test_lookup_preserves_insertion_order() -> None:
    registry = SubscriptionRegistry()
    listeners = [Listener() for _ in range(5)]
    for listener in listeners:
        registry.add_subscription(Ping, DeliveryMode.IMMEDIATE, _sub(listener, listener.on_ping))

    snapshot = registry.lookup(Ping, DeliveryMode.IMMEDIATE)

    assert [sub.subscriber for sub in snapshot] == listeners


def test_lookup_of_unknown_type_is_empty() -> None:
    registry = SubscriptionRegistry()
    assert registry.lookup(Ping, DeliveryMode.BACKGROUND_QUEUED) == ()
    assert not registry.has_subscriptions(Ping)


def test_partitions_are_independent() -> None:
    registry = SubscriptionRegistry()
    listener = Listener()
    registry.add_subscription(Ping, DeliveryMode.IMMEDIATE, _sub(listener, listener.on_ping))
    registry.add_subscription(
        Ping,
        DeliveryMode.BACKGROUND_FIRE_AND_FORGET,
        _sub(listener, listener.on_ping_again, DeliveryMode.BACKGROUND_FIRE_AND_FORGET),
    )

    assert len(registry.lookup(Ping, DeliveryMode.IMMEDIATE)) == 1
    assert registry.lookup(Ping, DeliveryMode.BACKGROUND_QUEUED) == ()
    assert len(registry.lookup(Ping, DeliveryMode.BACKGROUND_FIRE_AND_FORGET)) == 1
    assert registry.subscriber_count(Ping) == 2


def test_same_pair_is_added_once_per_event_type() -> None:
    registry = SubscriptionRegistry()
    listener = Listener()

    assert registry.add_subscription(Ping, DeliveryMode.IMMEDIATE, _sub(listener, listener.on_ping))
    # bound methods are recreated on each access but compare equal
    assert not registry.add_subscription(
        Ping,
        DeliveryMode.BACKGROUND_QUEUED,
        _sub(listener, listener.on_ping, DeliveryMode.BACKGROUND_QUEUED),
    )
    assert registry.add_subscription(Pong, DeliveryMode.IMMEDIATE, _sub(listener, listener.on_ping))

    assert registry.subscriber_count(Ping) == 1
    assert registry.lookup(Ping, DeliveryMode.BACKGROUND_QUEUED) == ()


def test_remove_subscriptions_clears_every_partition() -> None:
    registry = SubscriptionRegistry()
    listener, other = Listener(), Listener()
    registry.add_subscription(Ping, DeliveryMode.IMMEDIATE, _sub(listener, listener.on_ping))
    registry.add_subscription(
        Ping,
        DeliveryMode.BACKGROUND_QUEUED,
        _sub(listener, listener.on_ping_again, DeliveryMode.BACKGROUND_QUEUED),
    )
    registry.add_subscription(
        Pong,
        DeliveryMode.BACKGROUND_FIRE_AND_FORGET,
        _sub(listener, listener.on_ping, DeliveryMode.BACKGROUND_FIRE_AND_FORGET),
    )
    registry.add_subscription(Ping, DeliveryMode.IMMEDIATE, _sub(other, other.on_ping))

    removed = registry.remove_subscriptions(listener)

    assert removed == 3
    assert [sub.subscriber for sub in registry.lookup(Ping, DeliveryMode.IMMEDIATE)] == [other]
    assert registry.lookup(Ping, DeliveryMode.BACKGROUND_QUEUED) == ()
    assert not registry.has_subscriptions(Pong)
    assert registry.event_types() == frozenset({Ping})


def test_remove_unknown_subscriber_is_noop() -> None:
    registry = SubscriptionRegistry()
    assert registry.remove_subscriptions(Listener()) == 0


def test_snapshot_is_not_affected_by_later_mutation() -> None:
    registry = SubscriptionRegistry()
    listener = Listener()
    registry.add_subscription(Ping, DeliveryMode.IMMEDIATE, _sub(listener, listener.on_ping))
    snapshot = registry.lookup(Ping, DeliveryMode.IMMEDIATE)

    registry.remove_subscriptions(listener)

    assert len(snapshot) == 1
    assert registry.lookup(Ping, DeliveryMode.IMMEDIATE) == ()


def test_concurrent_registration_keeps_every_subscription() -> None:
    registry = SubscriptionRegistry()
    listeners = [Listener() for _ in range(200)]

    def _add(chunk: list[Listener]) -> None:
        for listener in chunk:
            registry.add_subscription(
                Ping, DeliveryMode.IMMEDIATE, _sub(listener, listener.on_ping)
            )

    threads = [Thread(target=_add, args=(listeners[i::4],)) for i in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert registry.subscriber_count(Ping) == 200

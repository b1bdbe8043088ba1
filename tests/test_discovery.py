"""Tests for decorator-declared bindings."""

from __future__ import annotations

from dataclasses import dataclass

from stickybus.bus import EventBus
from stickybus.contracts.models import Binding
from stickybus.contracts.types import DeliveryMode
from stickybus.discovery import bindings_for, subscribe
from stickybus.recorder import EventRecorder


@dataclass(frozen=True)
class Ping:
    id: int


@dataclass(frozen=True)
class Pong:
    id: int


class Display:
    def __init__(self) -> None:
        self.seen: list[object] = []

    @subscribe(Ping)
    def show(self, event: Ping) -> None:
        self.seen.append(("show", event))

    @subscribe(Ping, DeliveryMode.BACKGROUND_QUEUED)
    @subscribe(Pong, "BACKGROUND_FIRE_AND_FORGET")
    def persist(self, event: object) -> None:
        self.seen.append(("persist", event))

    def on_event(self, event: Ping) -> None:
        # naming conventions carry no meaning
        self.seen.append(("on_event", event))


class LoudDisplay(Display):
    @subscribe(Pong)
    def shout(self, event: Pong) -> None:
        self.seen.append(("shout", event))


class SelfDescribing:
    def __init__(self) -> None:
        self.recorder = EventRecorder()

    def bindings(self) -> list[Binding]:
        return [Binding(Pong, DeliveryMode.IMMEDIATE, self.recorder)]


def test_bindings_follow_declaration_order() -> None:
    display = Display()

    bindings = bindings_for(display)

    assert [(b.event_type, b.mode, b.callback.__name__) for b in bindings] == [
        (Ping, DeliveryMode.IMMEDIATE, "show"),
        (Ping, DeliveryMode.BACKGROUND_QUEUED, "persist"),
        (Pong, DeliveryMode.BACKGROUND_FIRE_AND_FORGET, "persist"),
    ]
    assert all(b.callback.__self__ is display for b in bindings)


def test_subclass_handlers_follow_base_handlers() -> None:
    bindings = bindings_for(LoudDisplay())
    assert [b.callback.__name__ for b in bindings] == ["show", "persist", "persist", "shout"]


def test_undecorated_objects_have_no_bindings() -> None:
    assert bindings_for(object()) == []


def test_subscriber_protocol_supplies_its_own_bindings() -> None:
    subscriber = SelfDescribing()
    bindings = bindings_for(subscriber)
    assert len(bindings) == 1
    assert bindings[0].callback is subscriber.recorder


def test_discovered_bindings_register_and_unregister(bus: EventBus) -> None:
    display = Display()
    assert bus.register(display, bindings_for(display)) == 3

    bus.post(Ping(id=1))
    assert ("show", Ping(id=1)) in display.seen
    assert ("on_event", Ping(id=1)) not in display.seen

    assert bus.unregister(display) == 3
    assert not bus.has_subscribers(Ping)
    assert not bus.has_subscribers(Pong)

"""Event types used by the demo scenarios."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Ping:
    id: int


@dataclass(frozen=True, slots=True)
class Status:
    state: str


@dataclass(frozen=True, slots=True)
class Unhandled:
    pass

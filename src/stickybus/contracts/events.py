"""Events synthesized by the bus itself."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class NoSubscriberEvent:
    """Posted when an event reached no subscription in any delivery mode."""

    bus: Any
    original_event: Any

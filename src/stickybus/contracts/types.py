"""Shared enums for bus contracts."""

from __future__ import annotations

from enum import Enum


class DeliveryMode(str, Enum):
    """How a subscription receives posted events."""

    IMMEDIATE = "IMMEDIATE"
    BACKGROUND_QUEUED = "BACKGROUND_QUEUED"
    BACKGROUND_FIRE_AND_FORGET = "BACKGROUND_FIRE_AND_FORGET"

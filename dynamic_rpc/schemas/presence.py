"""Presence Schemas - response models for the presence and settings routes."""

from typing import Any

from pydantic import BaseModel


class LaneStatus(BaseModel):
    name: str
    armed: bool
    index: int
    lines: list[str]


class PresenceStatus(BaseModel):
    """Scheduler state plus the last event handed to the host bus."""
    enabled: bool
    now_anchor: int | None = None
    lanes: list[LaneStatus]
    last_event: dict[str, Any] | None = None


class ActivityEnvelope(BaseModel):
    enabled: bool
    activity: dict[str, Any] | None = None

"""Scenario descriptor data structures."""

from __future__ import annotations

import string
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Canonical key names; arrow keys also accept an "Arrow" prefix.
LETTER_KEYS = frozenset(string.ascii_uppercase)
ARROW_KEYS = frozenset({"Up", "Down", "Left", "Right"})
VALID_KEYS = LETTER_KEYS | ARROW_KEYS


def normalize_key(name: str) -> str:
    """Map a scenario key name to its canonical form (``ArrowUp`` -> ``Up``)."""
    if name.startswith("Arrow") and name[5:] in ARROW_KEYS:
        return name[5:]
    if name in VALID_KEYS:
        return name
    raise ValueError(f"unknown key '{name}'")


class CameraConfig(BaseModel):
    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0

    @field_validator("zoom")
    @classmethod
    def default_zoom(cls, v: float) -> float:
        # A zero zoom means "not set"
        if v == 0:
            return 1.0
        if v < 0:
            raise ValueError("zoom must be positive")
        return v


class ClickSpec(BaseModel):
    x: int
    y: int
    button: Literal["left", "right", "middle"] = "left"


class Event(BaseModel):
    """One timed entry of a scenario: a key transition, a click, or a capture."""

    model_config = ConfigDict(extra="forbid")

    frame: int = Field(ge=0)
    key: Optional[str] = None
    action: Optional[Literal["down", "up", "press"]] = None
    click: Optional[ClickSpec] = None
    capture: Optional[str] = None

    @field_validator("key")
    @classmethod
    def canonical_key(cls, v: Optional[str]) -> Optional[str]:
        return normalize_key(v) if v is not None else None

    @model_validator(mode="after")
    def check_single_kind(self) -> "Event":
        kinds = [k for k in ("key", "click", "capture") if getattr(self, k) is not None]
        if len(kinds) != 1:
            raise ValueError(
                f"event at frame {self.frame} must have exactly one of key, click, capture"
            )
        if self.key is not None and self.action is None:
            raise ValueError(f"key event at frame {self.frame} requires an action")
        if self.key is None and self.action is not None:
            raise ValueError(f"action without key at frame {self.frame}")
        return self

    @property
    def kind(self) -> str:
        if self.key is not None:
            return "key"
        if self.click is not None:
            return "click"
        return "capture"


class Scenario(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    seed: int = 0
    test_mode: bool = False
    camera: Optional[CameraConfig] = None
    events: list[Event] = Field(default_factory=list)

    def max_frame(self) -> int | None:
        """Highest frame referenced by any event, or None without events."""
        if not self.events:
            return None
        return max(e.frame for e in self.events)

    def capture_filenames(self) -> list[str]:
        return [e.capture for e in self.events if e.capture is not None]

    def events_by_frame(self) -> dict[int, list[Event]]:
        """Group events by frame, keeping declaration order within a frame."""
        grouped: dict[int, list[Event]] = {}
        for event in self.events:
            grouped.setdefault(event.frame, []).append(event)
        return grouped

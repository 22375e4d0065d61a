"""Baseline registry data structures."""

from __future__ import annotations

from pydantic import BaseModel, Field


class BaselineEntry(BaseModel):
    scenario: str
    filename: str
    image_path: str  # relative path from baseline_root to the PNG
    image_hash: str  # SHA-256 hex digest
    promoted_at: str  # ISO timestamp
    run_id: str


class BaselineRegistry(BaseModel):
    last_updated: str = ""
    baselines: dict[str, BaselineEntry] = Field(default_factory=dict)
    # key format: "{scenario}__{filename}"

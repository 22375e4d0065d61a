"""Run result data structures produced by the event player and orchestrator."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class RunMetrics(BaseModel):
    """Timing and volume figures for one scenario run. Informational only."""
    frames: int = 0
    captures: int = 0
    draw_commands: int = 0
    duration_seconds: float = 0.0
    step_seconds: list[float] = Field(default_factory=list)
    render_seconds: list[float] = Field(default_factory=list)

    @property
    def avg_draw_commands(self) -> float:
        if self.frames == 0:
            return 0.0
        return self.draw_commands / self.frames

    @property
    def mean_step_ms(self) -> float:
        if not self.step_seconds:
            return 0.0
        return 1000 * sum(self.step_seconds) / len(self.step_seconds)

    @property
    def mean_render_ms(self) -> float:
        if not self.render_seconds:
            return 0.0
        return 1000 * sum(self.render_seconds) / len(self.render_seconds)


class CaptureSet(BaseModel):
    """Images written by one scenario run, keyed by capture filename."""
    scenario: str
    directory: Path
    files: dict[str, Path] = Field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.files)


class PlaybackResult(BaseModel):
    capture_set: CaptureSet
    metrics: RunMetrics = Field(default_factory=RunMetrics)
    test_mode: bool = False


class ScenarioRun(BaseModel):
    """Outcome of one scenario within a batch run."""
    scenario: str
    source: str = ""  # scenario file path
    status: str  # passed, fault, invalid
    captures: list[str] = Field(default_factory=list)
    metrics: Optional[RunMetrics] = None
    error: Optional[str] = None

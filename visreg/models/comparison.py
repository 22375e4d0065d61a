"""Comparison result data structures produced by the comparator."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class FileStatus(str, Enum):
    MATCHING = "matching"
    DIFFERENT = "different"
    MISSING_BASELINE = "missing-baseline"
    MISSING_CAPTURE = "missing-capture"


class FileComparison(BaseModel):
    filename: str
    status: FileStatus
    diff_path: Optional[str] = None  # only for different files with a generated diff
    diff_ratio: Optional[float] = None  # fraction of changed pixels, when measured
    message: str = ""


class ComparisonResult(BaseModel):
    """Outcome of comparing one scenario's captures against its baselines."""

    scenario: str
    files: list[FileComparison] = Field(default_factory=list)
    missing_baseline_dir: bool = False
    missing_capture_dir: bool = False

    def _count(self, status: FileStatus) -> int:
        return sum(1 for f in self.files if f.status == status)

    @property
    def matching(self) -> int:
        return self._count(FileStatus.MATCHING)

    @property
    def different(self) -> int:
        return self._count(FileStatus.DIFFERENT)

    @property
    def missing_baseline(self) -> int:
        return self._count(FileStatus.MISSING_BASELINE)

    @property
    def missing_capture(self) -> int:
        return self._count(FileStatus.MISSING_CAPTURE)

    @property
    def diff_paths(self) -> list[str]:
        return [f.diff_path for f in self.files if f.diff_path]

    @property
    def passed(self) -> bool:
        # Stale baselines (missing-capture) are reported but never fail a run
        return (
            self.different == 0
            and self.missing_baseline == 0
            and not self.missing_baseline_dir
            and not self.missing_capture_dir
        )


class ComparisonSummary(BaseModel):
    """Aggregate over one comparator invocation; never persisted."""

    results: list[ComparisonResult] = Field(default_factory=list)
    invalid_scenarios: list[str] = Field(default_factory=list)

    @property
    def matching(self) -> int:
        return sum(r.matching for r in self.results)

    @property
    def different(self) -> int:
        return sum(r.different for r in self.results)

    @property
    def missing_baseline(self) -> int:
        return sum(r.missing_baseline for r in self.results)

    @property
    def missing_capture(self) -> int:
        return sum(r.missing_capture for r in self.results)

    @property
    def missing_baseline_dirs(self) -> int:
        return sum(1 for r in self.results if r.missing_baseline_dir)

    @property
    def missing_capture_dirs(self) -> int:
        return sum(1 for r in self.results if r.missing_capture_dir)

    @property
    def passed(self) -> bool:
        return not self.invalid_scenarios and all(r.passed for r in self.results)

"""Comparator — diffs staged captures against the baseline store."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from visreg.baseline.store import IMAGE_SUFFIX, BaselineStore
from visreg.errors import DiffGenerationUnavailable, MissingBaseline, MissingBaselineDir
from visreg.models.comparison import ComparisonResult, ComparisonSummary, FileComparison, FileStatus

from .diff import generate_diff
from .strategies import ComparisonStrategy, ExactStrategy

logger = logging.getLogger(__name__)

DIFF_DIRNAME = "diff"


class Comparator:
    """Computes ComparisonResults. Never writes to the baseline store."""

    def __init__(
        self,
        store: BaselineStore,
        staging_root: Path,
        strategy: ComparisonStrategy | None = None,
        generate_diffs: bool = True,
    ):
        self.store = store
        self.staging_root = Path(staging_root)
        self.strategy = strategy or ExactStrategy()
        self.generate_diffs = generate_diffs

    def capture_dir(self, scenario: str) -> Path:
        return self.staging_root / scenario

    def diff_dir(self, scenario: str) -> Path:
        return self.capture_dir(scenario) / DIFF_DIRNAME

    def compare_all(self, scenarios: list[str]) -> ComparisonSummary:
        summary = ComparisonSummary()
        for scenario in scenarios:
            summary.results.append(self.compare(scenario))
        return summary

    def compare(self, scenario: str) -> ComparisonResult:
        result = ComparisonResult(scenario=scenario)
        capture_dir = self.capture_dir(scenario)

        # Diff artifacts only ever describe the latest comparison
        shutil.rmtree(self.diff_dir(scenario), ignore_errors=True)

        captures: list[str] = []
        if capture_dir.is_dir():
            captures = sorted(
                p.name for p in capture_dir.iterdir() if p.is_file() and p.suffix == IMAGE_SUFFIX
            )
        else:
            result.missing_capture_dir = True
            logger.warning("No captures for %s in %s", scenario, capture_dir)

        try:
            baselines = set(self.store.list_files(scenario))
        except MissingBaselineDir:
            result.missing_baseline_dir = True
            baselines = set()
            logger.warning("No baseline directory for %s", scenario)

        for filename in captures:
            result.files.append(self._compare_file(scenario, filename))

        for filename in sorted(baselines - set(captures)):
            result.files.append(FileComparison(
                filename=filename,
                status=FileStatus.MISSING_CAPTURE,
                message="baseline has no current capture",
            ))

        logger.info(
            "Compared %s: %d matching, %d different, %d missing baseline, %d missing capture",
            scenario, result.matching, result.different, result.missing_baseline, result.missing_capture,
        )
        return result

    def _compare_file(self, scenario: str, filename: str) -> FileComparison:
        current = (self.capture_dir(scenario) / filename).read_bytes()
        try:
            baseline = self.store.read_bytes(scenario, filename)
        except (MissingBaseline, MissingBaselineDir):
            return FileComparison(
                filename=filename,
                status=FileStatus.MISSING_BASELINE,
                message="no baseline image",
            )

        verdict = self.strategy.compare(baseline, current)
        if verdict.matches:
            return FileComparison(
                filename=filename,
                status=FileStatus.MATCHING,
                diff_ratio=verdict.diff_ratio,
                message=verdict.message,
            )

        comparison = FileComparison(
            filename=filename,
            status=FileStatus.DIFFERENT,
            diff_ratio=verdict.diff_ratio,
            message=verdict.message,
        )
        if self.generate_diffs:
            try:
                path = generate_diff(baseline, current, self.diff_dir(scenario) / filename)
                comparison.diff_path = str(path)
            except DiffGenerationUnavailable as e:
                logger.warning("Diff unavailable for %s/%s: %s", scenario, filename, e)
        return comparison

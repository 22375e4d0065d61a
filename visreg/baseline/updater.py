"""Baseline updater — explicit promotion of current captures to golden images."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .registry import BaselineRegistryManager
from .store import IMAGE_SUFFIX, BaselineStore

logger = logging.getLogger(__name__)


@dataclass
class PromotionResult:
    scenario: str
    updated: list[str] = field(default_factory=list)
    skipped_reason: str | None = None


class BaselineUpdater:
    """Copies a scenario's staged captures into the baseline store.

    Files are overwritten by name. Baseline files without a current capture
    are left in place; pruning them is a manual job.
    """

    def __init__(
        self,
        store: BaselineStore,
        registry_manager: BaselineRegistryManager,
        staging_root: Path,
    ):
        self.store = store
        self.registry_manager = registry_manager
        self.staging_root = Path(staging_root)

    def staged_files(self, scenario: str) -> list[Path]:
        """Capture images staged for a scenario; diff artifacts are excluded."""
        directory = self.staging_root / scenario
        if not directory.is_dir():
            return []
        return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix == IMAGE_SUFFIX)

    def promote(self, scenario: str, run_id: str) -> PromotionResult:
        result = PromotionResult(scenario=scenario)
        if not (self.staging_root / scenario).is_dir():
            result.skipped_reason = "no captures staged (run the scenario first)"
            logger.warning("Nothing to promote for %s: %s", scenario, result.skipped_reason)
            return result

        sources = self.staged_files(scenario)
        if not sources:
            # A run without captures still gets a baseline directory to compare against
            self.store.scenario_dir(scenario).mkdir(parents=True, exist_ok=True)
            logger.info("Scenario %s captured nothing; created empty baseline directory", scenario)
            return result

        registry = self.registry_manager.load()
        for source in sources:
            dest = self.store.write(scenario, source.name, source)
            self.registry_manager.record(registry, scenario, source.name, dest, run_id)
            result.updated.append(source.name)
        self.registry_manager.save(registry)

        logger.info("Promoted %d baseline(s) for %s", len(result.updated), scenario)
        return result

"""Baseline registry — an audit manifest of every promoted baseline image."""

from __future__ import annotations

import hashlib
import json
import logging
import time
from pathlib import Path

from visreg.models.baseline import BaselineEntry, BaselineRegistry

logger = logging.getLogger(__name__)


class BaselineRegistryManager:
    """Manages the JSON registry that records who promoted which baseline, and when."""

    def __init__(self, registry_path: Path, baseline_root: Path):
        self.registry_path = registry_path
        self.baseline_root = baseline_root

    def load(self) -> BaselineRegistry:
        """Load registry from disk, or create a new one."""
        if self.registry_path.exists():
            try:
                with open(self.registry_path) as f:
                    data = json.load(f)
                return BaselineRegistry(**data)
            except Exception as e:
                logger.warning("Failed to load baseline registry: %s. Creating new.", e)
        return BaselineRegistry()

    def save(self, registry: BaselineRegistry) -> None:
        """Persist registry to disk."""
        self.registry_path.parent.mkdir(parents=True, exist_ok=True)
        registry.last_updated = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())
        with open(self.registry_path, "w") as f:
            json.dump(registry.model_dump(), f, indent=2, sort_keys=True)
        logger.debug("Saved baseline registry to %s", self.registry_path)

    def _baseline_key(self, scenario: str, filename: str) -> str:
        return f"{scenario}__{filename}"

    def get_entry(self, registry: BaselineRegistry, scenario: str, filename: str) -> BaselineEntry | None:
        return registry.baselines.get(self._baseline_key(scenario, filename))

    def record(
        self,
        registry: BaselineRegistry,
        scenario: str,
        filename: str,
        image_path: Path,
        run_id: str,
    ) -> BaselineEntry:
        """Register a freshly promoted baseline image."""
        image_hash = hashlib.sha256(image_path.read_bytes()).hexdigest()

        # Relative path from baseline_root for portability
        rel_path = image_path.relative_to(self.baseline_root).as_posix()

        entry = BaselineEntry(
            scenario=scenario,
            filename=filename,
            image_path=rel_path,
            image_hash=image_hash,
            promoted_at=time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            run_id=run_id,
        )
        registry.baselines[self._baseline_key(scenario, filename)] = entry
        return entry

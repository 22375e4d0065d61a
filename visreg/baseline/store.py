"""Baseline store — the committed golden images, one directory per scenario."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from visreg.errors import MissingBaseline, MissingBaselineDir

logger = logging.getLogger(__name__)

IMAGE_SUFFIX = ".png"


class BaselineStore:
    """Read access to ``<root>/<scenario>/<file>.png``, plus the single write path.

    Only the baseline updater calls :meth:`write`; everything else treats the
    store as read-only.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def scenario_dir(self, scenario: str) -> Path:
        return self.root / scenario

    def has_scenario(self, scenario: str) -> bool:
        return self.scenario_dir(scenario).is_dir()

    def list_files(self, scenario: str) -> list[str]:
        """Baseline image filenames for a scenario, sorted."""
        directory = self.scenario_dir(scenario)
        if not directory.is_dir():
            raise MissingBaselineDir(scenario)
        return sorted(p.name for p in directory.iterdir() if p.is_file() and p.suffix == IMAGE_SUFFIX)

    def path_for(self, scenario: str, filename: str) -> Path:
        return self.scenario_dir(scenario) / filename

    def read_bytes(self, scenario: str, filename: str) -> bytes:
        if not self.has_scenario(scenario):
            raise MissingBaselineDir(scenario)
        path = self.path_for(scenario, filename)
        if not path.is_file():
            raise MissingBaseline(scenario, filename)
        return path.read_bytes()

    def write(self, scenario: str, filename: str, source: Path) -> Path:
        """Copy a capture over the baseline file of the same name."""
        dest = self.path_for(scenario, filename)
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, dest)
        logger.debug("Wrote baseline %s", dest)
        return dest

"""Harness orchestrator — coordinates run, compare, promote, and report stages."""

from __future__ import annotations

import logging
import time
import uuid
from pathlib import Path
from typing import Optional

from visreg.baseline.registry import BaselineRegistryManager
from visreg.baseline.store import BaselineStore
from visreg.baseline.updater import BaselineUpdater, PromotionResult
from visreg.comparator.comparator import Comparator
from visreg.comparator.strategies import build_strategy
from visreg.errors import HarnessError, InvalidScenario, ScenarioNotFound, SimulationFault
from visreg.models.comparison import ComparisonResult, ComparisonSummary
from visreg.models.config import ComparisonConfig, HarnessConfig
from visreg.models.run_result import ScenarioRun
from visreg.models.scenario import Scenario
from visreg.player.player import EventPlayer
from visreg.reporter.reporter import BugReporter
from visreg.scenarios.loader import discover_scenarios, find_scenario, load_scenario
from visreg.scenarios.validator import check_scenario_name
from visreg.simulation.loader import load_factory

logger = logging.getLogger(__name__)


class Orchestrator:
    """Runs harness commands over one scenario or all of them.

    Failures are isolated per scenario: a fault or invalid descriptor is
    recorded and the batch moves on to the next scenario.
    """

    def __init__(self, config: HarnessConfig):
        self.config = config
        self.scenarios_dir = Path(config.scenarios_dir)
        self.staging_root = Path(config.staging_root)
        self.store = BaselineStore(Path(config.baseline_root))
        self.registry_manager = BaselineRegistryManager(
            registry_path=Path(config.baseline_root) / "registry.json",
            baseline_root=Path(config.baseline_root),
        )

    # ------------------------------------------------------------------
    # Scenario resolution
    # ------------------------------------------------------------------

    def scenario_files(self, ref: Optional[str] = None) -> list[Path]:
        if ref:
            return [find_scenario(ref, self.scenarios_dir)]
        return discover_scenarios(self.scenarios_dir)

    @staticmethod
    def _claim_name(scenario: Scenario, path: Path, seen: dict[str, Path]) -> None:
        """Record which file owns a scenario name; a second owner is invalid."""
        owner = seen.get(scenario.name)
        if owner is not None and owner != path:
            raise InvalidScenario(
                scenario.name, [f"duplicate scenario name '{scenario.name}' (also in {owner.name})"],
            )
        seen[scenario.name] = path

    def scenario_names(self, ref: Optional[str] = None) -> tuple[list[str], list[str]]:
        """Names to compare or promote, plus descriptions of invalid scenario files.

        A reference that is not a scenario file is taken as a bare scenario
        name, so baselines can be compared without the descriptor at hand.
        """
        if ref:
            try:
                path = find_scenario(ref, self.scenarios_dir)
            except ScenarioNotFound:
                name_error = check_scenario_name(ref)
                if name_error:
                    return [], [str(InvalidScenario(ref, [name_error]))]
                return [ref], []
            try:
                return [load_scenario(path).name], []
            except InvalidScenario as e:
                return [], [str(e)]

        names, invalid = [], []
        seen: dict[str, Path] = {}
        for path in discover_scenarios(self.scenarios_dir):
            try:
                scenario = load_scenario(path)
                self._claim_name(scenario, path, seen)
            except InvalidScenario as e:
                logger.error("%s", e)
                invalid.append(str(e))
                continue
            names.append(scenario.name)
        return names, invalid

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _new_player(self) -> EventPlayer:
        # Fresh collaborators per scenario; no state crosses scenario runs
        simulation = load_factory(self.config.simulation_factory)()
        renderer = load_factory(self.config.renderer_factory)()
        return EventPlayer(simulation, renderer, self.staging_root)

    def run_scenario(
        self,
        path: Path,
        test_mode: Optional[bool] = None,
        seen: Optional[dict[str, Path]] = None,
    ) -> ScenarioRun:
        """Load and replay one scenario file, recording rather than raising failures.

        ``seen`` maps scenario names to the file that already ran them in this
        batch; a second file with the same name is recorded as invalid.
        """
        try:
            scenario = load_scenario(path)
            if seen is not None:
                self._claim_name(scenario, path, seen)
        except InvalidScenario as e:
            logger.error("%s", e)
            return ScenarioRun(scenario=e.scenario, source=str(path), status="invalid", error=str(e))

        try:
            result = self._new_player().play(scenario, test_mode=test_mode)
        except SimulationFault as e:
            logger.error("%s", e)
            return ScenarioRun(scenario=scenario.name, source=str(path), status="fault", error=str(e))
        except InvalidScenario as e:
            logger.error("%s", e)
            return ScenarioRun(scenario=scenario.name, source=str(path), status="invalid", error=str(e))
        except OSError as e:
            logger.error("Staging for %s failed: %s", scenario.name, e)
            return ScenarioRun(
                scenario=scenario.name, source=str(path), status="fault",
                error=f"staging directory unusable: {e}",
            )

        return ScenarioRun(
            scenario=scenario.name,
            source=str(path),
            status="passed",
            captures=sorted(result.capture_set.files),
            metrics=result.metrics,
        )

    def run_scenarios(self, ref: Optional[str] = None, test_mode: Optional[bool] = None) -> list[ScenarioRun]:
        start = time.time()
        paths = self.scenario_files(ref)
        logger.info("=== Running %d scenario(s) ===", len(paths))
        seen: dict[str, Path] = {}
        runs = [self.run_scenario(path, test_mode=test_mode, seen=seen) for path in paths]
        logger.info("=== Run complete in %.1fs ===", time.time() - start)
        return runs

    def compare(
        self,
        ref: Optional[str] = None,
        comparison: Optional[ComparisonConfig] = None,
    ) -> ComparisonSummary:
        settings = comparison or self.config.comparison
        comparator = Comparator(
            self.store,
            self.staging_root,
            strategy=build_strategy(settings),
            generate_diffs=settings.generate_diffs,
        )
        names, invalid = self.scenario_names(ref)
        summary = comparator.compare_all(names)
        summary.invalid_scenarios = invalid
        return summary

    def update_baselines(self, ref: Optional[str] = None) -> list[PromotionResult]:
        updater = BaselineUpdater(self.store, self.registry_manager, self.staging_root)
        run_id = f"promote_{uuid.uuid4().hex[:8]}"
        names, invalid = self.scenario_names(ref)
        for message in invalid:
            logger.warning("Skipping invalid scenario: %s", message)
        return [updater.promote(name, run_id) for name in names]

    def report_bug(self, scenario: str, description: str) -> dict[str, str]:
        if not scenario.strip() or not description.strip():
            raise HarnessError("Both a scenario name and a description are required")

        definition: Optional[Scenario] = None
        scenario_file: Optional[Path] = None
        name = scenario
        try:
            scenario_file = find_scenario(scenario, self.scenarios_dir)
            definition = load_scenario(scenario_file)
            name = definition.name
        except ScenarioNotFound as e:
            logger.warning("Reporting without scenario context: %s", e)
        except InvalidScenario as e:
            name = e.scenario
            logger.warning("Reporting without scenario context: %s", e)

        # The name keys the staging directory and the report file
        name_error = check_scenario_name(name)
        if name_error:
            raise InvalidScenario(name, [name_error])

        # Attach a fresh comparison (and diff images) when captures exist
        comparison: Optional[ComparisonResult] = None
        if (self.staging_root / name).is_dir():
            comparator = Comparator(
                self.store, self.staging_root,
                strategy=build_strategy(self.config.comparison),
            )
            comparison = comparator.compare(name)

        reporter = BugReporter(self.config)
        return reporter.generate(
            name, description,
            definition=definition,
            scenario_file=scenario_file,
            comparison=comparison,
        )

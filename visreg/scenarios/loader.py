"""Scenario file discovery and loading."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from visreg.errors import InvalidScenario, ScenarioNotFound
from visreg.models.scenario import Scenario

from .validator import validate_scenario

logger = logging.getLogger(__name__)


def load_scenario(path: str | Path) -> Scenario:
    """Load and validate a scenario from a JSON file."""
    path = Path(path)
    try:
        with open(path) as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ScenarioNotFound(f"Scenario file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise InvalidScenario(path.stem, [f"not valid JSON: {e}"]) from e

    try:
        scenario = Scenario.model_validate(data)
    except ValidationError as e:
        name = data.get("name") if isinstance(data, dict) else None
        errors = [
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        ]
        raise InvalidScenario(name or path.stem, errors) from e

    errors = validate_scenario(scenario)
    if errors:
        raise InvalidScenario(scenario.name, errors)

    logger.debug("Loaded scenario %s from %s (%d events)", scenario.name, path, len(scenario.events))
    return scenario


def find_scenario(ref: str, scenarios_dir: str | Path) -> Path:
    """Resolve a scenario reference: a direct file path, or a name under scenarios_dir."""
    direct = Path(ref)
    if direct.is_file():
        return direct

    candidate = Path(scenarios_dir) / f"{ref}.json"
    if candidate.is_file():
        return candidate

    raise ScenarioNotFound(f"Scenario not found: {ref}")


def discover_scenarios(scenarios_dir: str | Path) -> list[Path]:
    """List every scenario file in the directory, sorted by file name."""
    scenarios_dir = Path(scenarios_dir)
    if not scenarios_dir.is_dir():
        logger.warning("Scenarios directory does not exist: %s", scenarios_dir)
        return []
    return sorted(scenarios_dir.glob("*.json"))

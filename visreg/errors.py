"""Error taxonomy for the visual regression harness."""

from __future__ import annotations


class HarnessError(Exception):
    """Base class for all harness errors."""


class ConfigError(HarnessError):
    """Configuration could not be loaded or a factory could not be resolved."""


class ScenarioNotFound(HarnessError):
    """A scenario reference did not resolve to a scenario file."""


class InvalidScenario(HarnessError):
    """A scenario descriptor is malformed or its events are out of order.

    Raised before any simulation work begins.
    """

    def __init__(self, scenario: str, errors: list[str]):
        self.scenario = scenario
        self.errors = list(errors)
        detail = "; ".join(self.errors) if self.errors else "invalid scenario"
        super().__init__(f"Invalid scenario '{scenario}': {detail}")


class SimulationFault(HarnessError):
    """The driven simulation or renderer failed mid-run.

    The whole scenario run is failed; none of its captures are trusted.
    """

    def __init__(self, scenario: str, frame: int | None, reason: str):
        self.scenario = scenario
        self.frame = frame
        self.reason = reason
        where = f"frame {frame}" if frame is not None else "initialization"
        super().__init__(f"Simulation fault in '{scenario}' at {where}: {reason}")


class MissingBaselineDir(HarnessError):
    """No baseline directory exists for a scenario."""

    def __init__(self, scenario: str):
        self.scenario = scenario
        super().__init__(f"No baseline directory for scenario '{scenario}'")


class MissingBaseline(HarnessError):
    """A capture has no baseline image with the same filename."""

    def __init__(self, scenario: str, filename: str):
        self.scenario = scenario
        self.filename = filename
        super().__init__(f"No baseline for {scenario}/{filename}")


class DiffGenerationUnavailable(HarnessError):
    """A visual diff could not be produced for a differing file."""


class ReportWriteError(HarnessError):
    """A bug report could not be written to disk."""

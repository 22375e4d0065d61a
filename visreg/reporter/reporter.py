"""Bug report generation orchestration."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

from visreg.errors import ReportWriteError
from visreg.models.comparison import ComparisonResult
from visreg.models.config import HarnessConfig
from visreg.models.scenario import Scenario

from .bug_report import BugReportContext, generate_markdown_report
from .json_report import generate_json_report

logger = logging.getLogger(__name__)


class BugReporter:
    """Turns a detected visual regression into a trackable report."""

    def __init__(self, config: HarnessConfig):
        self.config = config

    def generate(
        self,
        scenario: str,
        description: str,
        definition: Optional[Scenario] = None,
        scenario_file: Optional[Path] = None,
        comparison: Optional[ComparisonResult] = None,
        output_dir: Optional[Path] = None,
    ) -> dict[str, str]:
        """Write the configured report formats. Returns format -> file path."""
        out_dir = output_dir or Path(self.config.reports_dir)
        now = time.gmtime()
        ctx = BugReportContext(
            scenario=scenario,
            description=description,
            created_at=time.strftime("%Y-%m-%dT%H:%M:%SZ", now),
            baseline_dir=Path(self.config.baseline_root) / scenario,
            capture_dir=Path(self.config.staging_root) / scenario,
            scenario_file=scenario_file,
            definition=definition,
            comparison=comparison,
            reproduction=[
                f"visreg run-tests {scenario}",
                f"visreg compare {scenario}",
            ],
        )
        stem = f"{scenario}_{time.strftime('%Y%m%d_%H%M%S', now)}"
        generated = {}

        try:
            out_dir.mkdir(parents=True, exist_ok=True)

            if "markdown" in self.config.report_formats:
                path = out_dir / f"{stem}.md"
                generate_markdown_report(ctx, path)
                generated["markdown"] = str(path)
                logger.info("Markdown report: %s", path)

            if "json" in self.config.report_formats:
                path = out_dir / f"{stem}.json"
                generate_json_report(ctx, path)
                generated["json"] = str(path)
                logger.info("JSON report: %s", path)
        except OSError as e:
            raise ReportWriteError(f"Cannot write report to {out_dir}: {e}") from e

        if not generated:
            raise ReportWriteError("No report format configured")

        return generated

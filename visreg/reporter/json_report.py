"""JSON bug report output."""

from __future__ import annotations

import json
from pathlib import Path

from .bug_report import BugReportContext


def generate_json_report(ctx: BugReportContext, output_path: Path) -> None:
    """Write a machine-readable companion to the Markdown report."""
    report = {
        "scenario": ctx.scenario,
        "description": ctx.description,
        "created_at": ctx.created_at,
        "status": "open",
        "scenario_file": str(ctx.scenario_file) if ctx.scenario_file else None,
        "seed": ctx.definition.seed if ctx.definition else None,
        "test_mode": ctx.definition.test_mode if ctx.definition else None,
        "baseline_dir": str(ctx.baseline_dir),
        "capture_dir": str(ctx.capture_dir),
        "reproduction": ctx.reproduction,
        "differing_files": ctx.differing_files,
        "diff_images": ctx.comparison.diff_paths if ctx.comparison else [],
        "comparison": ctx.comparison.model_dump(mode="json") if ctx.comparison else None,
    }

    with open(output_path, "w") as f:
        json.dump(report, f, indent=2, default=str)

"""Markdown bug report output."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from visreg.models.comparison import ComparisonResult, FileStatus
from visreg.models.scenario import Scenario


@dataclass
class BugReportContext:
    scenario: str
    description: str
    created_at: str
    baseline_dir: Path
    capture_dir: Path
    scenario_file: Optional[Path] = None
    definition: Optional[Scenario] = None
    comparison: Optional[ComparisonResult] = None
    reproduction: list[str] = field(default_factory=list)

    @property
    def differing_files(self) -> list[str]:
        if self.comparison is None:
            return []
        return [f.filename for f in self.comparison.files if f.status != FileStatus.MATCHING]


def _file_rows(ctx: BugReportContext) -> list[str]:
    if ctx.comparison is None:
        return ["_No comparison was available when this report was filed._"]

    rows = [
        "| File | Status | Expected | Actual | Diff |",
        "|------|--------|----------|--------|------|",
    ]
    for f in ctx.comparison.files:
        if f.status == FileStatus.MATCHING:
            continue
        expected = f"`{ctx.baseline_dir / f.filename}`" if f.status != FileStatus.MISSING_BASELINE else "-"
        actual = f"`{ctx.capture_dir / f.filename}`" if f.status != FileStatus.MISSING_CAPTURE else "-"
        diff = f"`{f.diff_path}`" if f.diff_path else "-"
        rows.append(f"| {f.filename} | {f.status.value} | {expected} | {actual} | {diff} |")
    if len(rows) == 2:
        rows.append("| _all files matching_ | | | | |")
    return rows


def render_markdown(ctx: BugReportContext) -> str:
    lines = [
        f"# Visual regression: {ctx.scenario}",
        "",
        f"**Filed:** {ctx.created_at}  ",
        "**Status:** open",
        "",
        "## Description",
        "",
        ctx.description,
        "",
        "## Context",
        "",
        f"- Scenario: `{ctx.scenario}`",
    ]
    if ctx.scenario_file is not None:
        lines.append(f"- Scenario file: `{ctx.scenario_file}`")
    if ctx.definition is not None:
        lines.append(f"- Seed: {ctx.definition.seed}")
        lines.append(f"- Test mode: {'on' if ctx.definition.test_mode else 'off'}")
        lines.append(f"- Events: {len(ctx.definition.events)}")
        if ctx.definition.description:
            lines.append(f"- Scenario purpose: {ctx.definition.description}")

    lines += ["", "## Reproduction", ""]
    lines += [f"{i}. `{cmd}`" for i, cmd in enumerate(ctx.reproduction, 1)]

    lines += [
        "",
        "## Expected / Actual",
        "",
        f"- Expected (baseline): `{ctx.baseline_dir}`",
        f"- Actual (current run): `{ctx.capture_dir}`",
        "",
    ]
    lines += _file_rows(ctx)

    lines += [
        "",
        "## Resolution checklist",
        "",
        "- [ ] Root cause identified",
        "- [ ] Fix implemented, or the change confirmed as intended",
        "- [ ] Scenario re-run and `compare` passes",
        "- [ ] Baseline promoted with `update-baseline` only if the change is intended",
        "- [ ] Report closed",
        "",
    ]
    return "\n".join(lines)


def generate_markdown_report(ctx: BugReportContext, output_path: Path) -> None:
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(render_markdown(ctx))

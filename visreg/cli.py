"""CLI entry point for the visual regression harness."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from visreg.errors import HarnessError
from visreg.models.comparison import ComparisonSummary, FileStatus
from visreg.models.config import DEFAULT_CONFIG_PATH, HarnessConfig
from visreg.orchestrator import Orchestrator
from visreg.scenarios.loader import load_scenario

console = Console()

PASS_MARK = "[green]✓[/green]"
FAIL_MARK = "[red]✗[/red]"
WARN_MARK = "[yellow]![/yellow]"


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def load_config(path: str) -> HarnessConfig:
    """Load the config file; the default path may be absent, an explicit one may not."""
    try:
        return HarnessConfig.load(path)
    except FileNotFoundError:
        if path != DEFAULT_CONFIG_PATH:
            console.print(f"[red]Config file not found: {path}[/red]")
            sys.exit(1)
        return HarnessConfig()
    except ValueError as e:
        console.print(f"[red]Invalid config file {path}: {e}[/red]")
        sys.exit(1)


config_option = click.option(
    "--config", "-c", default=DEFAULT_CONFIG_PATH, show_default=True, help="Config file path",
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Scenario-driven visual regression harness"""
    setup_logging(verbose)


@cli.command("run-tests")
@click.argument("scenario", required=False)
@click.option("--test-mode/--no-test-mode", default=None,
              help="Override the scenario's test_mode setting")
@config_option
def run_tests(scenario: Optional[str], test_mode: Optional[bool], config: str) -> None:
    """Replay scenarios and capture frames into the staging directory."""
    cfg = load_config(config)
    orchestrator = Orchestrator(cfg)
    try:
        runs = orchestrator.run_scenarios(scenario, test_mode=test_mode)
    except HarnessError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    for run in runs:
        if run.status == "passed":
            console.print(f"{PASS_MARK} {run.scenario}: {len(run.captures)} capture(s)")
            for name in run.captures:
                console.print(f"    {Path(cfg.staging_root) / run.scenario / name}")
        else:
            console.print(f"{FAIL_MARK} {run.scenario}: {run.status} - {run.error}")

    table = Table(title="Run Summary")
    table.add_column("Scenario", style="bold")
    table.add_column("Status")
    table.add_column("Frames", justify="right")
    table.add_column("Captures", justify="right")
    table.add_column("Draws/frame", justify="right")
    table.add_column("Step (ms)", justify="right")
    table.add_column("Render (ms)", justify="right")
    table.add_column("Time (s)", justify="right")
    for run in runs:
        status = "[green]passed[/green]" if run.status == "passed" else f"[red]{run.status}[/red]"
        m = run.metrics
        table.add_row(
            run.scenario,
            status,
            str(m.frames) if m else "-",
            str(m.captures) if m else "-",
            f"{m.avg_draw_commands:.1f}" if m else "-",
            f"{m.mean_step_ms:.2f}" if m else "-",
            f"{m.mean_render_ms:.2f}" if m else "-",
            f"{m.duration_seconds:.2f}" if m else "-",
        )
    console.print(table)

    failed = [r for r in runs if r.status != "passed"]
    console.print(f"{len(runs) - len(failed)}/{len(runs)} scenario(s) ran cleanly")
    if failed:
        sys.exit(1)


def _print_comparison(summary: ComparisonSummary) -> None:
    for message in summary.invalid_scenarios:
        console.print(f"{FAIL_MARK} {message}")

    for result in summary.results:
        if result.missing_baseline_dir:
            console.print(f"{FAIL_MARK} {result.scenario}: missing-baseline-dir")
        if result.missing_capture_dir:
            console.print(f"{FAIL_MARK} {result.scenario}: missing-capture-dir (run the scenario first)")
        for f in result.files:
            label = f"{result.scenario}/{f.filename}"
            match f.status:
                case FileStatus.MATCHING:
                    console.print(f"{PASS_MARK} {label}")
                case FileStatus.DIFFERENT:
                    detail = f" ({f.message})" if f.message else ""
                    console.print(f"{FAIL_MARK} {label}: different{detail}")
                    if f.diff_path:
                        console.print(f"    diff: [blue]{f.diff_path}[/blue]")
                case FileStatus.MISSING_BASELINE:
                    console.print(f"{FAIL_MARK} {label}: missing-baseline")
                case FileStatus.MISSING_CAPTURE:
                    console.print(f"{WARN_MARK} {label}: missing-capture")

    table = Table(title="Comparison Summary")
    table.add_column("Scenario", style="bold")
    table.add_column("Matching", justify="right")
    table.add_column("Different", justify="right")
    table.add_column("Missing baseline", justify="right")
    table.add_column("Missing capture", justify="right")
    table.add_column("Status")
    for r in summary.results:
        if r.missing_baseline_dir:
            status = "[red]missing-baseline-dir[/red]"
        elif r.missing_capture_dir:
            status = "[red]missing-capture-dir[/red]"
        else:
            status = "[green]pass[/green]" if r.passed else "[red]fail[/red]"
        table.add_row(
            r.scenario, str(r.matching), str(r.different),
            str(r.missing_baseline), str(r.missing_capture), status,
        )
    table.add_row(
        "[bold]Total[/bold]",
        str(summary.matching),
        f"[red]{summary.different}[/red]" if summary.different else "0",
        str(summary.missing_baseline),
        str(summary.missing_capture),
        "[green]PASS[/green]" if summary.passed else "[red]FAIL[/red]",
    )
    console.print(table)


@cli.command()
@click.argument("scenario", required=False)
@click.option("--strategy", type=click.Choice(["exact", "perceptual"]), default=None,
              help="Override the configured comparison strategy")
@click.option("--no-diff", is_flag=True, help="Skip generating diff images")
@config_option
def compare(scenario: Optional[str], strategy: Optional[str], no_diff: bool, config: str) -> None:
    """Compare staged captures against the committed baselines."""
    cfg = load_config(config)
    settings = cfg.comparison.model_copy()
    if strategy:
        settings.strategy = strategy
    if no_diff:
        settings.generate_diffs = False

    orchestrator = Orchestrator(cfg)
    summary = orchestrator.compare(scenario, comparison=settings)
    _print_comparison(summary)
    if not summary.passed:
        sys.exit(1)


@cli.command("update-baseline")
@click.argument("scenario", required=False)
@config_option
def update_baseline(scenario: Optional[str], config: str) -> None:
    """Promote staged captures to be the new baselines."""
    cfg = load_config(config)
    orchestrator = Orchestrator(cfg)
    try:
        results = orchestrator.update_baselines(scenario)
    except OSError as e:
        console.print(f"[red]Baseline update failed: {e}[/red]")
        sys.exit(1)

    total = 0
    for r in results:
        if r.skipped_reason:
            console.print(f"{WARN_MARK} {r.scenario}: {r.skipped_reason}")
            continue
        total += len(r.updated)
        console.print(f"{PASS_MARK} {r.scenario}: {len(r.updated)} file(s) updated")
        for name in r.updated:
            console.print(f"    {Path(cfg.baseline_root) / r.scenario / name}")
    console.print(f"[green]Updated {total} baseline file(s)[/green]")


@cli.command("report-bug")
@click.argument("scenario")
@click.argument("description")
@config_option
def report_bug(scenario: str, description: str, config: str) -> None:
    """File a structured bug report for a visual regression."""
    cfg = load_config(config)
    orchestrator = Orchestrator(cfg)
    try:
        reports = orchestrator.report_bug(scenario, description)
    except HarnessError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    for fmt, path in reports.items():
        console.print(f"  {fmt.upper()} report: [blue]{path}[/blue]")
    console.print(f"[green]Filed bug report for {scenario}[/green]")


@cli.command("list")
@config_option
def list_scenarios(config: str) -> None:
    """List the scenarios in the scenarios directory."""
    cfg = load_config(config)
    orchestrator = Orchestrator(cfg)
    paths = orchestrator.scenario_files()
    if not paths:
        console.print(f"[yellow]No scenarios found in {cfg.scenarios_dir}[/yellow]")
        return

    table = Table(title="Scenarios")
    table.add_column("Name", style="bold")
    table.add_column("Seed", justify="right")
    table.add_column("Events", justify="right")
    table.add_column("Captures", justify="right")
    table.add_column("Test mode")
    table.add_column("Baseline")
    for path in paths:
        try:
            s = load_scenario(path)
        except HarnessError as e:
            table.add_row(path.stem, "-", "-", "-", "-", f"[red]{e}[/red]")
            continue
        has_baseline = orchestrator.store.has_scenario(s.name)
        table.add_row(
            s.name, str(s.seed), str(len(s.events)), str(len(s.capture_filenames())),
            "yes" if s.test_mode else "no",
            "[green]yes[/green]" if has_baseline else "[yellow]no[/yellow]",
        )
    console.print(table)


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG_PATH, help="Config file to create")
def init(config: str) -> None:
    """Create a default configuration file."""
    config_path = Path(config)
    if config_path.exists():
        if not click.confirm(f"{config_path} already exists. Overwrite?"):
            return

    cfg = HarnessConfig()
    cfg.save(config_path)
    console.print(f"[green]Created {config_path}[/green]")
    console.print("\nYou can now add scenarios and run:")
    console.print("  [blue]visreg run-tests[/blue]")
    console.print("  [blue]visreg update-baseline[/blue]   (first time only)")
    console.print("  [blue]visreg compare[/blue]")


if __name__ == "__main__":
    cli()

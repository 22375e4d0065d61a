"""Integration tests for the orchestrator: run, compare, promote, report."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from visreg.demo.renderer import DemoRenderer
from visreg.errors import ConfigError, HarnessError, InvalidScenario, ScenarioNotFound
from visreg.models.comparison import FileStatus
from visreg.orchestrator import Orchestrator
from visreg.player.player import EventPlayer

pytestmark = pytest.mark.integration


@pytest.fixture
def orchestrator(harness_config) -> Orchestrator:
    return Orchestrator(harness_config)


@pytest.fixture
def camera_pan(write_scenario, camera_pan_events) -> Path:
    return write_scenario({"name": "camera-pan", "seed": 1234, "test_mode": True,
                           "events": camera_pan_events})


class TestRunScenarios:
    """Tests for Orchestrator.run_scenarios()."""

    def test_run_writes_captures(self, orchestrator, camera_pan, harness_config):
        runs = orchestrator.run_scenarios("camera-pan")

        assert len(runs) == 1
        assert runs[0].status == "passed"
        assert runs[0].captures == ["after-up.png", "initial.png"]
        assert runs[0].metrics.frames == 32
        for name in runs[0].captures:
            assert (Path(harness_config.staging_root) / "camera-pan" / name).exists()

    def test_unknown_scenario(self, orchestrator):
        with pytest.raises(ScenarioNotFound):
            orchestrator.run_scenarios("ghost")

    def test_invalid_scenario_isolated(self, orchestrator, camera_pan, write_scenario):
        write_scenario({"name": "broken", "seed": 1, "events": [
            {"frame": 3, "capture": "a.png"},
            {"frame": 1, "capture": "b.png"},
        ]})
        runs = {r.scenario: r for r in orchestrator.run_scenarios()}

        assert runs["broken"].status == "invalid"
        assert "comes after" in runs["broken"].error
        assert runs["camera-pan"].status == "passed"

    def test_fault_isolated(self, orchestrator, camera_pan, write_scenario, faulty_simulation_cls, tmp_path):
        write_scenario({"name": "zz-later", "seed": 1, "events": [{"frame": 0, "capture": "a.png"}]})
        staging = tmp_path / "out"
        players = [
            EventPlayer(faulty_simulation_cls(fail_at=5), DemoRenderer(64, 48), staging),
            EventPlayer(faulty_simulation_cls(fail_at=100), DemoRenderer(64, 48), staging),
        ]
        with patch.object(Orchestrator, "_new_player", side_effect=players):
            runs = orchestrator.run_scenarios()

        assert [r.status for r in runs] == ["fault", "passed"]
        assert "frame 5" in runs[0].error
        assert not (staging / "camera-pan").exists()
        assert (staging / "zz-later" / "a.png").exists()

    def test_capture_write_failure_isolated(self, orchestrator, write_scenario, harness_config):
        write_scenario({"name": "a", "seed": 1, "events": [{"frame": 0, "capture": "x" * 300 + ".png"}]})
        write_scenario({"name": "b", "seed": 1, "events": [{"frame": 0, "capture": "ok.png"}]})

        runs = orchestrator.run_scenarios()

        assert [(r.scenario, r.status) for r in runs] == [("a", "fault"), ("b", "passed")]
        assert "capture write failed" in runs[0].error
        assert (Path(harness_config.staging_root) / "b" / "ok.png").exists()

    def test_duplicate_names_rejected(self, orchestrator, write_scenario, harness_config):
        write_scenario({"name": "same", "seed": 1, "events": [{"frame": 0, "capture": "one.png"}]},
                       filename="one.json")
        write_scenario({"name": "same", "seed": 1, "events": [{"frame": 0, "capture": "two.png"}]},
                       filename="two.json")

        runs = orchestrator.run_scenarios()

        assert [r.status for r in runs] == ["passed", "invalid"]
        assert "duplicate scenario name 'same' (also in one.json)" in runs[1].error
        assert sorted(p.name for p in (Path(harness_config.staging_root) / "same").iterdir()) == ["one.png"]

    def test_bad_factory(self, harness_config, camera_pan):
        harness_config.simulation_factory = "visreg.demo.world:Missing"
        with pytest.raises(ConfigError):
            Orchestrator(harness_config).run_scenarios("camera-pan")


class TestBaselineWorkflow:
    """The run -> compare -> update-baseline -> compare cycle."""

    def test_first_compare_has_no_baselines(self, orchestrator, camera_pan):
        orchestrator.run_scenarios()
        summary = orchestrator.compare()

        assert not summary.passed
        assert summary.missing_baseline_dirs == 1
        assert summary.results[0].missing_baseline == 2

    def test_promote_then_compare_passes(self, orchestrator, camera_pan, harness_config):
        orchestrator.run_scenarios()
        results = orchestrator.update_baselines()

        assert results[0].updated == ["after-up.png", "initial.png"]
        assert (Path(harness_config.baseline_root) / "registry.json").exists()
        assert orchestrator.compare().passed

        # A second replay reproduces the promoted frames exactly
        orchestrator.run_scenarios()
        summary = orchestrator.compare()
        assert summary.passed
        assert summary.matching == 2

    def test_registry_records_run_id(self, orchestrator, camera_pan, harness_config):
        orchestrator.run_scenarios()
        orchestrator.update_baselines("camera-pan")

        data = json.loads((Path(harness_config.baseline_root) / "registry.json").read_text())
        entry = data["baselines"]["camera-pan__initial.png"]
        assert entry["run_id"].startswith("promote_")
        assert entry["image_path"] == "camera-pan/initial.png"

    def test_changed_baseline_detected(self, orchestrator, camera_pan, harness_config, make_png):
        orchestrator.run_scenarios()
        orchestrator.update_baselines()
        (Path(harness_config.baseline_root) / "camera-pan" / "initial.png").write_bytes(make_png(size=(320, 240)))

        summary = orchestrator.compare("camera-pan")
        statuses = {f.filename: f.status for f in summary.results[0].files}
        assert statuses["initial.png"] == FileStatus.DIFFERENT
        assert statuses["after-up.png"] == FileStatus.MATCHING
        assert not summary.passed

    def test_compare_before_run(self, orchestrator, camera_pan):
        summary = orchestrator.compare("camera-pan")
        assert summary.results[0].missing_capture_dir
        assert not summary.passed

    def test_compare_bare_name_without_descriptor(self, orchestrator):
        summary = orchestrator.compare("no-such-file")
        assert [r.scenario for r in summary.results] == ["no-such-file"]

    def test_compare_reports_invalid_scenarios(self, orchestrator, write_scenario):
        write_scenario({"name": "broken", "seed": 1, "events": [
            {"frame": 0, "capture": "a.png"},
            {"frame": 0, "capture": "a.png"},
        ]})
        summary = orchestrator.compare()
        assert len(summary.invalid_scenarios) == 1
        assert not summary.passed

    def test_compare_flags_duplicate_names(self, orchestrator, write_scenario):
        write_scenario({"name": "same", "seed": 1}, filename="one.json")
        write_scenario({"name": "same", "seed": 1}, filename="two.json")

        summary = orchestrator.compare()

        assert [r.scenario for r in summary.results] == ["same"]
        assert len(summary.invalid_scenarios) == 1
        assert not summary.passed

    def test_empty_scenario_round_trip(self, orchestrator, write_scenario, harness_config):
        write_scenario({"name": "empty", "seed": 1, "events": []})

        assert orchestrator.run_scenarios()[0].status == "passed"
        assert not orchestrator.compare().passed

        results = orchestrator.update_baselines()
        assert results[0].skipped_reason is None
        assert (Path(harness_config.baseline_root) / "empty").is_dir()
        assert orchestrator.compare().passed

    @pytest.mark.parametrize("ref", ["../x", "a/b", ".."])
    def test_unsafe_bare_name_rejected(self, orchestrator, harness_config, ref):
        summary = orchestrator.compare(ref)
        assert summary.results == []
        assert summary.invalid_scenarios
        assert not summary.passed

        assert orchestrator.update_baselines(ref) == []
        assert not (Path(harness_config.baseline_root).parent / "x").exists()

    def test_update_without_run_is_skipped(self, orchestrator, camera_pan):
        results = orchestrator.update_baselines()
        assert results[0].updated == []
        assert results[0].skipped_reason


class TestReportBug:
    """Tests for Orchestrator.report_bug()."""

    def test_report_includes_comparison(self, orchestrator, camera_pan, harness_config):
        orchestrator.run_scenarios()
        reports = orchestrator.report_bug("camera-pan", "Camera drifts")

        data = json.loads(Path(reports["json"]).read_text())
        assert data["scenario"] == "camera-pan"
        assert data["seed"] == 1234
        assert data["comparison"]["missing_baseline_dir"] is True
        assert Path(reports["markdown"]).parent == Path(harness_config.reports_dir)

    def test_unknown_scenario_still_reported(self, orchestrator):
        reports = orchestrator.report_bug("ghost", "Something looks wrong")
        data = json.loads(Path(reports["json"]).read_text())
        assert data["scenario_file"] is None
        assert data["comparison"] is None

    def test_unsafe_name_rejected(self, orchestrator, harness_config):
        with pytest.raises(InvalidScenario):
            orchestrator.report_bug("../escape", "Outside the reports dir")
        assert not (Path(harness_config.reports_dir).parent / "escape").exists()

    @pytest.mark.parametrize("scenario,description", [("", "desc"), ("camera-pan", "  ")])
    def test_requires_scenario_and_description(self, orchestrator, scenario, description):
        with pytest.raises(HarnessError):
            orchestrator.report_bug(scenario, description)

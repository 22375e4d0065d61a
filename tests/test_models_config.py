"""Tests for configuration models."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from visreg.models.config import ComparisonConfig, HarnessConfig


class TestComparisonConfig:
    """Tests for ComparisonConfig model."""

    def test_default_values(self):
        config = ComparisonConfig()
        assert config.strategy == "exact"
        assert config.pixel_threshold == 0
        assert config.tolerance == 0.0
        assert config.generate_diffs is True

    def test_unknown_strategy_rejected(self):
        with pytest.raises(ValidationError):
            ComparisonConfig(strategy="fuzzy")

    def test_tolerance_range(self):
        with pytest.raises(ValidationError):
            ComparisonConfig(tolerance=1.5)
        with pytest.raises(ValidationError):
            ComparisonConfig(pixel_threshold=300)


class TestHarnessConfig:
    """Tests for HarnessConfig model."""

    def test_default_values(self):
        config = HarnessConfig()
        assert config.scenarios_dir == "scenarios"
        assert config.baseline_root == "testdata/golden"
        assert config.staging_root == "out/visual"
        assert config.simulation_factory == "visreg.demo.world:DemoSimulation"
        assert config.renderer_factory == "visreg.demo.renderer:DemoRenderer"
        assert config.report_formats == ["markdown"]

    def test_env_directory_resolution(self, monkeypatch):
        monkeypatch.setenv("VISREG_GOLDEN", "/data/golden")
        config = HarnessConfig(baseline_root="env:VISREG_GOLDEN")
        assert config.baseline_root == "/data/golden"

    def test_env_directory_missing(self, monkeypatch):
        monkeypatch.delenv("VISREG_NOT_SET", raising=False)
        with pytest.raises(ValidationError, match="VISREG_NOT_SET"):
            HarnessConfig(staging_root="env:VISREG_NOT_SET")

    def test_unknown_report_format(self):
        with pytest.raises(ValidationError):
            HarnessConfig(report_formats=["pdf"])

    def test_empty_report_formats_rejected(self):
        with pytest.raises(ValidationError, match="At least one report format"):
            HarnessConfig(report_formats=[])

    def test_save_and_load(self, tmp_path: Path):
        path = tmp_path / "nested" / "config.json"
        original = HarnessConfig(
            scenarios_dir="my-scenarios",
            comparison=ComparisonConfig(strategy="perceptual", tolerance=0.01),
        )
        original.save(path)
        assert path.exists()

        loaded = HarnessConfig.load(path)
        assert loaded.scenarios_dir == "my-scenarios"
        assert loaded.comparison.strategy == "perceptual"
        assert loaded.comparison.tolerance == 0.01

    def test_load_partial_file_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"baseline_root": "golden"}))
        config = HarnessConfig.load(path)
        assert config.baseline_root == "golden"
        assert config.staging_root == "out/visual"

    def test_load_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            HarnessConfig.load(tmp_path / "missing.json")

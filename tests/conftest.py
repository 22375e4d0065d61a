"""Pytest configuration and shared fixtures."""

import io
import json
from pathlib import Path
from typing import Any, Callable, Optional

import pytest
from PIL import Image

from visreg.demo.renderer import DemoRenderer
from visreg.demo.world import DemoSimulation
from visreg.models.config import ComparisonConfig, HarnessConfig
from visreg.models.scenario import Scenario
from visreg.simulation.protocol import Camera, FrameInput, FrameOutput

# Small viewport keeps rendering cheap in tests
TEST_WIDTH = 64
TEST_HEIGHT = 48


# ============================================================================
# Simulation Doubles
# ============================================================================


class RecordingSimulation:
    """Wraps the demo simulation and records every call it receives."""

    def __init__(self, inner: Optional[DemoSimulation] = None):
        self.inner = inner or DemoSimulation(TEST_WIDTH, TEST_HEIGHT)
        self.seed: Optional[int] = None
        self.initial_camera: Optional[Camera] = None
        self.init_calls = 0
        self.inputs: list[FrameInput] = []
        self.outputs: list[FrameOutput] = []

    def init_world(self, seed: int, camera: Optional[Camera] = None) -> None:
        self.init_calls += 1
        self.seed = seed
        self.initial_camera = camera
        self.inner.init_world(seed, camera)

    def step(self, frame_input: FrameInput) -> FrameOutput:
        self.inputs.append(frame_input)
        output = self.inner.step(frame_input)
        self.outputs.append(output)
        return output


class FaultySimulation(RecordingSimulation):
    """Raises from step() once the given frame is reached."""

    def __init__(self, fail_at: int):
        super().__init__()
        self.fail_at = fail_at

    def step(self, frame_input: FrameInput) -> FrameOutput:
        if frame_input.frame >= self.fail_at:
            raise RuntimeError("physics exploded")
        return super().step(frame_input)


@pytest.fixture
def recording_simulation() -> RecordingSimulation:
    return RecordingSimulation()


@pytest.fixture
def faulty_simulation_cls() -> type[FaultySimulation]:
    return FaultySimulation


@pytest.fixture
def renderer() -> DemoRenderer:
    return DemoRenderer(TEST_WIDTH, TEST_HEIGHT)


# ============================================================================
# Scenario Fixtures
# ============================================================================


@pytest.fixture
def make_scenario() -> Callable[..., Scenario]:
    """Build a Scenario from event dicts, as they would appear in JSON."""

    def _make(events: list[dict[str, Any]], name: str = "sample", **kwargs: Any) -> Scenario:
        data = {"name": name, "seed": kwargs.pop("seed", 1234), "events": events}
        data.update(kwargs)
        return Scenario.model_validate(data)

    return _make


@pytest.fixture
def camera_pan_events() -> list[dict[str, Any]]:
    return [
        {"frame": 0, "capture": "initial.png"},
        {"frame": 1, "key": "W", "action": "down"},
        {"frame": 30, "key": "W", "action": "up"},
        {"frame": 30, "capture": "after-up.png"},
    ]


@pytest.fixture
def write_scenario(tmp_path: Path) -> Callable[..., Path]:
    """Write a scenario JSON document into tmp_path/scenarios."""

    def _write(data: dict[str, Any], filename: Optional[str] = None) -> Path:
        scenarios_dir = tmp_path / "scenarios"
        scenarios_dir.mkdir(exist_ok=True)
        path = scenarios_dir / (filename or f"{data.get('name', 'scenario')}.json")
        path.write_text(json.dumps(data))
        return path

    return _write


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def harness_config(tmp_path: Path) -> HarnessConfig:
    """Config with every directory inside tmp_path."""
    return HarnessConfig(
        scenarios_dir=str(tmp_path / "scenarios"),
        baseline_root=str(tmp_path / "golden"),
        staging_root=str(tmp_path / "out"),
        reports_dir=str(tmp_path / "reports"),
        comparison=ComparisonConfig(),
        report_formats=["markdown", "json"],
    )


@pytest.fixture
def temp_config_file(harness_config: HarnessConfig, tmp_path: Path) -> Path:
    config_file = tmp_path / "visreg-config.json"
    harness_config.save(config_file)
    return config_file


# ============================================================================
# Image Fixtures
# ============================================================================


@pytest.fixture
def make_png() -> Callable[..., bytes]:
    """Encode a solid-color PNG, optionally with a few changed pixels."""

    def _make(
        color: tuple[int, int, int] = (10, 20, 30),
        size: tuple[int, int] = (8, 8),
        changed: Optional[dict[tuple[int, int], tuple[int, int, int]]] = None,
    ) -> bytes:
        image = Image.new("RGB", size, color)
        for xy, pixel in (changed or {}).items():
            image.putpixel(xy, pixel)
        buf = io.BytesIO()
        image.save(buf, format="PNG")
        return buf.getvalue()

    return _make

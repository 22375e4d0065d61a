"""Deterministic event player — replays a scenario against a simulation."""

from __future__ import annotations

import logging
import shutil
import time
from pathlib import Path
from typing import Optional

from visreg.errors import InvalidScenario, SimulationFault
from visreg.models.run_result import CaptureSet, PlaybackResult, RunMetrics
from visreg.models.scenario import Scenario
from visreg.scenarios.validator import validate_scenario
from visreg.simulation.protocol import Camera, FrameOutput, Renderer, Simulation

from .capture_sink import FrameCaptureSink
from .input_state import InputState

logger = logging.getLogger(__name__)

# Frames stepped after the last scheduled event so its effects are rendered
SETTLE_FRAMES = 1


class EventPlayer:
    """Replays one scenario frame by frame and produces its CaptureSet.

    Each frame f applies the events scheduled at f in declaration order,
    steps the simulation exactly once with the accumulated input, renders,
    and writes any captures requested at f from that rendered frame.
    Nothing here depends on wall-clock time; timings are only measured.
    """

    def __init__(self, simulation: Simulation, renderer: Renderer, staging_root: Path):
        self.simulation = simulation
        self.renderer = renderer
        self.staging_root = Path(staging_root)

    def staging_dir(self, scenario_name: str) -> Path:
        return self.staging_root / scenario_name

    def play(self, scenario: Scenario, test_mode: Optional[bool] = None) -> PlaybackResult:
        """Run the scenario to completion.

        Args:
            scenario: The scenario to replay.
            test_mode: Overrides the scenario's own ``test_mode`` when not None.

        Raises:
            InvalidScenario: before any simulation work, for out-of-order
                frames or duplicate capture filenames.
            SimulationFault: if the simulation or renderer fails, or a
                capture cannot be written; the partial staging directory
                is removed.
        """
        errors = validate_scenario(scenario)
        if errors:
            raise InvalidScenario(scenario.name, errors)

        effective_test_mode = scenario.test_mode if test_mode is None else test_mode
        output_dir = self.staging_dir(scenario.name)
        self._reset_dir(output_dir)

        logger.info("Running scenario %s (seed=%d, %d events%s)",
                    scenario.name, scenario.seed, len(scenario.events),
                    ", test mode" if effective_test_mode else "")

        sink = FrameCaptureSink(output_dir, self.renderer, test_mode=effective_test_mode)
        metrics = RunMetrics()
        max_frame = scenario.max_frame()
        if max_frame is None:
            logger.info("Scenario %s has no events; nothing to capture", scenario.name)
            return self._result(scenario, sink, metrics, effective_test_mode)

        start = time.perf_counter()
        try:
            self._replay(scenario, sink, metrics, max_frame + SETTLE_FRAMES, effective_test_mode)
        except Exception:
            # Partial capture sets must never be compared or promoted
            shutil.rmtree(output_dir, ignore_errors=True)
            raise
        metrics.duration_seconds = round(time.perf_counter() - start, 4)

        logger.info("Scenario %s complete: %d frames, %d captures",
                    scenario.name, metrics.frames, metrics.captures)
        return self._result(scenario, sink, metrics, effective_test_mode)

    def _replay(
        self,
        scenario: Scenario,
        sink: FrameCaptureSink,
        metrics: RunMetrics,
        last_frame: int,
        test_mode: bool,
    ) -> None:
        camera = None
        if scenario.camera is not None:
            camera = Camera(x=scenario.camera.x, y=scenario.camera.y, zoom=scenario.camera.zoom)
        try:
            self.simulation.init_world(scenario.seed, camera)
        except Exception as e:
            raise SimulationFault(scenario.name, None, str(e)) from e

        state = InputState()
        schedule = scenario.events_by_frame()

        for frame in range(last_frame + 1):
            state.begin_frame()
            for event in schedule.get(frame, []):
                if event.capture is not None:
                    sink.request(event.capture)
                else:
                    state.apply(event)

            frame_input = state.snapshot(frame, test_mode=test_mode)

            step_start = time.perf_counter()
            try:
                output = self.simulation.step(frame_input)
            except Exception as e:
                raise SimulationFault(scenario.name, frame, str(e)) from e
            if not isinstance(output, FrameOutput):
                raise SimulationFault(
                    scenario.name, frame,
                    f"step returned {type(output).__name__}, expected FrameOutput",
                )
            metrics.step_seconds.append(time.perf_counter() - step_start)

            render_start = time.perf_counter()
            try:
                image = sink.render(output)
            except Exception as e:
                raise SimulationFault(scenario.name, frame, f"render failed: {e}") from e
            metrics.render_seconds.append(time.perf_counter() - render_start)

            metrics.frames += 1
            metrics.draw_commands += len(output.draw)
            if sink.has_pending:
                try:
                    metrics.captures += len(sink.flush(image))
                except OSError as e:
                    raise SimulationFault(scenario.name, frame, f"capture write failed: {e}") from e

    def _reset_dir(self, output_dir: Path) -> None:
        # Captures from a previous run are never mixed with this one
        if output_dir.exists():
            logger.debug("Clearing previous captures in %s", output_dir)
            shutil.rmtree(output_dir)

    def _result(
        self, scenario: Scenario, sink: FrameCaptureSink, metrics: RunMetrics, test_mode: bool,
    ) -> PlaybackResult:
        capture_set = CaptureSet(
            scenario=scenario.name,
            directory=sink.output_dir,
            files=dict(sink.captured),
        )
        return PlaybackResult(capture_set=capture_set, metrics=metrics, test_mode=test_mode)

"""Frame capture sink — turns rendered frames into PNG files."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path

from PIL import Image

from visreg.simulation.protocol import FrameOutput, Layer, Renderer

logger = logging.getLogger(__name__)


def strip_overlays(output: FrameOutput) -> FrameOutput:
    """Return a copy of the frame output without overlay draw commands."""
    world_only = [cmd for cmd in output.draw if cmd.layer != Layer.OVERLAY]
    return dataclasses.replace(output, draw=world_only)


class FrameCaptureSink:
    """Renders frames and persists the ones a scenario asked to capture."""

    def __init__(self, output_dir: Path, renderer: Renderer, test_mode: bool = False):
        self.output_dir = output_dir
        self.renderer = renderer
        self.test_mode = test_mode
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self._pending: list[str] = []
        self.captured: dict[str, Path] = {}

    def request(self, filename: str) -> None:
        """Queue a capture of the next rendered frame."""
        self._pending.append(filename)

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    def render(self, output: FrameOutput) -> Image.Image:
        """Render a frame, dropping overlay elements in test mode."""
        if self.test_mode:
            output = strip_overlays(output)
        return self.renderer.render(output)

    def flush(self, image: Image.Image) -> list[Path]:
        """Write every queued capture from the given rendered frame."""
        written = [self.save(image, filename) for filename in self._pending]
        self._pending.clear()
        return written

    def save(self, image: Image.Image, filename: str) -> Path:
        path = self.output_dir / filename
        # PNG is lossless and Pillow writes no timestamp chunks by default
        image.save(path, format="PNG", optimize=False)
        self.captured[filename] = path
        logger.debug("Captured %s", path)
        return path

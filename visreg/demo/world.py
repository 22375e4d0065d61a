"""Demo simulation — a seeded tile world with a keyboard-driven camera.

Used as the default harness target and by the test-suite. Key bindings:
W/A/S/D or the arrow keys pan the camera by ``CAMERA_SPEED / zoom`` world
units per step, Q zooms out and E zooms in. A left click drops a marker
where it landed. Twinkling stars draw from the seeded RNG every step, so
captures are only reproducible when the seed is.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from visreg.simulation.protocol import Camera, ClickInput, DrawCmd, FrameInput, FrameOutput, Layer

logger = logging.getLogger(__name__)

GRID_SIZE = 64
TILE_SIZE = 8.0
CAMERA_SPEED = 4.0
ZOOM_OUT_FACTOR = 0.98
ZOOM_IN_FACTOR = 1.02
MIN_ZOOM = 0.25
MAX_ZOOM = 4.0
STAR_COUNT = 24

BIOME_COLORS = [
    (38, 84, 160),   # water
    (70, 140, 70),   # grass
    (190, 172, 120),  # sand
    (112, 112, 118),  # rock
]
MARKER_COLOR = (230, 60, 60)
PANEL_COLOR = (16, 16, 48)


def _axis(held_keys: frozenset[str], negative: tuple[str, ...], positive: tuple[str, ...]) -> int:
    return int(any(k in held_keys for k in positive)) - int(any(k in held_keys for k in negative))


def update_camera(cam: Camera, held_keys: frozenset[str]) -> Camera:
    x, y, zoom = cam.x, cam.y, cam.zoom
    # W and Up are the same direction; holding both does not double the speed
    x += _axis(held_keys, ("A", "Left"), ("D", "Right")) * CAMERA_SPEED / cam.zoom
    y += _axis(held_keys, ("W", "Up"), ("S", "Down")) * CAMERA_SPEED / cam.zoom

    if "Q" in held_keys:
        zoom = max(MIN_ZOOM, zoom * ZOOM_OUT_FACTOR)
    if "E" in held_keys:
        zoom = min(MAX_ZOOM, zoom * ZOOM_IN_FACTOR)
    return Camera(x=x, y=y, zoom=zoom)


class DemoSimulation:
    def __init__(self, width: int = 320, height: int = 240):
        self.width = width
        self.height = height
        self._rng: Optional[random.Random] = None
        self.tiles: list[list[int]] = []
        self.stars: list[tuple[float, float]] = []
        self.markers: list[tuple[float, float]] = []
        self.camera = Camera()
        self.tick = 0

    def init_world(self, seed: int, camera: Optional[Camera] = None) -> None:
        self._rng = random.Random(seed)
        self.tiles = [[self._rng.randrange(len(BIOME_COLORS)) for _ in range(GRID_SIZE)]
                      for _ in range(GRID_SIZE)]
        half = GRID_SIZE * TILE_SIZE / 2
        self.stars = [(self._rng.uniform(-half, half), self._rng.uniform(-half, half))
                      for _ in range(STAR_COUNT)]
        self.markers = []
        self.camera = camera or Camera()
        self.tick = 0
        logger.debug("Demo world initialized with seed %d", seed)

    def screen_to_world(self, click: ClickInput) -> tuple[float, float]:
        wx = (click.x - self.width / 2) / self.camera.zoom + self.camera.x
        wy = (click.y - self.height / 2) / self.camera.zoom + self.camera.y
        return wx, wy

    def step(self, frame_input: FrameInput) -> FrameOutput:
        if self._rng is None:
            raise RuntimeError("init_world must be called before step")

        self.camera = update_camera(self.camera, frame_input.held_keys)
        if frame_input.click is not None and frame_input.click.button == "left":
            self.markers.append(self.screen_to_world(frame_input.click))
        self.tick += 1

        draw = self._draw_tiles() + self._draw_stars() + self._draw_markers() + self._draw_ui()
        return FrameOutput(
            draw=draw,
            camera=self.camera,
            debug=[f"tick={self.tick}"],
        )

    def _visible(self, x: float, y: float, size: float) -> bool:
        half_w = self.width / 2 / self.camera.zoom
        half_h = self.height / 2 / self.camera.zoom
        return (
            x + size >= self.camera.x - half_w and x <= self.camera.x + half_w
            and y + size >= self.camera.y - half_h and y <= self.camera.y + half_h
        )

    def _draw_tiles(self) -> list[DrawCmd]:
        origin = -GRID_SIZE * TILE_SIZE / 2
        cmds = []
        for ty, row in enumerate(self.tiles):
            for tx, biome in enumerate(row):
                x = origin + tx * TILE_SIZE
                y = origin + ty * TILE_SIZE
                if self._visible(x, y, TILE_SIZE):
                    cmds.append(DrawCmd("rect", x, y, TILE_SIZE, TILE_SIZE, BIOME_COLORS[biome], z=0))
        return cmds

    def _draw_stars(self) -> list[DrawCmd]:
        cmds = []
        for x, y in self.stars:
            # Always draw from the RNG so its sequence does not depend on the camera
            level = self._rng.randrange(150, 256)
            if self._visible(x, y, 2):
                cmds.append(DrawCmd("rect", x, y, 2, 2, (level, level, 200), z=1))
        return cmds

    def _draw_markers(self) -> list[DrawCmd]:
        return [DrawCmd("marker", x, y, 3, 3, MARKER_COLOR, z=2) for x, y in self.markers]

    def _draw_ui(self) -> list[DrawCmd]:
        cam = self.camera
        return [
            DrawCmd("panel", 0.02, 0.02, 0.6, 0.08, PANEL_COLOR,
                    text=f"Cam: ({cam.x:.0f}, {cam.y:.0f}) Zoom: {cam.zoom:.2f}x",
                    layer=Layer.OVERLAY),
            DrawCmd("panel", 0.02, 0.88, 0.3, 0.08, PANEL_COLOR,
                    text=f"Frame {self.tick}", layer=Layer.OVERLAY),
        ]

"""The seam between the harness and the simulation/renderer it drives.

The harness never implements game logic or drawing. It only needs two
capabilities from its collaborators:

* a :class:`Simulation` that can be seeded and stepped one frame at a time
  with an explicit :class:`FrameInput`, returning a :class:`FrameOutput`
  (a list of draw commands plus the camera for that frame), and
* a :class:`Renderer` that turns a :class:`FrameOutput` into a Pillow image.

Draw commands carry a :class:`Layer` so the capture sink can drop overlay
elements (HUD text, debug panels) when a scenario runs in test mode.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Protocol

from PIL import Image


class Layer(str, Enum):
    WORLD = "world"
    OVERLAY = "overlay"


@dataclass(frozen=True)
class Camera:
    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0


@dataclass(frozen=True)
class DrawCmd:
    kind: str  # rect, marker, panel, text
    x: float
    y: float
    w: float = 0.0
    h: float = 0.0
    color: tuple[int, int, int] = (255, 255, 255)
    text: str = ""
    z: int = 0
    layer: Layer = Layer.WORLD


@dataclass(frozen=True)
class ClickInput:
    x: int
    y: int
    button: str = "left"


@dataclass(frozen=True)
class FrameInput:
    frame: int
    held_keys: frozenset[str] = frozenset()
    pressed_keys: frozenset[str] = frozenset()  # keys that went down this frame
    click: Optional[ClickInput] = None
    test_mode: bool = False


@dataclass
class FrameOutput:
    draw: list[DrawCmd] = field(default_factory=list)
    camera: Camera = field(default_factory=Camera)
    debug: list[str] = field(default_factory=list)


class Simulation(Protocol):
    def init_world(self, seed: int, camera: Optional[Camera] = None) -> None:
        ...

    def step(self, frame_input: FrameInput) -> FrameOutput:
        ...


class Renderer(Protocol):
    width: int
    height: int

    def render(self, output: FrameOutput) -> Image.Image:
        ...

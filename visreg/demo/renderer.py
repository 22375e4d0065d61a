"""Demo renderer — draws FrameOutput draw commands with Pillow."""

from __future__ import annotations

import logging

from PIL import Image, ImageDraw, ImageFont

from visreg.simulation.protocol import Camera, DrawCmd, FrameOutput, Layer

logger = logging.getLogger(__name__)

BACKGROUND = (6, 6, 14)
TEXT_COLOR = (240, 240, 240)
TEXT_PADDING = 3


class DemoRenderer:
    """World commands are in world units and follow the camera.

    Overlay commands use normalized screen coordinates (0.0-1.0) and are drawn
    on top of the world in z order.
    """

    def __init__(self, width: int = 320, height: int = 240):
        self.width = width
        self.height = height
        self._font = ImageFont.load_default()

    def world_to_screen(self, camera: Camera, x: float, y: float) -> tuple[float, float]:
        sx = (x - camera.x) * camera.zoom + self.width / 2
        sy = (y - camera.y) * camera.zoom + self.height / 2
        return sx, sy

    def render(self, output: FrameOutput) -> Image.Image:
        image = Image.new("RGB", (self.width, self.height), BACKGROUND)
        draw = ImageDraw.Draw(image)

        world = sorted((c for c in output.draw if c.layer == Layer.WORLD), key=lambda c: c.z)
        overlay = sorted((c for c in output.draw if c.layer == Layer.OVERLAY), key=lambda c: c.z)

        for cmd in world:
            self._draw_world(draw, output.camera, cmd)
        for cmd in overlay:
            self._draw_overlay(draw, cmd)
        return image

    def _draw_world(self, draw: ImageDraw.ImageDraw, camera: Camera, cmd: DrawCmd) -> None:
        x0, y0 = self.world_to_screen(camera, cmd.x, cmd.y)
        x1, y1 = x0 + cmd.w * camera.zoom, y0 + cmd.h * camera.zoom
        box = [round(x0), round(y0), max(round(x0), round(x1) - 1), max(round(y0), round(y1) - 1)]
        match cmd.kind:
            case "rect":
                draw.rectangle(box, fill=cmd.color)
            case "marker":
                draw.ellipse(box, fill=cmd.color)
            case "text":
                draw.text((box[0], box[1]), cmd.text, fill=cmd.color, font=self._font)
            case _:
                logger.debug("Skipping unknown world draw command: %s", cmd.kind)

    def _draw_overlay(self, draw: ImageDraw.ImageDraw, cmd: DrawCmd) -> None:
        x0 = round(cmd.x * self.width)
        y0 = round(cmd.y * self.height)
        x1 = round((cmd.x + cmd.w) * self.width)
        y1 = round((cmd.y + cmd.h) * self.height)
        match cmd.kind:
            case "panel":
                draw.rectangle([x0, y0, max(x0, x1 - 1), max(y0, y1 - 1)], fill=cmd.color)
                if cmd.text:
                    draw.text((x0 + TEXT_PADDING, y0 + TEXT_PADDING), cmd.text,
                              fill=TEXT_COLOR, font=self._font)
            case "text":
                draw.text((x0, y0), cmd.text, fill=cmd.color, font=self._font)
            case _:
                logger.debug("Skipping unknown overlay draw command: %s", cmd.kind)

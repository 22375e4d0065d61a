"""Pixel-level difference helpers and diff image generation."""

from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import Image, ImageChops, UnidentifiedImageError

from visreg.errors import DiffGenerationUnavailable

logger = logging.getLogger(__name__)

HIGHLIGHT_COLOR = (255, 0, 80)  # changed pixels
DIM_FACTOR = 3  # unchanged pixels are drawn at a third of their brightness


def decode_png(data: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(data))
    image.load()
    return image.convert("RGBA")


def difference_mask(baseline: Image.Image, current: Image.Image, threshold: int = 0) -> Image.Image:
    """Return an "L" mask, 255 where any channel differs by more than threshold.

    Both images must be RGBA and the same size.
    """
    diff = ImageChops.difference(baseline, current)
    mask = None
    for band in diff.split():
        band_mask = band.point(lambda v: 255 if v > threshold else 0)
        mask = band_mask if mask is None else ImageChops.lighter(mask, band_mask)
    return mask


def _pad(image: Image.Image, size: tuple[int, int]) -> Image.Image:
    if image.size == size:
        return image
    canvas = Image.new("RGBA", size, (0, 0, 0, 0))
    canvas.paste(image, (0, 0))
    return canvas


def generate_diff(baseline_data: bytes, current_data: bytes, output_path: Path) -> Path:
    """Write a visual delta of two PNGs: changed pixels highlighted, the rest dimmed.

    Images of different sizes are compared on a canvas large enough for both;
    the area covered by only one of them shows as changed.

    Raises:
        DiffGenerationUnavailable: if either image cannot be decoded or the
            diff cannot be written.
    """
    try:
        baseline = decode_png(baseline_data)
        current = decode_png(current_data)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise DiffGenerationUnavailable(f"cannot decode images: {e}") from e

    size = (max(baseline.width, current.width), max(baseline.height, current.height))
    baseline = _pad(baseline, size)
    current = _pad(current, size)

    mask = difference_mask(baseline, current)
    dimmed = current.convert("RGB").point(lambda v: v // DIM_FACTOR)
    highlight = Image.new("RGB", size, HIGHLIGHT_COLOR)
    diff_image = Image.composite(highlight, dimmed, mask)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        diff_image.save(output_path, format="PNG")
    except OSError as e:
        raise DiffGenerationUnavailable(f"cannot write diff image: {e}") from e
    logger.debug("Wrote diff image %s", output_path)
    return output_path

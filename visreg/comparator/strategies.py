"""Comparison strategies: byte-exact and perceptual-threshold."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from PIL import UnidentifiedImageError

from visreg.models.config import ComparisonConfig

from .diff import decode_png, difference_mask

logger = logging.getLogger(__name__)


@dataclass
class Verdict:
    matches: bool
    diff_ratio: Optional[float] = None
    message: str = ""


class ComparisonStrategy(Protocol):
    name: str

    def compare(self, baseline: bytes, current: bytes) -> Verdict:
        ...


class ExactStrategy:
    """Files match only when they are byte-for-byte identical."""

    name = "exact"

    def compare(self, baseline: bytes, current: bytes) -> Verdict:
        if baseline == current:
            return Verdict(True, 0.0, "identical")
        return Verdict(False, None, "bytes differ")


class PerceptualStrategy:
    """Decoded pixels match when few enough of them moved by more than a threshold."""

    name = "perceptual"

    def __init__(self, pixel_threshold: int = 0, tolerance: float = 0.0):
        self.pixel_threshold = pixel_threshold
        self.tolerance = tolerance

    def compare(self, baseline: bytes, current: bytes) -> Verdict:
        if baseline == current:
            return Verdict(True, 0.0, "identical")
        try:
            base_img = decode_png(baseline)
            cur_img = decode_png(current)
        except (UnidentifiedImageError, OSError, ValueError) as e:
            return Verdict(False, None, f"cannot decode: {e}")

        if base_img.size != cur_img.size:
            return Verdict(
                False, 1.0,
                f"size changed: {base_img.width}x{base_img.height} -> {cur_img.width}x{cur_img.height}",
            )

        total = base_img.width * base_img.height
        if total == 0:
            return Verdict(True, 0.0, "empty images")

        mask = difference_mask(base_img, cur_img, self.pixel_threshold)
        changed = mask.histogram()[255]
        ratio = changed / total
        matches = ratio <= self.tolerance
        return Verdict(matches, ratio, f"pixel diff: {ratio:.2%} (tolerance: {self.tolerance:.2%})")


def build_strategy(config: ComparisonConfig) -> ComparisonStrategy:
    match config.strategy:
        case "exact":
            return ExactStrategy()
        case "perceptual":
            return PerceptualStrategy(config.pixel_threshold, config.tolerance)
        case _:
            raise ValueError(f"Unknown comparison strategy: {config.strategy}")

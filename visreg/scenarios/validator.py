"""Scenario descriptor validation."""

from __future__ import annotations

import logging

from visreg.models.scenario import Scenario

logger = logging.getLogger(__name__)

FORBIDDEN_NAME_CHARS = ("/", "\\")
IMAGE_SUFFIX = ".png"


def check_scenario_name(name: str) -> str | None:
    """Return an error message if a scenario name cannot be used as a directory key."""
    if not name or any(c in name for c in FORBIDDEN_NAME_CHARS) or name in (".", ".."):
        return f"scenario name '{name}' is not a valid directory name"
    return None


def validate_scenario(scenario: Scenario) -> list[str]:
    """Validate a scenario and return a list of error messages."""
    errors = []

    name_error = check_scenario_name(scenario.name)
    if name_error:
        errors.append(name_error)

    previous_frame = 0
    seen_captures = set()
    for i, event in enumerate(scenario.events):
        # Frames must never decrease
        if event.frame < previous_frame:
            errors.append(
                f"event {i}: frame {event.frame} comes after frame {previous_frame}"
            )
        previous_frame = max(previous_frame, event.frame)

        if event.capture is None:
            continue

        # Capture filenames are unique within a scenario
        if event.capture in seen_captures:
            errors.append(f"event {i}: duplicate capture filename '{event.capture}'")
        seen_captures.add(event.capture)

        if (
            not event.capture
            or any(c in event.capture for c in FORBIDDEN_NAME_CHARS)
            or event.capture in (".", "..")
        ):
            errors.append(f"event {i}: invalid capture filename '{event.capture}'")
        elif not event.capture.endswith(IMAGE_SUFFIX):
            errors.append(f"event {i}: capture filename '{event.capture}' must end with {IMAGE_SUFFIX}")

    if errors:
        logger.debug("Scenario %s has %d validation errors", scenario.name, len(errors))
    return errors

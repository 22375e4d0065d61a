"""Level-based input accumulator for one scenario run."""

from __future__ import annotations

import logging

from visreg.models.scenario import Event
from visreg.simulation.protocol import ClickInput, FrameInput

logger = logging.getLogger(__name__)


class InputState:
    """Tracks which keys are held across frames.

    ``down`` holds a key until a matching ``up``. ``press`` holds it for the
    frame it was scheduled on only; it is released by the next
    :meth:`begin_frame`. Transitions on the same key within one frame apply in
    order and the last one wins, so ``press`` then ``down`` keeps the key held
    and ``down`` then ``up`` leaves it released for that frame's step.

    Clicks are not level-based: only the last click declared on a frame is
    delivered, and only to that frame.
    """

    def __init__(self) -> None:
        self._held: set[str] = set()
        self._pressed: set[str] = set()
        self._auto_release: set[str] = set()
        self._click: ClickInput | None = None

    @property
    def held_keys(self) -> frozenset[str]:
        return frozenset(self._held)

    def begin_frame(self) -> None:
        """Release keys from last frame's ``press`` events and clear edges."""
        self._held -= self._auto_release
        self._auto_release.clear()
        self._pressed.clear()
        self._click = None

    def apply(self, event: Event) -> None:
        """Apply one key or click event to the accumulator."""
        if event.click is not None:
            self._click = ClickInput(x=event.click.x, y=event.click.y, button=event.click.button)
            return
        if event.key is None:
            raise ValueError(f"InputState cannot apply a {event.kind} event")

        key = event.key
        match event.action:
            case "down":
                self._held.add(key)
                self._pressed.add(key)
                self._auto_release.discard(key)
            case "up":
                self._held.discard(key)
                self._auto_release.discard(key)
            case "press":
                self._held.add(key)
                self._pressed.add(key)
                self._auto_release.add(key)

    def snapshot(self, frame: int, test_mode: bool = False) -> FrameInput:
        """Assemble the input delivered to the simulation for this frame."""
        return FrameInput(
            frame=frame,
            held_keys=frozenset(self._held),
            pressed_keys=frozenset(self._pressed),
            click=self._click,
            test_mode=test_mode,
        )

"""Prompt points: pointer event encoding and prompt accumulation."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from samcut_backend.enums import PointerButton, PointerKind, PointLabel, PromptMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Point:
    """A prompt point in normalized image coordinates."""

    x: float  # 0..1, left to right
    y: float  # 0..1, top to bottom
    label: PointLabel = PointLabel.POSITIVE


PromptSet = tuple[Point, ...]


@dataclass(frozen=True)
class Viewport:
    """Bounding box of the element displaying the image, in client pixels."""

    left: float
    top: float
    width: float
    height: float


@dataclass(frozen=True)
class PointerEvent:
    """A raw pointer event as reported by the UI."""

    kind: PointerKind
    client_x: float
    client_y: float
    button: int = PointerButton.PRIMARY
    negative: bool = False  # modifier held during a move


def _clamp_unit(value: float) -> float:
    return max(0.0, min(value, 1.0))


class PointEncoder:
    """Convert pointer events into normalized prompt points."""

    def encode(self, event: PointerEvent, viewport: Viewport) -> Point:
        """Map an event to a point clamped to the unit square.

        Args:
            event: Pointer event in client coordinates.
            viewport: Bounding box of the displayed image.

        Returns:
            Point with the label implied by the button or modifier.

        Raises:
            ValueError: If the viewport has no area.
        """
        if viewport.width <= 0 or viewport.height <= 0:
            raise ValueError("Viewport must have a positive width and height.")

        x = _clamp_unit((event.client_x - viewport.left) / viewport.width)
        y = _clamp_unit((event.client_y - viewport.top) / viewport.height)
        return Point(x=x, y=y, label=self.label_for(event))

    @staticmethod
    def label_for(event: PointerEvent) -> PointLabel:
        """Secondary clicks and negative-modifier moves exclude a region."""
        if event.kind == PointerKind.DOWN:
            if event.button == PointerButton.SECONDARY:
                return PointLabel.NEGATIVE
            return PointLabel.POSITIVE
        return PointLabel.NEGATIVE if event.negative else PointLabel.POSITIVE


class PromptAccumulator:
    """Owns the live prompt points and the interaction mode.

    In ephemeral mode each hover replaces the points with a single preview
    point. The first click switches to committed mode, after which points are
    only appended until cleared.
    """

    def __init__(self) -> None:
        self._points: list[Point] = []
        self._mode = PromptMode.EPHEMERAL

    @property
    def points(self) -> PromptSet:
        return tuple(self._points)

    @property
    def mode(self) -> PromptMode:
        return self._mode

    def hover(self, point: Point) -> bool:
        """Replace the points with a preview point.

        Returns:
            True if the points changed, False in committed mode.
        """
        if self._mode == PromptMode.COMMITTED:
            return False
        self._points = [point]
        return True

    def add(self, point: Point) -> None:
        """Append a clicked point and commit the point set."""
        if self._mode == PromptMode.EPHEMERAL:
            # The hover preview point, if any, becomes the first committed point
            self._mode = PromptMode.COMMITTED
            logger.debug("Prompt mode switched to committed")
        self._points.append(point)

    def clear(self) -> None:
        self._points = []
        self._mode = PromptMode.EPHEMERAL

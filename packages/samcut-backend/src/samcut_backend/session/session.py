"""Interactive segmentation session state machine."""

from __future__ import annotations

import logging
from typing import Any

from PIL import Image

from samcut_backend.enums import PointerButton, PointerKind, PromptMode, SessionState
from samcut_backend.session.errors import DecodeError, EncodeError, ExportError
from samcut_backend.session.export import export_cutout
from samcut_backend.session.model import SegmentationModel, SourceImage
from samcut_backend.session.points import PointEncoder, PointerEvent, PromptAccumulator, PromptSet, Viewport
from samcut_backend.session.rendering import (
    DEFAULT_OVERLAY_OPACITY,
    HIGHLIGHT_COLOR,
    RenderedMask,
    composite,
    empty_overlay,
    format_status,
    render,
)
from samcut_backend.session.scheduler import DEFAULT_DEBOUNCE_SECONDS, DecodeScheduler

logger = logging.getLogger(__name__)

STATUS_READY = "Ready"
STATUS_ENCODING = "Extracting image embedding..."
STATUS_ENCODED = "Embedding extracted!"
STATUS_ENCODE_ERROR = "Error processing image"
STATUS_DECODE_ERROR = "Error decoding points"


class SegmentationSession:
    """Turns pointer events on one image into rendered masks.

    The image is encoded once on load; every prompt change afterwards runs a
    cheap decode against the cached embedding. Decodes go through a
    ``DecodeScheduler`` so hover previews are debounced and only one decode is
    outstanding at a time.

    State transitions::

        IDLE -> ENCODING -> READY <-> DECODING
        ENCODING -> IDLE (encode failure)
        any -> IDLE (reset)

    Work started for an image that has since been replaced, or for points
    that have since been cleared, is discarded when it completes.
    """

    def __init__(
        self,
        model: SegmentationModel,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        overlay_color: tuple[int, int, int] = HIGHLIGHT_COLOR,
        overlay_opacity: float = DEFAULT_OVERLAY_OPACITY,
    ) -> None:
        self._model = model
        self._overlay_color = overlay_color
        self._overlay_opacity = overlay_opacity
        self._encoder = PointEncoder()
        self._prompt = PromptAccumulator()
        self._scheduler = DecodeScheduler(self._decode, debounce_seconds)

        self._state = SessionState.IDLE
        self._image: SourceImage | None = None
        self._embedding: Any = None
        self._rendered: RenderedMask | None = None
        self._status = STATUS_READY

        # Bumped when the image is replaced or the session reset
        self._generation = 0
        # Bumped when the prompt points are cleared
        self._prompt_epoch = 0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def mode(self) -> PromptMode:
        return self._prompt.mode

    @property
    def points(self) -> PromptSet:
        return self._prompt.points

    @property
    def status(self) -> str:
        return self._status

    @property
    def image(self) -> SourceImage | None:
        return self._image

    @property
    def embedding(self) -> Any:
        return self._embedding

    @property
    def rendered_mask(self) -> RenderedMask | None:
        return self._rendered

    @property
    def is_encoded(self) -> bool:
        return self._embedding is not None

    async def load_image(self, image: SourceImage) -> None:
        """Replace the session image and compute its embedding.

        Args:
            image: The image to segment.

        Raises:
            EncodeError: If the model cannot encode the image. The session is
                left in IDLE.
        """
        self._discard()
        self._generation += 1
        generation = self._generation

        self._image = image
        self._state = SessionState.ENCODING
        self._status = STATUS_ENCODING
        logger.info(f"Encoding image {image.width}x{image.height}")

        try:
            embedding = await self._model.encode(image)
        except Exception as e:
            if generation != self._generation:
                logger.info("Encode failed for an image that was already replaced")
                return
            logger.error(f"Failed to encode image: {e}")
            self._image = None
            self._state = SessionState.IDLE
            self._status = STATUS_ENCODE_ERROR
            raise EncodeError(str(e)) from e

        if generation != self._generation:
            logger.info("Image replaced during encoding, discarding embedding")
            return

        self._embedding = embedding
        self._state = SessionState.READY
        self._status = STATUS_ENCODED
        logger.info("Image embedding extracted")

    def handle_pointer(self, event: PointerEvent, viewport: Viewport) -> None:
        """Feed a pointer event into the prompt points.

        Moves update the single preview point in ephemeral mode. Primary and
        secondary presses append a positive or negative point and commit the
        point set. Events are ignored until an image is encoded, and moves are
        ignored while a decode is running.
        """
        if not self.is_encoded:
            return

        if event.kind == PointerKind.MOVE:
            if self._state == SessionState.DECODING:
                return
            if self._prompt.hover(self._encoder.encode(event, viewport)):
                self.update_prompt(self._prompt.points, debounce=True)
            return

        if event.button not in (PointerButton.PRIMARY, PointerButton.SECONDARY):
            return
        self._prompt.add(self._encoder.encode(event, viewport))
        self.update_prompt(self._prompt.points)

    def update_prompt(self, points: PromptSet, *, debounce: bool = False) -> None:
        """Schedule a decode for the given points.

        Only effective while READY or DECODING; while DECODING the request
        waits in the scheduler until the running decode returns.
        """
        if self._state not in (SessionState.READY, SessionState.DECODING):
            logger.debug(f"Ignoring prompt update in state {self._state.value}")
            return
        if not points:
            return
        self._scheduler.submit(tuple(points), debounce=debounce)

    def clear_points(self) -> None:
        """Remove all points and erase the overlay, keeping the embedding."""
        self._scheduler.cancel()
        self._prompt.clear()
        self._prompt_epoch += 1
        self._rendered = None

    def reset(self) -> None:
        """Drop the image, embedding, points and mask and return to IDLE."""
        self._discard()
        self._generation += 1
        self._state = SessionState.IDLE
        self._status = STATUS_READY
        logger.info("Session reset")

    async def wait_until_settled(self) -> None:
        """Wait for pending and running decodes to finish."""
        await self._scheduler.join()

    def close(self) -> None:
        """Drop scheduled work; a running decode finishes and is discarded."""
        self.reset()

    def overlay_image(self, with_source: bool = False) -> Image.Image | None:
        """Current overlay as an RGBA image.

        Args:
            with_source: Composite the overlay over the source image.

        Returns:
            The overlay (fully transparent when no mask is rendered), or None
            when there is no image.
        """
        if self._image is None:
            return None
        overlay = self._rendered.overlay if self._rendered is not None else empty_overlay(self._image.size)
        if with_source:
            return composite(self._image.pixels, overlay, self._overlay_opacity)
        return Image.fromarray(overlay)

    def cutout(self) -> Image.Image:
        """Cut the masked region out of the source image.

        Raises:
            ExportError: If no mask is rendered.
        """
        if self._image is None:
            raise ExportError("No image loaded.")
        return export_cutout(self._image.pixels, self._rendered)

    def _discard(self) -> None:
        self._scheduler.cancel()
        self._prompt.clear()
        self._prompt_epoch += 1
        self._image = None
        self._embedding = None
        self._rendered = None

    async def _decode(self, points: PromptSet) -> None:
        if self._state != SessionState.READY or self._image is None or self._embedding is None:
            logger.debug("Skipping decode without an encoded image")
            return

        generation = self._generation
        epoch = self._prompt_epoch
        self._state = SessionState.DECODING

        try:
            rendered = await self._decode_and_render(self._image, self._embedding, points)
        except DecodeError as e:
            logger.warning(f"Decode failed for {len(points)} points: {e}")
            if generation == self._generation:
                self._state = SessionState.READY
                self._status = STATUS_DECODE_ERROR
            return

        if generation != self._generation:
            logger.debug("Image replaced during decode, discarding mask")
            return
        self._state = SessionState.READY
        if epoch != self._prompt_epoch:
            logger.debug("Points cleared during decode, discarding mask")
            return

        self._rendered = rendered
        self._status = format_status(rendered.score)
        logger.info(f"Rendered mask {rendered.index} with score {rendered.score:.3f} from {len(points)} points")

    async def _decode_and_render(self, image: SourceImage, embedding: Any, points: PromptSet) -> RenderedMask:
        try:
            result = await self._model.decode(embedding, points)
            return render(image, result, self._overlay_color)
        except Exception as e:
            raise DecodeError(str(e)) from e

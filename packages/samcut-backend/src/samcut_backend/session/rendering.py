"""Mask selection and overlay rendering."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from samcut_backend.session.model import DecodeResult, SourceImage

# Highlight color for masked pixels
HIGHLIGHT_COLOR = (0, 114, 189)
DEFAULT_OVERLAY_OPACITY = 0.6


@dataclass(frozen=True)
class RenderedMask:
    """The winning mask candidate materialized as an overlay bitmap."""

    index: int
    score: float
    overlay: NDArray[np.uint8]  # Shape: (H, W, 4), RGBA

    @property
    def size(self) -> tuple[int, int]:
        """Overlay size as (width, height)."""
        return self.overlay.shape[1], self.overlay.shape[0]


def select_best(scores: Sequence[float] | NDArray[np.floating]) -> int:
    """Return the index of the highest score, lowest index on ties.

    Raises:
        ValueError: If no scores are given.
    """
    values = np.asarray(scores, dtype=np.float64).ravel()
    if values.size == 0:
        raise ValueError("Cannot select a mask from zero candidates.")
    return int(np.argmax(values))


def format_status(score: float) -> str:
    return f"Segment score: {score:.2f}"


def resize_mask(mask: NDArray, size: tuple[int, int]) -> NDArray[np.bool_]:
    """Binarize a mask and resize it to (width, height) with nearest neighbour."""
    mask_on = np.asarray(mask) > 0
    if (mask_on.shape[1], mask_on.shape[0]) == size:
        return mask_on
    mask_image = Image.fromarray(mask_on.astype(np.uint8) * 255)
    return np.array(mask_image.resize(size, Image.Resampling.NEAREST)) > 0


def empty_overlay(size: tuple[int, int]) -> NDArray[np.uint8]:
    """Fully transparent overlay of the given (width, height)."""
    width, height = size
    return np.zeros((height, width, 4), dtype=np.uint8)


def render_overlay(
    mask: NDArray,
    size: tuple[int, int],
    color: tuple[int, int, int] = HIGHLIGHT_COLOR,
) -> NDArray[np.uint8]:
    """Paint the on pixels of a mask in an opaque color, leave the rest transparent.

    Args:
        mask: 2D mask, nonzero = on.
        size: Target (width, height), usually the source image size.
        color: RGB highlight color.

    Returns:
        RGBA overlay with shape (height, width, 4).
    """
    mask_on = resize_mask(mask, size)
    overlay = empty_overlay(size)
    overlay[mask_on] = (*color, 255)
    return overlay


def render(
    image: SourceImage,
    result: DecodeResult,
    color: tuple[int, int, int] = HIGHLIGHT_COLOR,
) -> RenderedMask:
    """Select the best candidate of a decode result and render its overlay."""
    index = select_best(result.scores)
    overlay = render_overlay(result.masks[index], image.size, color)
    return RenderedMask(index=index, score=float(result.scores[index]), overlay=overlay)


def composite(
    image: Image.Image,
    overlay: NDArray[np.uint8],
    opacity: float = DEFAULT_OVERLAY_OPACITY,
) -> Image.Image:
    """Draw an overlay over an image at a fixed translucency.

    Args:
        image: Source image, any mode.
        overlay: RGBA overlay, resized to the image if needed.
        opacity: Overlay opacity, 0 (invisible) to 1 (opaque).

    Returns:
        RGBA preview image.
    """
    base = image.convert("RGBA")
    layer = Image.fromarray(overlay)
    if layer.size != base.size:
        layer = layer.resize(base.size, Image.Resampling.NEAREST)

    alpha = layer.getchannel("A").point(lambda a: round(a * opacity))
    layer.putalpha(alpha)
    return Image.alpha_composite(base, layer)

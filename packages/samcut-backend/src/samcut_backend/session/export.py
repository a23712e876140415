"""Cut-out export of the masked region of an image."""

from __future__ import annotations

from io import BytesIO

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from samcut_backend.session.errors import ExportError
from samcut_backend.session.rendering import RenderedMask

CUTOUT_FILENAME = "cut-image.png"


def cutout(image: Image.Image, overlay: NDArray[np.uint8]) -> Image.Image:
    """Keep the source pixels under the overlay, make everything else transparent.

    Args:
        image: Source image, any mode.
        overlay: RGBA overlay; pixels with alpha > 0 are kept.

    Returns:
        RGBA image of the source size.
    """
    source = np.array(image.convert("RGBA"))
    height, width = source.shape[:2]

    layer = Image.fromarray(overlay)
    if layer.size != (width, height):
        layer = layer.resize((width, height), Image.Resampling.NEAREST)
    keep = np.array(layer.getchannel("A")) > 0

    result = np.zeros_like(source)
    result[keep] = source[keep]
    return Image.fromarray(result)


def export_cutout(image: Image.Image, rendered: RenderedMask | None) -> Image.Image:
    """Cut out the rendered mask region.

    Raises:
        ExportError: If there is no rendered mask.
    """
    if rendered is None:
        raise ExportError("No mask to cut out. Place a point on the image first.")
    return cutout(image, rendered.overlay)


def encode_png(image: Image.Image) -> bytes:
    """Encode an image as PNG bytes."""
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()

"""Data passed between the session and the segmentation model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from samcut_backend.session.points import PromptSet


@dataclass(frozen=True)
class SourceImage:
    """Image being segmented, held as RGBA pixels."""

    pixels: Image.Image

    @classmethod
    def from_pil(cls, image: Image.Image) -> SourceImage:
        return cls(pixels=image.convert("RGBA"))

    @property
    def width(self) -> int:
        return self.pixels.width

    @property
    def height(self) -> int:
        return self.pixels.height

    @property
    def size(self) -> tuple[int, int]:
        return self.pixels.size

    def to_rgb(self) -> Image.Image:
        return self.pixels.convert("RGB")


@dataclass
class DecodeResult:
    """Candidate masks proposed by one decode call."""

    masks: NDArray[np.uint8]  # Shape: (num_candidates, H, W), nonzero = on
    scores: NDArray[np.float32]  # Shape: (num_candidates,), predicted quality

    def __post_init__(self) -> None:
        if len(self.masks) != len(self.scores):
            raise ValueError(f"Got {len(self.masks)} masks but {len(self.scores)} scores.")


class SegmentationModel(Protocol):
    """Encode-once, decode-many segmentation backend."""

    async def encode(self, image: SourceImage) -> Any:
        """Compute the embedding for an image.

        Raises:
            ModelError: If the image cannot be processed.
        """
        ...

    async def decode(self, embedding: Any, points: PromptSet) -> DecodeResult:
        """Predict candidate masks for prompt points on an encoded image.

        Raises:
            ModelError: If the prompt is malformed or the backend fails.
        """
        ...

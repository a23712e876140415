"""SAM inference service: encode an image once, decode point prompts many times."""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass

import numpy as np
import torch

from samcut_backend.config import settings
from samcut_backend.session.errors import ModelError, ModelLoadError
from samcut_backend.session.model import DecodeResult, SourceImage
from samcut_backend.session.points import PromptSet

logger = logging.getLogger(__name__)


@dataclass
class SamEmbedding:
    """Image embedding plus the sizes needed to map prompts and masks."""

    image_embeddings: torch.Tensor
    original_size: tuple[int, int]  # (H, W) of the source image
    reshaped_size: tuple[int, int]  # (H, W) after resizing for the encoder


def resolve_device(device: str) -> str:
    """Map the configured device name to a torch device string."""
    if device == "auto":
        return "cuda" if torch.cuda.is_available() else "cpu"
    return device


class SamService:
    """Service running a Hugging Face SAM checkpoint with point prompts.

    The blocking ``*_sync`` methods hold a lock around model calls so the
    service can be shared by several sessions. The async ``encode`` and
    ``decode`` methods run them in a worker thread.
    """

    def __init__(self, model_name: str | None = None, device: str | None = None) -> None:
        """Initialize the service without loading the model."""
        self._model_name = model_name or settings.sam_model_name
        self._device = resolve_device(device or settings.sam_device)
        self._model = None
        self._processor = None
        self._load_error: ModelLoadError | None = None
        self._lock = threading.Lock()

    def load_model(self) -> None:
        """Load the SAM model and processor into memory.

        Raises:
            ModelLoadError: If loading fails. The failure is remembered and
                raised again on every later call without retrying.
        """
        if self._load_error is not None:
            raise self._load_error

        if self._model is not None:
            logger.info("SAM model already loaded")
            return

        logger.info(f"Loading SAM model {self._model_name} on {self._device}...")

        try:
            from transformers import SamModel, SamProcessor

            model = SamModel.from_pretrained(self._model_name).to(self._device)
            model.eval()
            processor = SamProcessor.from_pretrained(self._model_name)
        except Exception as e:
            self._load_error = ModelLoadError(f"Failed to load SAM model {self._model_name}: {e}")
            logger.error(str(self._load_error))
            raise self._load_error from e

        self._model = model
        self._processor = processor
        logger.info("SAM model loaded successfully")

    def encode_sync(self, image: SourceImage) -> SamEmbedding:
        """Compute the image embedding.

        Args:
            image: Image to encode.

        Returns:
            Embedding handle for later decodes.

        Raises:
            ModelError: If the model is not loaded or inference fails.
        """
        self._ensure_loaded()

        try:
            inputs = self._processor(images=image.to_rgb(), return_tensors="pt").to(self._device)
            with self._lock, torch.inference_mode():
                image_embeddings = self._model.get_image_embeddings(inputs["pixel_values"])
            original_height, original_width = (int(v) for v in inputs["original_sizes"][0].tolist())
            reshaped_height, reshaped_width = (int(v) for v in inputs["reshaped_input_sizes"][0].tolist())
        except Exception as e:
            raise ModelError(f"Failed to encode image: {e}") from e

        logger.info(f"Encoded {original_width}x{original_height} image at {reshaped_width}x{reshaped_height}")
        return SamEmbedding(
            image_embeddings=image_embeddings,
            original_size=(original_height, original_width),
            reshaped_size=(reshaped_height, reshaped_width),
        )

    def decode_sync(self, embedding: SamEmbedding, points: PromptSet) -> DecodeResult:
        """Predict candidate masks for prompt points.

        Args:
            embedding: Embedding from ``encode_sync``.
            points: Normalized prompt points, at least one.

        Returns:
            Binary candidate masks at the original image size with their
            predicted IoU scores.

        Raises:
            ModelError: If no points are given, the model is not loaded or
                inference fails.
        """
        self._ensure_loaded()

        if not points:
            raise ModelError("Cannot decode without prompt points.")

        # Prompt coordinates live in the resized encoder frame
        reshaped_height, reshaped_width = embedding.reshaped_size
        coords = [[p.x * reshaped_width, p.y * reshaped_height] for p in points]
        labels = [int(p.label) for p in points]

        try:
            input_points = torch.tensor([[coords]], dtype=torch.float32, device=self._device)  # (1, 1, N, 2)
            input_labels = torch.tensor([[labels]], dtype=torch.int64, device=self._device)  # (1, 1, N)

            with self._lock, torch.inference_mode():
                outputs = self._model(
                    image_embeddings=embedding.image_embeddings,
                    input_points=input_points,
                    input_labels=input_labels,
                    multimask_output=True,
                )
            masks = self._processor.post_process_masks(
                outputs.pred_masks.cpu(),
                torch.tensor([embedding.original_size]),
                torch.tensor([embedding.reshaped_size]),
            )

            # masks[0] shape: (point_batch, num_candidates, H, W)
            candidates = masks[0][0].numpy().astype(np.uint8)
            scores = outputs.iou_scores[0, 0].float().cpu().numpy().astype(np.float32)
            return DecodeResult(masks=candidates, scores=scores)
        except Exception as e:
            raise ModelError(f"Failed to decode {len(points)} points: {e}") from e

    async def encode(self, image: SourceImage) -> SamEmbedding:
        return await asyncio.to_thread(self.encode_sync, image)

    async def decode(self, embedding: SamEmbedding, points: PromptSet) -> DecodeResult:
        return await asyncio.to_thread(self.decode_sync, embedding, points)

    def unload_model(self) -> None:
        """Release the SAM model from memory to free GPU resources."""
        if self._model is None:
            logger.info("SAM model not loaded, nothing to unload")
            return

        logger.info("Unloading SAM model...")

        del self._model
        del self._processor
        self._model = None
        self._processor = None

        # Clear CUDA cache
        if torch.cuda.is_available():
            torch.cuda.empty_cache()

        logger.info("SAM model unloaded")

    @property
    def is_loaded(self) -> bool:
        """Check if the model is currently loaded."""
        return self._model is not None

    @property
    def load_error(self) -> ModelLoadError | None:
        """The remembered load failure, if loading failed."""
        return self._load_error

    @property
    def model_name(self) -> str:
        return self._model_name

    def _ensure_loaded(self) -> None:
        if self._load_error is not None:
            raise self._load_error
        if self._model is None or self._processor is None:
            raise ModelError("SAM model not loaded. Call load_model() first.")

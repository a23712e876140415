"""Test fixtures for samcut tests."""

import asyncio
import io
import os
from collections.abc import Generator

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Set test environment variables before importing app modules
os.environ["LOAD_MODEL_ON_STARTUP"] = "false"

from samcut_backend.dependencies import get_sam_service, get_session_registry
from samcut_backend.main import app
from samcut_backend.services import SessionRegistry
from samcut_backend.session import DecodeResult, ModelLoadError, PromptSet, SourceImage

DEFAULT_SCORES = (0.2, 0.9, 0.5)


def make_candidates(width: int, height: int) -> np.ndarray:
    """Three candidate masks: everything, the left half, the top half."""
    masks = np.zeros((3, height, width), dtype=np.uint8)
    masks[0] = 1
    masks[1, :, : width // 2] = 1
    masks[2, : height // 2, :] = 1
    return masks


class FakeSegmentationModel:
    """In-process stand-in for the SAM service.

    Encode returns the image size as the embedding. Decode returns the
    candidates from ``make_candidates`` with configurable scores. Gates let
    tests hold a call in flight.
    """

    def __init__(self, scores: tuple[float, ...] = DEFAULT_SCORES) -> None:
        self.scores = scores
        self.encode_calls: list[SourceImage] = []
        self.decode_calls: list[PromptSet] = []
        self.encode_error: Exception | None = None
        self.decode_error: Exception | None = None
        self.encode_gate: asyncio.Event | None = None
        self.decode_gate: asyncio.Event | None = None

        # Surface of SamService used by the routes
        self.model_name = "fake-sam"
        self.load_error: ModelLoadError | None = None
        self.is_loaded = True

    def load_model(self) -> None:
        if self.load_error is not None:
            raise self.load_error

    async def encode(self, image: SourceImage) -> dict:
        self.encode_calls.append(image)
        if self.encode_gate is not None:
            await self.encode_gate.wait()
        if self.encode_error is not None:
            raise self.encode_error
        return {"size": image.size}

    async def decode(self, embedding: dict, points: PromptSet) -> DecodeResult:
        self.decode_calls.append(points)
        if self.decode_gate is not None:
            await self.decode_gate.wait()
        if self.decode_error is not None:
            raise self.decode_error
        width, height = embedding["size"]
        return DecodeResult(
            masks=make_candidates(width, height),
            scores=np.array(self.scores, dtype=np.float32),
        )


def create_test_image(width: int = 100, height: int = 80, color: str = "red") -> bytes:
    """Create a simple test image."""
    img = Image.new("RGB", (width, height), color=color)
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    buffer.seek(0)
    return buffer.getvalue()


@pytest.fixture
def fake_model() -> FakeSegmentationModel:
    """Create a fake segmentation model."""
    return FakeSegmentationModel()


@pytest.fixture
def source_image() -> SourceImage:
    """A 100x80 solid red image."""
    return SourceImage.from_pil(Image.new("RGB", (100, 80), color="red"))


@pytest.fixture
def registry() -> SessionRegistry:
    """Create an empty session registry."""
    return SessionRegistry()


@pytest.fixture
def client(fake_model: FakeSegmentationModel, registry: SessionRegistry) -> Generator[TestClient, None, None]:
    """Create a test client with mocked dependencies."""
    app.dependency_overrides[get_sam_service] = lambda: fake_model
    app.dependency_overrides[get_session_registry] = lambda: registry

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()

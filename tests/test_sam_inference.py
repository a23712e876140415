"""Tests for SAM inference service."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import numpy as np
import pytest
import torch
from PIL import Image
from samcut_backend.enums import PointLabel
from samcut_backend.services.sam_inference import SamEmbedding, SamService, resolve_device
from samcut_backend.session import ModelError, ModelLoadError, Point, SourceImage


def make_loaded_service() -> SamService:
    service = SamService(model_name="test/sam", device="cpu")
    service._model = MagicMock()
    service._processor = MagicMock()
    return service


def make_embedding() -> SamEmbedding:
    return SamEmbedding(
        image_embeddings=torch.zeros((1, 256, 64, 64)),
        original_size=(80, 100),
        reshaped_size=(819, 1024),
    )


class TestSamService:
    """Tests for SamService class."""

    def test_service_initializes_unloaded(self) -> None:
        """Test that service initializes without loading model."""
        service = SamService(device="cpu")

        assert not service.is_loaded
        assert service.load_error is None
        assert service.model_name == "Zigeng/SlimSAM-uniform-77"

    def test_encode_raises_when_model_not_loaded(self) -> None:
        """Test that encoding requires a loaded model."""
        service = SamService(device="cpu")
        image = SourceImage.from_pil(Image.new("RGB", (10, 10)))

        with pytest.raises(ModelError, match="not loaded"):
            service.encode_sync(image)

    @patch("transformers.SamProcessor")
    @patch("transformers.SamModel")
    def test_load_model_initializes_model_and_processor(
        self, mock_model_cls: MagicMock, mock_processor_cls: MagicMock
    ) -> None:
        """Test that load_model pulls both parts from the checkpoint."""
        service = SamService(model_name="test/sam", device="cpu")
        service.load_model()

        assert service.is_loaded
        mock_model_cls.from_pretrained.assert_called_once_with("test/sam")
        mock_model_cls.from_pretrained.return_value.to.assert_called_once_with("cpu")
        mock_processor_cls.from_pretrained.assert_called_once_with("test/sam")

    @patch("transformers.SamProcessor")
    @patch("transformers.SamModel")
    def test_load_failure_is_remembered(self, mock_model_cls: MagicMock, mock_processor_cls: MagicMock) -> None:
        """Test that a failed load is raised again without retrying."""
        mock_model_cls.from_pretrained.side_effect = OSError("no such checkpoint")
        service = SamService(model_name="missing/sam", device="cpu")

        with pytest.raises(ModelLoadError, match="no such checkpoint"):
            service.load_model()
        with pytest.raises(ModelLoadError):
            service.load_model()
        with pytest.raises(ModelLoadError):
            service.decode_sync(make_embedding(), (Point(0.5, 0.5),))

        assert mock_model_cls.from_pretrained.call_count == 1
        assert not service.is_loaded
        assert service.load_error is not None

    def test_encode_returns_embedding_with_sizes(self) -> None:
        """Test that encode keeps the original and reshaped sizes."""
        service = make_loaded_service()
        service._processor.return_value.to.return_value = {
            "pixel_values": torch.zeros((1, 3, 1024, 1024)),
            "original_sizes": torch.tensor([[80, 100]]),
            "reshaped_input_sizes": torch.tensor([[819, 1024]]),
        }
        service._model.get_image_embeddings.return_value = torch.ones((1, 256, 64, 64))

        embedding = service.encode_sync(SourceImage.from_pil(Image.new("RGB", (100, 80))))

        assert embedding.original_size == (80, 100)
        assert embedding.reshaped_size == (819, 1024)
        assert embedding.image_embeddings.shape == (1, 256, 64, 64)
        service._model.get_image_embeddings.assert_called_once()

    def test_decode_rejects_empty_points(self) -> None:
        """Test that decode needs at least one prompt point."""
        service = make_loaded_service()

        with pytest.raises(ModelError, match="without prompt points"):
            service.decode_sync(make_embedding(), ())

        service._model.assert_not_called()

    def test_decode_scales_points_to_reshaped_frame(self) -> None:
        """Test that normalized points are mapped to encoder coordinates with their labels."""
        service = make_loaded_service()
        service._model.return_value = SimpleNamespace(
            pred_masks=torch.zeros((1, 1, 3, 256, 256)),
            iou_scores=torch.tensor([[[0.1, 0.8, 0.3]]]),
        )
        service._processor.post_process_masks.return_value = [torch.zeros((1, 3, 80, 100), dtype=torch.bool)]

        service.decode_sync(make_embedding(), (Point(0.5, 0.25), Point(1.0, 0.0, PointLabel.NEGATIVE)))

        kwargs = service._model.call_args.kwargs
        assert kwargs["multimask_output"] is True
        assert kwargs["input_points"].shape == (1, 1, 2, 2)
        torch.testing.assert_close(
            kwargs["input_points"], torch.tensor([[[[512.0, 204.75], [1024.0, 0.0]]]], dtype=torch.float32)
        )
        assert kwargs["input_labels"].tolist() == [[[1, 0]]]

    def test_decode_returns_candidates_at_original_size(self) -> None:
        """Test the shape and content of the decode result."""
        service = make_loaded_service()
        service._model.return_value = SimpleNamespace(
            pred_masks=torch.zeros((1, 1, 3, 256, 256)),
            iou_scores=torch.tensor([[[0.1, 0.8, 0.3]]]),
        )
        post_processed = torch.zeros((1, 3, 80, 100), dtype=torch.bool)
        post_processed[0, 1, :40] = True
        service._processor.post_process_masks.return_value = [post_processed]

        result = service.decode_sync(make_embedding(), (Point(0.5, 0.5),))

        assert result.masks.shape == (3, 80, 100)
        assert result.masks.dtype == np.uint8
        assert result.masks[1, :40].all()
        assert not result.masks[1, 40:].any()
        np.testing.assert_allclose(result.scores, [0.1, 0.8, 0.3], rtol=1e-6)

        args = service._processor.post_process_masks.call_args.args
        assert args[1].tolist() == [[80, 100]]
        assert args[2].tolist() == [[819, 1024]]

    def test_decode_wraps_model_failure(self) -> None:
        """Test that inference errors surface as ModelError."""
        service = make_loaded_service()
        service._model.side_effect = RuntimeError("CUDA out of memory")

        with pytest.raises(ModelError, match="CUDA out of memory"):
            service.decode_sync(make_embedding(), (Point(0.5, 0.5),))

    def test_decode_wraps_post_processing_failure(self) -> None:
        """Test that failures while unpacking the masks surface as ModelError."""
        service = make_loaded_service()
        service._model.return_value = SimpleNamespace(
            pred_masks=torch.zeros((1, 1, 3, 256, 256)),
            iou_scores=torch.tensor([[[0.1, 0.8, 0.3]]]),
        )
        service._processor.post_process_masks.return_value = []

        with pytest.raises(ModelError, match="Failed to decode"):
            service.decode_sync(make_embedding(), (Point(0.5, 0.5),))

    def test_unload_model_clears_references(self) -> None:
        """Test that unload_model clears model and processor references."""
        service = make_loaded_service()

        assert service.is_loaded

        service.unload_model()

        assert not service.is_loaded
        assert service._model is None
        assert service._processor is None

    def test_unload_model_noop_when_not_loaded(self) -> None:
        """Test that unload_model does nothing when model not loaded."""
        service = SamService(device="cpu")

        service.unload_model()

        assert not service.is_loaded


class TestResolveDevice:
    """Tests for device selection."""

    def test_explicit_device_is_kept(self) -> None:
        assert resolve_device("cpu") == "cpu"

    @patch("torch.cuda.is_available", return_value=False)
    def test_auto_falls_back_to_cpu(self, _mock_available: MagicMock) -> None:
        assert resolve_device("auto") == "cpu"

    @patch("torch.cuda.is_available", return_value=True)
    def test_auto_prefers_cuda(self, _mock_available: MagicMock) -> None:
        assert resolve_device("auto") == "cuda"

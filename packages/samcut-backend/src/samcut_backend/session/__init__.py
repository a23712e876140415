"""Interactive segmentation session core."""

from samcut_backend.session.errors import (
    DecodeError,
    EncodeError,
    ExportError,
    ImageFetchError,
    InvalidImageError,
    ModelError,
    ModelLoadError,
    SegmentationError,
)
from samcut_backend.session.export import CUTOUT_FILENAME, cutout, encode_png, export_cutout
from samcut_backend.session.model import DecodeResult, SegmentationModel, SourceImage
from samcut_backend.session.points import Point, PointEncoder, PointerEvent, PromptAccumulator, PromptSet, Viewport
from samcut_backend.session.rendering import (
    HIGHLIGHT_COLOR,
    RenderedMask,
    composite,
    format_status,
    render,
    render_overlay,
    select_best,
)
from samcut_backend.session.scheduler import DecodeScheduler
from samcut_backend.session.session import SegmentationSession

__all__ = [
    "CUTOUT_FILENAME",
    "HIGHLIGHT_COLOR",
    "DecodeError",
    "DecodeResult",
    "DecodeScheduler",
    "EncodeError",
    "ExportError",
    "ImageFetchError",
    "InvalidImageError",
    "ModelError",
    "ModelLoadError",
    "Point",
    "PointEncoder",
    "PointerEvent",
    "PromptAccumulator",
    "PromptSet",
    "RenderedMask",
    "SegmentationError",
    "SegmentationModel",
    "SegmentationSession",
    "SourceImage",
    "Viewport",
    "composite",
    "cutout",
    "encode_png",
    "export_cutout",
    "format_status",
    "render",
    "render_overlay",
    "select_best",
]

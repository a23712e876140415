"""Backend services."""

from samcut_backend.services.image_source import EXAMPLE_IMAGE_URL, fetch_image_url, load_image_bytes
from samcut_backend.services.sam_inference import SamEmbedding, SamService, resolve_device
from samcut_backend.services.session_registry import SessionRegistry

__all__ = [
    "EXAMPLE_IMAGE_URL",
    "SamEmbedding",
    "SamService",
    "SessionRegistry",
    "fetch_image_url",
    "load_image_bytes",
    "resolve_device",
]

"""Resolve uploaded bytes or image URLs into session images."""

import logging
from io import BytesIO

import httpx
from PIL import Image, UnidentifiedImageError

from samcut_backend.config import settings
from samcut_backend.session.errors import ImageFetchError, InvalidImageError
from samcut_backend.session.model import SourceImage

logger = logging.getLogger(__name__)

EXAMPLE_IMAGE_URL = settings.example_image_url


def load_image_bytes(data: bytes) -> SourceImage:
    """Decode image bytes into a session image.

    Args:
        data: Raw bytes of an image file.

    Returns:
        The decoded image as RGBA pixels.

    Raises:
        InvalidImageError: If the bytes are empty or not a readable image.
    """
    if not data:
        raise InvalidImageError("Empty image data")

    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            image = SourceImage.from_pil(img)
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImageError(f"Cannot read image: {e}") from e

    logger.info(f"Loaded {image.width}x{image.height} image")
    return image


async def fetch_image_url(url: str, client: httpx.AsyncClient | None = None) -> bytes:
    """Download image bytes from a URL.

    Args:
        url: HTTP(S) URL of the image.
        client: Optional client to reuse; a short-lived one is created otherwise.

    Raises:
        ImageFetchError: If the request fails or returns an error status.
    """
    logger.info(f"Fetching image from {url}")
    try:
        if client is not None:
            response = await client.get(url, follow_redirects=True)
        else:
            async with httpx.AsyncClient(timeout=settings.fetch_timeout) as new_client:
                response = await new_client.get(url, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise ImageFetchError(f"Failed to fetch image from {url}: {e}") from e
    return response.content

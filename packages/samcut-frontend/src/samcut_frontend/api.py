"""API client functions for backend communication."""

import httpx

from samcut_frontend.config import API_URL
from samcut_frontend.constants import API_TIMEOUT_READ, API_TIMEOUT_WRITE
from samcut_frontend.models import PointerButton


class ApiError(Exception):
    """A backend call failed; the message carries the backend's detail."""


def _detail(response: httpx.Response) -> str:
    try:
        return str(response.json().get("detail", response.text))
    except ValueError:
        return response.text


def _check(response: httpx.Response) -> httpx.Response:
    if response.is_error:
        raise ApiError(f"{response.status_code}: {_detail(response)}")
    return response


def create_session() -> dict:
    """Create a segmentation session.

    Raises:
        ApiError: If the backend is unreachable or the model failed to load.
    """
    try:
        response = httpx.post(f"{API_URL}/sessions", timeout=API_TIMEOUT_WRITE)
    except httpx.HTTPError as e:
        raise ApiError(f"Backend unreachable: {e}") from e
    return _check(response).json()


def fetch_session(session_id: str) -> dict | None:
    """Fetch a session snapshot, None if it no longer exists."""
    try:
        response = httpx.get(f"{API_URL}/sessions/{session_id}", timeout=API_TIMEOUT_READ)
        if response.status_code == 200:
            return response.json()
    except httpx.HTTPError:
        pass
    return None


def upload_image(session_id: str, filename: str, content: bytes, content_type: str) -> dict:
    """Upload an image into a session and wait for it to be encoded.

    Raises:
        ApiError: If the upload or the encode fails.
    """
    try:
        files = {"file": (filename, content, content_type)}
        response = httpx.post(
            f"{API_URL}/sessions/{session_id}/image",
            files=files,
            timeout=API_TIMEOUT_WRITE,
        )
    except httpx.HTTPError as e:
        raise ApiError(f"Upload failed: {e}") from e
    return _check(response).json()


def load_example_image(session_id: str) -> dict:
    """Load the example image into a session.

    Raises:
        ApiError: If fetching or encoding the example fails.
    """
    try:
        response = httpx.post(f"{API_URL}/sessions/{session_id}/image/example", timeout=API_TIMEOUT_WRITE)
    except httpx.HTTPError as e:
        raise ApiError(f"Loading example failed: {e}") from e
    return _check(response).json()


def send_click(session_id: str, x: int, y: int, width: int, height: int, is_positive: bool) -> dict | None:
    """Send a click on the displayed image and wait for the new mask.

    Args:
        session_id: The session UUID.
        x: Click x in displayed image pixels.
        y: Click y in displayed image pixels.
        width: Displayed image width.
        height: Displayed image height.
        is_positive: Place a positive point (primary button) or a negative one.
    """
    button = PointerButton.PRIMARY if is_positive else PointerButton.SECONDARY
    try:
        response = httpx.post(
            f"{API_URL}/sessions/{session_id}/events",
            params={"wait": "true"},
            json={
                "kind": "down",
                "client_x": x,
                "client_y": y,
                "viewport_width": width,
                "viewport_height": height,
                "button": button.value,
            },
            timeout=API_TIMEOUT_WRITE,
        )
        response.raise_for_status()
        return response.json()
    except httpx.HTTPError:
        return None


def clear_points(session_id: str) -> bool:
    """Clear all points and the mask."""
    try:
        response = httpx.delete(f"{API_URL}/sessions/{session_id}/points", timeout=API_TIMEOUT_READ)
        response.raise_for_status()
        return True
    except httpx.HTTPError:
        return False


def reset_session(session_id: str) -> bool:
    """Reset the session, dropping its image."""
    try:
        response = httpx.post(f"{API_URL}/sessions/{session_id}/reset", timeout=API_TIMEOUT_READ)
        response.raise_for_status()
        return True
    except httpx.HTTPError:
        return False


def fetch_preview(session_id: str) -> bytes | None:
    """Fetch the image with the mask overlay composited over it."""
    try:
        response = httpx.get(
            f"{API_URL}/sessions/{session_id}/overlay",
            params={"composite": "true"},
            timeout=API_TIMEOUT_READ,
        )
        if response.status_code == 200:
            return response.content
    except httpx.HTTPError:
        pass
    return None


def fetch_cutout(session_id: str) -> bytes | None:
    """Fetch the cut-out PNG, None if there is no mask."""
    try:
        response = httpx.get(f"{API_URL}/sessions/{session_id}/cutout", timeout=API_TIMEOUT_WRITE)
        if response.status_code == 200:
            return response.content
    except httpx.HTTPError:
        pass
    return None

"""Interactive segmentation session endpoints."""

import logging
import uuid

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import Response

from samcut_backend.dependencies import get_sam_service, get_session_registry
from samcut_backend.schemas import PointerEventRequest, SessionResponse
from samcut_backend.services import EXAMPLE_IMAGE_URL, SamService, SessionRegistry, fetch_image_url, load_image_bytes
from samcut_backend.session import (
    CUTOUT_FILENAME,
    EncodeError,
    ExportError,
    ImageFetchError,
    InvalidImageError,
    ModelLoadError,
    SegmentationSession,
    SourceImage,
    encode_png,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


def get_session_or_404(registry: SessionRegistry, session_id: uuid.UUID) -> SegmentationSession:
    """Look up a session or raise a 404."""
    session = registry.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


async def _load_image(session_id: uuid.UUID, session: SegmentationSession, image: SourceImage) -> SessionResponse:
    try:
        await session.load_image(image)
    except EncodeError as e:
        logger.warning(f"Session {session_id} failed to encode image: {e}")
        raise HTTPException(status_code=422, detail=f"{session.status}: {e}") from None
    return SessionResponse.from_session(session_id, session)


@router.post("", response_model=SessionResponse, status_code=201)
def create_session(
    registry: SessionRegistry = Depends(get_session_registry),
    sam: SamService = Depends(get_sam_service),
) -> SessionResponse:
    """Create a session; the model is loaded on first use."""
    try:
        sam.load_model()
    except ModelLoadError as e:
        raise HTTPException(status_code=503, detail=str(e)) from None

    session_id, session = registry.create(sam)
    return SessionResponse.from_session(session_id, session)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: uuid.UUID,
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionResponse:
    """Get a snapshot of a session."""
    session = get_session_or_404(registry, session_id)
    return SessionResponse.from_session(session_id, session)


@router.delete("/{session_id}", status_code=204)
async def delete_session(
    session_id: uuid.UUID,
    registry: SessionRegistry = Depends(get_session_registry),
) -> None:
    """Close and delete a session."""
    if not registry.remove(session_id):
        raise HTTPException(status_code=404, detail="Session not found")


@router.post("/{session_id}/image", response_model=SessionResponse)
async def upload_image(
    session_id: uuid.UUID,
    file: UploadFile = File(...),
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionResponse:
    """Load an uploaded image into the session and encode it."""
    session = get_session_or_404(registry, session_id)

    # Validate file type
    if not file.content_type or not file.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="File must be an image")

    content = await file.read()
    try:
        image = load_image_bytes(content)
    except InvalidImageError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None

    return await _load_image(session_id, session, image)


@router.post("/{session_id}/image/example", response_model=SessionResponse)
async def load_example_image(
    session_id: uuid.UUID,
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionResponse:
    """Fetch the configured example image and encode it."""
    session = get_session_or_404(registry, session_id)

    try:
        content = await fetch_image_url(EXAMPLE_IMAGE_URL)
    except ImageFetchError as e:
        raise HTTPException(status_code=502, detail=str(e)) from None

    try:
        image = load_image_bytes(content)
    except InvalidImageError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None

    return await _load_image(session_id, session, image)


@router.post("/{session_id}/events", response_model=SessionResponse)
async def post_pointer_event(
    session_id: uuid.UUID,
    event: PointerEventRequest,
    wait: bool = False,
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionResponse:
    """Feed a pointer event to the session.

    Args:
        session_id: UUID of the session.
        event: The pointer event and the viewport it happened in.
        wait: Respond only after the resulting decode has finished.
        registry: Session registry.

    Returns:
        SessionResponse after the event (and the decode, if waiting).
    """
    session = get_session_or_404(registry, session_id)
    session.handle_pointer(event.to_event(), event.to_viewport())
    if wait:
        await session.wait_until_settled()
    return SessionResponse.from_session(session_id, session)


@router.delete("/{session_id}/points", response_model=SessionResponse)
async def clear_points(
    session_id: uuid.UUID,
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionResponse:
    """Clear the prompt points and erase the mask."""
    session = get_session_or_404(registry, session_id)
    session.clear_points()
    return SessionResponse.from_session(session_id, session)


@router.post("/{session_id}/reset", response_model=SessionResponse)
async def reset_session(
    session_id: uuid.UUID,
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionResponse:
    """Drop the image and everything derived from it."""
    session = get_session_or_404(registry, session_id)
    session.reset()
    return SessionResponse.from_session(session_id, session)


@router.get("/{session_id}/overlay")
async def get_overlay(
    session_id: uuid.UUID,
    composite: bool = False,
    registry: SessionRegistry = Depends(get_session_registry),
) -> Response:
    """Get the mask overlay as PNG, optionally composited over the image."""
    session = get_session_or_404(registry, session_id)
    image = session.overlay_image(with_source=composite)
    if image is None:
        raise HTTPException(status_code=404, detail="No image loaded")
    return Response(content=encode_png(image), media_type="image/png")


@router.get("/{session_id}/cutout")
async def get_cutout(
    session_id: uuid.UUID,
    registry: SessionRegistry = Depends(get_session_registry),
) -> Response:
    """Download the masked region of the image with a transparent background."""
    session = get_session_or_404(registry, session_id)

    try:
        image = session.cutout()
    except ExportError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None

    return Response(
        content=encode_png(image),
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{CUTOUT_FILENAME}"'},
    )

"""Pydantic schemas for API request/response models."""

import uuid

from pydantic import BaseModel, Field

from samcut_backend.enums import PointerButton, PointerKind, PointLabel, PromptMode, SessionState
from samcut_backend.session import Point, PointerEvent, SegmentationSession, Viewport


class PointResponse(BaseModel):
    """Schema for a prompt point in normalized coordinates."""

    x: float
    y: float
    label: PointLabel

    @classmethod
    def from_point(cls, point: Point) -> "PointResponse":
        return cls(x=point.x, y=point.y, label=point.label)


class SessionResponse(BaseModel):
    """Schema for a snapshot of a segmentation session."""

    id: uuid.UUID
    state: SessionState
    mode: PromptMode
    status: str
    points: list[PointResponse]
    has_mask: bool
    mask_score: float | None = None
    image_width: int | None = None
    image_height: int | None = None

    @classmethod
    def from_session(cls, session_id: uuid.UUID, session: SegmentationSession) -> "SessionResponse":
        rendered = session.rendered_mask
        image = session.image
        return cls(
            id=session_id,
            state=session.state,
            mode=session.mode,
            status=session.status,
            points=[PointResponse.from_point(p) for p in session.points],
            has_mask=rendered is not None,
            mask_score=rendered.score if rendered is not None else None,
            image_width=image.width if image is not None else None,
            image_height=image.height if image is not None else None,
        )


class PointerEventRequest(BaseModel):
    """Schema for a pointer event over the displayed image."""

    kind: PointerKind
    client_x: float
    client_y: float
    viewport_width: float = Field(gt=0)
    viewport_height: float = Field(gt=0)
    viewport_left: float = 0.0
    viewport_top: float = 0.0
    button: PointerButton = PointerButton.PRIMARY
    negative: bool = False

    def to_event(self) -> PointerEvent:
        return PointerEvent(
            kind=self.kind,
            client_x=self.client_x,
            client_y=self.client_y,
            button=self.button,
            negative=self.negative,
        )

    def to_viewport(self) -> Viewport:
        return Viewport(
            left=self.viewport_left,
            top=self.viewport_top,
            width=self.viewport_width,
            height=self.viewport_height,
        )


class HealthResponse(BaseModel):
    """Schema for the health check."""

    status: str
    sam_model: str
    sam_loaded: bool
    sam_error: str | None = None

"""In-memory registry of interactive segmentation sessions."""

import logging
import uuid

from samcut_backend.config import settings
from samcut_backend.session import SegmentationModel, SegmentationSession

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Owns the live sessions of this process.

    Sessions are not persisted; a restart drops them.
    """

    def __init__(self) -> None:
        self._sessions: dict[uuid.UUID, SegmentationSession] = {}

    def create(self, model: SegmentationModel) -> tuple[uuid.UUID, SegmentationSession]:
        """Create a session bound to the given model."""
        session_id = uuid.uuid4()
        session = SegmentationSession(
            model,
            debounce_seconds=settings.debounce_ms / 1000,
            overlay_opacity=settings.overlay_opacity,
        )
        self._sessions[session_id] = session
        logger.info(f"Created session {session_id}")
        return session_id, session

    def get(self, session_id: uuid.UUID) -> SegmentationSession | None:
        return self._sessions.get(session_id)

    def remove(self, session_id: uuid.UUID) -> bool:
        """Close and drop a session.

        Returns:
            True if the session existed.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        logger.info(f"Removed session {session_id}")
        return True

    def clear(self) -> None:
        for session_id in list(self._sessions):
            self.remove(session_id)

    def __len__(self) -> int:
        return len(self._sessions)

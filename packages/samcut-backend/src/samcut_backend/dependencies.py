"""FastAPI dependency providers for shared services."""

from samcut_backend.services import SamService, SessionRegistry

_sam_service: SamService | None = None
_session_registry: SessionRegistry | None = None


def get_sam_service() -> SamService:
    """Get or create the SAM service singleton."""
    global _sam_service
    if _sam_service is None:
        _sam_service = SamService()
    return _sam_service


def get_session_registry() -> SessionRegistry:
    """Get or create the session registry singleton."""
    global _session_registry
    if _session_registry is None:
        _session_registry = SessionRegistry()
    return _session_registry

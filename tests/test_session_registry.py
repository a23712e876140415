"""Tests for the in-memory session registry."""

import uuid

import pytest
from conftest import FakeSegmentationModel
from samcut_backend.enums import SessionState
from samcut_backend.services import SessionRegistry
from samcut_backend.session import SourceImage


class TestSessionRegistry:
    """Tests for SessionRegistry."""

    def test_create_and_get(self, registry: SessionRegistry, fake_model: FakeSegmentationModel) -> None:
        """Test that created sessions can be looked up by id."""
        session_id, session = registry.create(fake_model)

        assert registry.get(session_id) is session
        assert len(registry) == 1
        assert session.state == SessionState.IDLE

    def test_sessions_are_independent(self, registry: SessionRegistry, fake_model: FakeSegmentationModel) -> None:
        """Test that each create returns a new session."""
        first_id, first = registry.create(fake_model)
        second_id, second = registry.create(fake_model)

        assert first_id != second_id
        assert first is not second

    def test_get_unknown(self, registry: SessionRegistry) -> None:
        """Test that unknown ids return None."""
        assert registry.get(uuid.uuid4()) is None

    @pytest.mark.asyncio
    async def test_remove_closes_session(
        self, registry: SessionRegistry, fake_model: FakeSegmentationModel, source_image: SourceImage
    ) -> None:
        """Test that removing a session resets it."""
        session_id, session = registry.create(fake_model)
        await session.load_image(source_image)

        assert registry.remove(session_id)

        assert session.image is None
        assert session.state == SessionState.IDLE
        assert registry.get(session_id) is None
        assert not registry.remove(session_id)

    def test_clear(self, registry: SessionRegistry, fake_model: FakeSegmentationModel) -> None:
        """Test that clear drops every session."""
        registry.create(fake_model)
        registry.create(fake_model)

        registry.clear()

        assert len(registry) == 0

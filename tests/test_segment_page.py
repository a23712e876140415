"""Tests for the segmentation page text."""

from samcut_frontend.pages.segment import INSTRUCTIONS


class TestInstructions:
    """Tests for the instructions panel."""

    def test_hover_limitation_is_stated(self) -> None:
        """Test that the page says the preview follows clicks, not hovering."""
        text = " ".join(INSTRUCTIONS)

        assert "updates on click" in text
        assert "Hover preview is only available through the API" in text

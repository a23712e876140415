"""Point annotator component using streamlit-image-coordinates."""

from typing import Any

import streamlit as st
from PIL import Image, ImageDraw
from streamlit_image_coordinates import streamlit_image_coordinates

from samcut_frontend.constants import COLOR_NEGATIVE_POINT, COLOR_POSITIVE_POINT
from samcut_frontend.models import PointLabel

# Point rendering constants
POINT_RADIUS = 6
POINT_OUTLINE_WIDTH = 2


def draw_points_on_image(
    image: Image.Image,
    points: list[dict[str, Any]],
) -> Image.Image:
    """Draw prompt points on an image.

    Args:
        image: PIL Image to draw on.
        points: Point dicts with normalized x, y and a label.

    Returns:
        RGB image with points drawn as colored circles.
    """
    img_copy = image.copy().convert("RGBA")
    draw = ImageDraw.Draw(img_copy)
    width, height = img_copy.size

    for point in points:
        x = point["x"] * width
        y = point["y"] * height
        is_positive = point["label"] == PointLabel.POSITIVE

        fill_color = COLOR_POSITIVE_POINT if is_positive else COLOR_NEGATIVE_POINT

        # Draw filled circle with white outline
        draw.ellipse(
            [x - POINT_RADIUS, y - POINT_RADIUS, x + POINT_RADIUS, y + POINT_RADIUS],
            fill=fill_color,
            outline="white",
            width=POINT_OUTLINE_WIDTH,
        )

    return img_copy.convert("RGB")


def scale_to_width(image: Image.Image, width: int) -> Image.Image:
    """Downscale an image to at most the given width, keeping the aspect ratio."""
    if image.width <= width:
        return image
    height = max(1, round(image.height * width / image.width))
    return image.resize((width, height), Image.Resampling.LANCZOS)


def point_annotator(
    image: Image.Image,
    points: list[dict[str, Any]],
    key: str = "point_annotator",
) -> dict[str, int] | None:
    """Interactive point annotator component.

    Displays an image with existing points overlaid and detects clicks.

    Args:
        image: PIL Image as displayed; click coordinates are in its pixels.
        points: Point dicts with normalized x, y and a label.
        key: Unique key for the Streamlit component.

    Returns:
        Dict with x, y coordinates of the click, or None if no new click.
    """
    # Track last processed click timestamp to avoid processing the same click twice
    state_key = f"_last_click_time_{key}"
    if state_key not in st.session_state:
        st.session_state[state_key] = None

    annotated_image = draw_points_on_image(image, points)

    value = streamlit_image_coordinates(
        annotated_image,
        key=key,
        click_and_drag=False,
    )

    if value and "x" in value and "y" in value:
        current_time = value.get("unix_time")

        # Skip if we've already processed this exact click (same timestamp)
        if current_time is not None and current_time == st.session_state[state_key]:
            return None

        st.session_state[state_key] = current_time

        return {
            "x": value["x"],
            "y": value["y"],
        }

    return None

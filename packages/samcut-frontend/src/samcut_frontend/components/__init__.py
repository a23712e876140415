"""Reusable UI components."""

from samcut_frontend.components.point_annotator import draw_points_on_image, point_annotator, scale_to_width

__all__ = [
    "draw_points_on_image",
    "point_annotator",
    "scale_to_width",
]

"""Shared constants for the frontend."""

# Semantic colors for point markers
COLOR_POSITIVE_POINT = "#4bff4b"  # green
COLOR_NEGATIVE_POINT = "#ff4b4b"  # red

# Width the preview is scaled to before display
DISPLAY_WIDTH = 640

# API timeouts
API_TIMEOUT_READ = 10.0
API_TIMEOUT_WRITE = 60.0

"""Frontend configuration from environment variables."""

import os

API_URL = os.environ.get("SAMCUT_API_URL", "http://localhost:8000").rstrip("/")

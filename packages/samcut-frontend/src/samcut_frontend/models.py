"""Shared data models and enums."""

from enum import IntEnum, StrEnum


class SessionState(StrEnum):
    """Lifecycle state of a backend segmentation session."""

    IDLE = "idle"
    ENCODING = "encoding"
    READY = "ready"
    DECODING = "decoding"


class PointLabel(IntEnum):
    """Polarity of a prompt point."""

    NEGATIVE = 0
    POSITIVE = 1


class PointerButton(IntEnum):
    """Mouse buttons understood by the backend."""

    PRIMARY = 0
    SECONDARY = 2

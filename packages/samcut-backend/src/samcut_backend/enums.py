"""Shared enums for the application."""

import enum


class SessionState(str, enum.Enum):
    """Lifecycle state of a segmentation session."""

    IDLE = "idle"
    ENCODING = "encoding"
    READY = "ready"
    DECODING = "decoding"


class PromptMode(str, enum.Enum):
    """How pointer events feed the prompt points."""

    EPHEMERAL = "ephemeral"
    COMMITTED = "committed"


class PointLabel(int, enum.Enum):
    """Polarity of a prompt point, using the model's label values."""

    NEGATIVE = 0
    POSITIVE = 1


class PointerKind(str, enum.Enum):
    """Kind of pointer event delivered to a session."""

    MOVE = "move"
    DOWN = "down"


class PointerButton(int, enum.Enum):
    """Mouse button numbers as reported by the browser."""

    PRIMARY = 0
    MIDDLE = 1
    SECONDARY = 2

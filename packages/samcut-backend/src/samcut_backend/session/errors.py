"""Exceptions raised by the segmentation session and its collaborators."""


class SegmentationError(Exception):
    """Base class for segmentation session errors."""


class ModelError(SegmentationError):
    """The segmentation model could not process a request."""


class ModelLoadError(ModelError):
    """The segmentation model failed to initialize.

    Fatal for the lifetime of the process; the model service remembers the
    failure and never retries.
    """


class EncodeError(SegmentationError):
    """An image could not be encoded into an embedding."""


class DecodeError(SegmentationError):
    """A decode call for the current prompt points failed."""


class ExportError(SegmentationError):
    """A cutout was requested while no mask is rendered."""


class InvalidImageError(SegmentationError):
    """Image bytes could not be decoded into pixels."""


class ImageFetchError(SegmentationError):
    """An image could not be downloaded from a URL."""

# app/domain/errors.py
"""
Error kinds reported by the frame editing and export pipeline.

Every error here is recoverable: the current export attempt is aborted,
the editing session is left as it was, and the message is shown to the user.
"""
from typing import Any, Dict, Optional


class FrameError(Exception):
    """Base class for all reported frame pipeline errors."""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class MissingSource(FrameError):
    """No uploaded photo (or no selected frame) at export time."""

    def __init__(self, message: str = "no source image", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class InvalidCrop(FrameError):
    """Degenerate or out-of-bounds crop rectangle."""

    status_code = 422


class MeasurementNotReady(FrameError):
    """The text box has not been measured yet, or the measurement is stale."""

    status_code = 409

    def __init__(self, message: str = "text box not measured yet", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class RenderFailure(FrameError):
    """Text rasterization, image decode or image encode failed."""

    status_code = 500


class DegenerateGeometry(FrameError):
    """A computed width or height is not positive, or a layer overflows the inner area."""

    status_code = 422

    def __init__(self, message: str = "degenerate frame geometry", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)

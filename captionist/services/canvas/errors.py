"""
Canvas Exceptions

Error hierarchy for the annotation canvas session and its graphics engines.
"""
from typing import Any, Dict, Optional


class CanvasError(Exception):
    """
    Base exception for canvas session errors.

    Carries a machine-readable error code and a context dict so the UI
    boundary can report the failure without parsing the message.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for display"""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
        }

        if self.cause:
            result["caused_by"] = str(self.cause)

        return result


class MissingSourceError(CanvasError):
    """No source image URL was supplied for a new session."""


class EngineUnavailableError(CanvasError):
    """The graphics engine is missing or could not create a canvas."""

    def __init__(self, message: str, engine: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        if engine:
            self.context["engine"] = engine


class ImageLoadError(CanvasError):
    """Fetching or decoding the background image failed."""

    def __init__(self, message: str, url: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        if url:
            self.context["url"] = url


class NotReadyError(CanvasError):
    """An operation needs a canvas handle that does not exist (yet or anymore)."""


class ExportError(CanvasError):
    """Flattening the canvas into a raster image failed."""


class ExportTaintError(ExportError):
    """The canvas holds cross-origin image data that may not be read back."""

"""
Tests for canvas exceptions
"""
import pytest

from captionist.services.canvas import (
    CanvasError,
    EngineUnavailableError,
    ExportError,
    ExportTaintError,
    ImageLoadError,
    MissingSourceError,
    NotReadyError,
)


class TestCanvasErrors:
    """Tests for the canvas error hierarchy"""

    @pytest.mark.parametrize(
        "error_class",
        [MissingSourceError, EngineUnavailableError, ImageLoadError, NotReadyError, ExportError, ExportTaintError],
    )
    def test_hierarchy(self, error_class):
        """Test every error is a CanvasError"""
        assert issubclass(error_class, CanvasError)

    def test_taint_is_export_error(self):
        """Test callers catching ExportError also see taint failures"""
        with pytest.raises(ExportError):
            raise ExportTaintError("cross-origin")

    def test_default_error_code(self):
        """Test error_code defaults to the class name"""
        error = NotReadyError("no canvas")

        assert error.error_code == "NotReadyError"
        assert error.message == "no canvas"
        assert str(error) == "no canvas"
        assert error.context == {}

    def test_image_load_context(self):
        """Test the URL is recorded in the context"""
        cause = OSError("connection refused")
        error = ImageLoadError("fetch failed", url="https://x.example/a.png", cause=cause)

        assert error.context == {"url": "https://x.example/a.png"}
        assert error.cause is cause

    def test_engine_context(self):
        """Test the engine name is recorded in the context"""
        error = EngineUnavailableError("gone", engine="pillow")

        assert error.context["engine"] == "pillow"

    def test_to_dict(self):
        """Test conversion for display"""
        error = ImageLoadError("fetch failed", url="https://x.example/a.png", cause=ValueError("bad"))

        assert error.to_dict() == {
            "error_type": "ImageLoadError",
            "message": "fetch failed",
            "error_code": "ImageLoadError",
            "context": {"url": "https://x.example/a.png"},
            "caused_by": "bad",
        }

    def test_to_dict_without_cause(self):
        """Test caused_by is omitted when there is no cause"""
        assert "caused_by" not in MissingSourceError("empty").to_dict()

"""
Shared pytest fixtures for Captionist tests
"""
from concurrent.futures import Future
from typing import List, Optional

import pytest
from PIL import Image

from captionist.services.canvas import (
    EngineUnavailableError,
    ExportTaintError,
    SessionController,
)
from captionist.services.canvas.engines.base import (
    CanvasHandle,
    CorsMode,
    GraphicsEngine,
    ImageHandle,
    ObjectHandle,
)

# Test data
TEST_IMAGE_URL = "https://images.example.com/photo.jpg"
FAKE_PNG = b"\x89PNG\r\n\x1a\nfake"


class RecordingEngine(GraphicsEngine):
    """
    Graphics engine that records calls and hands out futures the test resolves

    Resolving a future with ``set_result`` runs the controller's completion
    callback synchronously in the test thread.
    """

    def __init__(self, fail_create: bool = False):
        self.fail_create = fail_create
        self.calls: List[tuple] = []
        self.futures: List[Future] = []
        self.canvases: List[CanvasHandle] = []

    @property
    def name(self) -> str:
        return "recording"

    @property
    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]

    @property
    def last_future(self) -> Optional[Future]:
        return self.futures[-1] if self.futures else None

    def create_canvas(self, width, height, background_color):
        self.calls.append(("create_canvas", width, height, background_color))
        if self.fail_create:
            raise EngineUnavailableError("Canvas capability missing", engine=self.name)
        handle = CanvasHandle(width=width, height=height, background_color=background_color)
        self.canvases.append(handle)
        return handle

    def load_image_async(self, url, cors_mode=CorsMode.ANONYMOUS):
        self.calls.append(("load_image_async", url, cors_mode))
        future = Future()
        self.futures.append(future)
        return future

    def set_background(self, handle, image):
        self._check_handle(handle)
        self.calls.append(("set_background", image.url))
        handle.background = image

    def add_object(self, handle, layer):
        self._check_handle(handle)
        self.calls.append(("add_object", layer.kind.value))
        obj = ObjectHandle(id=len(handle.objects) + 1, layer=layer)
        handle.objects.append(obj)
        return obj

    def set_active_object(self, handle, obj):
        self._check_handle(handle)
        self.calls.append(("set_active_object", obj.id))
        handle.active_object = obj

    def render(self, handle):
        self._check_handle(handle)
        self.calls.append(("render",))
        return Image.new("RGBA", (handle.width, handle.height), "white")

    def to_raster_bytes(self, handle, fmt="png", quality=1.0):
        self._check_handle(handle)
        self.calls.append(("to_raster_bytes", fmt, quality))
        if handle.background is not None and handle.background.tainted:
            raise ExportTaintError("Tainted canvas")
        return FAKE_PNG

    def dispose(self, handle):
        self.calls.append(("dispose", handle.id))
        handle.disposed = True


def _image_handle(width: int, height: int, url: str = TEST_IMAGE_URL, tainted: bool = False) -> ImageHandle:
    return ImageHandle(url=url, image=Image.new("RGBA", (width, height), "blue"), tainted=tainted)


@pytest.fixture
def image_url():
    """URL used to start sessions"""
    return TEST_IMAGE_URL


@pytest.fixture
def make_image_handle():
    """
    Factory fixture creating ImageHandles around blank images

    Usage:
        handle = make_image_handle(1600, 900, tainted=True)
    """
    return _image_handle


@pytest.fixture
def recording_engine():
    """Create a RecordingEngine"""
    return RecordingEngine()


@pytest.fixture
def controller(recording_engine):
    """Create a SessionController around the recording engine"""
    controller = SessionController(recording_engine)
    yield controller
    controller.end_session()


@pytest.fixture
def loaded_controller(controller, recording_engine):
    """Controller whose session has a 1600x900 background loaded"""
    controller.start_session(TEST_IMAGE_URL)
    recording_engine.last_future.set_result(_image_handle(1600, 900))
    return controller


@pytest.fixture
def failing_engine():
    """Create a RecordingEngine whose canvas creation fails"""
    return RecordingEngine(fail_create=True)

"""
End-to-end tests for the annotation canvas with the real Pillow engine.

Tests:
- Background load through the worker pool
- Layer ledger after a full captioning pass
- PNG export of the composed canvas
"""
import base64
import json
from io import BytesIO

import numpy as np
import pytest
from PIL import Image

from captionist.services.canvas import (
    GraphicsEngineFactory,
    ImageLoadError,
    SessionController,
    SessionState,
)

LOAD_TIMEOUT = 10


def _data_url(image: Image.Image) -> str:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode()


@pytest.fixture
def engine():
    engine = GraphicsEngineFactory.create("pillow", max_workers=1)
    yield engine
    engine.shutdown()


@pytest.fixture
def source_url():
    """400x300 red photo; scales by 2.0 to fill the 800x600 canvas"""
    return _data_url(Image.new("RGB", (400, 300), color="red"))


class TestCaptioningPass:
    """Full session from URL to PNG"""

    def test_background_loads(self, engine, source_url):
        """Test the background lands scaled and recorded"""
        with SessionController(engine) as controller:
            session = controller.start_session(source_url)

            assert session.wait_for_background(timeout=LOAD_TIMEOUT)
            assert session.state == SessionState.READY
            assert session.errors == []
            assert session.scale_factor == pytest.approx(2.0)

            background = session.layers.background
            assert background is not None
            assert (background.scaled_width, background.scaled_height) == (800, 600)

    def test_export_after_adding_shapes(self, engine, source_url):
        """Test the exported PNG holds the background and every shape"""
        with SessionController(engine) as controller:
            session = controller.start_session(source_url)
            assert session.wait_for_background(timeout=LOAD_TIMEOUT)

            controller.add_text("Caption")
            controller.add_rectangle()
            controller.add_circle()
            controller.add_triangle()
            controller.add_polygon()

            data = controller.export_raster()
            records = json.loads(session.layers.to_json())

        assert [r["kind"] for r in records] == [
            "background-image", "text", "rectangle", "circle", "triangle", "polygon",
        ]
        assert records[1]["text"] == "Caption"

        exported = Image.open(BytesIO(data))
        assert exported.format == "PNG"
        assert exported.size == (800, 600)

        pixels = np.asarray(exported.convert("RGBA"))
        # Untouched background corner
        assert tuple(pixels[590, 790]) == (255, 0, 0, 255)
        # Translucent green circle over red
        r, g, b, _ = pixels[250, 250]
        assert g > 90 and b < 10

    def test_shapes_without_background(self, engine, tmp_path):
        """Test a failed load still leaves a usable canvas"""
        missing = (tmp_path / "gone.png").as_uri()

        with SessionController(engine) as controller:
            session = controller.start_session(missing)
            assert session.wait_for_background(timeout=LOAD_TIMEOUT)

            assert isinstance(session.errors[0], ImageLoadError)
            controller.add_rectangle()
            data = controller.export_raster()

        pixels = np.asarray(Image.open(BytesIO(data)).convert("RGBA"))
        assert tuple(pixels[10, 10]) == (255, 255, 255, 255)
        # Half-alpha red over white
        assert pixels[200, 200][0] == 255
        assert abs(int(pixels[200, 200][1]) - 127) <= 1

    def test_malformed_url_reported(self, engine):
        """Test a URL with a bad port ends loading with a reported error"""
        with SessionController(engine) as controller:
            session = controller.start_session("http://example.com:abc/photo.jpg")
            assert session.wait_for_background(timeout=LOAD_TIMEOUT)

            assert session.state == SessionState.READY
            assert isinstance(session.errors[0], ImageLoadError)
            assert controller.snapshot() == ()

    def test_end_session_releases_canvas(self, engine, source_url):
        """Test the canvas handle is disposed when the session ends"""
        controller = SessionController(engine)
        session = controller.start_session(source_url)
        session.wait_for_background(timeout=LOAD_TIMEOUT)
        canvas = session.canvas

        controller.end_session()

        assert canvas.disposed is True
        assert controller.snapshot() == ()

"""
Shared pytest fixtures for canvas service tests
"""
import base64
from io import BytesIO

import pytest
from PIL import Image

from captionist.services.canvas import PillowEngine


def _png_bytes(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def pillow_engine():
    """Create a PillowEngine and shut it down afterwards"""
    engine = PillowEngine(origin="http://localhost:8501", max_workers=1)
    yield engine
    engine.shutdown()


@pytest.fixture
def red_image():
    """Create a 400x300 red test image"""
    return Image.new("RGB", (400, 300), color="red")


@pytest.fixture
def red_image_data_url(red_image):
    """The red test image as a data URL"""
    encoded = base64.b64encode(_png_bytes(red_image)).decode()
    return f"data:image/png;base64,{encoded}"


@pytest.fixture
def tall_image_file_url(tmp_path):
    """A 300x1200 green PNG on disk, as a file URL"""
    path = tmp_path / "tall.png"
    Image.new("RGB", (300, 1200), color="green").save(path)
    return path.as_uri()


@pytest.fixture
def not_an_image_file_url(tmp_path):
    """A text file posing as an image"""
    path = tmp_path / "broken.png"
    path.write_text("definitely not a png")
    return path.as_uri()

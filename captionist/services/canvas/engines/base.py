"""
Base classes for graphics engines

A graphics engine owns every pixel: it creates canvases, decodes images,
composites objects and encodes the result. The session controller talks to
it only through the GraphicsEngine contract below.
"""
from abc import ABC, abstractmethod
from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional
import uuid

from PIL import Image

from ..errors import NotReadyError
from ..models import Layer


class CorsMode(str, Enum):
    """Credentials mode for cross-origin image fetches"""
    ANONYMOUS = "anonymous"
    USE_CREDENTIALS = "use-credentials"


@dataclass
class ImageHandle:
    """
    Decoded image owned by an engine

    Attributes:
        url: Source URL
        image: Decoded RGBA image at natural size
        tainted: True if the pixels came from an origin that did not allow reading them back
        selectable: Whether the user may pick and move the image
        left: Horizontal placement on the canvas
        top: Vertical placement on the canvas
        scale: Uniform scale applied when drawing
    """
    url: str
    image: Image.Image
    tainted: bool = False
    selectable: bool = True
    left: float = 0
    top: float = 0
    scale: float = 1.0

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def scaled_width(self) -> float:
        return self.width * self.scale

    @property
    def scaled_height(self) -> float:
        return self.height * self.scale


@dataclass
class ObjectHandle:
    """A layer as placed on one canvas"""
    id: int
    layer: Layer
    selectable: bool = True


@dataclass
class CanvasHandle:
    """Engine-side state of one canvas"""
    width: int
    height: int
    background_color: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    background: Optional[ImageHandle] = None
    objects: List[ObjectHandle] = field(default_factory=list)
    active_object: Optional[ObjectHandle] = None
    disposed: bool = False


class GraphicsEngine(ABC):
    """
    Abstract base class for all graphics engines

    Engines surface three failures distinctly: EngineUnavailableError when
    a canvas cannot be created at all, ImageLoadError when an image cannot
    be fetched or decoded, and ExportTaintError when the canvas may not be
    read back. Every call other than dispose() on a disposed canvas raises
    NotReadyError; dispose() itself is idempotent.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Engine name used by the factory"""
        pass

    @abstractmethod
    def create_canvas(self, width: int, height: int, background_color: str) -> CanvasHandle:
        """Allocate a blank canvas"""
        pass

    @abstractmethod
    def load_image_async(self, url: str, cors_mode: Optional[CorsMode] = CorsMode.ANONYMOUS) -> "Future[ImageHandle]":
        """
        Start fetching and decoding an image without blocking the caller

        Args:
            url: Image URL
            cors_mode: Credentials mode for cross-origin fetches, or None for a plain fetch

        Returns:
            Future resolving to an ImageHandle, or failing with ImageLoadError
        """
        pass

    @abstractmethod
    def set_background(self, handle: CanvasHandle, image: ImageHandle) -> None:
        """Draw ``image`` beneath every object of the canvas"""
        pass

    @abstractmethod
    def add_object(self, handle: CanvasHandle, layer: Layer) -> ObjectHandle:
        """Place a shape or text described by ``layer`` on top of the canvas"""
        pass

    @abstractmethod
    def set_active_object(self, handle: CanvasHandle, obj: ObjectHandle) -> None:
        """Mark an object as the current selection"""
        pass

    @abstractmethod
    def render(self, handle: CanvasHandle) -> Image.Image:
        """
        Composite the canvas

        Returns:
            The current frame as an RGBA image, for display
        """
        pass

    @abstractmethod
    def to_raster_bytes(self, handle: CanvasHandle, fmt: str = "png", quality: float = 1.0) -> bytes:
        """Flatten the canvas and encode it"""
        pass

    @abstractmethod
    def dispose(self, handle: CanvasHandle) -> None:
        """Release everything the canvas holds"""
        pass

    def shutdown(self) -> None:
        """Release engine-wide resources (worker pools). Default: nothing to release"""
        pass

    @staticmethod
    def _check_handle(handle: Optional[CanvasHandle]) -> CanvasHandle:
        if handle is None:
            raise NotReadyError("No canvas handle")
        if handle.disposed:
            raise NotReadyError(
                f"Canvas {handle.id} has been disposed",
                context={"canvas_id": handle.id},
            )
        return handle

"""
Pillow Graphics Engine

Composites canvases with Pillow. Images are fetched with urllib on a small
worker pool so loading never blocks the caller.
"""
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, Optional
from urllib.parse import urlparse
import http.client
import io
import itertools
import logging
import urllib.error
import urllib.request

from PIL import Image, ImageColor, ImageDraw, ImageFont

from captionist import config
from .base import CanvasHandle, CorsMode, GraphicsEngine, ImageHandle, ObjectHandle
from ..errors import EngineUnavailableError, ExportError, ExportTaintError, ImageLoadError
from ..models import (
    CircleLayer,
    Layer,
    PolygonLayer,
    RectangleLayer,
    ShapeLayer,
    TextLayer,
    TriangleLayer,
)

logger = logging.getLogger(__name__)

# Schemes whose pixels never count as cross-origin
LOCAL_SCHEMES = ("data", "file")
RASTER_FORMATS = {"png": "PNG", "jpeg": "JPEG", "jpg": "JPEG"}
MAX_JPEG_QUALITY = 95


class PillowEngine(GraphicsEngine):
    """
    Graphics engine backed by Pillow

    Object geometry follows the usual vector-canvas conventions: ``left`` and
    ``top`` locate the bounding box corner, circles span ``2 * radius``,
    triangles point up, and polygon points are shifted so their bounding box
    starts at ``left``/``top``.
    """

    def __init__(self, origin: Optional[str] = None, max_workers: Optional[int] = None, **kwargs):
        """
        Initialize Pillow engine

        Args:
            origin: Origin announced on cross-origin fetches (default: config.CANVAS_ORIGIN)
            max_workers: Image loader threads (default: config.IMAGE_LOADER_WORKERS)
        """
        self.origin = (origin or config.CANVAS_ORIGIN).rstrip("/")
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or config.IMAGE_LOADER_WORKERS,
            thread_name_prefix="captionist-loader",
        )
        self._object_ids = itertools.count(1)
        self._fonts: Dict[int, ImageFont.ImageFont] = {}
        self._closed = False

    @property
    def name(self) -> str:
        return "pillow"

    def create_canvas(self, width: int, height: int, background_color: str) -> CanvasHandle:
        if self._closed:
            raise EngineUnavailableError("Pillow engine has been shut down", engine=self.name)
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas dimensions must be positive, got {width}x{height}")
        # Fail early on colors Pillow cannot parse
        ImageColor.getcolor(background_color, "RGBA")

        handle = CanvasHandle(width=width, height=height, background_color=background_color)
        logger.debug(f"Created canvas {handle.id} ({width}x{height})")
        return handle

    def load_image_async(self, url: str, cors_mode: Optional[CorsMode] = CorsMode.ANONYMOUS) -> "Future[ImageHandle]":
        if self._closed:
            raise EngineUnavailableError("Pillow engine has been shut down", engine=self.name)
        return self._executor.submit(self._load_image, url, cors_mode)

    def set_background(self, handle: CanvasHandle, image: ImageHandle) -> None:
        handle = self._check_handle(handle)
        handle.background = image

    def add_object(self, handle: CanvasHandle, layer: Layer) -> ObjectHandle:
        handle = self._check_handle(handle)
        if not isinstance(layer, ShapeLayer):
            raise TypeError(f"Cannot add {type(layer).__name__} as a canvas object")

        obj = ObjectHandle(id=next(self._object_ids), layer=layer)
        handle.objects.append(obj)
        return obj

    def set_active_object(self, handle: CanvasHandle, obj: ObjectHandle) -> None:
        handle = self._check_handle(handle)
        if obj not in handle.objects:
            raise ValueError(f"Object {obj.id} is not on canvas {handle.id}")
        handle.active_object = obj

    def render(self, handle: CanvasHandle) -> Image.Image:
        handle = self._check_handle(handle)

        frame = Image.new(
            "RGBA",
            (handle.width, handle.height),
            ImageColor.getcolor(handle.background_color, "RGBA"),
        )
        if handle.background is not None:
            self._draw_image(frame, handle.background)
        for obj in handle.objects:
            self._draw_layer(frame, obj.layer)
        return frame

    def to_raster_bytes(self, handle: CanvasHandle, fmt: str = "png", quality: float = 1.0) -> bytes:
        handle = self._check_handle(handle)

        pil_format = RASTER_FORMATS.get(fmt.lower())
        if pil_format is None:
            raise ExportError(
                f"Unsupported raster format: '{fmt}'. "
                f"Available formats: {', '.join(RASTER_FORMATS)}"
            )
        if not 0 < quality <= 1:
            raise ExportError(f"Quality must be in (0, 1], got {quality}")

        if handle.background is not None and handle.background.tainted:
            raise ExportTaintError(
                "Canvas contains a cross-origin image that may not be exported",
                context={"url": handle.background.url, "canvas_id": handle.id},
            )

        frame = self.render(handle)
        buffer = io.BytesIO()
        try:
            if pil_format == "PNG":
                frame.save(buffer, format="PNG")
            else:
                frame.convert("RGB").save(
                    buffer,
                    format="JPEG",
                    quality=max(1, round(quality * MAX_JPEG_QUALITY)),
                )
        except (OSError, ValueError) as e:
            raise ExportError(f"Failed to encode canvas as {pil_format}: {e}", cause=e) from e

        return buffer.getvalue()

    def dispose(self, handle: CanvasHandle) -> None:
        if handle.disposed:
            return

        if handle.background is not None:
            handle.background.image.close()
            handle.background = None
        handle.objects.clear()
        handle.active_object = None
        handle.disposed = True
        logger.debug(f"Disposed canvas {handle.id}")

    def shutdown(self) -> None:
        """Stop the loader pool; pending loads are cancelled"""
        self._closed = True
        self._executor.shutdown(wait=False, cancel_futures=True)

    # ------------------------------------------------------------------
    # Image loading
    # ------------------------------------------------------------------

    def _load_image(self, url: str, cors_mode: Optional[CorsMode]) -> ImageHandle:
        request = urllib.request.Request(url, headers=self._request_headers(url, cors_mode))
        try:
            with urllib.request.urlopen(request) as response:
                data = response.read()
                headers = response.headers
        except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as e:
            raise ImageLoadError(f"Failed to fetch image: {e}", url=url, cause=e) from e

        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (OSError, Image.DecompressionBombError) as e:
            raise ImageLoadError(f"Failed to decode image: {e}", url=url, cause=e) from e

        tainted = self._is_tainted(url, cors_mode, headers)
        if tainted:
            logger.warning(f"Image from {url} is not CORS-enabled for {self.origin}; export will be blocked")

        logger.info(f"Loaded image {url} ({image.width}x{image.height})")
        return ImageHandle(url=url, image=image.convert("RGBA"), tainted=tainted)

    def _request_headers(self, url: str, cors_mode: Optional[CorsMode]) -> Dict[str, str]:
        # Anonymous mode never attaches credentials; urllib sends no cookies on its own
        if cors_mode is None or not self._is_remote(url) or self._same_origin(url):
            return {}
        return {"Origin": self.origin}

    def _is_tainted(self, url: str, cors_mode: Optional[CorsMode], headers) -> bool:
        if not self._is_remote(url) or self._same_origin(url):
            return False
        if cors_mode is None:
            return True

        allowed = headers.get("Access-Control-Allow-Origin")
        if cors_mode == CorsMode.USE_CREDENTIALS:
            credentials = (headers.get("Access-Control-Allow-Credentials") or "").lower()
            return not (allowed == self.origin and credentials == "true")
        return allowed not in ("*", self.origin)

    @staticmethod
    def _is_remote(url: str) -> bool:
        return urlparse(url).scheme not in LOCAL_SCHEMES

    def _same_origin(self, url: str) -> bool:
        parsed = urlparse(url)
        return f"{parsed.scheme}://{parsed.netloc}" == self.origin

    # ------------------------------------------------------------------
    # Compositing
    # ------------------------------------------------------------------

    @staticmethod
    def _draw_image(frame: Image.Image, image: ImageHandle) -> None:
        size = (max(1, round(image.scaled_width)), max(1, round(image.scaled_height)))
        scaled = image.image.resize(size, Image.Resampling.LANCZOS)
        frame.alpha_composite(scaled, dest=(max(0, round(image.left)), max(0, round(image.top))))

    def _draw_layer(self, frame: Image.Image, layer: ShapeLayer) -> None:
        # Each object gets its own overlay so translucent fills blend with what is beneath
        overlay = Image.new("RGBA", frame.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)
        fill = layer.fill.to_rgba()
        left, top = layer.left, layer.top

        if isinstance(layer, RectangleLayer):
            draw.rectangle([left, top, left + layer.width, top + layer.height], fill=fill)
        elif isinstance(layer, CircleLayer):
            diameter = 2 * layer.radius
            draw.ellipse([left, top, left + diameter, top + diameter], fill=fill)
        elif isinstance(layer, TriangleLayer):
            draw.polygon(
                [
                    (left + layer.width / 2, top),
                    (left + layer.width, top + layer.height),
                    (left, top + layer.height),
                ],
                fill=fill,
            )
        elif isinstance(layer, PolygonLayer):
            x_min, y_min, _, _ = layer.get_bbox()
            draw.polygon([(left + p.x - x_min, top + p.y - y_min) for p in layer.points], fill=fill)
        elif isinstance(layer, TextLayer):
            draw.text((left, top), layer.text, fill=fill, font=self._font(layer.font_size))
        else:
            raise TypeError(f"Unsupported layer type: {type(layer).__name__}")

        frame.alpha_composite(overlay)

    def _font(self, size: int) -> ImageFont.ImageFont:
        if size not in self._fonts:
            self._fonts[size] = ImageFont.load_default(size=size)
        return self._fonts[size]

"""
Canvas Session Controller

Owns the single live editing session: its canvas handle, background image,
scale factor and layer store. All mutations go through SessionController,
which forwards drawing to the injected GraphicsEngine and records every
placed object in the LayerStore.
"""
from concurrent.futures import CancelledError, Future
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import List, Optional, Tuple
import logging
import threading
import uuid

from PIL import Image

from captionist import config
from .engines.base import CanvasHandle, CorsMode, GraphicsEngine, ImageHandle
from .errors import (
    CanvasError,
    EngineUnavailableError,
    ExportError,
    ImageLoadError,
    MissingSourceError,
    NotReadyError,
)
from .layers import LayerStore
from .models import (
    BackgroundLayer,
    CircleLayer,
    Color,
    Layer,
    PolygonLayer,
    RectangleLayer,
    ShapeLayer,
    TextLayer,
    TriangleLayer,
    regular_polygon_points,
)

logger = logging.getLogger(__name__)

# Default objects
DEFAULT_TEXT = "Your Text Here"
TEXT_POSITION = (100, 100)
TEXT_FONT_SIZE = 24
TEXT_FILL = Color(0, 0, 0)

RECTANGLE_POSITION = (150, 150)
RECTANGLE_SIZE = (100, 100)
RECTANGLE_FILL = Color(255, 0, 0, 0.5)

CIRCLE_POSITION = (200, 200)
CIRCLE_RADIUS = 50
CIRCLE_FILL = Color(0, 200, 0, 0.5)

TRIANGLE_POSITION = (250, 250)
TRIANGLE_SIZE = (100, 100)
TRIANGLE_FILL = Color(0, 0, 255, 0.5)

POLYGON_POSITION = (300, 300)
POLYGON_SIDES = 6
POLYGON_RADIUS = 50
POLYGON_FILL = Color(255, 165, 0, 0.5)


class SessionState(str, Enum):
    """Lifecycle of an editing session"""
    UNINITIALIZED = "uninitialized"  # no canvas handle
    LOADING = "loading"  # canvas exists, background pending
    READY = "ready"  # background settled (loaded or failed)
    DISPOSED = "disposed"


@dataclass(frozen=True)
class CanvasConfig:
    """
    Canvas settings applied when a session starts

    Attributes:
        width: Canvas width in pixels
        height: Canvas height in pixels
        background_color: Fill behind the background image
    """
    width: int = config.CANVAS_WIDTH
    height: int = config.CANVAS_HEIGHT
    background_color: str = config.CANVAS_BACKGROUND_COLOR

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Canvas dimensions must be positive, got {self.width}x{self.height}")
        # Raises ValueError for colors Pillow cannot parse
        Color.from_string(self.background_color)


class LoadToken:
    """
    Ties an in-flight background load to the session that issued it

    The completion callback does nothing once the token is cancelled or the
    controller has moved on to another session.
    """

    def __init__(self, session_id: str):
        self.session_id = session_id
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()


@dataclass
class Session:
    """
    One live editing context

    Attributes:
        image_url: Source of the background image
        canvas_width: Canvas width, fixed for the session
        canvas_height: Canvas height, fixed for the session
        background_color: Canvas fill color
        id: Session identity checked by the background load
        state: Lifecycle state
        canvas: Engine canvas handle (None until created, and after disposal)
        background: Loaded background image
        scale_factor: Uniform scale fitting the background into the canvas
        layers: Ordered record of placed objects
        errors: Non-fatal errors reported during the session
    """
    image_url: str
    canvas_width: int
    canvas_height: int
    background_color: str
    id: str = field(default_factory=lambda: f"session_{uuid.uuid4().hex[:8]}")
    state: SessionState = SessionState.UNINITIALIZED
    canvas: Optional[CanvasHandle] = None
    background: Optional[ImageHandle] = None
    scale_factor: Optional[float] = None
    layers: LayerStore = field(default_factory=LayerStore)
    errors: List[CanvasError] = field(default_factory=list)
    load_future: Optional[Future] = field(default=None, repr=False)
    load_token: Optional[LoadToken] = field(default=None, repr=False)
    _background_settled: threading.Event = field(
        default_factory=threading.Event, init=False, repr=False, compare=False
    )

    @property
    def has_background(self) -> bool:
        return self.background is not None

    def wait_for_background(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the background load has been handled

        Returns:
            True once the load succeeded, failed or was abandoned; False on timeout
        """
        return self._background_settled.wait(timeout)


def compute_scale_factor(canvas_width: int, canvas_height: int, image_width: int, image_height: int) -> float:
    """
    Largest uniform scale at which the image fits inside the canvas

    Raises:
        ValueError: If the image has no area
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {image_width}x{image_height}")
    return min(canvas_width / image_width, canvas_height / image_height)


class SessionController:
    """
    Drives the annotation canvas session

    The graphics engine is passed in explicitly; the controller never looks
    one up. Use as a context manager to guarantee the canvas is disposed:

        with SessionController(engine) as controller:
            controller.start_session(url)
            controller.add_rectangle()
            png = controller.export_raster()
    """

    def __init__(self, engine: Optional[GraphicsEngine], canvas_config: Optional[CanvasConfig] = None):
        """
        Initialize controller

        Args:
            engine: Graphics engine, or None when no engine could be created
            canvas_config: Canvas settings for new sessions (default: CanvasConfig())
        """
        self.engine = engine
        self.canvas_config = canvas_config or CanvasConfig()
        self._session: Optional[Session] = None
        # Serializes engine calls and layer appends across the caller and loader threads
        self._lock = threading.RLock()

    def __enter__(self) -> "SessionController":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.end_session()

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def is_ready(self) -> bool:
        """Whether shape and export operations can run"""
        session = self._session
        return session is not None and session.canvas is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_session(self, image_url: Optional[str]) -> Session:
        """
        Start a session over a background image

        Ends the current session first, if any. Engine problems do not raise:
        they are logged and kept on ``Session.errors``, and the session stays
        usable (without a canvas when none could be created).

        Args:
            image_url: Background image URL

        Returns:
            The new Session

        Raises:
            MissingSourceError: If ``image_url`` is missing or blank
        """
        if image_url is None or not str(image_url).strip():
            raise MissingSourceError("No source image URL supplied")
        image_url = str(image_url).strip()

        with self._lock:
            if self._session is not None:
                self.end_session()

            cfg = self.canvas_config
            session = Session(
                image_url=image_url,
                canvas_width=cfg.width,
                canvas_height=cfg.height,
                background_color=cfg.background_color,
            )
            self._session = session

            if self.engine is None:
                self._report(session, EngineUnavailableError("No graphics engine available"))
                session._background_settled.set()
                return session

            try:
                session.canvas = self.engine.create_canvas(cfg.width, cfg.height, cfg.background_color)
            except EngineUnavailableError as e:
                self._report(session, e)
                session._background_settled.set()
                return session

            session.state = SessionState.LOADING
            token = LoadToken(session.id)
            session.load_token = token
            try:
                future = self.engine.load_image_async(image_url, CorsMode.ANONYMOUS)
            except EngineUnavailableError as e:
                self._report(session, e)
                session.state = SessionState.READY
                session._background_settled.set()
                return session

            session.load_future = future
            logger.info(f"Started {session.id} ({cfg.width}x{cfg.height}), loading {image_url}")
            future.add_done_callback(partial(self._on_background_loaded, token))

        return session

    def end_session(self) -> None:
        """Dispose the canvas and drop the session. Safe to call repeatedly"""
        with self._lock:
            session = self._session
            if session is None:
                return
            self._session = None

            if session.load_token is not None:
                session.load_token.cancel()
            if session.load_future is not None:
                session.load_future.cancel()

            if session.canvas is not None and self.engine is not None:
                try:
                    self.engine.dispose(session.canvas)
                except Exception as e:
                    logger.warning(f"Failed to dispose canvas for {session.id}: {e}")

            session.canvas = None
            session.background = None
            session.layers = LayerStore()
            session.state = SessionState.DISPOSED
            session._background_settled.set()
            logger.info(f"Ended {session.id}")

    def _on_background_loaded(self, token: LoadToken, future: Future) -> None:
        with self._lock:
            session = self._session
            if token.cancelled or session is None or session.id != token.session_id:
                logger.debug(f"Ignoring background load for ended session {token.session_id}")
                self._discard(future)
                return

            try:
                try:
                    image = future.result()
                except CancelledError:
                    self._report(session, ImageLoadError("Background load was cancelled", url=session.image_url))
                except CanvasError as e:
                    self._report(session, e)
                except Exception as e:
                    self._report(session, ImageLoadError(str(e), url=session.image_url, cause=e))
                else:
                    try:
                        self._apply_background(session, image)
                    except CanvasError as e:
                        self._report(session, e)
                    except ValueError as e:
                        self._report(session, ImageLoadError(str(e), url=session.image_url, cause=e))
            finally:
                session.state = SessionState.READY
                session._background_settled.set()

    @staticmethod
    def _discard(future: Future) -> None:
        # Release pixels of a load nobody is waiting for
        if future.cancelled() or future.exception() is not None:
            return
        future.result().image.close()

    def _apply_background(self, session: Session, image: ImageHandle) -> None:
        scale = compute_scale_factor(session.canvas_width, session.canvas_height, image.width, image.height)

        # Backdrop, not a layer the user can pick up
        image.selectable = False
        image.left = 0
        image.top = 0
        image.scale = scale

        self.engine.set_background(session.canvas, image)
        self.engine.render(session.canvas)

        session.background = image
        session.scale_factor = scale
        session.layers.append_background(
            BackgroundLayer(
                source_url=session.image_url,
                scaled_width=image.scaled_width,
                scaled_height=image.scaled_height,
            )
        )
        logger.info(
            f"Background {image.width}x{image.height} scaled by {scale:.4f} "
            f"to {image.scaled_width:.1f}x{image.scaled_height:.1f}"
        )

    @staticmethod
    def _report(session: Session, error: CanvasError) -> None:
        session.errors.append(error)
        logger.warning(f"{type(error).__name__}: {error.message}")

    # ------------------------------------------------------------------
    # Shapes
    # ------------------------------------------------------------------

    def add_text(self, initial_text: str = DEFAULT_TEXT) -> TextLayer:
        """Add an editable text object at the default position"""
        left, top = TEXT_POSITION
        return self._add_object(
            TextLayer(left=left, top=top, fill=TEXT_FILL, text=initial_text, font_size=TEXT_FONT_SIZE)
        )

    def add_rectangle(self) -> RectangleLayer:
        left, top = RECTANGLE_POSITION
        width, height = RECTANGLE_SIZE
        return self._add_object(
            RectangleLayer(left=left, top=top, fill=RECTANGLE_FILL, width=width, height=height)
        )

    def add_circle(self) -> CircleLayer:
        left, top = CIRCLE_POSITION
        return self._add_object(CircleLayer(left=left, top=top, fill=CIRCLE_FILL, radius=CIRCLE_RADIUS))

    def add_triangle(self) -> TriangleLayer:
        left, top = TRIANGLE_POSITION
        width, height = TRIANGLE_SIZE
        return self._add_object(
            TriangleLayer(left=left, top=top, fill=TRIANGLE_FILL, width=width, height=height)
        )

    def add_polygon(self) -> PolygonLayer:
        """Add a regular hexagon"""
        left, top = POLYGON_POSITION
        points = regular_polygon_points(POLYGON_SIDES, POLYGON_RADIUS)
        return self._add_object(PolygonLayer(left=left, top=top, fill=POLYGON_FILL, points=points))

    def _add_object(self, layer: ShapeLayer) -> ShapeLayer:
        with self._lock:
            canvas = self._require_canvas()
            obj = self.engine.add_object(canvas, layer)
            self.engine.set_active_object(canvas, obj)
            self.engine.render(canvas)
            self._session.layers.append(layer)

        logger.info(f"New layer added: {layer.to_dict()}")
        return layer

    def _require_canvas(self) -> CanvasHandle:
        session = self._session
        if session is None or session.canvas is None:
            raise NotReadyError("Canvas is not ready")
        return session.canvas

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def export_raster(self) -> bytes:
        """
        Flatten the canvas into PNG bytes

        Raises:
            ExportError: If there is no canvas, or it cannot be read back
                (ExportTaintError for cross-origin images)
        """
        with self._lock:
            session = self._session
            if session is None or session.canvas is None:
                raise ExportError("Nothing to export: canvas is not ready")
            try:
                data = self.engine.to_raster_bytes(session.canvas, config.EXPORT_FORMAT, config.EXPORT_QUALITY)
            except NotReadyError as e:
                raise ExportError(f"Nothing to export: {e.message}", cause=e) from e

        logger.info(f"Exported {len(data)} bytes from {session.id}")
        return data

    def preview(self) -> Image.Image:
        """Current frame for display; works on tainted canvases too"""
        with self._lock:
            return self.engine.render(self._require_canvas())

    def snapshot(self) -> Tuple[Layer, ...]:
        """Layers of the live session in z-order (empty without a session)"""
        session = self._session
        if session is None:
            return ()
        return session.layers.snapshot()

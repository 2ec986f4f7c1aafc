"""
Annotation Canvas Service

Session controller, layer store and graphics engines for captioning images.

Usage:
    from captionist.services.canvas import GraphicsEngineFactory, SessionController

    engine = GraphicsEngineFactory.create("pillow")
    with SessionController(engine) as controller:
        session = controller.start_session("https://example.com/photo.jpg")
        session.wait_for_background()

        controller.add_text("Hello")
        controller.add_rectangle()

        # One JSON record per layer, background first
        print(session.layers.to_json())

        png_bytes = controller.export_raster()
"""
from .errors import (
    CanvasError,
    MissingSourceError,
    EngineUnavailableError,
    ImageLoadError,
    NotReadyError,
    ExportError,
    ExportTaintError,
)
from .models import (
    LayerKind,
    Point,
    Color,
    Layer,
    BackgroundLayer,
    ShapeLayer,
    TextLayer,
    RectangleLayer,
    CircleLayer,
    TriangleLayer,
    PolygonLayer,
    layers_to_json,
)
from .layers import LayerStore
from .engines import CorsMode, GraphicsEngine, PillowEngine
from .factory import GraphicsEngineFactory
from .session import (
    CanvasConfig,
    LoadToken,
    Session,
    SessionController,
    SessionState,
    compute_scale_factor,
)

# Register engines
GraphicsEngineFactory.register_engine('pillow', PillowEngine)

__all__ = [
    "CanvasError",
    "MissingSourceError",
    "EngineUnavailableError",
    "ImageLoadError",
    "NotReadyError",
    "ExportError",
    "ExportTaintError",
    "LayerKind",
    "Point",
    "Color",
    "Layer",
    "BackgroundLayer",
    "ShapeLayer",
    "TextLayer",
    "RectangleLayer",
    "CircleLayer",
    "TriangleLayer",
    "PolygonLayer",
    "layers_to_json",
    "LayerStore",
    "CorsMode",
    "GraphicsEngine",
    "PillowEngine",
    "GraphicsEngineFactory",
    "CanvasConfig",
    "LoadToken",
    "Session",
    "SessionController",
    "SessionState",
    "compute_scale_factor",
]

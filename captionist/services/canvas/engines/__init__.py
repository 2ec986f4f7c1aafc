"""
Graphics engines for the annotation canvas
"""
from .base import CanvasHandle, CorsMode, GraphicsEngine, ImageHandle, ObjectHandle
from .pillow_engine import PillowEngine

__all__ = [
    "CanvasHandle",
    "CorsMode",
    "GraphicsEngine",
    "ImageHandle",
    "ObjectHandle",
    "PillowEngine",
]

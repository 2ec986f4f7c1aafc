"""
Canvas Data Models

Immutable records describing what has been placed on the annotation canvas.
Each layer kind carries only the fields relevant to it.
"""
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar, Dict, Tuple
import json
import math

from PIL import ImageColor


class LayerKind(str, Enum):
    """Kinds of objects that can sit on the canvas"""
    BACKGROUND_IMAGE = "background-image"
    TEXT = "text"
    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    TRIANGLE = "triangle"
    POLYGON = "polygon"


@dataclass(frozen=True)
class Point:
    """2D point with x, y coordinates"""
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Color:
    """RGB color with a 0-1 alpha channel"""
    r: int
    g: int
    b: int
    a: float = 1.0

    @classmethod
    def from_string(cls, value: str) -> "Color":
        """Parse any color string Pillow understands (hex, names, rgb())"""
        rgba = ImageColor.getcolor(value, "RGBA")
        return cls(rgba[0], rgba[1], rgba[2], round(rgba[3] / 255, 3))

    def to_rgba(self) -> Tuple[int, int, int, int]:
        """Color as an 8-bit RGBA tuple for drawing"""
        return (self.r, self.g, self.b, round(self.a * 255))

    def to_css(self) -> str:
        if self.a >= 1.0:
            return f"#{self.r:02x}{self.g:02x}{self.b:02x}"
        return f"rgba({self.r}, {self.g}, {self.b}, {self.a:g})"


@dataclass(frozen=True)
class Layer:
    """
    Base record for one placed object.

    Subclasses set ``kind``; serialization walks the dataclass fields so a
    layer never reports attributes its kind does not have.
    """
    kind: ClassVar[LayerKind]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.kind.value}
        for f in fields(self):
            data[f.name] = _serialize(getattr(self, f.name))
        return data

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string"""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


@dataclass(frozen=True)
class BackgroundLayer(Layer):
    """
    Background image, recorded at its scaled size

    Attributes:
        source_url: URL the image was loaded from
        scaled_width: Natural width times the session scale factor
        scaled_height: Natural height times the session scale factor
    """
    kind: ClassVar[LayerKind] = LayerKind.BACKGROUND_IMAGE

    source_url: str
    scaled_width: float
    scaled_height: float


@dataclass(frozen=True)
class ShapeLayer(Layer):
    """Foreground object positioned by its bounding box corner"""
    left: float
    top: float
    fill: Color


@dataclass(frozen=True)
class TextLayer(ShapeLayer):
    kind: ClassVar[LayerKind] = LayerKind.TEXT

    text: str
    font_size: int = 24


@dataclass(frozen=True)
class RectangleLayer(ShapeLayer):
    kind: ClassVar[LayerKind] = LayerKind.RECTANGLE

    width: float
    height: float


@dataclass(frozen=True)
class CircleLayer(ShapeLayer):
    kind: ClassVar[LayerKind] = LayerKind.CIRCLE

    radius: float


@dataclass(frozen=True)
class TriangleLayer(ShapeLayer):
    """Isosceles triangle with its apex at the top centre of the box"""
    kind: ClassVar[LayerKind] = LayerKind.TRIANGLE

    width: float
    height: float


@dataclass(frozen=True)
class PolygonLayer(ShapeLayer):
    """Polygon whose points are offsets; the engine places their bounding box at left/top"""
    kind: ClassVar[LayerKind] = LayerKind.POLYGON

    points: Tuple[Point, ...]

    def get_bbox(self) -> tuple:
        """Get bounding box (x, y, width, height) of the raw points"""
        if not self.points:
            return (0, 0, 0, 0)
        xs = [p.x for p in self.points]
        ys = [p.y for p in self.points]
        x_min, x_max = min(xs), max(xs)
        y_min, y_max = min(ys), max(ys)
        return (x_min, y_min, x_max - x_min, y_max - y_min)


def regular_polygon_points(sides: int, radius: float, precision: int = 1) -> Tuple[Point, ...]:
    """
    Vertices of a regular polygon centered at the origin

    The first vertex sits at (0, radius) and the rest follow clockwise
    (y-up orientation), each rounded to ``precision`` decimals.

    Args:
        sides: Number of vertices (>= 3)
        radius: Circumradius
        precision: Decimal places kept per coordinate

    Returns:
        Tuple of Points
    """
    if sides < 3:
        raise ValueError(f"A polygon needs at least 3 sides, got {sides}")

    step = 2 * math.pi / sides
    points = []
    for i in range(sides):
        angle = math.pi / 2 - i * step
        # + 0.0 turns -0.0 into 0.0
        x = round(radius * math.cos(angle), precision) + 0.0
        y = round(radius * math.sin(angle), precision) + 0.0
        points.append(Point(x, y))
    return tuple(points)


def layers_to_json(layers, indent: int = 2) -> str:
    """Serialize a sequence of layers as one JSON array"""
    return json.dumps([layer.to_dict() for layer in layers], indent=indent, ensure_ascii=False)


def _serialize(value: Any) -> Any:
    if isinstance(value, Color):
        return value.to_css()
    if isinstance(value, (tuple, list)):
        return [_serialize(v) for v in value]
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value

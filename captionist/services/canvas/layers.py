"""
Layer Store

Append-only, ordered ledger of everything placed on the canvas. It is kept
apart from the graphics engine so the composed scene can be inspected or
tested without querying engine internals.
"""
import threading
from typing import Iterator, List, Optional, Tuple

from .models import BackgroundLayer, Layer, layers_to_json


class LayerStore:
    """
    Ordered record of canvas layers

    Insertion order is z-order. The background, when recorded, is always the
    first entry. There is no delete or update: a layer, once stored, stays.
    """

    def __init__(self):
        self._layers: List[Layer] = []
        self._lock = threading.Lock()

    def append(self, layer: Layer) -> None:
        """Add a foreground layer on top of the stack"""
        if isinstance(layer, BackgroundLayer):
            raise TypeError("Background layers are recorded with append_background()")
        with self._lock:
            self._layers.append(layer)

    def append_background(self, layer: BackgroundLayer) -> None:
        """
        Record the background beneath any foreground layers

        Foreground shapes may be added while the background is still loading,
        so the background goes to the bottom rather than the top.

        Raises:
            ValueError: If a background is already recorded
        """
        with self._lock:
            if self._layers and isinstance(self._layers[0], BackgroundLayer):
                raise ValueError("Background layer already recorded")
            self._layers.insert(0, layer)

    def snapshot(self) -> Tuple[Layer, ...]:
        """Read-only copy of the current layers in z-order"""
        with self._lock:
            return tuple(self._layers)

    @property
    def background(self) -> Optional[BackgroundLayer]:
        """The recorded background layer, if any"""
        with self._lock:
            if self._layers and isinstance(self._layers[0], BackgroundLayer):
                return self._layers[0]
        return None

    def to_json(self, indent: int = 2) -> str:
        return layers_to_json(self.snapshot(), indent=indent)

    def __len__(self) -> int:
        with self._lock:
            return len(self._layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(self.snapshot())

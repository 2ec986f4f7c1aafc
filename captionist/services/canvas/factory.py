"""
Graphics Engine Factory - creates engines by name
"""
from typing import Dict, List, Type

from .engines.base import GraphicsEngine
from .errors import EngineUnavailableError


class GraphicsEngineFactory:
    """
    Factory for creating graphics engine instances

    Engines register under a name; the app picks one with config.DEFAULT_ENGINE.
    """

    _engines: Dict[str, Type[GraphicsEngine]] = {}

    @classmethod
    def create(cls, name: str, **kwargs) -> GraphicsEngine:
        """
        Create a graphics engine instance

        Args:
            name: Registered engine name (e.g., 'pillow')
            **kwargs: Engine-specific configuration

        Returns:
            GraphicsEngine instance

        Raises:
            EngineUnavailableError: If no engine is registered under ``name``
        """
        if name not in cls._engines:
            available = ', '.join(cls._engines.keys()) or 'none'
            raise EngineUnavailableError(
                f"Unknown engine: '{name}'. "
                f"Available engines: {available}",
                engine=name,
            )
        return cls._engines[name](**kwargs)

    @classmethod
    def available_engines(cls) -> List[str]:
        """Get list of available engine names"""
        return sorted(cls._engines.keys())

    @classmethod
    def register_engine(cls, name: str, engine_class: Type[GraphicsEngine]):
        """Register an engine"""
        cls._engines[name] = engine_class

"""
Application state management for Captionist

Contains dataclasses for session state that persists across Streamlit reruns.
"""
from dataclasses import dataclass
from typing import Optional
import logging

from captionist import config
from captionist.services.canvas import (
    CanvasError,
    GraphicsEngine,
    GraphicsEngineFactory,
    SessionController,
)

logger = logging.getLogger(__name__)

HOME_PAGE = "Home"
EDITOR_PAGE = "Editor"


@dataclass
class EditorState:
    """Application state for the editor that persists across Streamlit reruns"""
    image_url: Optional[str] = None
    controller: Optional[SessionController] = None


def create_engine(engine_name: str = config.DEFAULT_ENGINE) -> Optional[GraphicsEngine]:
    """
    Build the configured graphics engine

    Returns None for an unknown engine; sessions then start without a canvas
    and report EngineUnavailableError.
    """
    try:
        return GraphicsEngineFactory.create(engine_name)
    except CanvasError as e:
        logger.error(f"Graphics engine unavailable: {e.message}")
        return None


def init_session_state(engine: Optional[GraphicsEngine]):
    """
    Initialize session state if not already done

    Args:
        engine: Engine shared by every browser session of this process
    """
    import streamlit as st

    if "editor_state" not in st.session_state:
        st.session_state.editor_state = EditorState(controller=SessionController(engine))

    if "current_page" not in st.session_state:
        st.session_state.current_page = HOME_PAGE

"""
Editor Page - caption an image

Features:
- Background image fitted to the canvas
- Text, rectangle, circle, triangle and polygon tools
- PNG download of the composed canvas
- Layer log, one JSON record per placed object
"""
from typing import Optional

import streamlit as st

from captionist import config
from captionist.state import HOME_PAGE, EditorState
from captionist.services.canvas import (
    ExportError,
    MissingSourceError,
    NotReadyError,
    Session,
    SessionController,
    SessionState,
)
from captionist.services.canvas.session import DEFAULT_TEXT


def get_editor_state() -> EditorState:
    """Get editor state from session state"""
    return st.session_state.editor_state


def go_home(state: EditorState):
    """Leave the editor, releasing the canvas"""
    if state.controller is not None:
        state.controller.end_session()
    st.session_state.current_page = HOME_PAGE
    st.rerun()


def ensure_session(state: EditorState) -> Optional[Session]:
    """
    Return the session for the selected image, starting one if needed

    Redirects to the home page when no image has been selected.
    """
    session = state.controller.session
    if session is not None and session.image_url == state.image_url:
        return session

    try:
        return state.controller.start_session(state.image_url)
    except MissingSourceError:
        st.session_state.current_page = HOME_PAGE
        st.rerun()
        return None


def render_session_status(session: Session):
    """Show reported errors and loading progress"""
    for error in session.errors:
        st.warning(f"{error.message}. You can still add text and shapes.")

    if session.state == SessionState.LOADING:
        st.info("Background image is still loading...")


def render_controls(controller: SessionController):
    """Render the shape tools and the download button"""
    text = st.text_input("Caption text", value=DEFAULT_TEXT, key="caption_text")
    disabled = not controller.is_ready

    tools = [
        ("Add Text", lambda: controller.add_text(text)),
        ("Add Rectangle", controller.add_rectangle),
        ("Add Circle", controller.add_circle),
        ("Add Triangle", controller.add_triangle),
        ("Add Polygon", controller.add_polygon),
    ]
    cols = st.columns(len(tools) + 1)

    for col, (label, action) in zip(cols, tools):
        if col.button(label, disabled=disabled, key=f"tool_{label}", use_container_width=True):
            try:
                action()
            except NotReadyError as e:
                st.warning(f"{e.message}. Try again once the canvas has loaded.")
            else:
                st.rerun()

    render_download(controller, cols[len(tools)])


def render_download(controller: SessionController, col):
    """Offer the composed canvas as a PNG download"""
    if not controller.is_ready:
        col.button("Download", disabled=True, key="download_disabled", use_container_width=True)
        return

    try:
        png_bytes = controller.export_raster()
    except ExportError as e:
        st.error(f"Export failed: {e.message}")
        return

    col.download_button(
        label="Download",
        data=png_bytes,
        file_name=config.EXPORT_FILE_NAME,
        mime="image/png",
        use_container_width=True,
    )


def render_canvas(controller: SessionController):
    """Render the current frame"""
    if not controller.is_ready:
        st.info("Canvas is not available.")
        return

    session = controller.session
    st.image(controller.preview(), width=session.canvas_width)


def render_layer_log(controller: SessionController):
    """Render every layer as a JSON record"""
    st.subheader("Canvas Layers")

    layers = controller.snapshot()
    if not layers:
        st.info("No layers yet. Add shapes or text!")
        return

    for layer in layers:
        st.code(layer.to_json(), language="json")


def render_editor_page():
    """Render the editor page"""
    state = get_editor_state()

    st.header("Add Caption & Shapes")

    session = ensure_session(state)
    if session is None:
        return

    if session.state == SessionState.LOADING:
        with st.spinner("Loading image..."):
            session.wait_for_background(timeout=config.BACKGROUND_WAIT_SECONDS)

    if st.sidebar.button("Back to Home", key="editor_back"):
        go_home(state)
        return

    render_session_status(session)
    render_controls(state.controller)
    render_canvas(state.controller)
    render_layer_log(state.controller)

"""
Home Page - choose the photo to caption

Image search lives outside this app; paste the URL of the photo to edit.
"""
import streamlit as st

from captionist.state import EDITOR_PAGE, EditorState


def get_editor_state() -> EditorState:
    """Get editor state from session state"""
    return st.session_state.editor_state


def open_editor(state: EditorState, image_url: str):
    """Switch to the editor for ``image_url``"""
    state.image_url = image_url.strip()
    st.session_state.current_page = EDITOR_PAGE
    st.rerun()


def render_home_page():
    """Render the home page"""
    state = get_editor_state()

    st.title("Captionist")
    st.write("Pick a photo, add captions and shapes, and download the result.")

    image_url = st.text_input(
        "Image URL",
        value=state.image_url or "",
        placeholder="https://images.pexels.com/photos/...",
        key="home_image_url",
    )

    if st.button("Edit Image", type="primary", disabled=not image_url.strip()):
        open_editor(state, image_url)

"""
Captionist - caption and annotate stock photos

Main application entry point with sidebar navigation.
"""
from typing import Optional

import streamlit as st

from captionist import config
from captionist.logging_utils import setup_logging
from captionist.services.canvas import GraphicsEngine
from captionist.state import EDITOR_PAGE, HOME_PAGE, create_engine, init_session_state
from captionist.pages.home import render_home_page
from captionist.pages.editor import render_editor_page


@st.cache_resource(show_spinner=False)
def get_engine(engine_name: str = config.DEFAULT_ENGINE) -> Optional[GraphicsEngine]:
    """One engine, and one image loader pool, per server process"""
    return create_engine(engine_name)


def main():
    """Main application entry point"""
    # Page config
    st.set_page_config(
        page_title="Captionist",
        page_icon="",
        layout="wide",
    )

    setup_logging()

    # Initialize session state
    init_session_state(get_engine())

    # Sidebar navigation
    st.sidebar.title("Captionist")
    pages = [HOME_PAGE, EDITOR_PAGE]
    page = st.sidebar.radio(
        "Navigation",
        pages,
        index=pages.index(st.session_state.current_page),
        label_visibility="collapsed",
    )
    if page == HOME_PAGE and st.session_state.current_page == EDITOR_PAGE:
        # Leaving the editor releases its canvas
        st.session_state.editor_state.controller.end_session()
    st.session_state.current_page = page
    st.sidebar.divider()

    # Render selected page
    if page == HOME_PAGE:
        render_home_page()
    else:
        render_editor_page()


if __name__ == "__main__":
    main()

"""
Shared pytest fixtures for page tests
"""
import pytest
from unittest.mock import MagicMock, Mock

from captionist.state import EditorState, HOME_PAGE

# Column mocking constants
EXTRA_COLUMN_BUFFER = 2  # Number of extra columns beyond expected count


@pytest.fixture
def mock_streamlit():
    """Mock Streamlit module for UI testing."""
    mock_st = MagicMock()

    # Mock sidebar
    mock_st.sidebar = MagicMock()
    mock_st.sidebar.title = MagicMock()
    mock_st.sidebar.radio = MagicMock(return_value=HOME_PAGE)
    mock_st.sidebar.button = MagicMock(return_value=False)
    mock_st.sidebar.divider = MagicMock()

    # Mock main UI elements
    mock_st.title = MagicMock()
    mock_st.header = MagicMock()
    mock_st.subheader = MagicMock()
    mock_st.write = MagicMock()
    mock_st.text_input = MagicMock(return_value="")
    mock_st.button = MagicMock(return_value=False)
    mock_st.info = MagicMock()
    mock_st.warning = MagicMock()
    mock_st.error = MagicMock()
    mock_st.image = MagicMock()
    mock_st.code = MagicMock()
    mock_st.columns = MagicMock()
    mock_st.rerun = MagicMock()

    # Mock spinner context manager
    mock_spinner = MagicMock()
    mock_spinner.__enter__ = Mock(return_value=None)
    mock_spinner.__exit__ = Mock(return_value=None)
    mock_st.spinner = MagicMock(return_value=mock_spinner)

    # Mock session state
    mock_st.session_state = MagicMock()
    mock_st.session_state.current_page = HOME_PAGE

    return mock_st


@pytest.fixture
def mock_streamlit_columns():
    """
    Factory fixture that creates column mocks with extra columns beyond expected.

    Usage:
        columns = mock_streamlit_columns(6)  # Creates 6 + EXTRA_COLUMN_BUFFER columns
    """
    def _create_columns(expected_count):
        cols = []
        for _ in range(expected_count + EXTRA_COLUMN_BUFFER):
            col = MagicMock()
            col.button = MagicMock(return_value=False)
            col.download_button = MagicMock()
            cols.append(col)
        return cols
    return _create_columns


@pytest.fixture
def editor_state(controller, image_url):
    """EditorState pointing at the test image, with no session yet"""
    return EditorState(image_url=image_url, controller=controller)


@pytest.fixture
def loaded_editor_state(loaded_controller, image_url):
    """EditorState whose session has its background loaded"""
    return EditorState(image_url=image_url, controller=loaded_controller)


@pytest.fixture
def find_button():
    """
    Helper fixture locating a button call by its label.

    Usage:
        call = find_button(column.button, "Add Circle")
    """
    def _find(button_mock, label):
        for call in button_mock.call_args_list:
            if call[0] and call[0][0] == label:
                return call
        return None
    return _find

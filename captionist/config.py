"""
Application configuration settings for Captionist UI and services
"""
import os
from pathlib import Path

# Project directories
# Support bundled mode via environment variable override
PROJECT_ROOT = Path(os.environ.get('CAPTIONIST_ROOT', Path(__file__).parent.parent))
LOG_DIR = PROJECT_ROOT / "logs"

# Canvas settings
# Dimensions are fixed for the lifetime of a session; changing them only
# affects sessions started afterwards.
CANVAS_WIDTH = int(os.getenv('CAPTIONIST_CANVAS_WIDTH', '800'))
CANVAS_HEIGHT = int(os.getenv('CAPTIONIST_CANVAS_HEIGHT', '600'))
CANVAS_BACKGROUND_COLOR = os.getenv('CAPTIONIST_CANVAS_BACKGROUND', '#ffffff')

# Graphics engine settings
DEFAULT_ENGINE = os.getenv('CAPTIONIST_ENGINE', 'pillow')
IMAGE_LOADER_WORKERS = int(os.getenv('CAPTIONIST_LOADER_WORKERS', '2'))

# Origin announced on cross-origin image fetches. Streamlit serves on 8501 by default.
CANVAS_ORIGIN = os.getenv('CAPTIONIST_ORIGIN', 'http://localhost:8501')

# Export settings
EXPORT_FILE_NAME = "modified-image.png"
EXPORT_FORMAT = "png"
EXPORT_QUALITY = 1.0

# UI settings
# How long the editor page blocks on a pending background before rendering anyway
BACKGROUND_WAIT_SECONDS = float(os.getenv('CAPTIONIST_BACKGROUND_WAIT', '5'))

# Logging
LOG_LEVEL = os.getenv('CAPTIONIST_LOG_LEVEL', 'INFO').upper()
LOG_TO_FILE = os.getenv('CAPTIONIST_LOG_TO_FILE', 'false').lower() == 'true'

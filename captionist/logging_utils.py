"""
Logging setup for the Captionist app
"""
from datetime import datetime
from pathlib import Path
from typing import Optional, Union
import logging

from captionist import config


def setup_logging(
    name: str = "captionist",
    level: Union[int, str, None] = None,
    output_dir: Optional[Path] = None,
) -> logging.Logger:
    """
    Set up logging for the app.

    Creates a console handler, plus a file handler when ``output_dir`` is
    given (or config.LOG_TO_FILE is set).

    Args:
        name: Logger name; module loggers under this package inherit it
        level: Logging level (default: config.LOG_LEVEL)
        output_dir: Directory for log files

    Returns:
        Configured logger
    """
    level = level if level is not None else config.LOG_LEVEL

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Clear existing handlers (Streamlit re-runs the script on every interaction)
    logger.handlers = []

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_format = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    console_handler.setFormatter(console_format)
    logger.addHandler(console_handler)

    if output_dir is None and config.LOG_TO_FILE:
        output_dir = config.LOG_DIR

    # File handler
    if output_dir is not None:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        log_file = output_dir / f"{name}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_format = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        file_handler.setFormatter(file_format)
        logger.addHandler(file_handler)

    return logger

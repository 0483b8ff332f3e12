import logging
import os
from datetime import datetime

LOGGER_NAME = "videopalette"


def configure_logging(verbose: bool = False, log_dir: str | None = None):
    """Configure the package logger once, at application startup"""
    logger = logging.getLogger(LOGGER_NAME)

    # Only configure if not already configured
    if not logger.handlers:
        logger.setLevel(logging.DEBUG)

        formatter = logging.Formatter(
            "%(asctime)s - %(threadName)s - %(levelname)s - %(message)s"
        )

        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

            # Format timestamp as readable datetime (e.g., 2023-05-25_14-30-45)
            timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

            file_handler = logging.FileHandler(os.path.join(log_dir, f"{timestamp}.log"))
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        # Always add the stream handler for console output
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    return logger

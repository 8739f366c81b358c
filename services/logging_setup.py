import json
import logging
import os

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _use_gcloud_logging() -> bool:
    return os.getenv("USE_GCLOUD_LOGGING", "false").lower() == "true"


def setup_gcloud_logging(level: int) -> logging.Logger:
    """Setup logging for Google Cloud App Engine"""
    # Only import Google Cloud logging if actually using it
    import google.cloud.logging
    from google.cloud.logging_v2.handlers import CloudLoggingHandler

    client = google.cloud.logging.Client()

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    cloud_handler = CloudLoggingHandler(client)

    # Set formatter to output JSON that gcloud can parse
    formatter = logging.Formatter(
        '{"message": "%(message)s", "severity": "%(levelname)s", "timestamp": "%(asctime)s"}'
    )
    cloud_handler.setFormatter(formatter)
    root.addHandler(cloud_handler)
    return root


def setup_logging() -> None:
    """
    Initialize logging - use Google Cloud logging only if enabled, otherwise
    use standard logging.
    """
    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)

    if _use_gcloud_logging():
        try:
            setup_gcloud_logging(level)
            return
        except Exception as e:
            # Fallback to standard logging if Google Cloud logging fails
            logging.basicConfig(level=level)
            logger.warning(f"Failed to initialize Google Cloud logging: {e}. Using standard logging.")
            return

    logging.basicConfig(level=level)


def log_info(message: str, **kwargs):
    """Log info message with additional context"""
    if kwargs:
        logger.info(f"{message} - {json.dumps(kwargs, default=str)}")
    else:
        logger.info(message)

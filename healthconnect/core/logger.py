import logging
import sys

from healthconnect.core.config import settings

def setup_logging(level: str = settings.LOG_LEVEL):
    """
    Configure the ``healthconnect`` logger used by services and middleware.
    """
    logger = logging.getLogger("healthconnect")
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    handler.setFormatter(formatter)

    # Reloads (uvicorn --reload, test imports) must not stack handlers
    if not logger.handlers:
        logger.addHandler(handler)

    return logger

logger = setup_logging()

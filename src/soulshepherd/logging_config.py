import logging
import os

LOG_LEVEL_ENV = "SOUL_SHEPHERD_LOG_LEVEL"


def configure_logging(default_level: int = logging.INFO) -> None:
    """Configure the root logger with the project's default format.

    Respects SOUL_SHEPHERD_LOG_LEVEL if present (e.g. DEBUG, WARNING).
    """
    level_name = os.getenv(LOG_LEVEL_ENV)
    level = default_level
    if level_name:
        level = getattr(logging, level_name.upper(), default_level)
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )

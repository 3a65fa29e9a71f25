"""
Loguru configuration shared by the API and service modules.

Service code imports ``logger`` straight from loguru and passes structured
context as keyword arguments; this module only decides where records go.
"""

import sys
from loguru import logger
from .config import settings


def setup_logging(level: str | None = None, json_logs: bool | None = None):
    """
    Replace loguru's default handler with one driven by settings.

    Args:
        level: Minimum level (defaults to LOG_LEVEL)
        json_logs: Emit one JSON object per line (defaults to LOG_JSON)

    Returns:
        The configured loguru logger
    """
    level = (level or settings.log_level).upper()
    json_logs = settings.log_json if json_logs is None else json_logs

    logger.remove()
    if json_logs:
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        logger.add(
            sys.stderr,
            level=level,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
                "<cyan>{name}</cyan> - <level>{message}</level> {extra}"
            ),
        )

    return logger.bind(app=settings.app_name, env=settings.app_env)

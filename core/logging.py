from loguru import logger

from core.config import settings

if settings.log_file:
    logger.add(
        settings.log_file,
        rotation="10 MB",
        retention="7 days",
        serialize=True,
    )

__all__ = ["logger"]

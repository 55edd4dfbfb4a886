"""
Loguru sink setup.
"""

import sys
from loguru import logger

from cronedit.config import LoggingConfig


def configure_logging(cfg: LoggingConfig) -> None:
    """Replace the default loguru sink with the configured stderr/file sinks."""
    logger.remove()
    logger.add(sys.stderr, level=cfg.level, format=cfg.format)
    if cfg.file:
        cfg.file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(str(cfg.file), level=cfg.level, rotation=cfg.rotation, enqueue=True)

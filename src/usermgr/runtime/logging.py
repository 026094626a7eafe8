"""Loguru sink setup driven by the logging section of the configuration."""

import sys
from pathlib import Path

from loguru import logger

from src.usermgr.runtime.config.config_data import ConfigData

_PLAIN_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def configure_logging(config: ConfigData) -> None:
    """Reset loguru sinks according to the logging section of the config."""
    cfg = config.logging
    diagnose_on = config.app.environment != "production"

    logger.remove()

    # Console: always colorized, human-readable
    logger.add(
        sys.stderr,
        level=cfg.level,
        format=_PLAIN_FORMAT,
        colorize=True,
        backtrace=diagnose_on,
        diagnose=diagnose_on,
    )

    # File: JSON or plain
    if cfg.file:
        path = Path(cfg.file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        is_json_file = cfg.format == "json"
        logger.add(
            str(path),
            level=cfg.level,
            format="{message}" if is_json_file else _PLAIN_FORMAT,
            serialize=is_json_file,
            backtrace=diagnose_on,
            diagnose=diagnose_on,
        )

    logger.debug("Logging configured at level {}", cfg.level)

"""Loguru setup for the API process and the CLI."""

import logging
import sys
from pathlib import Path
from typing import Any

from loguru import logger

from src.salsila.runtime.config.config_data import ConfigData
from src.salsila.runtime.context import get_config

PLAIN_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "[<cyan>{extra[request_id]}</cyan>] | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# stdlib loggers that would otherwise drown the application's own records
_STDLIB_LEVELS = {
    "sqlalchemy.engine": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
    "uvicorn": logging.INFO,
    "uvicorn.error": logging.INFO,
    "uvicorn.access": logging.CRITICAL,
}


class InterceptHandler(logging.Handler):
    """Forward stdlib ``logging`` records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # request middleware already logs every request
        if record.name == "uvicorn.access":
            return

        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.opt(depth=2, exception=record.exc_info).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def _sink_options(config: ConfigData) -> dict[str, Any]:
    is_json = config.logging.format == "json"
    environment = config.app.environment
    return {
        "level": config.logging.level,
        "format": "{message}" if is_json else PLAIN_FORMAT,
        "serialize": is_json,
        "backtrace": environment != "production",
        "diagnose": environment == "development",
    }


def _route_stdlib_logging() -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in list(logging.root.manager.loggerDict):
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers = []
        stdlib_logger.propagate = True
    for name, level in _STDLIB_LEVELS.items():
        logging.getLogger(name).setLevel(level)


def configure_logging(config: ConfigData | None = None) -> None:
    """Replace loguru's sinks according to ``config.logging``.

    Records always carry ``request_id`` (``-`` outside a request). A rotating
    file sink is added only when ``logging.file`` is set.
    """
    config = config or get_config()
    options = _sink_options(config)

    logger.remove()
    logger.configure(extra={"request_id": "-"})
    logger.add(sys.stderr, colorize=not options["serialize"], **options)

    log_file = config.logging.file
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(path),
            rotation=f"{config.logging.max_size_mb} MB",
            retention=config.logging.backup_count,
            compression="zip",
            enqueue=True,
            **options,
        )

    _route_stdlib_logging()

    logger.info(
        "Logging configured",
        log_level=config.logging.level,
        log_format=config.logging.format,
        log_file=log_file,
        environment=config.app.environment,
    )

"""Structured logging setup shared by the web app and the CLI."""

import logging
import sys
from pathlib import Path

import structlog

from prodcalc.config import get_config

LOG_FILE = Path("logs/prodcalc.log")

_configured = False


def _processors(json_logs: bool) -> list:
    chain = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]
    if json_logs:
        chain.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        chain.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return chain


def configure_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """Configure structlog and route stdlib ``logging`` output to stdout.

    Args:
        level: Log level name; defaults to ``AppConfig.log_level``.
        json_logs: Render JSON lines instead of the console renderer; defaults
            to ``AppConfig.json_logs`` (``LOG_FORMAT=json`` or ``JSON_LOGS=true``).

    Calling it again only adjusts the root level.
    """
    global _configured

    config = get_config()
    level = (level or config.log_level).upper()
    if _configured:
        logging.getLogger().setLevel(level)
        return

    structlog.configure(
        processors=_processors(config.json_logs if json_logs is None else json_logs),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers = [logging.StreamHandler(sys.stdout)]
    if LOG_FILE.parent.is_dir():
        root.handlers.append(logging.FileHandler(LOG_FILE))
    for handler in root.handlers:
        handler.setFormatter(logging.Formatter("%(message)s"))
    root.setLevel(level)

    # SQL echo is controlled by DB_ECHO, not by the root level
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    _configured = True

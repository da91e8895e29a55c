"""
Structured logging setup.

Every module logs through ``structlog.get_logger(__name__)``; this module
wires structlog onto the stdlib logging tree once at startup.
"""

import logging
import sys

import structlog


def configure_logging(level: str = "INFO", json: bool = True) -> None:
    """
    Configure structlog and the root stdlib logger.

    Args:
        level: Log level name; unknown names fall back to INFO
        json: Render JSON lines when True, human readable console output otherwise
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    root.setLevel(numeric_level)

    # SQL echo is noisy at DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    renderer = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

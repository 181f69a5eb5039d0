import logging
import sys

import structlog

# Library loggers that are chatty at INFO during AEMET downloads and DB access.
QUIET_LOGGERS = ("urllib3", "requests", "sqlalchemy.engine", "sqlalchemy.pool")


def init_logging(log_level: str = "INFO") -> structlog.BoundLogger:
    """Configure structlog for the service and the ingestion command.

    Values bound with ``structlog.contextvars.bind_contextvars`` (the request
    id while serving ``/api/hi``) are merged into every event.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer() if level == logging.DEBUG else structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger()

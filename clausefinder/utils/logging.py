"""structlog configuration for ingestion runs and search queries.

One processor chain serves both outputs: a coloured console renderer while
developing against a local document folder, and JSON lines in production
where ingestion reports are shipped to a log collector.  The standard
library root logger is routed through the same chain, so records from
httpx (OCR calls) come out in the same format as our own events.
"""

import logging
import sys

import structlog

# Third-party loggers that log every request at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore")


def _processor_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False,
    app_env: str = "development",
) -> structlog.BoundLogger:
    """Install the structlog pipeline and bridge stdlib logging into it.

    Parameters
    ----------
    log_level:
        Minimum level name (``DEBUG``, ``INFO``, ``WARNING``, ...).
    json_output:
        Force JSON lines.  Production (``app_env == "production"``) always
        renders JSON.
    app_env:
        Deployment environment from the ``app`` config section.

    Returns
    -------
    structlog.BoundLogger
        A logger bound to the freshly configured pipeline.
    """
    level = log_level.upper()
    shared = _processor_chain()
    renderer: structlog.types.Processor
    if json_output or app_env == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[*shared, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *shared,
                renderer,
            ],
        )
    )
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # Request lines from the OCR client only matter when debugging.
    chatty_level = logging.DEBUG if level == "DEBUG" else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(chatty_level)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a logger bound with ``logger_name``, configuring defaults on first use."""
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)

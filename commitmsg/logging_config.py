"""Configure commitmsg logging.

Routes structlog events through the standard library so third-party SDK
loggers and commitmsg share one stderr handler. Call setup_logging() once
at process startup.
"""

import logging as stdlib_logging
import sys

import structlog


def setup_logging(level: str = "WARNING") -> None:
    """Set up stderr logging with a structlog console renderer.

    Args:
        level: Log level name for commitmsg and the root logger.
    """
    log_level = stdlib_logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = stdlib_logging.WARNING

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
    ]

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = stdlib_logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.dev.ConsoleRenderer(colors=False),
            ],
        )
    )

    root_logger = stdlib_logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    # SDK HTTP clients are noisy at INFO
    for noisy in ("httpx", "httpcore", "openai", "anthropic", "groq", "google_genai"):
        stdlib_logging.getLogger(noisy).setLevel(max(log_level, stdlib_logging.WARNING))

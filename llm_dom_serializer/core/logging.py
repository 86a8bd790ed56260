"""Logging configuration for the DOM serializer."""

import logging
import sys
from pathlib import Path
from typing import Optional

import structlog


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_logs: bool = False
) -> logging.Logger:
    """
    Set up logging configuration for the package.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for logging
        json_logs: Whether to output JSON formatted logs

    Returns:
        Configured logger instance
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
    ]
    if json_logs:
        processors = shared_processors + [
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ]
    else:
        processors = shared_processors + [
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=False)
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    if not json_logs:
        console_handler.setFormatter(logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        root_logger.addHandler(file_handler)

    logger = logging.getLogger("llm_dom_serializer")
    logger.setLevel(numeric_level)

    return logger


def get_logger(name: str = "llm_dom_serializer") -> structlog.stdlib.BoundLogger:
    """
    Get a structlog logger instance.

    Events go through the stdlib logger of the same name, so level
    filtering and handlers apply even when ``setup_logging`` was never
    called.

    Args:
        name: Logger name (usually module name)

    Returns:
        Bound logger instance
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def log_serialization(stats: dict, timing: dict) -> None:
    """
    Log the outcome of one serialization call.

    Args:
        stats: Serialization statistics as a plain dict
        timing: Stage timings in seconds
    """
    logger = get_logger("llm_dom_serializer.serializer")
    logger.debug(
        "DOM serialized",
        interactive=stats.get("interactive_elements"),
        new=stats.get("new_elements"),
        filtered=stats.get("filtered_nodes"),
        total_ms=round(timing.get("total", 0.0) * 1000, 2),
    )


def log_iframe_issues(issues: list) -> None:
    """
    Log the issues collected during one iframe traversal as a single batch.

    Args:
        issues: Issue descriptions, in the order they occurred
    """
    if not issues:
        return
    logger = get_logger("llm_dom_serializer.iframe")
    logger.warning(
        "Iframe processing issues detected",
        count=len(issues),
        issues=list(issues),
    )

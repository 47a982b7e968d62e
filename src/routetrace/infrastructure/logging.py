# src/routetrace/infrastructure/logging.py
"""
Logging configuration for routetrace.

Uses Loguru as backend. Two entry points:
- setup_logging(): configures handlers once, at host startup
- get_logger(name): returns the global logger bound with the module name

Level conventions inside routetrace:

    DEBUG   - ignored or late signals (unmatched child end, double finish)
    INFO    - activity span started / finished
    WARNING - interaction not created, invalid performance entry dropped
    ERROR   - exporter or callback failure (contained, never re-raised)

If setup_logging() is never called, Loguru's default stderr handler is used.
Hosts embedding routetrace in a larger application usually configure Loguru
themselves and skip setup_logging() entirely.
"""

from loguru import logger
from pathlib import Path
import sys


# Flag to prevent multiple setups
_is_configured = False


def setup_logging(
    level: str = "DEBUG",
    console_level: str = "INFO",
    log_dir: str = "logs",
    log_filename: str = "routetrace.log"
) -> None:
    """
    Configure logging handlers.

    Subsequent calls are ignored.

    Args:
        level: Minimum level for the FILE handler. Default: "DEBUG"
        console_level: Minimum level for the CONSOLE handler. Default: "INFO"
        log_dir: Directory for log files. Created if it doesn't exist.
        log_filename: Name of the log file. Default: "routetrace.log"

    Example:
        from routetrace.infrastructure.logging import setup_logging

        setup_logging(console_level="WARNING")
    """
    global _is_configured

    if _is_configured:
        return

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logger.remove()

    # {extra[name]} comes from bind() in get_logger()
    log_format = (
        "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
        "{level:<8} | "
        "{extra[name]}:{function}:{line} | "
        "{message}"
    )

    logger.add(
        sink=log_path / log_filename,
        level=level,
        format=log_format,
        rotation="50 MB",
        retention="7 days",
        encoding="utf-8",
    )

    console_format = (
        "<level>{level:<8}</level> | "
        "<cyan>{extra[name]}</cyan>:<cyan>{function}</cyan> | "
        "{message}"
    )

    logger.add(
        sink=sys.stderr,
        level=console_level,
        format=console_format,
        colorize=True,
    )

    _is_configured = True

    logger.bind(name="routetrace.logging").info(
        f"Logging configured - file={level}, console={console_level}, path={log_path / log_filename}"
    )


def get_logger(name: str):
    """
    Get a logger with the module name bound.

    Args:
        name: Module name. Always use __name__ for consistency.

    Returns:
        Loguru logger with bound name.

    Example:
        from routetrace.infrastructure.logging import get_logger

        logger = get_logger(__name__)
        logger.debug("child ended with no open children, ignoring")
    """
    return logger.bind(name=name)


def describe_span(span) -> str:
    """
    One-line description of an ActivitySpan for log messages.

    Example output:
        navigation:/users/:id [3f2a9c1e] reason=idleTimeout children=0 duration=1000.0ms
    """
    parts = [f"{span.operation}:{span.route_name} [{span.id[:8]}]"]
    if span.finish_reason is not None:
        parts.append(f"reason={span.finish_reason}")
    parts.append(f"children={span.child_count}")
    if span.duration is not None:
        parts.append(f"duration={span.duration:.1f}ms")
    if not span.sampled:
        parts.append("unsampled")
    return " ".join(parts)

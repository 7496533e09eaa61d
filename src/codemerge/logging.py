from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

_LOGGING_CONFIGURED = False
_FILE_HANDLER: logging.FileHandler | None = None


def _attach_file_handler(filename: str | Path) -> None:
    global _FILE_HANDLER  # noqa: PLW0603
    close_log_file()
    _FILE_HANDLER = logging.FileHandler(str(filename), encoding="utf-8")
    _FILE_HANDLER.setFormatter(logging.Formatter("%(message)s"))
    stdlib_logger = logging.getLogger("codemerge")
    stdlib_logger.addHandler(_FILE_HANDLER)
    stdlib_logger.propagate = False


def close_log_file() -> None:
    """Detach and close the log file handler, sending logs back to stderr."""
    global _FILE_HANDLER  # noqa: PLW0603
    if _FILE_HANDLER is None:
        return
    stdlib_logger = logging.getLogger("codemerge")
    stdlib_logger.removeHandler(_FILE_HANDLER)
    stdlib_logger.propagate = True
    _FILE_HANDLER.close()
    _FILE_HANDLER = None


def setup_logging(filename: str | Path | None = None) -> structlog.BoundLogger:
    """Set up structured logging for the codemerge module.

    Per-entry traversal failures and fatal merge errors go through this logger,
    so stderr (or the log file) is the error channel of the tool.

    Args:
        filename: Optional path to a log file. If None, logs are written to stderr.

    Returns:
        A structlog logger instance configured for the codemerge module.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if filename:
        _attach_file_handler(filename)
    if not _LOGGING_CONFIGURED:
        logging.basicConfig(
            level=logging.INFO,
            handlers=[logging.StreamHandler(sys.stderr)],
            format="%(message)s",
        )
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_CONFIGURED = True

    return structlog.get_logger("codemerge")


logger = setup_logging()

"""Logging setup with per-verification context (policy number, file name)."""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s%(context)s"


class ContextFilter(logging.Filter):
    """
    Attach the current verification context to every record.

    Each context field is set as a record attribute, and ``record.context``
    holds them rendered as `` [key=value ...]`` (empty when there is no
    context) so formats can include ``%(context)s`` unconditionally.
    """

    def __init__(self):
        super().__init__()
        self.context: Dict[str, Any] = {}

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.context.items():
            setattr(record, key, value)
        fields = " ".join(f"{key}={value}" for key, value in self.context.items() if value)
        record.context = f" [{fields}]" if fields else ""
        return True


# Shared by every handler installed by setup_logging
_context_filter = ContextFilter()


def setup_logging(
    level: str = "INFO",
    log_format: str = DEFAULT_FORMAT,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure the root logger with a console handler and an optional file handler.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format string; may reference %(context)s
        log_file: Optional path to a log file; parent directories are created

    Returns:
        Configured root logger
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(log_format)

    handlers = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        handler.addFilter(_context_filter)
        root_logger.addHandler(handler)

    return root_logger


def set_context(**kwargs):
    """
    Set context fields for all subsequent log messages.

    Example:
        set_context(policy_number="QBEPL12345678", file_name="coc.pdf")
        logger.info("Evaluated certificate")  # ... [policy_number=QBEPL12345678 file_name=coc.pdf]
    """
    _context_filter.context.update(kwargs)


def clear_context():
    _context_filter.context.clear()


def get_context() -> Dict[str, Any]:
    """Return a copy of the current logging context."""
    return dict(_context_filter.context)


@contextmanager
def verification_context(**kwargs) -> Iterator[None]:
    """Add context fields for the duration of one verification, then restore the previous context."""
    previous = get_context()
    set_context(**kwargs)
    try:
        yield
    finally:
        clear_context()
        set_context(**previous)

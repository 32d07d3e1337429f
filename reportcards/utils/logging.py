"""
Logging Configuration

One-line log records tagged with the report they concern, so the steps
of a single export (capture, document build, save) can be followed in
an interleaved log.
"""
import logging
import sys
from typing import Any, Optional
from datetime import datetime, timezone

LEVEL_COLORS = {
    'DEBUG': '\033[36m',     # Cyan
    'INFO': '\033[32m',      # Green
    'WARNING': '\033[33m',   # Yellow
    'ERROR': '\033[31m',     # Red
    'CRITICAL': '\033[35m',  # Magenta
}
RESET = '\033[0m'

# Marks handlers installed by setup_logging
HANDLER_TAG = "_reportcards"


class ReportCardFormatter(logging.Formatter):
    """
    ``[time] LEVEL [logger] report=<id> message``

    The ``report=`` field appears only when the record carries a
    ``report_id`` (see ``report_logger``). Time is UTC, ISO 8601.
    """

    def __init__(self, use_color: bool = False):
        super().__init__()
        self.use_color = use_color

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        return datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="milliseconds")

    def format(self, record: logging.LogRecord) -> str:
        fields = [f"[{self.formatTime(record)}]", f"{record.levelname:8}", f"[{record.name}]"]

        report_id = getattr(record, "report_id", None)
        if report_id is not None:
            fields.append(f"report={report_id}")
        fields.append(record.getMessage())

        line = " ".join(fields)
        if self.use_color and record.levelname in LEVEL_COLORS:
            line = f"{LEVEL_COLORS[record.levelname]}{line}{RESET}"

        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def report_logger(logger: logging.Logger, report_id: Any) -> logging.LoggerAdapter:
    """Wrap ``logger`` so every record it emits carries ``report_id``."""
    return logging.LoggerAdapter(logger, {"report_id": str(report_id)})


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    use_color: Optional[bool] = None,
) -> None:
    """
    Configure application-wide logging.

    Calling it again replaces the handlers it installed before and leaves
    any other root handler (e.g. pytest's capture) in place.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for log output, always without colour
        use_color: Colour console output; defaults to whether stdout is a TTY
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(root_logger.handlers):
        if getattr(handler, HANDLER_TAG, False):
            root_logger.removeHandler(handler)
            handler.close()

    if use_color is None:
        use_color = sys.stdout.isatty()

    handlers = [logging.StreamHandler(sys.stdout)]
    handlers[0].setFormatter(ReportCardFormatter(use_color=use_color))

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(ReportCardFormatter())
        handlers.append(file_handler)

    for handler in handlers:
        setattr(handler, HANDLER_TAG, True)
        root_logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Logger for a module (typically ``__name__``)."""
    return logging.getLogger(name)

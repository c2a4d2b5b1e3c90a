"""
Logging Configuration

Console and file logging for the ca-trust command line.

Console records go to stderr so tables and JSON on stdout stay clean.
A log file, when requested, records everything down to DEBUG whatever
the console verbosity, which keeps the per-request checker details
available after a quiet run.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO

PACKAGE_LOGGER = "ca_trust"

# HTTP client libraries; the checkers log their own request summaries
QUIET_LOGGERS = ("httpx", "httpcore")


def level_for_verbosity(verbose: int = 0, quiet: bool = False) -> int:
    """Map -v/-q flags to a console log level"""
    if quiet:
        return logging.ERROR
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return logging.WARNING


class TrustLogFormatter(logging.Formatter):
    """[time] LEVEL [logger] message, with colored levels on terminals"""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        use_colors: bool = True,
        stream: Optional[TextIO] = None,
        with_date: bool = False,
    ):
        super().__init__()
        stream = stream or sys.stderr
        self.use_colors = use_colors and stream.isatty()
        self.time_format = "%Y-%m-%d %H:%M:%S.%f" if with_date else "%H:%M:%S.%f"

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        # milliseconds
        return datetime.fromtimestamp(record.created).strftime(datefmt or self.time_format)[:-3]

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:8}"
        if self.use_colors and record.levelname in self.LEVEL_COLORS:
            level = f"{self.LEVEL_COLORS[record.levelname]}{level}{self.RESET}"

        line = f"[{self.formatTime(record)}] {level} [{record.name}] {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(
    level: int = logging.WARNING,
    log_file: Optional[str] = None,
    use_colors: bool = True,
) -> logging.Logger:
    """
    Configure the ca_trust logger.

    Args:
        level: Console log level, see level_for_verbosity()
        log_file: Optional file receiving every record down to DEBUG
        use_colors: Color level names when stderr is a terminal

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(TrustLogFormatter(use_colors=use_colors, stream=sys.stderr))
    logger.addHandler(console_handler)
    logger.setLevel(level)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(TrustLogFormatter(use_colors=False, with_date=True))
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug(
        f"Logging configured console_level={logging.getLevelName(level)} log_file={log_file}"
    )
    return logger

"""
Output Formatting

Provides progress reporting, console tables and JSON output.
"""

from .base import BaseFormatter, NullProgress, OutputLevel, ProgressReporter
from .console import ConsoleProgress, ConsoleTableFormatter, format_status
from .json_output import JsonFormatter

__all__ = [
    "BaseFormatter",
    "OutputLevel",
    "ProgressReporter",
    "NullProgress",
    "ConsoleProgress",
    "ConsoleTableFormatter",
    "JsonFormatter",
    "format_status",
]

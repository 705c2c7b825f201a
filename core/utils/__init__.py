"""
Utility modules for mf
"""
from .logger import normalize_level, setup_logger
from .time_utils import format_duration, parse_duration
from .validators import split_command_line, validate_pid

__all__ = [
    "normalize_level",
    "setup_logger",
    "format_duration",
    "parse_duration",
    "split_command_line",
    "validate_pid",
]

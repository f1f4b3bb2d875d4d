"""
Utility modules for Docker Janitor
"""
from .logger import setup_logger
from .singleton import singleton
from .time_utils import format_duration, parse_duration

__all__ = [
    "setup_logger",
    "singleton",
    "format_duration",
    "parse_duration",
]

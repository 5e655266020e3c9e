from __future__ import annotations

from .formatters import JSONFormatter
from .handlers import build_human_console_handler, build_json_file_handler, json_log_path
from .logger import EngineLogger

__all__ = [
    "EngineLogger",
    "build_json_file_handler",
    "build_human_console_handler",
    "json_log_path",
    "JSONFormatter",
]

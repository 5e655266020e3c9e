"""Handlers attached by ``EngineLogger``.

JSON lines go to ``<logs_dir>/<logger_name>.jsonl``. The console handler
writes to stderr because stdout carries command output (``--json``).
"""

from __future__ import annotations

import logging
import sys
from logging import Handler
from pathlib import Path
from typing import TextIO

from .formatters import HumanReadableFormatter, JSONFormatter


def json_log_path(logs_dir: Path, logger_name: str) -> Path:
    return logs_dir / f"{logger_name}.jsonl"


def build_json_file_handler(logs_dir: Path, logger_name: str, level: int = logging.INFO) -> Handler:
    """Append JSON lines to the logger's file under ``logs_dir``.

    The file is opened on the first emitted record, so a request that logs
    nothing at ``level`` leaves no empty file behind.
    """
    path = json_log_path(logs_dir, logger_name)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8", delay=True)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    return handler


def build_human_console_handler(level: int = logging.INFO, stream: TextIO | None = None) -> Handler:
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(HumanReadableFormatter())
    return handler

from __future__ import annotations

import logging
from pathlib import Path

from dependency_injector.resources import Resource

from .handlers import build_human_console_handler, build_json_file_handler


class EngineLogger(Resource):
    """Structured logger for the engine.

    Keyword arguments of the logging methods are attached to the record and
    end up as fields of the JSON line.
    """

    def init(
        self,
        *,
        logs_dir: Path | None = None,
        logger_name: str = "findings_engine",
        json_file: bool = True,
        console_output: bool = False,
        level: str = "INFO",
    ) -> "EngineLogger":
        """Attach handlers to the named logger.

        Args:
            logs_dir: Directory of the ``<logger_name>.jsonl`` file
            logger_name: Logger name
            json_file: Whether to write JSON lines to ``logs_dir``
            console_output: Whether to enable human-readable stderr output
            level: Logging level (DEBUG, INFO, WARNING, ERROR)

        Returns:
            Self for dependency_injector Resource pattern
        """
        numeric_level = getattr(logging, level.upper())
        self._logger = logging.getLogger(logger_name)
        self._logger.setLevel(numeric_level)
        self._logger.propagate = False

        self._logger.handlers.clear()
        self._handlers: list[logging.Handler] = []

        if json_file and logs_dir is not None:
            file_handler = build_json_file_handler(logs_dir, logger_name, level=numeric_level)
            self._logger.addHandler(file_handler)
            self._handlers.append(file_handler)

        if console_output:
            console_handler = build_human_console_handler(level=numeric_level)
            self._logger.addHandler(console_handler)
            self._handlers.append(console_handler)

        return self

    def shutdown(self, resource: "EngineLogger") -> None:
        """Flush and close every handler attached by ``init``."""
        for handler in self._handlers:
            handler.flush()
            handler.close()
        self._logger.handlers.clear()

    def debug(self, message: str, **kwargs) -> None:
        if kwargs:
            self._logger.debug(message, extra=kwargs)
        else:
            self._logger.debug(message)

    def info(self, message: str, **kwargs) -> None:
        if kwargs:
            self._logger.info(message, extra=kwargs)
        else:
            self._logger.info(message)

    def warning(self, message: str, **kwargs) -> None:
        if kwargs:
            self._logger.warning(message, extra=kwargs)
        else:
            self._logger.warning(message)

    def error(self, message: str, exc_info: bool = False, **kwargs) -> None:
        """Log error message with optional extra fields and exception info."""
        if kwargs:
            self._logger.error(message, extra=kwargs, exc_info=exc_info)
        else:
            self._logger.error(message, exc_info=exc_info)

    def exception(self, message: str, **kwargs) -> None:
        """Log exception with traceback and optional extra fields."""
        if kwargs:
            self._logger.exception(message, extra=kwargs)
        else:
            self._logger.exception(message)

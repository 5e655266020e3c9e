"""Domain exceptions for findings_engine.

Every error surfaced to callers carries a stable ``error_code``, a public
message and an HTTP-equivalent ``status_code`` so outer layers (CLI, an HTTP
adapter) can render them without inspecting the exception type.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class for errors surfaced to callers."""

    error_code: str = "InternalError"
    default_message: str = "An internal error occurred."
    status_code: int = 500

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, object]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "status_code": self.status_code,
        }


class NotAuthorized(EngineError):
    """Raised when the access check for an organization/project/analysis fails.

    The message never includes which of the checks failed.
    """

    error_code = "NotAuthorized"
    default_message = "You are not authorized to perform this action."
    status_code = 403


class UnknownWorkspace(EngineError):
    error_code = "UnknownWorkspace"
    default_message = "The referenced workspace does not exist on the project."
    status_code = 404

    def __init__(self, workspace: str | None = None, message: str | None = None) -> None:
        self.workspace = workspace
        super().__init__(message)


class EntityNotFound(EngineError):
    error_code = "EntityNotFound"
    default_message = "The requested entity could not be found."
    status_code = 404


class PluginResultNotAvailable(EngineError):
    """Raised when the producing tool has not (yet) stored a result."""

    error_code = "PluginResultNotAvailable"
    default_message = (
        "The plugin result is not available, and thus either not finished "
        "or failed to finish properly."
    )
    status_code = 500

    def __init__(self, plugin: str | None = None, message: str | None = None) -> None:
        self.plugin = plugin
        super().__init__(message)


class PluginFailed(EngineError):
    """Raised when the producing tool stored a result with status ``failure``."""

    error_code = "PluginResultFailed"
    default_message = "The plugin failed to run."
    status_code = 500

    def __init__(self, plugin: str | None = None, message: str | None = None) -> None:
        self.plugin = plugin
        super().__init__(message)


class InvalidCVSSVector(EngineError):
    error_code = "InvalidCVSSVector"
    default_message = "The CVSS vector could not be parsed."
    status_code = 422

    def __init__(self, vector: str, message: str | None = None) -> None:
        self.vector = vector
        if message is None:
            message = f"Invalid CVSS vector: {vector!r}"
        super().__init__(message)


class ReportGenerationFailed(EngineError):
    """Raised when neither advisory nor CVE evidence exists for a vulnerability."""

    error_code = "ReportGenerationFailed"
    default_message = "The vulnerability report is unavailable."
    status_code = 500

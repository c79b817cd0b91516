"""
Domain Errors

Architectural Intent:
- Single error taxonomy for the adapter, shared by every layer
- Each error carries a stable machine code plus a human message
- Only ConfigurationError is fatal; everything else is turned into an
  error envelope at the Dispatcher boundary
"""

from typing import Any, Optional


class NcloudMCPError(Exception):
    """Structured adapter error."""

    code = "internal_error"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.code,
                "message": str(self),
                "details": self.details,
            }
        }


class ConfigurationError(NcloudMCPError):
    """Required process configuration (credentials) is missing."""

    code = "configuration_error"


class UnknownActionError(NcloudMCPError):
    code = "tool_not_found"

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}", {"name": name})
        self.name = name


class MissingArgumentError(NcloudMCPError):
    """No argument bag at all, or required fields absent from it."""

    code = "missing_arguments"

    def __init__(self, message: str, violations: Optional[list[str]] = None):
        super().__init__(message, {"violations": list(violations or [])})
        self.violations = list(violations or [])


class InvalidArgumentError(NcloudMCPError):
    """Supplied fields do not have their declared structural type."""

    code = "invalid_arguments"

    def __init__(self, message: str, violations: Optional[list[str]] = None):
        super().__init__(message, {"violations": list(violations or [])})
        self.violations = list(violations or [])


class RemoteCallError(NcloudMCPError):
    """The NCP endpoint answered non-2xx, or the transport failed."""

    code = "remote_call_failed"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(
            f"NCP API Error: {message}",
            {"status_code": status_code} if status_code is not None else {},
        )
        self.status_code = status_code

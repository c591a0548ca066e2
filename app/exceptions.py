# =============================================================================
# app/exceptions.py - RPC Exceptions and Handlers
# =============================================================================
# Call-level failures for the plugin's RPC surface.
# Following the principle: "Errors should tell HOW to fix, not just WHAT failed."
#
# Everything recoverable (bad rows, bad files) is handled inside the engine.
# Only requests that cannot be satisfied at all end up here and are reported
# to the host as a gRPC status.
# =============================================================================

import logging
from typing import Any, NoReturn

import grpc

logger = logging.getLogger(__name__)


class PluginException(Exception):
    """
    Base exception for call-level plugin failures.

    All custom exceptions inherit from this class.
    Carries the gRPC status code the host should receive.
    """

    def __init__(
        self,
        message: str,
        code: str = "PLUGIN_ERROR",
        status_code: grpc.StatusCode = grpc.StatusCode.INTERNAL,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dict for logging."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result

    def status_message(self) -> str:
        """Text sent to the host alongside the status code."""
        if self.suggestion:
            return f"[{self.code}] {self.message}. {self.suggestion}"
        return f"[{self.code}] {self.message}"


# =============================================================================
# Publish Exceptions
# =============================================================================

class ProtocolError(PluginException):
    """Raised when a request is malformed, e.g. undecodable schema settings."""

    def __init__(self, reason: str, suggestion: str | None = None):
        super().__init__(
            message=f"Malformed request: {reason}",
            code="PROTOCOL_ERROR",
            status_code=grpc.StatusCode.INVALID_ARGUMENT,
            suggestion=suggestion or "Pass back a schema exactly as returned by Discover",
            details={"reason": reason},
        )


class NoReadableFilesError(PluginException):
    """Raised when none of a schema's files could be opened."""

    def __init__(self, schema_name: str, files: list[str]):
        super().__init__(
            message=f"No readable files for schema '{schema_name}'",
            code="NO_READABLE_FILES",
            status_code=grpc.StatusCode.NOT_FOUND,
            suggestion="Check that the files still exist and run Discover again if they moved",
            details={"schema": schema_name, "files": files},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

def plugin_exception_handler(context: grpc.ServicerContext, exc: PluginException) -> NoReturn:
    """
    Terminate the current RPC with the exception's status.

    context.abort() raises, so this never returns.
    """
    logger.warning(f"Request failed: {exc.to_dict()}")
    context.abort(exc.status_code, exc.status_message())


def unexpected_exception_handler(context: grpc.ServicerContext, exc: Exception) -> NoReturn:
    """
    Handle unexpected exceptions.

    The traceback is logged; the host only sees a generic INTERNAL status.
    """
    logger.exception(f"Unexpected error: {exc}")
    context.abort(grpc.StatusCode.INTERNAL, "[INTERNAL_ERROR] An unexpected error occurred")

"""Error Hierarchy - typed, categorized exceptions for presence failures.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Missing appName is NOT an error: the builder returns None instead
    - Empty rotation pools and non-positive intervals are NOT errors: the lane stays idle
    - to_response() produces the REST envelope used by the API error handlers

Design Decisions:
    - Single hierarchy with DynamicRPCError base: one FastAPI handler catches all
    - ErrorContext as dataclass: observability fields without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context attached to an error for logs and responses."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    app_id: str | None = None
    asset_key: str | None = None
    lane: str | None = None
    debug_info: dict[str, Any] | None = None


class DynamicRPCError(Exception):
    """Base exception for all Dynamic RPC errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "app_id": self.context.app_id,
                    "asset_key": self.context.asset_key,
                    "lane": self.context.lane,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ConfigurationError(DynamicRPCError):
    """A settings update could not be validated."""
    def __init__(self, message: str, field: str | None = None, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFIGURATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


# ─── Infrastructure Errors (500-level) ──────────────────────────

class AssetResolutionError(DynamicRPCError):
    """The host could not turn an image key into an asset id."""
    def __init__(
        self,
        message: str,
        app_id: str,
        key: str,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.app_id = app_id
        ctx.asset_key = key
        super().__init__(
            f"Asset resolution failed for '{key}': {message}",
            "ASSET_RESOLUTION_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, ctx, 502,
        )
        self.app_id = app_id
        self.key = key

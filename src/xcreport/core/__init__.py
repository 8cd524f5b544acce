"""Core module exports."""

from xcreport.core.errors import (
    ConfigError,
    ErrorCode,
    InternalError,
    ParseError,
    ToolInvocationError,
    UnsupportedFeatureError,
    XcReportError,
)
from xcreport.core.logging import (
    bundle_context,
    configure_logging,
)

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "ParseError",
    "ToolInvocationError",
    "UnsupportedFeatureError",
    "XcReportError",
    # Logging
    "bundle_context",
    "configure_logging",
]

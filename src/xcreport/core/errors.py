"""xcreport error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Tool invocation
- 4xxx: Result parsing
- 5xxx: Unsupported feature
- 9xxx: Internal
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Tool invocation (3xxx)
    TOOL_COMMAND_FAILED = 3001
    TOOL_EXECUTABLE_MISSING = 3002
    TOOL_OUTPUT_LIMIT = 3003

    # Result parsing (4xxx)
    PARSE_INVALID_JSON = 4001
    PARSE_SCHEMA_MISMATCH = 4002
    PARSE_MISSING_ROOT_ID = 4003

    # Unsupported feature (5xxx)
    FEATURE_UNSUPPORTED = 5001

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class XcReportError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'PARSE_INVALID_JSON')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(XcReportError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class ToolInvocationError(XcReportError):
    """An external command failed, was missing, or produced too much output."""

    @classmethod
    def command_failed(
        cls, args: Sequence[str], exit_code: int, stderr: str = ""
    ) -> "ToolInvocationError":
        command = " ".join(args)
        reason = stderr.strip() or f"exit code {exit_code}"
        return cls(
            code=ErrorCode.TOOL_COMMAND_FAILED,
            message=f"Command failed: {command}: {reason}",
            details={"command": command, "exit_code": exit_code, "stderr": stderr},
        )

    @classmethod
    def executable_missing(cls, args: Sequence[str], reason: str) -> "ToolInvocationError":
        command = " ".join(args)
        return cls(
            code=ErrorCode.TOOL_EXECUTABLE_MISSING,
            message=f"Could not run {command}: {reason}",
            details={"command": command, "reason": reason},
        )

    @classmethod
    def output_limit_exceeded(cls, args: Sequence[str], limit: int) -> "ToolInvocationError":
        command = " ".join(args)
        return cls(
            code=ErrorCode.TOOL_OUTPUT_LIMIT,
            message=f"Output of {command} exceeded {limit} bytes",
            details={"command": command, "limit": limit},
        )


class ParseError(XcReportError):
    """Tool output was received but did not have the expected shape."""

    @classmethod
    def invalid_json(cls, source: str, reason: str) -> "ParseError":
        return cls(
            code=ErrorCode.PARSE_INVALID_JSON,
            message=f"Invalid JSON in {source}: {reason}",
            details={"source": source, "reason": reason},
        )

    @classmethod
    def schema_mismatch(cls, source: str, reason: str) -> "ParseError":
        return cls(
            code=ErrorCode.PARSE_SCHEMA_MISMATCH,
            message=f"Unexpected {source} shape: {reason}",
            details={"source": source, "reason": reason},
        )

    @classmethod
    def missing_root_id(cls) -> "ParseError":
        return cls(
            code=ErrorCode.PARSE_MISSING_ROOT_ID,
            message="Could not find root ID in Info.plist",
        )


class UnsupportedFeatureError(XcReportError):
    """An optional tool flag is not available. Triggers a silent fallback."""

    @classmethod
    def flag(cls, flag: str) -> "UnsupportedFeatureError":
        return cls(
            code=ErrorCode.FEATURE_UNSUPPORTED,
            message=f"Flag not supported by this toolchain: {flag}",
            details={"flag": flag},
        )


class InternalError(XcReportError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )

"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config() (CLI flags end up here)
2. Environment variables (XCREPORT__SECTION__KEY)
3. YAML file (.xcreport.yaml in the working directory, or --config PATH)
4. Built-in defaults (this file)

Environment Variable Format:
    XCREPORT__<SECTION>__<KEY>=<VALUE>

Examples:
    XCREPORT__LOGGING__LEVEL=DEBUG
    XCREPORT__TOOL__XCRUN=/usr/bin/xcrun
    XCREPORT__TOOL__MAX_OUTPUT_MB=100
    XCREPORT__REPORT__SHOW_PASSED_TESTS=false
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from xcreport.config.constants import DEFAULT_MAX_OUTPUT_MB

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        XCREPORT__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. DEBUG prints every tool invocation.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ToolConfig(BaseModel):
    """External toolchain configuration.

    Env vars:
        XCREPORT__TOOL__XCRUN: xcrun executable
        XCREPORT__TOOL__XCODEBUILD: xcodebuild executable
        XCREPORT__TOOL__PLUTIL: plutil executable
        XCREPORT__TOOL__MAX_OUTPUT_MB: Output ceiling per command
    """

    xcrun: str = Field(default="xcrun", description="xcrun executable name or path.")
    xcodebuild: str = Field(
        default="xcodebuild", description="xcodebuild executable name or path."
    )
    plutil: str = Field(default="plutil", description="plutil executable name or path.")
    max_output_mb: int = Field(
        default=DEFAULT_MAX_OUTPUT_MB,
        description="Largest stdout accepted from a single command. "
        "Exceeding it fails only the section that issued the command.",
    )

    @field_validator("max_output_mb")
    @classmethod
    def validate_max_output(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"max_output_mb must be positive, got {v}")
        return v

    @property
    def max_output_bytes(self) -> int:
        return self.max_output_mb * 1024 * 1024


class ReportConfig(BaseModel):
    """Default render options. CLI flags take precedence.

    Env vars:
        XCREPORT__REPORT__SHOW_PASSED_TESTS
        XCREPORT__REPORT__SHOW_CODE_COVERAGE
    """

    show_passed_tests: bool = True
    show_code_coverage: bool = True


class XcReportConfig(BaseModel):
    """Root configuration."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    tool: ToolConfig = Field(default_factory=ToolConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)

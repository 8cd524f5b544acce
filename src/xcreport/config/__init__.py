"""Config module exports."""

from xcreport.config.loader import load_config
from xcreport.config.models import (
    LoggingConfig,
    LogOutputConfig,
    ReportConfig,
    ToolConfig,
    XcReportConfig,
)

__all__ = [
    "load_config",
    "LoggingConfig",
    "LogOutputConfig",
    "ReportConfig",
    "ToolConfig",
    "XcReportConfig",
]

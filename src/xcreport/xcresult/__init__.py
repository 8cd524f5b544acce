"""xcresult bundle normalization and markdown rendering.

Usage:
    from xcreport.xcresult import RenderOptions, SubprocessRunner, build_report

    sections = build_report(
        "Build/Test.xcresult",
        SubprocessRunner(),
        RenderOptions(show_passed_tests=False),
    )
    print("\\n".join(sections.as_list()))
"""

from xcreport.xcresult.coverage import CoverageAggregator, LegacyCoverageAggregator
from xcreport.xcresult.legacy import LegacyResultParser, extract_root_id
from xcreport.xcresult.models import (
    CoverageReport,
    DeviceInfo,
    RenderOptions,
    ReportSections,
    SchemaVersion,
    SuiteHeading,
    TargetCoverage,
    TestEntry,
    TestFailure,
    TestReport,
)
from xcreport.xcresult.modern import ModernResultParser, parse_modern_summary
from xcreport.xcresult.pipeline import build_report
from xcreport.xcresult.render import render_report
from xcreport.xcresult.runner import CommandResult, CommandRunner, SubprocessRunner
from xcreport.xcresult.tree import flatten_tests
from xcreport.xcresult.version import classify_version, detect_schema_version

__all__ = [
    # Models
    "CoverageReport",
    "DeviceInfo",
    "RenderOptions",
    "ReportSections",
    "SchemaVersion",
    "SuiteHeading",
    "TargetCoverage",
    "TestEntry",
    "TestFailure",
    "TestReport",
    # Detection
    "classify_version",
    "detect_schema_version",
    # Parsers
    "LegacyResultParser",
    "ModernResultParser",
    "extract_root_id",
    "flatten_tests",
    "parse_modern_summary",
    # Coverage
    "CoverageAggregator",
    "LegacyCoverageAggregator",
    # Rendering
    "render_report",
    # Running
    "CommandResult",
    "CommandRunner",
    "SubprocessRunner",
    "build_report",
]

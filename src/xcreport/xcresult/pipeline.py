"""End-to-end report build for one bundle.

Sequential by construction: the schema decision comes first, and every
legacy lookup depends on the root id resolved before it. Test results and
coverage are processed independently; a failure in one becomes an error
section while the other still renders.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import structlog

from xcreport.config.models import ToolConfig
from xcreport.core.errors import InternalError, XcReportError
from xcreport.core.logging import bundle_context
from xcreport.xcresult.coverage import CoverageAggregator, LegacyCoverageAggregator
from xcreport.xcresult.legacy import LegacyResultParser
from xcreport.xcresult.models import (
    CoverageReport,
    RenderOptions,
    ReportSections,
    SchemaVersion,
    TestReport,
)
from xcreport.xcresult.modern import ModernResultParser
from xcreport.xcresult.render import render_error, render_report
from xcreport.xcresult.runner import CommandRunner
from xcreport.xcresult.tool import LegacyResultTool, ModernResultTool, select_tool
from xcreport.xcresult.version import detect_schema_version

log = structlog.get_logger()

TEST_RESULTS_SECTION = "Test Results"
COVERAGE_SECTION = "Code Coverage"


def _as_report_error(e: Exception) -> XcReportError:
    if isinstance(e, XcReportError):
        return e
    return InternalError.unexpected(str(e), type=type(e).__name__)


def build_test_report(tool: LegacyResultTool | ModernResultTool) -> TestReport:
    if isinstance(tool, ModernResultTool):
        return ModernResultParser(tool).parse()
    return LegacyResultParser(tool).parse()


def build_coverage_report(tool: LegacyResultTool | ModernResultTool) -> CoverageReport:
    if isinstance(tool, ModernResultTool):
        return CoverageAggregator(tool).aggregate()
    return LegacyCoverageAggregator(tool).aggregate()


def build_report(
    bundle_path: str | Path,
    runner: CommandRunner,
    options: RenderOptions,
    *,
    tool_config: ToolConfig | None = None,
    schema: SchemaVersion | None = None,
) -> ReportSections:
    """Build every report section for one bundle.

    Args:
        bundle_path: Path to the ``.xcresult`` bundle.
        runner: Command runner used for every tool request.
        options: Render switches.
        tool_config: Executable names; defaults to plain ``xcrun`` etc.
        schema: Skip detection and use this schema version.

    Returns:
        Rendered sections. Processing failures appear as error sections.
    """
    tool_config = tool_config or ToolConfig()

    with bundle_context(str(bundle_path)):
        if schema is None:
            schema = detect_schema_version(runner, tool_config.xcodebuild)
        tool = select_tool(schema, runner, bundle_path, tool_config)
        log.info("report.start", schema=schema.value)

        test_error: XcReportError | None = None
        try:
            report = build_test_report(tool)
        except Exception as e:
            test_error = _as_report_error(e)
            log.error(
                "report.test_results_failed",
                error=str(test_error),
                exc_info=not isinstance(e, XcReportError),
            )
            report = TestReport(schema=schema)

        coverage: CoverageReport | None = None
        coverage_error: XcReportError | None = None
        if options.show_code_coverage:
            try:
                coverage = build_coverage_report(tool)
            except Exception as e:
                coverage_error = _as_report_error(e)
                log.error(
                    "report.coverage_failed",
                    error=str(coverage_error),
                    exc_info=not isinstance(e, XcReportError),
                )

        sections = render_report(report, coverage, options)
        if test_error is not None:
            sections = replace(
                sections,
                summary=render_error(TEST_RESULTS_SECTION, test_error.message),
                details="",
            )
        if coverage_error is not None:
            sections = replace(
                sections, coverage=render_error(COVERAGE_SECTION, coverage_error.message)
            )

        log.info("report.done")
        return sections

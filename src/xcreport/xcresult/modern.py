"""Parser for the modern (Xcode 16+) test-results summary."""

from __future__ import annotations

import structlog

from xcreport.xcresult.models import DeviceInfo, SchemaVersion, TestFailure, TestReport
from xcreport.xcresult.schemas import ModernSummary, load_document
from xcreport.xcresult.tool import ModernResultTool

log = structlog.get_logger()


def parse_modern_summary(content: str) -> TestReport:
    """Convert ``xcresulttool get test-results summary`` JSON to a TestReport.

    Counts are copied verbatim. Failures keep the order they appear in the
    document. The modern summary has no per-test listing, so ``entries``
    stays empty.

    Raises:
        ParseError: If the text is not JSON or lacks the summary fields.
    """
    summary = load_document(content, ModernSummary, "test-results summary")

    device = None
    config = summary.devices_and_configurations
    if config is not None and config.device is not None:
        device = DeviceInfo(
            device_name=config.device.device_name,
            model_name=config.device.model_name,
            os_version=config.device.os_version,
            architecture=config.device.architecture,
        )

    return TestReport(
        schema=SchemaVersion.MODERN,
        total_count=summary.total_test_count,
        passed_count=summary.passed_tests,
        failed_count=summary.failed_tests,
        skipped_count=summary.skipped_tests,
        expected_failure_count=summary.expected_failures,
        result=summary.result,
        failures=[
            TestFailure(
                test_name=f.test_name,
                target_name=f.target_name,
                failure_text=f.failure_text,
            )
            for f in summary.test_failures
        ],
        device=device,
    )


class ModernResultParser:
    """Fetches the summary with a ModernResultTool and parses it."""

    def __init__(self, tool: ModernResultTool) -> None:
        self.tool = tool

    def parse(self) -> TestReport:
        report = parse_modern_summary(self.tool.test_summary())
        log.debug("modern.parsed", total=report.total_count, failures=len(report.failures))
        return report

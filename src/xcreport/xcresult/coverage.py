"""Coverage report aggregation.

Coverage numbers are computed by ``xccov``; this module only collects its
text output into a CoverageReport.

Modern bundles are read directly: the whole-bundle report, the target list,
and (when ``--only-target`` is supported) one detailed report per target.
Legacy bundles have to be exported first: the coverage archive id is read
from the root action record, exported into a scratch directory, reported on,
and the directory removed on every exit path.
"""

from __future__ import annotations

import re
import tempfile
from dataclasses import dataclass

import structlog

from xcreport.core.errors import ToolInvocationError, UnsupportedFeatureError
from xcreport.xcresult.legacy import resolve_action_record
from xcreport.xcresult.models import CoverageReport, TargetCoverage
from xcreport.xcresult.tool import LegacyResultTool, ModernResultTool

log = structlog.get_logger()

NO_COVERAGE_DATA = "No code coverage data found in the xcresult bundle."
SCRATCH_PREFIX = "xcresult-coverage-"

# "<id> <name> <source files> <percent>%[ (<covered>/<total>)]"
_TARGET_LINE = re.compile(
    r"^(?P<id>[0-9a-fA-F]+)\s+(?P<name>.+?)\s+(?P<count>\d+)\s+"
    r"(?P<percent>\d+(?:\.\d+)?)%(?:\s+\(\d+/\d+\))?$"
)


@dataclass(frozen=True, slots=True)
class TargetLine:
    """One parsed line of ``xccov view --report --only-targets``."""

    target_id: str
    name: str
    file_count: int
    percent: float
    line: str


def parse_target_line(line: str) -> TargetLine | None:
    """Parse a target summary line; None when it does not look like one."""
    stripped = line.strip()
    match = _TARGET_LINE.match(stripped)
    if match is None:
        return None
    return TargetLine(
        target_id=match.group("id"),
        name=match.group("name"),
        file_count=int(match.group("count")),
        percent=float(match.group("percent")),
        line=stripped,
    )


def parse_target_list(text: str) -> list[TargetLine]:
    """Parse every recognisable target line, skipping headers and drift."""
    targets: list[TargetLine] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        parsed = parse_target_line(line)
        if parsed is None:
            log.debug("coverage.target_line_skipped", line=line)
            continue
        targets.append(parsed)
    return targets


class CoverageAggregator:
    """Collects whole-bundle and per-target coverage for a modern bundle."""

    def __init__(self, tool: ModernResultTool) -> None:
        self.tool = tool

    def aggregate(self) -> CoverageReport:
        """Build the coverage report.

        Raises:
            ToolInvocationError: If the whole-bundle report cannot be produced.
        """
        report = CoverageReport(combined_text=self.tool.bundle_coverage_report())

        try:
            listing = self.tool.target_list()
        except ToolInvocationError as e:
            log.warning("coverage.target_list_failed", error=e.message)
            return report

        targets = parse_target_list(listing)
        if not targets:
            return report

        supported = self.tool.supports_target_filter()
        log.debug("coverage.target_filter", supported=supported, targets=len(targets))

        for target in targets:
            detail = self._target_detail(target) if supported else None
            report.targets.append(
                TargetCoverage(
                    target_name=target.name, summary_line=target.line, detail_text=detail
                )
            )
        return report

    def _target_detail(self, target: TargetLine) -> str | None:
        try:
            return self.tool.target_report(target.name)
        except UnsupportedFeatureError:
            return None
        except ToolInvocationError as e:
            log.warning("coverage.target_failed", target=target.name, error=e.message)
            return f"Failed to get coverage for target {target.name}: {e.message}"


class LegacyCoverageAggregator:
    """Exports a legacy coverage archive and reports on it."""

    def __init__(self, tool: LegacyResultTool) -> None:
        self.tool = tool

    def aggregate(self) -> CoverageReport:
        """Build the coverage report.

        Raises:
            ParseError: Missing root id or malformed action record.
            ToolInvocationError: Lookup, export, or report command failed.
        """
        record = resolve_action_record(self.tool)
        archive_ref = record.archive_ref
        if archive_ref is None:
            log.info("coverage.no_archive_ref")
            return CoverageReport(notice=NO_COVERAGE_DATA)

        log.debug("coverage.archive_ref", archive_ref=archive_ref)
        with tempfile.TemporaryDirectory(prefix=SCRATCH_PREFIX) as scratch:
            log.debug("coverage.scratch_created", path=scratch)
            self.tool.export_directory(archive_ref, scratch)
            combined = self.tool.coverage_report(scratch)
        log.debug("coverage.scratch_removed", path=scratch)
        return CoverageReport(combined_text=combined)

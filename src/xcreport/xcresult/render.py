"""Markdown rendering of the unified report model.

Rendering is pure: it reads the model, never mutates it, and the same input
always yields the same text. Counts are printed as stored; a count the schema
did not report is left out rather than shown as zero.
"""

from __future__ import annotations

from collections.abc import Callable

from xcreport.xcresult.models import (
    CoverageReport,
    ListingItem,
    RenderOptions,
    ReportSections,
    SuiteHeading,
    TestEntry,
    TestReport,
)

SUMMARY_HEADER = "# Test Results Summary"
DETAILS_HEADER = "# Test Details"
COVERAGE_HEADER = "# Code Coverage Summary"
FAILED_TESTS_HEADER = "## Failed Tests"
ENVIRONMENT_HEADER = "## Test Environment"
TARGETS_HEADER = "## Target Coverage Details"

PASSED_GLYPH = "✅"
FAILED_GLYPH = "❌"
INDENT = "  "

# (label, accessor, formatter); order is the order lines appear in
_SUMMARY_FIELDS: list[tuple[str, Callable[[TestReport], object], Callable[[object], str]]] = [
    ("Total tests", lambda r: r.total_count, str),
    ("Passed tests", lambda r: r.passed_count, str),
    ("Failed tests", lambda r: r.failed_count, str),
    ("Unexpected failures", lambda r: r.unexpected_failure_count, str),
    ("Skipped tests", lambda r: r.skipped_count, str),
    ("Expected failures", lambda r: r.expected_failure_count, str),
    ("Test duration", lambda r: r.duration_seconds, lambda v: f"{v:.2f} seconds"),
    ("Result", lambda r: r.result, str),
]


def _fenced(text: str) -> str:
    body = text if text.endswith("\n") else text + "\n"
    return f"```\n{body}```\n"


def render_summary(report: TestReport) -> str:
    lines = [SUMMARY_HEADER, ""]
    for label, accessor, formatter in _SUMMARY_FIELDS:
        value = accessor(report)
        if value is not None:
            lines.append(f"- {label}: {formatter(value)}")
    if report.notice:
        lines.append(report.notice)
    return "\n".join(lines) + "\n"


def _render_entry(entry: TestEntry) -> list[str]:
    indent = INDENT * entry.indent_depth
    glyph = PASSED_GLYPH if entry.passed else FAILED_GLYPH
    duration = f"{entry.duration_seconds:.2f}" if entry.duration_seconds is not None else "?"
    lines = [f"{indent}- {glyph} **{entry.name}** ({duration}s)"]
    if not entry.passed and entry.has_failure_ref:
        lines.append(f"{indent}{INDENT}- Failure: Test failed")
    return lines


def _render_listing(entries: list[ListingItem], show_passed_tests: bool) -> str:
    out: list[str] = []
    for item in entries:
        if isinstance(item, SuiteHeading):
            out.append(f"{INDENT * item.indent_depth}## {item.name}\n\n")
        elif item.passed and not show_passed_tests:
            continue
        else:
            out.append("\n".join(_render_entry(item)) + "\n")
    return "".join(out)


def render_details(report: TestReport, show_passed_tests: bool = True) -> str:
    """Failed tests, then the environment, then the flattened listing.

    Failing entries are always listed; passing ones only with
    ``show_passed_tests``.
    """
    out = [f"{DETAILS_HEADER}\n\n"]

    if report.failures:
        out.append(f"{FAILED_TESTS_HEADER}\n\n")
        for failure in report.failures:
            out.append(f"### {failure.test_name} ({failure.target_name})\n")
            out.append(_fenced(failure.failure_text) + "\n")

    if report.device is not None:
        device = report.device
        out.append(f"{ENVIRONMENT_HEADER}\n\n")
        out.append(f"- Device: {device.device_name}\n")
        out.append(f"- Model: {device.model_name}\n")
        out.append(f"- OS Version: {device.os_version}\n")
        out.append(f"- Architecture: {device.architecture}\n")

    out.append(_render_listing(report.entries, show_passed_tests))
    return "".join(out)


def render_coverage(coverage: CoverageReport) -> str:
    """Whole-bundle block followed by one subsection per target."""
    out = [f"{COVERAGE_HEADER}\n\n"]
    if coverage.notice:
        out.append(f"{coverage.notice}\n")
        return "".join(out)

    out.append(_fenced(coverage.combined_text) + "\n")
    if coverage.targets:
        out.append(f"{TARGETS_HEADER}\n\n")
        for target in coverage.targets:
            text = target.detail_text if target.detail_text is not None else target.summary_line
            out.append(f"### {target.target_name}\n\n")
            out.append(_fenced(text) + "\n")
    return "".join(out)


def render_error(section: str, message: str) -> str:
    """Section-scoped error block, e.g. ``# Error Processing Test Results``."""
    return f"# Error Processing {section}\n\nFailed to process {section.lower()}: {message}\n"


def render_report(
    report: TestReport,
    coverage: CoverageReport | None,
    options: RenderOptions,
) -> ReportSections:
    """Render all sections. Coverage is None when coverage is switched off."""
    coverage_section = None
    if options.show_code_coverage and coverage is not None:
        coverage_section = render_coverage(coverage)
    return ReportSections(
        summary=render_summary(report),
        details=render_details(report, options.show_passed_tests),
        coverage=coverage_section,
    )

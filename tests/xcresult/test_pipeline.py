"""End-to-end report builds against a scripted toolchain."""

import json
from typing import Any

import pytest
import structlog
from structlog.testing import LogCapture

from xcreport.xcresult.coverage import CoverageAggregator
from xcreport.xcresult.models import RenderOptions, SchemaVersion
from xcreport.xcresult.modern import ModernResultParser
from xcreport.xcresult.pipeline import build_report
from xcreport.xcresult.render import render_report
from xcreport.xcresult.tool import ModernResultTool

XCODE_16 = "Xcode 16.0\nBuild version 16A242d\n"
XCODE_15 = "Xcode 15.4\nBuild version 15F31d\n"


def _get(bundle: str, object_id: str) -> list[str]:
    return ["xcrun", "xcresulttool", "get", "--format", "json", "--path", bundle, "--id", object_id]


@pytest.fixture
def modern_runner(
    fake_runner: Any,
    bundle: str,
    modern_summary: dict[str, Any],
    coverage_text: str,
    target_list_text: str,
) -> Any:
    fake_runner.add(["xcodebuild", "-version"], XCODE_16)
    fake_runner.add(
        ["xcrun", "xcresulttool", "get", "test-results", "summary", "--path", bundle],
        json.dumps(modern_summary),
    )
    fake_runner.add(["xcrun", "xccov", "view", "--report", bundle], coverage_text)
    fake_runner.add(
        ["xcrun", "xccov", "view", "--report", "--only-targets", bundle], target_list_text
    )
    fake_runner.add(["xcrun", "xccov", "view", "--help"], "  --only-target <name>\n")
    for target in ("MyApp.app", "MyKit.framework"):
        fake_runner.add(
            ["xcrun", "xccov", "view", "--report", "--only-target", target, bundle],
            f"{target} files\n",
        )
    return fake_runner


@pytest.fixture
def legacy_runner(
    fake_runner: Any,
    bundle: str,
    info_plist: str,
    legacy_action_record: dict[str, Any],
    legacy_tests_document: dict[str, Any],
) -> Any:
    fake_runner.add(["xcodebuild", "-version"], XCODE_15)
    fake_runner.add(["plutil", "-p", f"{bundle}/Info.plist"], info_plist)
    fake_runner.add(_get(bundle, "0~rootABC123"), json.dumps(legacy_action_record))
    fake_runner.add(_get(bundle, "0~testsRef"), json.dumps(legacy_tests_document))
    return fake_runner


class TestModernPipeline:
    """Xcode 16+ bundles."""

    def test_all_sections(self, modern_runner: Any, bundle: str) -> None:
        sections = build_report(bundle, modern_runner, RenderOptions())

        assert "- Total tests: 12\n" in sections.summary
        assert "- Result: Failed\n" in sections.summary
        assert "### testCheckout() (ShopTests)" in sections.details
        assert "- Device: iPhone 15" in sections.details
        assert sections.coverage is not None
        assert "### MyApp.app\n\n```\nMyApp.app files\n```" in sections.coverage
        assert "### MyKit.framework\n\n```\nMyKit.framework files\n```" in sections.coverage

    def test_matches_rendering_the_parsed_models(self, modern_runner: Any, bundle: str) -> None:
        options = RenderOptions(show_passed_tests=False)
        tool = ModernResultTool(modern_runner, bundle)
        expected = render_report(
            ModernResultParser(tool).parse(), CoverageAggregator(tool).aggregate(), options
        )

        assert build_report(bundle, modern_runner, options) == expected

    def test_coverage_disabled_issues_no_coverage_commands(
        self, modern_runner: Any, bundle: str
    ) -> None:
        sections = build_report(bundle, modern_runner, RenderOptions(show_code_coverage=False))

        assert sections.coverage is None
        assert not any("xccov" in call for call in modern_runner.calls)

    def test_forced_schema_skips_detection(self, modern_runner: Any, bundle: str) -> None:
        build_report(
            bundle,
            modern_runner,
            RenderOptions(show_code_coverage=False),
            schema=SchemaVersion.MODERN,
        )

        assert ("xcodebuild", "-version") not in modern_runner.calls

    def test_test_failure_does_not_block_coverage(
        self, modern_runner: Any, bundle: str
    ) -> None:
        modern_runner.add(
            ["xcrun", "xcresulttool", "get", "test-results", "summary", "--path", bundle],
            "not json",
        )

        sections = build_report(bundle, modern_runner, RenderOptions())

        assert sections.summary.startswith("# Error Processing Test Results\n\n")
        assert "Failed to process test results: Invalid JSON" in sections.summary
        assert sections.details == ""
        assert sections.coverage is not None
        assert sections.coverage.startswith("# Code Coverage Summary")

    def test_coverage_failure_does_not_block_tests(
        self, modern_runner: Any, bundle: str
    ) -> None:
        del modern_runner.responses[("xcrun", "xccov", "view", "--report", bundle)]

        sections = build_report(bundle, modern_runner, RenderOptions())

        assert sections.summary.startswith("# Test Results Summary")
        assert sections.coverage is not None
        assert sections.coverage.startswith("# Error Processing Code Coverage\n\n")
        assert "Failed to process code coverage:" in sections.coverage

    def test_unexpected_exception_becomes_internal_error(
        self, modern_runner: Any, bundle: str
    ) -> None:
        modern_runner.add(
            ["xcrun", "xcresulttool", "get", "test-results", "summary", "--path", bundle],
            RuntimeError("kaboom"),
        )

        sections = build_report(bundle, modern_runner, RenderOptions(show_code_coverage=False))

        assert sections.summary == (
            "# Error Processing Test Results\n\n"
            "Failed to process test results: Internal error: kaboom\n"
        )

    def test_events_carry_bundle_path(self, modern_runner: Any, bundle: str) -> None:
        capture = LogCapture()
        structlog.configure(processors=[structlog.contextvars.merge_contextvars, capture])

        build_report(bundle, modern_runner, RenderOptions(show_code_coverage=False))

        start = next(e for e in capture.entries if e["event"] == "report.start")
        assert start["bundle"] == bundle
        assert start["schema"] == "modern"


class TestLegacyPipeline:
    """Pre Xcode 16 bundles."""

    def test_test_sections(self, legacy_runner: Any, bundle: str) -> None:
        sections = build_report(bundle, legacy_runner, RenderOptions(show_code_coverage=False))

        assert sections.summary == (
            "# Test Results Summary\n"
            "\n"
            "- Total tests: 3\n"
            "- Failed tests: 1\n"
            "- Unexpected failures: 0\n"
            "- Test duration: 1.50 seconds\n"
        )
        assert "## MyAppTests" in sections.details
        assert "- ❌ **testInvalidLogin()** (0.50s)" in sections.details

    def test_hidden_passes(self, legacy_runner: Any, bundle: str) -> None:
        options = RenderOptions(show_passed_tests=False, show_code_coverage=False)

        sections = build_report(bundle, legacy_runner, options)

        assert "testValidLogin()" not in sections.details
        assert "testInvalidLogin()" in sections.details

    def test_failed_export_is_a_coverage_error(self, legacy_runner: Any, bundle: str) -> None:
        sections = build_report(bundle, legacy_runner, RenderOptions())

        assert sections.summary.startswith("# Test Results Summary")
        assert sections.coverage is not None
        assert sections.coverage.startswith("# Error Processing Code Coverage")

    def test_failed_version_check_means_legacy(self, legacy_runner: Any, bundle: str) -> None:
        del legacy_runner.responses[("xcodebuild", "-version")]

        sections = build_report(bundle, legacy_runner, RenderOptions(show_code_coverage=False))

        assert "- Unexpected failures: 0" in sections.summary

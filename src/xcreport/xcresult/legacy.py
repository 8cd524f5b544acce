"""Parser for the legacy (pre Xcode 16) result schema.

The legacy bundle is an object graph addressed by content-hash ids:

    Info.plist  --rootId-->  action record  --actions.testsRef-->  tests document

The tests document carries ``summaries[0].totals`` and the nested test tree.
It reports total, failed, and unexpected-failure counts plus a duration;
passed, skipped, and expected-failure counts are left unreported.
"""

from __future__ import annotations

import re

import structlog

from xcreport.core.errors import ParseError
from xcreport.xcresult.models import SchemaVersion, TestReport
from xcreport.xcresult.schemas import LegacyActionRecord, LegacyTestsDocument, load_document
from xcreport.xcresult.tool import LegacyResultTool
from xcreport.xcresult.tree import flatten_tests

log = structlog.get_logger()

NO_TEST_DATA = "No test data found in the xcresult bundle."

_ROOT_ID = re.compile(r'"rootId"\s*=>\s*\{\s*"hash"\s*=>\s*"([^"]+)"')


def extract_root_id(plist_text: str) -> str:
    """Pull the root object id out of ``plutil -p`` output.

    Raises:
        ParseError: If no root id is present.
    """
    match = _ROOT_ID.search(plist_text)
    if match is None:
        raise ParseError.missing_root_id()
    return match.group(1)


def parse_action_record(content: str) -> LegacyActionRecord:
    return load_document(content, LegacyActionRecord, "action record")


def parse_tests_document(content: str) -> TestReport:
    """Build a TestReport from the document addressed by ``testsRef``."""
    document = load_document(content, LegacyTestsDocument, "tests document")
    report = TestReport(schema=SchemaVersion.LEGACY)

    if document.summaries:
        summary = document.summaries[0]
        report.total_count = summary.totals.tests_count.value
        report.failed_count = summary.totals.failed_count.value
        report.unexpected_failure_count = summary.totals.unexpected_failure_count.value
        if summary.duration is not None:
            report.duration_seconds = summary.duration.value

    report.entries = flatten_tests(document.tests)
    return report


def resolve_action_record(tool: LegacyResultTool) -> LegacyActionRecord:
    """Root id lookup followed by the root object fetch."""
    root_id = extract_root_id(tool.info_plist())
    log.debug("legacy.root_id", root_id=root_id)
    return parse_action_record(tool.get_object(root_id))


class LegacyResultParser:
    """Walks the id graph with a LegacyResultTool and builds the report."""

    def __init__(self, tool: LegacyResultTool) -> None:
        self.tool = tool

    def parse(self) -> TestReport:
        """Resolve ids in order and parse the tests document.

        Raises:
            ParseError: Missing root id or malformed documents.
            ToolInvocationError: A lookup command failed.
        """
        record = resolve_action_record(self.tool)

        tests_ref = record.tests_ref
        if tests_ref is None:
            log.info("legacy.no_tests_ref")
            return TestReport(schema=SchemaVersion.LEGACY, notice=NO_TEST_DATA)

        log.debug("legacy.tests_ref", tests_ref=tests_ref)
        report = parse_tests_document(self.tool.get_object(tests_ref))
        log.debug("legacy.parsed", entries=len(report.entries))
        return report

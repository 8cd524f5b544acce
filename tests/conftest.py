"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages, and
provides a scripted command runner so no test needs a real Xcode toolchain.
"""

import logging
import sys
from collections.abc import Generator, Sequence
from pathlib import Path
from typing import Any

import pytest
import structlog

# Insert local src directory at the beginning of sys.path
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from xcreport.core.errors import ToolInvocationError  # noqa: E402
from xcreport.xcresult.runner import CommandResult  # noqa: E402

BUNDLE = "/builds/Test.xcresult"


class FakeRunner:
    """Scripted CommandRunner.

    Maps exact argv tuples to stdout text or to an exception to raise.
    Unknown commands fail like a missing subcommand would.
    """

    def __init__(self, responses: dict[tuple[str, ...], str | Exception] | None = None) -> None:
        self.responses: dict[tuple[str, ...], str | Exception] = dict(responses or {})
        self.calls: list[tuple[str, ...]] = []

    def add(self, args: Sequence[str], response: str | Exception) -> None:
        self.responses[tuple(args)] = response

    def run(self, args: Sequence[str]) -> CommandResult:
        key = tuple(args)
        self.calls.append(key)
        if key not in self.responses:
            raise ToolInvocationError.command_failed(list(args), 64, "unexpected command")
        response = self.responses[key]
        if isinstance(response, Exception):
            raise response
        return CommandResult(stdout=response)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture(autouse=True)
def _reset_logging() -> Generator[None, None, None]:
    """Drop handlers a test installed so later tests never write to closed streams."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


# =============================================================================
# Sample tool output
# =============================================================================

INFO_PLIST = """\
{
  "dateCreated" => 2024-05-01 10:00:00 +0000
  "externalLocations" => [
  ]
  "rootId" => {
    "hash" => "0~rootABC123"
  }
  "storage" => {
    "backend" => "fileBacked2"
    "compression" => "standard"
  }
  "version" => {
    "major" => 3
    "minor" => 53
  }
}
"""


def _value(v: Any) -> dict[str, Any]:
    return {"_type": {"_name": "String"}, "_value": v}


def leaf(
    name: str,
    status: str | None = "Success",
    duration: float | None = 0.01,
    summary_ref: bool = False,
) -> dict[str, Any]:
    """Legacy test-case node."""
    node: dict[str, Any] = {"_type": {"_name": "ActionTestMetadata"}, "name": _value(name)}
    if status is not None:
        node["testStatus"] = _value(status)
    if duration is not None:
        node["duration"] = _value(str(duration))
    if summary_ref:
        node["summaryRef"] = {"id": _value("0~summary-" + name)}
    return node


def suite(name: str, *children: dict[str, Any]) -> dict[str, Any]:
    """Legacy suite node."""
    return {
        "_type": {"_name": "ActionTestSummaryGroup"},
        "name": _value(name),
        "subtests": list(children),
    }


@pytest.fixture
def legacy_action_record() -> dict[str, Any]:
    return {
        "_type": {"_name": "ActionsInvocationRecord"},
        "actions": {
            "testsRef": _value("0~testsRef"),
            "codeCoverageInfo": {"archiveRef": _value("0~archiveRef")},
        },
    }


@pytest.fixture
def legacy_tests_document() -> dict[str, Any]:
    return {
        "_type": {"_name": "ActionTestPlanRunSummaries"},
        "summaries": [
            {
                "totals": {
                    "testsCount": _value("3"),
                    "failedCount": _value("1"),
                    "unexpectedFailureCount": _value("0"),
                },
                "duration": _value("1.5"),
            }
        ],
        "tests": [
            suite(
                "MyAppTests",
                suite(
                    "LoginTests",
                    leaf("testValidLogin()", "Success", 0.0123),
                    leaf("testInvalidLogin()", "Failure", 0.5, summary_ref=True),
                ),
                leaf("testLaunch()", "Success", None),
            )
        ],
    }


@pytest.fixture
def modern_summary() -> dict[str, Any]:
    return {
        "title": "Test - MyApp",
        "environmentDescription": "MyApp · Built with macOS 14.5",
        "topInsights": [],
        "result": "Failed",
        "totalTestCount": 12,
        "passedTests": 9,
        "failedTests": 2,
        "skippedTests": 1,
        "expectedFailures": 0,
        "statistics": [],
        "devicesAndConfigurations": {
            "device": {
                "deviceId": "00008112-000A",
                "deviceName": "iPhone 15",
                "modelName": "iPhone 15",
                "platform": "iOS Simulator",
                "osVersion": "17.5",
                "architecture": "arm64",
            }
        },
        "testFailures": {
            "b": {
                "testName": "testCheckout()",
                "targetName": "ShopTests",
                "failureText": "XCTAssertEqual failed: (\"1\") is not equal to (\"2\")",
                "testIdentifier": 7,
            },
            "a": {
                "testName": "testLogin()",
                "targetName": "AuthTests",
                "failureText": "Asynchronous wait failed:\n  timeout",
                "testIdentifier": 3,
            },
        },
    }


COVERAGE_REPORT = """\
MyApp.app: 45.00% (90/200)
    AppDelegate.swift: 80.00% (8/10)
"""

TARGET_LIST = """\
ID Name              # Source Files Coverage
-- ----------------- -------------- ----------------
0  MyApp.app         12             45.00% (90/200)
1  MyKit.framework   4              72.50% (29/40)
"""


@pytest.fixture
def bundle() -> str:
    return BUNDLE


@pytest.fixture
def info_plist() -> str:
    return INFO_PLIST


@pytest.fixture
def coverage_text() -> str:
    return COVERAGE_REPORT


@pytest.fixture
def target_list_text() -> str:
    return TARGET_LIST


@pytest.fixture
def make_leaf() -> Any:
    return leaf


@pytest.fixture
def make_suite() -> Any:
    return suite

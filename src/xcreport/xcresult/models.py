"""Unified test-report model.

Both result schemas (legacy, pre Xcode 16, and modern, Xcode 16+) convert to
this representation. Counts are copied from the tool output as reported;
``None`` means the active schema does not report that field. Nothing here
recomputes or cross-checks counts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# =============================================================================
# Schema Version
# =============================================================================


class SchemaVersion(str, Enum):
    """Which xcresulttool output shape is in play."""

    LEGACY = "legacy"
    MODERN = "modern"


# =============================================================================
# Test Results
# =============================================================================


@dataclass(frozen=True, slots=True)
class TestFailure:
    """A failure reported by the modern summary."""

    __test__ = False

    test_name: str
    target_name: str
    failure_text: str


@dataclass(frozen=True, slots=True)
class DeviceInfo:
    """Device/configuration the tests ran on."""

    device_name: str
    model_name: str
    os_version: str
    architecture: str


@dataclass(frozen=True, slots=True)
class SuiteHeading:
    """A suite line in the flattened listing."""

    name: str
    indent_depth: int


@dataclass(frozen=True, slots=True)
class TestEntry:
    """A single leaf test outcome in the flattened listing."""

    __test__ = False

    name: str
    status_text: str  # raw status, "Success" or anything else
    duration_seconds: float | None
    indent_depth: int
    has_failure_ref: bool = False

    @property
    def passed(self) -> bool:
        return self.status_text == "Success"


ListingItem = SuiteHeading | TestEntry


@dataclass(slots=True)
class TestReport:
    """Aggregate root for one bundle's test results."""

    __test__ = False

    schema: SchemaVersion
    total_count: int | None = None
    passed_count: int | None = None
    failed_count: int | None = None
    skipped_count: int | None = None
    expected_failure_count: int | None = None
    unexpected_failure_count: int | None = None
    duration_seconds: float | None = None
    result: str | None = None
    failures: list[TestFailure] = field(default_factory=list)
    device: DeviceInfo | None = None
    entries: list[ListingItem] = field(default_factory=list)
    notice: str | None = None  # shown in the summary when there is no data

    @property
    def test_entries(self) -> list[TestEntry]:
        """Leaf outcomes only, in listing order."""
        return [item for item in self.entries if isinstance(item, TestEntry)]


# =============================================================================
# Coverage
# =============================================================================


@dataclass(frozen=True, slots=True)
class TargetCoverage:
    """Coverage for one build target.

    ``detail_text`` is None when the toolchain cannot filter by target; the
    renderer then falls back to ``summary_line``.
    """

    target_name: str
    summary_line: str
    detail_text: str | None = None


@dataclass(slots=True)
class CoverageReport:
    """Whole-bundle coverage text plus per-target breakdown."""

    combined_text: str = ""
    targets: list[TargetCoverage] = field(default_factory=list)
    notice: str | None = None  # replaces the combined block when set


# =============================================================================
# Rendering
# =============================================================================


@dataclass(frozen=True, slots=True)
class RenderOptions:
    """Read-only render switches."""

    show_passed_tests: bool = True
    show_code_coverage: bool = True


@dataclass(frozen=True, slots=True)
class ReportSections:
    """Rendered markdown, one string per section."""

    summary: str
    details: str
    coverage: str | None = None

    def as_list(self) -> list[str]:
        sections = [self.summary, self.details]
        if self.coverage is not None:
            sections.append(self.coverage)
        return sections

"""Pydantic shapes for xcresulttool JSON output.

Every document is validated against one of these models before any field is
read, so a missing or mistyped field surfaces as a single ParseError instead
of an AttributeError deep inside a parser.

Legacy documents wrap scalars as ``{"_type": {...}, "_value": ...}``; the
``*Value`` models unwrap them.
"""

from __future__ import annotations

import json
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from xcreport.core.errors import ParseError

_Model = TypeVar("_Model", bound=BaseModel)


class _Shape(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def load_document(content: str, model: type[_Model], source: str) -> _Model:
    """Decode JSON text and validate it against ``model``.

    Raises:
        ParseError: If the text is not JSON or does not match the shape.
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ParseError.invalid_json(source, str(e)) from e
    try:
        return model.model_validate(data)
    except ValidationError as e:
        err = e.errors()[0]
        location = ".".join(str(loc) for loc in err["loc"]) or "<root>"
        raise ParseError.schema_mismatch(source, f"{location}: {err['msg']}") from e


# =============================================================================
# Legacy schema (xcresulttool get --format json --id ...)
# =============================================================================


class StringValue(_Shape):
    value: str = Field(alias="_value")


class IntValue(_Shape):
    value: int = Field(alias="_value")


class FloatValue(_Shape):
    value: float = Field(alias="_value")


class LegacyCoverageInfo(_Shape):
    archive_ref: StringValue | None = Field(default=None, alias="archiveRef")


class LegacyReference(_Shape):
    id: StringValue | None = None


class LegacyArchiveInfo(_Shape):
    archive_ref: LegacyReference | None = Field(default=None, alias="archiveRef")


class LegacyActionResult(_Shape):
    tests_ref: LegacyReference | None = Field(default=None, alias="testsRef")
    coverage: LegacyArchiveInfo | None = None


class LegacyActionEntry(_Shape):
    action_result: LegacyActionResult | None = Field(default=None, alias="actionResult")


class LegacyActions(_Shape):
    tests_ref: StringValue | None = Field(default=None, alias="testsRef")
    code_coverage_info: LegacyCoverageInfo | None = Field(default=None, alias="codeCoverageInfo")
    # Xcode's own encoding wraps each action as _values[i].actionResult
    values: list[LegacyActionEntry] = Field(default_factory=list, alias="_values")

    def action_results(self) -> list[LegacyActionResult]:
        return [v.action_result for v in self.values if v.action_result is not None]


def _ref_id(ref: LegacyReference | None) -> str | None:
    if ref is None or ref.id is None:
        return None
    return ref.id.value


def _unwrap_values(v: Any) -> Any:
    # Xcode wraps arrays as {"_type": {...}, "_values": [...]}
    if isinstance(v, dict) and "_values" in v:
        return v["_values"]
    return v


class LegacyActionRecord(_Shape):
    """Top-level object addressed by the bundle's root id.

    Refs are read from ``actions.testsRef`` / ``actions.codeCoverageInfo``
    first, then from the first action result in ``actions._values`` that
    carries one.
    """

    actions: LegacyActions | None = None

    @property
    def tests_ref(self) -> str | None:
        if self.actions is None:
            return None
        if self.actions.tests_ref is not None:
            return self.actions.tests_ref.value
        for result in self.actions.action_results():
            ref = _ref_id(result.tests_ref)
            if ref is not None:
                return ref
        return None

    @property
    def archive_ref(self) -> str | None:
        if self.actions is None:
            return None
        info = self.actions.code_coverage_info
        if info is not None and info.archive_ref is not None:
            return info.archive_ref.value
        for result in self.actions.action_results():
            if result.coverage is not None:
                ref = _ref_id(result.coverage.archive_ref)
                if ref is not None:
                    return ref
        return None


class LegacyTotals(_Shape):
    tests_count: IntValue = Field(alias="testsCount")
    failed_count: IntValue = Field(alias="failedCount")
    unexpected_failure_count: IntValue = Field(alias="unexpectedFailureCount")


class LegacySummary(_Shape):
    totals: LegacyTotals
    duration: FloatValue | None = None


class LegacyTestNode(_Shape):
    """A suite (has ``subtests``) or a test case (has leaf fields)."""

    name: StringValue | None = None
    subtests: list[LegacyTestNode] | None = None
    test_status: StringValue | None = Field(default=None, alias="testStatus")
    duration: FloatValue | None = None
    summary_ref: Any = Field(default=None, alias="summaryRef")

    @field_validator("subtests", mode="before")
    @classmethod
    def subtests_from_array(cls, v: Any) -> Any:
        return _unwrap_values(v)

    @property
    def is_suite(self) -> bool:
        return self.subtests is not None


class LegacyTestsDocument(_Shape):
    """Object addressed by ``actions.testsRef``."""

    summaries: list[LegacySummary] = Field(default_factory=list)
    tests: list[LegacyTestNode] = Field(default_factory=list)

    @field_validator("summaries", "tests", mode="before")
    @classmethod
    def lists_from_array(cls, v: Any) -> Any:
        return _unwrap_values(v)


LegacyTestNode.model_rebuild()


# =============================================================================
# Modern schema (xcresulttool get test-results summary)
# =============================================================================


class ModernFailure(_Shape):
    test_name: str = Field(alias="testName")
    target_name: str = Field(default="", alias="targetName")
    failure_text: str = Field(default="", alias="failureText")


class ModernDevice(_Shape):
    device_name: str = Field(default="", alias="deviceName")
    model_name: str = Field(default="", alias="modelName")
    os_version: str = Field(default="", alias="osVersion")
    architecture: str = ""


class ModernConfiguration(_Shape):
    device: ModernDevice | None = None


class ModernSummary(_Shape):
    total_test_count: int = Field(alias="totalTestCount")
    passed_tests: int = Field(alias="passedTests")
    failed_tests: int = Field(alias="failedTests")
    skipped_tests: int = Field(alias="skippedTests")
    expected_failures: int = Field(alias="expectedFailures")
    result: str
    test_failures: list[ModernFailure] = Field(default_factory=list, alias="testFailures")
    devices_and_configurations: ModernConfiguration | None = Field(
        default=None, alias="devicesAndConfigurations"
    )

    @field_validator("test_failures", mode="before")
    @classmethod
    def failures_from_map(cls, v: Any) -> Any:
        # Keys are discarded; values keep the document's insertion order
        if isinstance(v, dict):
            return list(v.values())
        if v is None:
            return []
        return v

    @field_validator("devices_and_configurations", mode="before")
    @classmethod
    def first_configuration(cls, v: Any) -> Any:
        if isinstance(v, list):
            return v[0] if v else None
        return v

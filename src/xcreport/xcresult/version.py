"""Toolchain version detection.

The modern ``xcresulttool get test-results`` command only exists from Xcode 16
on, so anything that is not recognisably 16+ is treated as legacy.
"""

import re

import structlog

from xcreport.config.constants import MODERN_SCHEMA_MIN_MAJOR
from xcreport.core.errors import ToolInvocationError
from xcreport.xcresult.models import SchemaVersion
from xcreport.xcresult.runner import CommandRunner

log = structlog.get_logger()

_XCODE_VERSION = re.compile(r"Xcode (\d+)\.(\d+)")


def classify_version(version_output: str | None) -> SchemaVersion:
    """Map ``xcodebuild -version`` output to a schema version. Never raises."""
    if not version_output:
        return SchemaVersion.LEGACY
    match = _XCODE_VERSION.search(version_output)
    if match is None:
        return SchemaVersion.LEGACY
    if int(match.group(1)) >= MODERN_SCHEMA_MIN_MAJOR:
        return SchemaVersion.MODERN
    return SchemaVersion.LEGACY


def detect_schema_version(runner: CommandRunner, xcodebuild: str = "xcodebuild") -> SchemaVersion:
    """Ask the toolchain for its version and classify it.

    A failed invocation falls back to legacy.
    """
    try:
        output = runner.run([xcodebuild, "-version"]).stdout
    except ToolInvocationError as e:
        log.warning("version.detect_failed", error=e.message, assumed=SchemaVersion.LEGACY.value)
        return SchemaVersion.LEGACY

    schema = classify_version(output)
    log.debug("version.detected", version=output.strip(), schema=schema.value)
    return schema

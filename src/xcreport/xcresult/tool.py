"""Toolchain strategies.

Each strategy turns the logical requests the parsers need ("JSON for id X",
"coverage report for target T") into command lines for one schema version.
The strategy is chosen once per run from the detected SchemaVersion and
handed to the parsers; nothing rewrites arguments afterwards.
"""

from __future__ import annotations

import re
from pathlib import Path

from xcreport.config.models import ToolConfig
from xcreport.core.errors import ToolInvocationError, UnsupportedFeatureError
from xcreport.xcresult.models import SchemaVersion
from xcreport.xcresult.runner import CommandRunner

ONLY_TARGET_FLAG = "--only-target"
_ONLY_TARGET_RE = re.compile(re.escape(ONLY_TARGET_FLAG) + r"\b")


class ResultTool:
    """Requests shared by both schema versions."""

    schema: SchemaVersion

    def __init__(
        self, runner: CommandRunner, bundle_path: str | Path, config: ToolConfig | None = None
    ) -> None:
        self.runner = runner
        self.bundle_path = str(bundle_path)
        self.config = config or ToolConfig()

    def _xcrun(self, *args: str) -> str:
        return self.runner.run([self.config.xcrun, *args]).stdout

    def coverage_report(self, path: str | Path) -> str:
        """Whole-report coverage text for a bundle or exported archive."""
        return self._xcrun("xccov", "view", "--report", str(path))


class LegacyResultTool(ResultTool):
    """Pre Xcode 16: objects addressed by id, coverage via archive export."""

    schema = SchemaVersion.LEGACY

    def info_plist(self) -> str:
        """Pretty-printed Info.plist holding the root id."""
        plist = Path(self.bundle_path) / "Info.plist"
        return self.runner.run([self.config.plutil, "-p", str(plist)]).stdout

    def get_object(self, object_id: str) -> str:
        """JSON document for one object id."""
        return self._xcrun(
            "xcresulttool", "get", "--format", "json", "--path", self.bundle_path, "--id", object_id
        )

    def export_directory(self, object_id: str, output_path: str | Path) -> None:
        self._xcrun(
            "xcresulttool",
            "export",
            "--type",
            "directory",
            "--id",
            object_id,
            "--path",
            self.bundle_path,
            "--output-path",
            str(output_path),
        )


class ModernResultTool(ResultTool):
    """Xcode 16+: direct summary command and per-target coverage views."""

    schema = SchemaVersion.MODERN

    def test_summary(self) -> str:
        return self._xcrun(
            "xcresulttool", "get", "test-results", "summary", "--path", self.bundle_path
        )

    def bundle_coverage_report(self) -> str:
        return self.coverage_report(self.bundle_path)

    def target_list(self) -> str:
        """One summary line per build target."""
        return self._xcrun("xccov", "view", "--report", "--only-targets", self.bundle_path)

    def supports_target_filter(self) -> bool:
        """Check whether ``xccov view`` accepts ``--only-target``."""
        try:
            help_text = self._xcrun("xccov", "view", "--help")
        except ToolInvocationError:
            return False
        return _ONLY_TARGET_RE.search(help_text) is not None

    def target_report(self, target_name: str) -> str:
        """Coverage report restricted to one target.

        Raises:
            UnsupportedFeatureError: If the toolchain rejects the filter flag.
            ToolInvocationError: For any other failure.
        """
        try:
            return self._xcrun(
                "xccov", "view", "--report", ONLY_TARGET_FLAG, target_name, self.bundle_path
            )
        except ToolInvocationError as e:
            if ONLY_TARGET_FLAG in str(e.details.get("stderr", "")):
                raise UnsupportedFeatureError.flag(ONLY_TARGET_FLAG) from e
            raise


def select_tool(
    schema: SchemaVersion,
    runner: CommandRunner,
    bundle_path: str | Path,
    config: ToolConfig | None = None,
) -> LegacyResultTool | ModernResultTool:
    """Pick the strategy for the detected schema version."""
    if schema is SchemaVersion.MODERN:
        return ModernResultTool(runner, bundle_path, config)
    return LegacyResultTool(runner, bundle_path, config)

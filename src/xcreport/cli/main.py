"""xcreport CLI - render an .xcresult bundle as markdown."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click

from xcreport import __version__
from xcreport.config import XcReportConfig, load_config
from xcreport.core.errors import ConfigError
from xcreport.core.logging import configure_logging
from xcreport.xcresult.models import RenderOptions, ReportSections
from xcreport.xcresult.pipeline import build_report
from xcreport.xcresult.runner import SubprocessRunner

RULE = "=" * 80


def validate_bundle(path: Path) -> Path:
    """Check that PATH exists and is an ``.xcresult`` directory.

    Raises:
        click.ClickException: With exit code 1 otherwise.
    """
    if not path.exists():
        raise click.ClickException(f"File not found: {path}")
    if path.suffix != ".xcresult" or not path.is_dir():
        raise click.ClickException(f"Not a valid xcresult bundle: {path}")
    return path


def format_output(sections: ReportSections, github_action: bool) -> str:
    """Join sections for the GitHub step summary, or frame them for a terminal."""
    if github_action:
        return "\n".join(sections.as_list())

    blocks = [f"\n{RULE}", sections.summary, f"{RULE}\n", sections.details]
    if sections.coverage is not None:
        blocks.extend([f"\n{RULE}", sections.coverage, f"{RULE}\n"])
    return "\n".join(blocks)


def _load(config_path: Path | None, overrides: dict[str, Any]) -> XcReportConfig:
    try:
        return load_config(config_path, **overrides)
    except ConfigError as e:
        raise click.ClickException(e.message) from e


@click.command()
@click.version_option(version=__version__, prog_name="xcreport")
@click.argument("path", type=click.Path(path_type=Path))
@click.option(
    "--show-passed-tests/--hide-passed-tests",
    default=None,
    help="List passing tests in the details section (default: show)",
)
@click.option(
    "--show-code-coverage/--hide-code-coverage",
    default=None,
    help="Include the code coverage section (default: show)",
)
@click.option(
    "--github-action",
    is_flag=True,
    help="Emit plain sections for a GitHub Actions step summary",
)
@click.option("-d", "--debug", is_flag=True, help="Enable debug logging")
@click.option("--json-logs", is_flag=True, help="Log as JSON lines")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML config file (default: .xcreport.yaml if present)",
)
def cli(
    path: Path,
    show_passed_tests: bool | None,
    show_code_coverage: bool | None,
    github_action: bool,
    debug: bool,
    json_logs: bool,
    config_path: Path | None,
) -> None:
    """Render the test results and coverage of an Xcode PATH.xcresult bundle."""
    report_overrides: dict[str, Any] = {}
    if show_passed_tests is not None:
        report_overrides["show_passed_tests"] = show_passed_tests
    if show_code_coverage is not None:
        report_overrides["show_code_coverage"] = show_code_coverage

    overrides: dict[str, Any] = {}
    if report_overrides:
        overrides["report"] = report_overrides
    logging_overrides: dict[str, Any] = {}
    if debug:
        logging_overrides["level"] = "DEBUG"
    if json_logs:
        logging_overrides["outputs"] = [{"format": "json"}]
    if logging_overrides:
        overrides["logging"] = logging_overrides

    config = _load(config_path, overrides)
    configure_logging(config=config.logging)

    bundle = validate_bundle(path)

    runner = SubprocessRunner(config.tool.max_output_bytes)
    options = RenderOptions(
        show_passed_tests=config.report.show_passed_tests,
        show_code_coverage=config.report.show_code_coverage,
    )

    sections = build_report(bundle, runner, options, tool_config=config.tool)
    click.echo(format_output(sections, github_action))


if __name__ == "__main__":
    cli()
